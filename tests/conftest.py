"""Shared test fixtures for incidentglobe tests."""

import csv

import pytest

from incidentglobe.config import Config
from incidentglobe.session import Session
from incidentglobe.store import RecordStore


def _row(**values):
    """A CSV-shaped row: every column present, all cells as text."""
    row = {
        "Incident ID": "", "Year": "", "Month": "", "Day": "",
        "Country": "", "Details": "", "Latitude": "", "Longitude": "",
        "Attack context": "", "Actor type": "",
        "UN": "0", "INGO": "0", "ICRC": "0", "NRCS and IFRC": "0", "NNGO": "0", "Other": "0",
        "Total killed": "0", "Total wounded": "0", "Total kidnapped": "0", "Total affected": "0",
        "Gender Male": "0", "Gender Female": "0", "Gender Unknown": "0",
    }
    row.update(values)
    return row


SAMPLE_ROWS = [
    _row(**{
        "Incident ID": "1", "Year": "2005", "Month": "3", "Day": "14",
        "Country": "Afghanistan", "Details": "Convoy ambushed near Kabul.",
        "Latitude": "34.5", "Longitude": "69.2",
        "Attack context": "Ambush", "Actor type": "Non-state armed group: National",
        "UN": "1", "Total killed": "1", "Total affected": "1", "Gender Male": "1",
    }),
    _row(**{
        "Incident ID": "2", "Year": "2012", "Country": "Afghanistan",
        "Latitude": "34.6", "Longitude": "69.1",
        "Attack context": "Raid", "Actor type": "Unknown",
        "INGO": "2", "Total wounded": "2", "Total affected": "2",
        "Gender Male": "1", "Gender Female": "1",
    }),
    _row(**{
        "Incident ID": "3", "Year": "2015", "Country": "Somalia",
        "Latitude": "2.05", "Longitude": "45.3",
        "Attack context": "Individual attack", "Actor type": "  CRIMINAL ",
        "ICRC": "1", "NNGO": "1", "Total killed": "2", "Total wounded": "1",
        "Total affected": "3", "Gender Female": "2", "Gender Unknown": "1",
    }),
    _row(**{
        "Incident ID": "4", "Year": "2009", "Country": "South Sudan",
        "Latitude": "4.85", "Longitude": "31.6",
        "Attack context": "Combat/Crossfire", "Actor type": "Host state",
        "NNGO": "3", "Total kidnapped": "3", "Total affected": "3", "Gender Male": "3",
    }),
    _row(**{
        "Incident ID": "5", "Year": "2020", "Country": "Syria",
        "Latitude": "36.2", "Longitude": "37.1",
        "Attack context": "Unknown", "Actor type": "Martians",
        "Other": "1", "Total affected": "", "Gender Male": "n/a",
    }),
    _row(**{"Incident ID": "6", "Year": "2010", "Latitude": "", "Longitude": "10", "UN": "1"}),
    _row(**{"Incident ID": "7", "Year": "2010", "Latitude": "abc", "Longitude": "10", "UN": "1"}),
    _row(**{
        "Incident ID": "8", "Year": "unknown", "Country": "Chad",
        "Latitude": "10", "Longitude": "10", "UN": "1", "Total affected": "1",
    }),
    _row(**{
        "Incident ID": "9", "Year": "2012", "Country": "Afghanistan",
        "Latitude": "34.55", "Longitude": "69.15",
        "Attack context": "Ambush", "Actor type": "Non-state armed group: National",
        "UN": "1", "INGO": "1", "Total affected": "5",
        "Gender Male": "2", "Gender Female": "3",
    }),
]


@pytest.fixture()
def config():
    return Config()


@pytest.fixture()
def store(config):
    """RecordStore over SAMPLE_ROWS: 7 usable records, 2 dropped."""
    return RecordStore.from_rows(SAMPLE_ROWS, incident_radius=config.globe.incident_radius)


@pytest.fixture()
def session(store, config):
    return Session(store, config)


@pytest.fixture()
def csv_file(tmp_path):
    """SAMPLE_ROWS written as a CSV file."""
    path = tmp_path / "security_incidents.csv"
    with path.open("w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(SAMPLE_ROWS[0].keys()))
        writer.writeheader()
        writer.writerows(SAMPLE_ROWS)
    return path
