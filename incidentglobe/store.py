"""Record store: the parsed incident table plus per-record geometry caches."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from incidentglobe.config import Config
from incidentglobe.geo import lat_lon_to_uv_array, lat_lon_to_xyz_array
from incidentglobe.models import IncidentRecord, parse_coordinate

logger = logging.getLogger(__name__)


class IngestionResult:
    """Summary of an ingestion run."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.rows_read = 0
        self.records_kept = 0
        self.rows_skipped = 0

    def __repr__(self) -> str:
        return (
            f"IngestionResult({self.source}: "
            f"{self.records_kept} kept / {self.rows_read} read, "
            f"{self.rows_skipped} skipped for bad coordinates)"
        )


def parse_row(row: Mapping[str, Any], row_number: int) -> IncidentRecord | None:
    """Build a record from one table row, or None if its coordinates are unusable."""
    lat = parse_coordinate(row.get("Latitude"), 90.0)
    lon = parse_coordinate(row.get("Longitude"), 180.0)
    if lat is None or lon is None:
        logger.debug(
            "Skipping row %d: invalid coordinates (%r, %r)",
            row_number, row.get("Latitude"), row.get("Longitude"),
        )
        return None
    return IncidentRecord.model_validate({**row, "Latitude": lat, "Longitude": lon})


class RecordStore:
    """Immutable incident table with derived positions and UVs.

    ``positions[i]``, ``uvs[i]`` and ``records[i]`` describe the same incident.
    """

    def __init__(
        self,
        records: Sequence[IncidentRecord],
        incident_radius: float = 1.035,
        ingestion: IngestionResult | None = None,
    ) -> None:
        self.records: tuple[IncidentRecord, ...] = tuple(records)
        self.incident_radius = incident_radius
        self.ingestion = ingestion

        lats = np.array([r.latitude for r in self.records], dtype=np.float64)
        lons = np.array([r.longitude for r in self.records], dtype=np.float64)
        self.positions = lat_lon_to_xyz_array(lats, lons, incident_radius).reshape(-1, 3)
        self.uvs = lat_lon_to_uv_array(lats, lons).reshape(-1, 2)
        self.positions.setflags(write=False)
        self.uvs.setflags(write=False)

        self.years: list[int] = sorted({r.year for r in self.records if r.year is not None})

    def __len__(self) -> int:
        return len(self.records)

    @property
    def year_bounds(self) -> tuple[int, int] | None:
        if not self.years:
            return None
        return self.years[0], self.years[-1]

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Mapping[str, Any]],
        incident_radius: float = 1.035,
        source: str = "<rows>",
    ) -> "RecordStore":
        result = IngestionResult(source)
        records: list[IncidentRecord] = []
        for i, row in enumerate(rows, start=1):
            result.rows_read += 1
            record = parse_row(row, i)
            if record is None:
                result.rows_skipped += 1
                continue
            records.append(record)
        result.records_kept = len(records)

        if result.rows_skipped:
            logger.info(
                "Dropped %d of %d rows from %s with missing or invalid coordinates",
                result.rows_skipped, result.rows_read, source,
            )
        logger.info("Ingestion complete: %s", result)
        return cls(records, incident_radius=incident_radius, ingestion=result)

    @classmethod
    def from_csv(cls, path: Path, config: Config | None = None) -> "RecordStore":
        """Load the incident CSV. All cells are read as text and parsed per field."""
        config = config or Config()
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Incident table not found: {path}")

        df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True)
        df.columns = [str(c).strip() for c in df.columns]
        missing = {"Latitude", "Longitude", "Year"} - set(df.columns)
        if missing:
            logger.warning("%s is missing columns %s; affected rows will be dropped", path, sorted(missing))

        return cls.from_rows(
            df.to_dict(orient="records"),
            incident_radius=config.globe.incident_radius,
            source=path.name,
        )
