"""Tests for UV proximity queries and the tooltip summarizer."""

import numpy as np
import pytest

from incidentglobe.config import HoverConfig, TooltipConfig
from incidentglobe.filters import Palette, apply
from incidentglobe.geo import lat_lon_to_uv
from incidentglobe.models import (
    ALL_ORGANIZATIONS,
    ALL_SECTIONS,
    ColorMode,
    FilteredView,
    IncidentRecord,
    TooltipSection,
)
from incidentglobe.proximity import (
    hover_radius,
    hover_summary,
    nearest,
    query,
    summarize,
    top_counts,
)


def _view_with_uvs(uvs, records=None):
    n = len(uvs)
    if records is None:
        records = tuple(
            IncidentRecord(Latitude=0.0, Longitude=0.0, Year=2000, **{"Incident ID": str(i)})
            for i in range(n)
        )
    return FilteredView(
        positions=np.zeros((n, 3), dtype=np.float32),
        uvs=np.array(uvs, dtype=np.float32).reshape(-1, 2),
        colors=np.zeros((n, 3), dtype=np.float32),
        records=tuple(records),
        source_indices=np.arange(n, dtype=np.int64),
    )


@pytest.fixture()
def full_view(store, config):
    return apply(store, 2005, 2020, frozenset(ALL_ORGANIZATIONS), ColorMode.SINGLE,
                 Palette.from_config(config.colors))


class TestQuery:
    def test_three_point_example(self):
        view = _view_with_uvs([(0.10, 0.10), (0.50, 0.50), (0.11, 0.11)])
        assert query(view, (0.10, 0.10), 0.05) == [0, 2]

    def test_strict_radius(self):
        view = _view_with_uvs([(0.5, 0.5), (0.75, 0.5)])
        assert query(view, (0.5, 0.5), 0.25) == [0]
        assert query(view, (0.5, 0.5), 0.2501) == [0, 1]

    def test_empty_view(self):
        assert query(FilteredView.empty(), (0.5, 0.5), 1.0) == []

    def test_zero_radius_matches_nothing(self):
        view = _view_with_uvs([(0.5, 0.5)])
        assert query(view, (0.5, 0.5), 0.0) == []

    def test_finds_records_near_lat_lon(self, full_view):
        # the three Afghanistan incidents sit within a fraction of a degree
        hits = query(full_view, tuple(lat_lon_to_uv(34.55, 69.15)), 0.01)
        assert sorted(full_view.records[i].incident_id for i in hits) == ["1", "2", "9"]

    def test_nearest(self):
        view = _view_with_uvs([(0.10, 0.10), (0.50, 0.50), (0.11, 0.11)])
        assert nearest(view, (0.112, 0.112), [0, 2]) == 2
        assert nearest(view, (0.1, 0.1), []) is None


class TestHoverRadius:
    def test_fixed(self):
        assert hover_radius((0.3, 0.9), HoverConfig(radius=0.04)) == 0.04

    def test_adaptive_widens_toward_poles(self):
        cfg = HoverConfig(adaptive=True, near_radius=0.03, far_radius=0.07)
        assert hover_radius((0.2, 0.5), cfg) == pytest.approx(0.03)
        assert hover_radius((0.2, 1.0), cfg) == pytest.approx(0.05)
        assert hover_radius((0.2, 0.0), cfg) == pytest.approx(0.05)


class TestTopCounts:
    def test_descending_with_first_seen_ties(self):
        values = ["b", "a", "c", "a", "b", "d", "e", "f"]
        top = top_counts(values, 5, "No data")
        assert [(t.label, t.count) for t in top] == [
            ("b", 2), ("a", 2), ("c", 1), ("d", 1), ("e", 1),
        ]

    def test_blank_is_unknown(self):
        top = top_counts(["", "  "], 5, "No data")
        assert [(t.label, t.count) for t in top] == [("Unknown", 2)]

    def test_placeholder_when_empty(self):
        top = top_counts([], 5, "No data")
        assert [(t.label, t.count) for t in top] == [("No data", 0)]


class TestSummarize:
    def test_no_data(self, full_view):
        summary = summarize(full_view, [], ALL_SECTIONS)
        assert summary.total == 0
        assert all(v == 0 for v in summary.impact.values())
        assert all(v == 0 for v in summary.gender.values())
        assert all(v == 0 for v in summary.organizations.values())
        assert summary.countries[0].label == "No data"
        assert summary.countries[0].count == 0
        assert summary.contexts[0].label == "No data"
        assert summary.actors[0].label == "No data"
        assert summary.actor_targets == []
        assert summary.detail is None

    def test_no_data_from_empty_view(self):
        summary = summarize(FilteredView.empty(), query(FilteredView.empty(), (0.5, 0.5), 0.1), ALL_SECTIONS)
        assert summary.total == 0
        assert set(summary.impact) == {"killed", "wounded", "kidnapped", "affected"}

    def test_sums_and_counts(self, full_view):
        ids = [r.incident_id for r in full_view.records]
        indices = [ids.index("1"), ids.index("2"), ids.index("9")]
        summary = summarize(full_view, indices, ALL_SECTIONS)

        assert summary.total == 3
        assert [(t.label, t.count) for t in summary.countries] == [("Afghanistan", 3)]
        assert [(t.label, t.count) for t in summary.contexts] == [("Ambush", 2), ("Raid", 1)]
        assert [(t.label, t.count) for t in summary.actors] == [
            ("Non-state armed group: National", 2), ("Unknown", 1),
        ]
        assert summary.impact == {"killed": 1, "wounded": 2, "kidnapped": 0, "affected": 8}
        assert summary.gender == {"male": 4, "female": 4, "unknown": 0}
        assert summary.organizations["UN"] == 2
        assert summary.organizations["INGO"] == 3
        assert summary.organizations["ICRC"] == 0

        nsag = summary.actor_targets[0]
        assert nsag.actor == "Non-state armed group: National"
        assert nsag.incidents == 2
        assert nsag.organizations["UN"] == 2
        assert nsag.organizations["INGO"] == 1

    def test_only_enabled_sections(self, full_view):
        summary = summarize(full_view, [0, 1], {TooltipSection.COUNTRY})
        assert summary.sections == [TooltipSection.COUNTRY]
        assert summary.countries
        assert summary.impact == {}
        assert summary.actors == []

    def test_top_n_from_config(self, full_view):
        summary = summarize(full_view, list(range(len(full_view))), ALL_SECTIONS, TooltipConfig(top_n=2))
        assert len(summary.countries) == 2
        assert summary.countries[0].label == "Afghanistan"

    def test_detail_for_nearest(self, full_view):
        ids = [r.incident_id for r in full_view.records]
        i = ids.index("1")
        summary = summarize(full_view, [i], ALL_SECTIONS, nearest_index=i)
        assert summary.detail.incident_id == "1"
        assert summary.detail.country == "Afghanistan"
        assert summary.detail.date == "2005-3-14"
        assert summary.detail.details == "Convoy ambushed near Kabul."


class TestHoverSummary:
    def test_hover_over_somalia(self, full_view):
        uv = tuple(lat_lon_to_uv(2.05, 45.3))
        summary = hover_summary(full_view, uv, ALL_SECTIONS, HoverConfig(radius=0.02), TooltipConfig())
        assert summary.total == 1
        assert summary.detail.incident_id == "3"
        assert summary.impact["killed"] == 2

    def test_hover_over_ocean(self, full_view):
        uv = tuple(lat_lon_to_uv(-40.0, -30.0))
        summary = hover_summary(full_view, uv, ALL_SECTIONS, HoverConfig(), TooltipConfig())
        assert summary.total == 0
        assert summary.detail is None
