"""Tests for render buffer serialization."""

import gzip
import json

from incidentglobe.config import HeatmapConfig
from incidentglobe.export import heatmap_payload, view_payload, write_json
from incidentglobe.filters import Palette, apply
from incidentglobe.heatmap import build_heatmap
from incidentglobe.models import ALL_ORGANIZATIONS, ColorMode, FilteredView

ALL = frozenset(ALL_ORGANIZATIONS)


class TestPayloads:
    def test_view_payload_flat_buffers(self, store, config):
        view = apply(store, 2005, 2020, ALL, ColorMode.BY_ORG, Palette.from_config(config.colors))
        payload = view_payload(view)
        assert payload["count"] == 6
        assert len(payload["positions"]) == 18
        assert len(payload["uvs"]) == 12
        assert len(payload["colors"]) == 18
        assert [i["id"] for i in payload["incidents"]] == ["1", "2", "3", "4", "5", "9"]
        assert payload["incidents"][0] == {
            "id": "1", "country": "Afghanistan", "year": 2005, "lat": 34.5, "lon": 69.2,
        }

    def test_empty_view(self):
        payload = view_payload(FilteredView.empty())
        assert payload == {"count": 0, "positions": [], "uvs": [], "colors": [], "incidents": []}

    def test_heatmap_payload(self, store):
        heatmap = build_heatmap(store, 2005, 2020, ALL, HeatmapConfig())
        payload = heatmap_payload(heatmap)
        assert payload["count"] == 4
        assert len(payload["positions"]) == 12
        kabul = payload["cells"][0]
        assert (kabul["lat_bin"], kabul["lon_bin"]) == (17, 34)
        assert kabul["affected"] == 8
        assert kabul["count"] == 3
        assert 0.05 <= kabul["intensity"] <= 1.0


class TestWriteJson:
    def test_plain_json(self, tmp_path):
        out = write_json({"count": 1, "cells": []}, tmp_path / "nested" / "cells.json")
        assert json.loads(out.read_text()) == {"count": 1, "cells": []}

    def test_gzip_when_suffix_gz(self, tmp_path, store, config):
        view = apply(store, 2005, 2020, ALL, ColorMode.SINGLE, Palette.from_config(config.colors))
        out = write_json(view_payload(view), tmp_path / "points.json.gz")
        with gzip.open(out, "rt", encoding="utf-8") as f:
            data = json.load(f)
        assert data["count"] == 6
        assert len(data["positions"]) == 18
