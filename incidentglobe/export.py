"""Serialize render buffers for the 3D scene.

Buffers are flattened to plain float lists (x,y,z / u,v / r,g,b per vertex)
so the front end can wrap them straight into typed arrays.
"""

import gzip
import json
import logging
from pathlib import Path
from typing import Any

from incidentglobe.models import FilteredView, HeatmapView

logger = logging.getLogger(__name__)


def view_payload(view: FilteredView) -> dict[str, Any]:
    return {
        "count": len(view),
        "positions": view.positions.ravel().tolist(),
        "uvs": view.uvs.ravel().tolist(),
        "colors": view.colors.ravel().tolist(),
        "incidents": [
            {
                "id": r.incident_id,
                "country": r.country,
                "year": r.year,
                "lat": r.latitude,
                "lon": r.longitude,
            }
            for r in view.records
        ],
    }


def heatmap_payload(heatmap: HeatmapView) -> dict[str, Any]:
    return {
        "count": len(heatmap),
        "positions": heatmap.positions.ravel().tolist(),
        "colors": heatmap.colors.ravel().tolist(),
        "cells": [
            {
                "lat_bin": c.lat_bin,
                "lon_bin": c.lon_bin,
                "center_lat": c.center_lat,
                "center_lon": c.center_lon,
                "affected": c.aggregate_affected,
                "count": c.count,
                "intensity": float(level),
            }
            for c, level in zip(heatmap.cells, heatmap.intensities)
        ],
    }


def write_json(payload: dict[str, Any], output_path: Path) -> Path:
    """Write compact JSON; gzip when the path ends in .gz."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    json_str = json.dumps(payload, separators=(",", ":"))

    if output_path.suffix == ".gz":
        with gzip.open(output_path, "wt", encoding="utf-8") as f:
            f.write(json_str)
    else:
        output_path.write_text(json_str)

    size_kb = output_path.stat().st_size / 1024
    logger.info("Wrote %s (%.1f KB)", output_path, size_kb)
    return output_path
