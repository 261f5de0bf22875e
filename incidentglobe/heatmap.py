"""Heatmap binner: coarse lat/lon grid with log-scaled intensity.

Cell intensity:

    raw        = max(0, aggregate_affected)
    normalized = ln(1 + raw) / ln(1 + reference)      reference = 100 by default
    adjusted   = max(min_intensity, normalized)        min_intensity = 0.05

Cell color is a red-dominant ramp: (1, min(1, adjusted * 1.5), min(1, adjusted * 0.4)).
"""

import logging
import math
from collections.abc import Collection, Sequence
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw

from incidentglobe.config import HeatmapConfig
from incidentglobe.filters import matching_indices
from incidentglobe.geo import lat_lon_to_xyz
from incidentglobe.models import GridCell, HeatmapView, Organization
from incidentglobe.store import RecordStore

logger = logging.getLogger(__name__)

BG = (13, 17, 23)


def _bin(value: float, cell_size: float, limit: float) -> int:
    """floor(value / cell_size), with value == +limit folded into the last cell."""
    return min(math.floor(value / cell_size), math.ceil(limit / cell_size) - 1)


def bin_records(
    store: RecordStore,
    min_year: int,
    max_year: int,
    selected_orgs: Collection[Organization],
    cell_size: float,
) -> list[GridCell]:
    """Bucket matching records by floor(lat / cell_size), floor(lon / cell_size).

    Cells come back in the order their first record appears in the store.
    """
    buckets: dict[tuple[int, int], list[float]] = {}
    for i in matching_indices(store, min_year, max_year, selected_orgs):
        record = store.records[i]
        key = (_bin(record.latitude, cell_size, 90.0), _bin(record.longitude, cell_size, 180.0))
        acc = buckets.setdefault(key, [0.0, 0])
        acc[0] += record.total_affected
        acc[1] += 1

    return [
        GridCell(
            lat_bin=lat_bin,
            lon_bin=lon_bin,
            center_lat=lat_bin * cell_size + cell_size / 2,
            center_lon=lon_bin * cell_size + cell_size / 2,
            aggregate_affected=affected,
            count=int(count),
        )
        for (lat_bin, lon_bin), (affected, count) in buckets.items()
    ]


def intensity(aggregate_affected: float, config: HeatmapConfig | None = None) -> float:
    """Adjusted (floored) log intensity for one cell."""
    config = config or HeatmapConfig()
    raw = max(0.0, aggregate_affected)
    normalized = math.log(1 + raw) / math.log(1 + config.reference_affected)
    return max(config.min_intensity, normalized)


def heat_color(adjusted: float, config: HeatmapConfig | None = None) -> tuple[float, float, float]:
    config = config or HeatmapConfig()
    return (
        1.0,
        min(1.0, adjusted * config.green_gain),
        min(1.0, adjusted * config.blue_gain),
    )


def build_heatmap(
    store: RecordStore,
    min_year: int,
    max_year: int,
    selected_orgs: Collection[Organization],
    config: HeatmapConfig,
) -> HeatmapView:
    """Cells plus marker buffers, placed like individual incidents."""
    cells = bin_records(store, min_year, max_year, selected_orgs, config.cell_size_degrees)
    levels = [intensity(c.aggregate_affected, config) for c in cells]
    positions = np.array(
        [lat_lon_to_xyz(c.center_lat, c.center_lon, store.incident_radius) for c in cells],
        dtype=np.float32,
    ).reshape(-1, 3)
    colors = np.array([heat_color(a, config) for a in levels], dtype=np.float32).reshape(-1, 3)
    logger.debug("Heatmap %d-%d: %d cells", min_year, max_year, len(cells))
    return HeatmapView(
        cells=tuple(cells),
        positions=positions,
        colors=colors,
        intensities=np.array(levels, dtype=np.float32),
    )


def render_preview(
    cells: Sequence[GridCell],
    output_path: Path,
    config: HeatmapConfig | None = None,
) -> Path:
    """Draw the grid as an equirectangular PNG, one filled rectangle per cell."""
    config = config or HeatmapConfig()
    ppd = config.pixels_per_degree
    width, height = 360 * ppd, 180 * ppd
    img = Image.new("RGB", (width, height), BG)
    draw = ImageDraw.Draw(img)

    size = config.cell_size_degrees
    for cell in cells:
        r, g, b = heat_color(intensity(cell.aggregate_affected, config), config)
        x0 = (cell.lon_bin * size + 180) * ppd
        y0 = (90 - (cell.lat_bin + 1) * size) * ppd
        x1 = x0 + size * ppd
        y1 = y0 + size * ppd
        draw.rectangle(
            [x0, y0, max(x0, x1 - 1), max(y0, y1 - 1)],
            fill=(round(r * 255), round(g * 255), round(b * 255)),
        )

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    img.save(output_path, "PNG")
    logger.info("Heatmap preview: %d cells -> %s (%dx%d)", len(cells), output_path, width, height)
    return output_path
