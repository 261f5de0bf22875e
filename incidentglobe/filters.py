"""Filter engine: record subset + index-aligned position/UV/color buffers.

Every call builds a brand-new FilteredView. Nothing here mutates a view
that has already been handed out, so a reader holding the previous view
never sees a half-built one.
"""

import logging
from collections.abc import Collection
from dataclasses import dataclass
from functools import lru_cache

import numpy as np
from PIL import ImageColor

from incidentglobe.config import ColorConfig
from incidentglobe.models import (
    ALL_ORGANIZATIONS,
    ColorMode,
    FilteredView,
    FilterState,
    IncidentRecord,
    Organization,
)
from incidentglobe.store import RecordStore

logger = logging.getLogger(__name__)

RGB = tuple[float, float, float]


@lru_cache(maxsize=256)
def hex_to_rgb(color: str) -> RGB:
    """'#ff8000' -> (1.0, 0.502, 0.0)."""
    r, g, b = ImageColor.getrgb(color)[:3]
    return r / 255.0, g / 255.0, b / 255.0


def normalize_actor(actor_type: str) -> str:
    return actor_type.strip().lower()


@dataclass(frozen=True)
class Palette:
    """Color lookups resolved from ColorConfig."""
    single: RGB
    before_split: RGB
    after_split: RGB
    split_year: int
    neutral: RGB
    actors: dict[str, RGB]
    organizations: dict[Organization, RGB]
    gender: dict[str, RGB]

    @classmethod
    def from_config(cls, colors: ColorConfig) -> "Palette":
        neutral = hex_to_rgb(colors.neutral)
        return cls(
            single=hex_to_rgb(colors.single),
            before_split=hex_to_rgb(colors.before_split),
            after_split=hex_to_rgb(colors.after_split),
            split_year=colors.split_year,
            neutral=neutral,
            actors={normalize_actor(k): hex_to_rgb(v) for k, v in colors.actors.items()},
            organizations={
                org: hex_to_rgb(colors.organizations.get(org.value, colors.neutral))
                for org in ALL_ORGANIZATIONS
            },
            gender={
                key: hex_to_rgb(colors.gender.get(key, colors.neutral))
                for key in ("male", "female", "unknown")
            },
        )


# --- Predicate ---


def includes(
    record: IncidentRecord,
    min_year: int,
    max_year: int,
    selected_orgs: Collection[Organization],
) -> bool:
    """Year within [min_year, max_year] and any selected organization involved."""
    if record.year is None or not (min_year <= record.year <= max_year):
        return False
    return any(record.involves(org) for org in selected_orgs)


def matching_indices(
    store: RecordStore,
    min_year: int,
    max_year: int,
    selected_orgs: Collection[Organization],
) -> list[int]:
    if not selected_orgs:
        return []
    return [
        i for i, record in enumerate(store.records)
        if includes(record, min_year, max_year, selected_orgs)
    ]


# --- Color modes ---


def gender_majority(record: IncidentRecord) -> str:
    """'male', 'female' or 'unknown'. A tie for the largest sum is 'unknown'."""
    male, female, unknown = record.gender_male, record.gender_female, record.gender_unknown
    if male > female and male > unknown:
        return "male"
    if female > male and female > unknown:
        return "female"
    return "unknown"


def primary_organization(record: IncidentRecord) -> Organization:
    for org in ALL_ORGANIZATIONS:
        if record.involves(org):
            return org
    return Organization.OTHER


def record_color(record: IncidentRecord, mode: ColorMode, palette: Palette) -> RGB:
    if mode == ColorMode.DUAL_BY_DECADE:
        if record.year is not None and record.year < palette.split_year:
            return palette.before_split
        return palette.after_split
    if mode == ColorMode.BY_ACTOR:
        return palette.actors.get(normalize_actor(record.actor_type), palette.neutral)
    if mode == ColorMode.BY_ORG:
        return palette.organizations[primary_organization(record)]
    if mode == ColorMode.BY_GENDER_MAJORITY:
        return palette.gender[gender_majority(record)]
    # SINGLE, and HEATMAP whose cells are colored by the binner
    return palette.single


# --- Engine ---


def apply(
    store: RecordStore,
    min_year: int,
    max_year: int,
    selected_orgs: Collection[Organization],
    color_mode: ColorMode,
    palette: Palette,
) -> FilteredView:
    """Build the FilteredView for one filter setting."""
    indices = matching_indices(store, min_year, max_year, selected_orgs)
    if not indices:
        return FilteredView.empty()

    idx = np.asarray(indices, dtype=np.int64)
    records = tuple(store.records[i] for i in indices)
    colors = np.array(
        [record_color(r, color_mode, palette) for r in records], dtype=np.float32,
    )
    view = FilteredView(
        positions=store.positions[idx].astype(np.float32),
        uvs=store.uvs[idx].astype(np.float32),
        colors=colors.reshape(-1, 3),
        records=records,
        source_indices=idx,
    )
    logger.debug(
        "Filter %d-%d orgs=%s mode=%s -> %d records",
        min_year, max_year, sorted(o.value for o in selected_orgs), color_mode.value, len(view),
    )
    return view


def apply_state(store: RecordStore, state: FilterState, palette: Palette) -> FilteredView:
    return apply(
        store, state.min_year, state.max_year, state.selected_orgs, state.color_mode, palette,
    )
