"""Typed data model for the incident globe.

Config-like data (records, chapter specs, tooltip summaries) are pydantic
models. Runtime state that carries numpy vertex buffers is held in frozen
dataclasses and replaced wholesale, never patched in place.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Organization(str, Enum):
    """Organization tags, in color-priority order. Values are CSV headers."""
    UN = "UN"
    INGO = "INGO"
    ICRC = "ICRC"
    NRCS_IFRC = "NRCS and IFRC"
    NNGO = "NNGO"
    OTHER = "Other"


class ColorMode(str, Enum):
    SINGLE = "single"
    DUAL_BY_DECADE = "dual_by_decade"
    BY_ACTOR = "by_actor"
    BY_ORG = "by_org"
    BY_GENDER_MAJORITY = "by_gender_majority"
    HEATMAP = "heatmap"


class Layer(str, Enum):
    POINTS = "points"
    HEATMAP = "heatmap"


class TooltipSection(str, Enum):
    COUNTRY = "country"
    CONTEXT = "context"
    ACTOR = "actor"
    IMPACT = "impact"
    GENDER = "gender"
    ACTOR_TARGET = "actor_target"
    ORGANIZATION = "organization"


ALL_ORGANIZATIONS: tuple[Organization, ...] = tuple(Organization)
ALL_SECTIONS: tuple[TooltipSection, ...] = tuple(TooltipSection)


def parse_float(value: Any, default: float = 0.0) -> float:
    """Parse a numeric cell, returning default for blanks, garbage and NaN."""
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(str(value).strip().replace(",", ""))
    except ValueError:
        return default
    if not math.isfinite(result):
        return default
    return result


def parse_year(value: Any) -> int | None:
    """Parse a Year cell. "2015" and "2015.0" are valid; anything else is None."""
    result = parse_float(value, default=math.nan)
    if math.isnan(result) or result != int(result):
        return None
    return int(result)


def parse_coordinate(value: Any, limit: float) -> float | None:
    result = parse_float(value, default=math.nan)
    if math.isnan(result) or abs(result) > limit:
        return None
    return result


# --- Incident records ---


_ORG_FIELDS: dict[Organization, str] = {
    Organization.UN: "un",
    Organization.INGO: "ingo",
    Organization.ICRC: "icrc",
    Organization.NRCS_IFRC: "nrcs_ifrc",
    Organization.NNGO: "nngo",
    Organization.OTHER: "other_org",
}

_NUMERIC_FIELDS = (
    "un", "ingo", "icrc", "nrcs_ifrc", "nngo", "other_org",
    "total_killed", "total_wounded", "total_kidnapped", "total_affected",
    "gender_male", "gender_female", "gender_unknown",
)

_TEXT_FIELDS = (
    "incident_id", "month", "day", "country", "details",
    "attack_context", "actor_type",
)


class IncidentRecord(BaseModel):
    """One row of the security incident table."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    latitude: float = Field(alias="Latitude")
    longitude: float = Field(alias="Longitude")
    year: int | None = Field(None, alias="Year")
    incident_id: str = Field("", alias="Incident ID")
    month: str = Field("", alias="Month")
    day: str = Field("", alias="Day")
    country: str = Field("", alias="Country")
    details: str = Field("", alias="Details")
    attack_context: str = Field("", alias="Attack context")
    actor_type: str = Field("", alias="Actor type")
    un: float = Field(0.0, alias="UN")
    ingo: float = Field(0.0, alias="INGO")
    icrc: float = Field(0.0, alias="ICRC")
    nrcs_ifrc: float = Field(0.0, alias="NRCS and IFRC")
    nngo: float = Field(0.0, alias="NNGO")
    other_org: float = Field(0.0, alias="Other")
    total_killed: float = Field(0.0, alias="Total killed")
    total_wounded: float = Field(0.0, alias="Total wounded")
    total_kidnapped: float = Field(0.0, alias="Total kidnapped")
    total_affected: float = Field(0.0, alias="Total affected")
    gender_male: float = Field(0.0, alias="Gender Male")
    gender_female: float = Field(0.0, alias="Gender Female")
    gender_unknown: float = Field(0.0, alias="Gender Unknown")

    @field_validator(*_NUMERIC_FIELDS, mode="before")
    @classmethod
    def _safe_numeric(cls, v: Any) -> float:
        return parse_float(v)

    @field_validator("year", mode="before")
    @classmethod
    def _safe_year(cls, v: Any) -> int | None:
        return parse_year(v)

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        if v is None or (isinstance(v, float) and math.isnan(v)):
            return ""
        return str(v).strip()

    def org_value(self, org: Organization) -> float:
        return getattr(self, _ORG_FIELDS[org])

    def involves(self, org: Organization) -> bool:
        return self.org_value(org) > 0

    @property
    def date_label(self) -> str:
        return f"{self.year if self.year is not None else ''}-{self.month}-{self.day}"


# --- Chapter configuration ---


class CameraTarget(BaseModel):
    lat: float = 0.0
    lon: float = 0.0
    distance: float = 3.5


class TimelineConfig(BaseModel):
    """Playback panel settings. None years resolve to the store's year bounds."""
    visible: bool = False
    min_year: int | None = None
    max_year: int | None = None


class ChapterEntry(BaseModel):
    """Declarative description of everything a chapter sets on entry."""
    min_year: int | None = None
    max_year: int | None = None
    organizations: list[Organization] = Field(default_factory=lambda: list(ALL_ORGANIZATIONS))
    color_mode: ColorMode = ColorMode.SINGLE
    layer: Layer = Layer.POINTS
    camera: CameraTarget = Field(default_factory=CameraTarget)
    tooltip_sections: list[TooltipSection] = Field(default_factory=lambda: [
        TooltipSection.COUNTRY, TooltipSection.IMPACT,
    ])
    timeline: TimelineConfig = Field(default_factory=TimelineConfig)
    legend_visible: bool = True


class ChapterSpec(BaseModel):
    identifier: str
    title: str = ""
    narrative: Any = None  # opaque to the core, rendered by the UI
    entry: ChapterEntry = Field(default_factory=ChapterEntry)


# --- Tooltip output ---


class TopEntry(BaseModel):
    label: str
    count: int


class IncidentDetail(BaseModel):
    incident_id: str
    country: str
    date: str
    details: str


class ActorTargetRow(BaseModel):
    actor: str
    incidents: int
    organizations: dict[str, int]


class TooltipSummary(BaseModel):
    total: int = 0
    countries: list[TopEntry] = Field(default_factory=list)
    contexts: list[TopEntry] = Field(default_factory=list)
    actors: list[TopEntry] = Field(default_factory=list)
    impact: dict[str, float] = Field(default_factory=dict)
    gender: dict[str, float] = Field(default_factory=dict)
    actor_targets: list[ActorTargetRow] = Field(default_factory=list)
    organizations: dict[str, float] = Field(default_factory=dict)
    sections: list[TooltipSection] = Field(default_factory=list)
    detail: IncidentDetail | None = None


# --- Runtime state ---


@dataclass(frozen=True)
class FilterState:
    min_year: int
    max_year: int
    selected_orgs: frozenset[Organization] = frozenset(ALL_ORGANIZATIONS)
    color_mode: ColorMode = ColorMode.SINGLE


def _empty(width: int) -> np.ndarray:
    return np.zeros((0, width), dtype=np.float32)


@dataclass(frozen=True, eq=False)
class FilteredView:
    """Index-aligned render buffers for the records that passed a filter."""
    positions: np.ndarray  # (n, 3) float32
    uvs: np.ndarray  # (n, 2) float32
    colors: np.ndarray  # (n, 3) float32
    records: tuple[IncidentRecord, ...]
    source_indices: np.ndarray  # (n,) int64, rows of the RecordStore

    @classmethod
    def empty(cls) -> "FilteredView":
        return cls(
            positions=_empty(3),
            uvs=_empty(2),
            colors=_empty(3),
            records=(),
            source_indices=np.zeros(0, dtype=np.int64),
        )

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class GridCell:
    lat_bin: int
    lon_bin: int
    center_lat: float
    center_lon: float
    aggregate_affected: float
    count: int


@dataclass(frozen=True, eq=False)
class HeatmapView:
    cells: tuple[GridCell, ...]
    positions: np.ndarray  # (n, 3) float32, one marker per cell
    colors: np.ndarray  # (n, 3) float32
    intensities: np.ndarray  # (n,) float32, adjusted intensity per cell

    def __len__(self) -> int:
        return len(self.cells)


@dataclass(frozen=True)
class PlaybackState:
    running: bool = False
    current_year: int | None = None


@dataclass(frozen=True, eq=False)
class SessionState:
    """Everything currently displayed. Replaced as a whole on every action."""
    chapter_index: int
    filter: FilterState
    layer: Layer
    camera: CameraTarget
    tooltip_sections: frozenset[TooltipSection]
    timeline: TimelineConfig
    legend_visible: bool
    view: FilteredView
    heatmap: HeatmapView | None = None
    playback: PlaybackState = field(default_factory=PlaybackState)
    hover_uv: tuple[float, float] | None = None
    hover: TooltipSummary | None = None
    hover_radius: float | None = None
