"""Configuration loading for the incident globe."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

from incidentglobe.models import ChapterSpec


class GlobeConfig(BaseModel):
    globe_radius: float = 1.0
    incident_radius: float = 1.035  # sits just above the globe mesh

    @model_validator(mode="after")
    def _incidents_outside_globe(self) -> "GlobeConfig":
        if self.incident_radius <= self.globe_radius:
            raise ValueError("incident_radius must be greater than globe_radius")
        return self


class HoverConfig(BaseModel):
    radius: float = 0.04
    adaptive: bool = False
    near_radius: float = 0.03
    far_radius: float = 0.07


class HeatmapConfig(BaseModel):
    cell_size_degrees: float = Field(2.0, gt=0, le=90)
    reference_affected: float = Field(100.0, gt=0)
    min_intensity: float = 0.05
    green_gain: float = 1.5
    blue_gain: float = 0.4
    pixels_per_degree: int = Field(2, gt=0)


class PlaybackConfig(BaseModel):
    interval_seconds: float = 1.0


class ColorConfig(BaseModel):
    single: str = "#ff1a1a"
    before_split: str = "#ffb000"
    after_split: str = "#e0115f"
    split_year: int = 2010
    neutral: str = "#808080"
    actors: dict[str, str] = Field(default_factory=lambda: {
        "unknown": "#9e9e9e",
        "non-state armed group: national": "#e41a1c",
        "non-state armed group: subnational": "#ff7f00",
        "non-state armed group: regional": "#a65628",
        "non-state armed group: global": "#984ea3",
        "host state": "#377eb8",
        "foreign or coalition forces": "#4daf4a",
        "police or paramilitary": "#1f78b4",
        "criminal": "#f781bf",
        "staff member": "#ffff33",
        "aid recipient": "#66c2a5",
        "host community": "#8da0cb",
        "unaffiliated": "#b3b3b3",
    })
    organizations: dict[str, str] = Field(default_factory=lambda: {
        "UN": "#4b92db",
        "INGO": "#ff7f0e",
        "ICRC": "#d62728",
        "NRCS and IFRC": "#e377c2",
        "NNGO": "#2ca02c",
        "Other": "#bcbd22",
    })
    gender: dict[str, str] = Field(default_factory=lambda: {
        "male": "#3a86ff",
        "female": "#ff006e",
        "unknown": "#adb5bd",
    })


class TooltipConfig(BaseModel):
    top_n: int = 5
    placeholder: str = "No data"


class Config(BaseModel):
    data_path: str = "datasets/security_incidents.csv"
    globe: GlobeConfig = Field(default_factory=GlobeConfig)
    hover: HoverConfig = Field(default_factory=HoverConfig)
    heatmap: HeatmapConfig = Field(default_factory=HeatmapConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
    colors: ColorConfig = Field(default_factory=ColorConfig)
    tooltip: TooltipConfig = Field(default_factory=TooltipConfig)
    chapters: list[ChapterSpec] | None = None

    @property
    def resolved_data_path(self) -> Path:
        """Resolve data_path relative to project root."""
        p = Path(self.data_path).expanduser()
        if p.is_absolute():
            return p
        return _project_root() / p


def _project_root() -> Path:
    """Return the incidentglobe project root directory."""
    return Path(__file__).parent.parent


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML file. Falls back to defaults if file missing."""
    if config_path is None:
        config_path = _project_root() / "config.yaml"

    if config_path.exists():
        raw: dict[str, Any] = yaml.safe_load(config_path.read_text()) or {}
        return Config(**raw)

    return Config()
