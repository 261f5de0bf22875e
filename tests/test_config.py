"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from incidentglobe.config import Config, GlobeConfig, HeatmapConfig, load_config
from incidentglobe.models import ColorMode


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.yaml")
        assert config == Config()

    def test_yaml_overrides(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "globe:\n"
            "  incident_radius: 1.1\n"
            "hover:\n"
            "  radius: 0.02\n"
            "heatmap:\n"
            "  cell_size_degrees: 5\n"
            "chapters:\n"
            "  - identifier: intro\n"
            "    entry:\n"
            "      color_mode: by_actor\n"
        )
        config = load_config(path)
        assert config.globe.incident_radius == 1.1
        assert config.globe.globe_radius == 1.0
        assert config.hover.radius == 0.02
        assert config.heatmap.cell_size_degrees == 5.0
        assert config.chapters[0].entry.color_mode == ColorMode.BY_ACTOR

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == Config()

    def test_project_config_loads(self):
        config = load_config()
        assert config.heatmap.reference_affected == 100
        assert config.colors.split_year == 2010


class TestValidation:
    def test_incidents_must_sit_outside_globe(self):
        with pytest.raises(ValidationError):
            GlobeConfig(globe_radius=1.0, incident_radius=1.0)

    def test_relative_data_path_resolved(self):
        config = Config(data_path="data/x.csv")
        assert config.resolved_data_path.is_absolute()
        assert config.resolved_data_path.parts[-2:] == ("data", "x.csv")

    def test_absolute_data_path_kept(self, tmp_path):
        config = Config(data_path=str(tmp_path / "x.csv"))
        assert config.resolved_data_path == Path(tmp_path / "x.csv")

    @pytest.mark.parametrize("field", ["cell_size_degrees", "reference_affected", "pixels_per_degree"])
    def test_heatmap_values_must_be_positive(self, field):
        with pytest.raises(ValidationError):
            HeatmapConfig(**{field: 0})

    def test_zero_reference_rejected_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("heatmap:\n  reference_affected: 0\n")
        with pytest.raises(ValidationError):
            load_config(path)
