#!/usr/bin/env python3
"""Incident globe MCP server: drive a viewing session through tool calls."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

from mcp.server.fastmcp import FastMCP

from incidentglobe.actions import (
    Advance,
    ClearOrganizations,
    Hover,
    Retreat,
    Scrub,
    SelectAllOrganizations,
    SetHoverRadius,
    SetYearRange,
    ToggleOrganization,
    ToggleSection,
)
from incidentglobe.config import Config, load_config
from incidentglobe.export import heatmap_payload
from incidentglobe.geo import lat_lon_to_uv
from incidentglobe.heatmap import build_heatmap
from incidentglobe.models import Organization, TooltipSection
from incidentglobe.session import Session
from incidentglobe.store import RecordStore

mcp = FastMCP("incidentglobe")
logger = logging.getLogger(__name__)

# Redirect all logging to stderr so stdout stays clean for MCP stdio transport
logging.basicConfig(
    stream=sys.stderr,
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

_session: Session | None = None
_config: Config | None = None


def _get_config() -> Config:
    global _config
    if _config is None:
        _config = load_config()
    return _config


def _get_session() -> Session:
    global _session
    if _session is None:
        config = _get_config()
        _session = Session(RecordStore.from_csv(config.resolved_data_path, config), config)
    return _session


def _state_json() -> str:
    return json.dumps(_get_session().ui_config(), default=str)


@mcp.tool()
def load_incidents(csv_path: Optional[str] = None) -> str:
    """Load (or reload) the incident table and start a session at the first chapter."""
    global _session
    try:
        config = _get_config()
        path = Path(csv_path) if csv_path else config.resolved_data_path
        store = RecordStore.from_csv(path, config)
        _session = Session(store, config)
        return json.dumps({"ingestion": repr(store.ingestion), **_session.ui_config()}, default=str)
    except (ValueError, FileNotFoundError) as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def current_chapter() -> str:
    """Current chapter plus the panel, filter, camera and timeline configuration."""
    try:
        return _state_json()
    except (ValueError, FileNotFoundError) as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def advance_chapter() -> str:
    """Move to the next chapter. No change at the last chapter."""
    try:
        _get_session().dispatch(Advance())
        return _state_json()
    except (ValueError, FileNotFoundError) as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def retreat_chapter() -> str:
    """Move to the previous chapter. No change at the first chapter."""
    try:
        _get_session().dispatch(Retreat())
        return _state_json()
    except (ValueError, FileNotFoundError) as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def set_year_range(min_year: int, max_year: int) -> str:
    """Show incidents from min_year to max_year inclusive."""
    try:
        _get_session().dispatch(SetYearRange(min_year, max_year))
        return _state_json()
    except (ValueError, FileNotFoundError) as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def toggle_organization(tag: str) -> str:
    """Toggle an organization tag: UN, INGO, ICRC, NRCS and IFRC, NNGO, Other."""
    try:
        _get_session().dispatch(ToggleOrganization(Organization(tag)))
        return _state_json()
    except (ValueError, FileNotFoundError) as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def select_all_organizations() -> str:
    """Turn every organization tag on."""
    try:
        _get_session().dispatch(SelectAllOrganizations())
        return _state_json()
    except (ValueError, FileNotFoundError) as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def clear_organizations() -> str:
    """Turn every organization tag off. Nothing is shown until one is turned back on."""
    try:
        _get_session().dispatch(ClearOrganizations())
        return _state_json()
    except (ValueError, FileNotFoundError) as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def toggle_tooltip_section(name: str) -> str:
    """Toggle a tooltip section (country/context/actor/impact/gender/actor_target/organization)."""
    try:
        _get_session().dispatch(ToggleSection(TooltipSection(name)))
        return _state_json()
    except (ValueError, FileNotFoundError) as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def scrub_year(year: int) -> str:
    """Set the playback year, clamped to the chapter's timeline range."""
    try:
        _get_session().dispatch(Scrub(year))
        return _state_json()
    except (ValueError, FileNotFoundError) as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def hover_summary(
    u: Optional[float] = None,
    v: Optional[float] = None,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
) -> str:
    """Tooltip summary of incidents near a UV point (or a lat/lon, converted to UV)."""
    try:
        if u is None or v is None:
            if lat is None or lon is None:
                raise ValueError("Pass either u and v, or lat and lon")
            u, v = lat_lon_to_uv(lat, lon)
        state = _get_session().dispatch(Hover(u, v))
        return json.dumps(state.hover.model_dump(mode="json") if state.hover else None)
    except (ValueError, FileNotFoundError) as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def set_hover_radius(radius: Optional[float] = None) -> str:
    """Fix the hover query radius in UV units. Omit it to go back to the configured radius."""
    try:
        _get_session().dispatch(SetHoverRadius(radius))
        return _state_json()
    except (ValueError, FileNotFoundError) as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def heatmap_cells() -> str:
    """Heatmap grid cells for the current filter, whatever layer is showing."""
    try:
        session = _get_session()
        state = session.state
        heatmap = state.heatmap
        if heatmap is None:
            heatmap = build_heatmap(
                session.store,
                state.filter.min_year,
                state.filter.max_year,
                state.filter.selected_orgs,
                session.config.heatmap,
            )
        payload = heatmap_payload(heatmap)
        return json.dumps({"count": payload["count"], "cells": payload["cells"]})
    except (ValueError, FileNotFoundError) as e:
        return json.dumps({"error": str(e)})


if __name__ == "__main__":
    mcp.run()
