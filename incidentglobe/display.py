"""Single rebuild point for what the globe currently shows.

Chapter entry, playback ticks and UI actions all end up here. A rebuild
produces fresh view objects and a fresh SessionState; the caller swaps the
new state in only once it is complete.
"""

import dataclasses
import logging

from incidentglobe.config import Config
from incidentglobe.filters import Palette, apply_state
from incidentglobe.heatmap import build_heatmap
from incidentglobe.models import (
    FilteredView,
    FilterState,
    HeatmapView,
    Layer,
    SessionState,
)
from incidentglobe.proximity import hover_summary
from incidentglobe.store import RecordStore

logger = logging.getLogger(__name__)


def build_display(
    store: RecordStore,
    filter_state: FilterState,
    layer: Layer,
    config: Config,
) -> tuple[FilteredView, HeatmapView | None]:
    """Point view always (hover reads it); heatmap cells only on the heatmap layer."""
    view = apply_state(store, filter_state, Palette.from_config(config.colors))
    heatmap = None
    if layer == Layer.HEATMAP:
        heatmap = build_heatmap(
            store,
            filter_state.min_year,
            filter_state.max_year,
            filter_state.selected_orgs,
            config.heatmap,
        )
    return view, heatmap


def refresh_hover(state: SessionState, config: Config) -> SessionState:
    if state.hover_uv is None:
        return dataclasses.replace(state, hover=None)
    hover = config.hover
    if state.hover_radius is not None:
        hover = hover.model_copy(update={"radius": state.hover_radius, "adaptive": False})
    summary = hover_summary(
        state.view, state.hover_uv, state.tooltip_sections, hover, config.tooltip,
    )
    return dataclasses.replace(state, hover=summary)


def refilter(
    state: SessionState,
    filter_state: FilterState,
    store: RecordStore,
    config: Config,
    **changes,
) -> SessionState:
    """New state with ``filter_state`` applied and views rebuilt from scratch."""
    layer = changes.get("layer", state.layer)
    view, heatmap = build_display(store, filter_state, layer, config)
    new_state = dataclasses.replace(
        state, filter=filter_state, view=view, heatmap=heatmap, **changes,
    )
    return refresh_hover(new_state, config)
