"""Session: owns the current SessionState and applies UI actions to it.

``reduce`` is a pure (state, action) -> state function; ``Session`` just
holds the store, config and chapter list it needs and swaps in each new
state once it has been fully built.
"""

import dataclasses
import logging
from typing import Any, Callable

from incidentglobe import chapters as chapter_ops
from incidentglobe import playback
from incidentglobe.actions import (
    Action,
    Advance,
    ClearHover,
    ClearOrganizations,
    GoTo,
    Hover,
    Pause,
    Play,
    Retreat,
    Scrub,
    SelectAllOrganizations,
    SetColorMode,
    SetHoverRadius,
    SetYearRange,
    Tick,
    ToggleOrganization,
    ToggleSection,
)
from incidentglobe.config import Config
from incidentglobe.display import refilter, refresh_hover
from incidentglobe.models import ALL_ORGANIZATIONS, ChapterSpec, ColorMode, Layer, SessionState
from incidentglobe.store import RecordStore

logger = logging.getLogger(__name__)


def reduce(
    state: SessionState,
    action: Action,
    store: RecordStore,
    config: Config,
    chapters: list[ChapterSpec],
) -> SessionState:
    if isinstance(action, Advance):
        return chapter_ops.advance(state, chapters, store, config)
    if isinstance(action, Retreat):
        return chapter_ops.retreat(state, chapters, store, config)
    if isinstance(action, GoTo):
        return chapter_ops.goto(state, action.index, chapters, store, config)

    if isinstance(action, Play):
        return playback.start(state, store, config)
    if isinstance(action, Pause):
        return playback.stop(state)
    if isinstance(action, Tick):
        return playback.tick(state, store, config)
    if isinstance(action, Scrub):
        return playback.scrub_to(state, action.year, store, config)

    if isinstance(action, ToggleOrganization):
        orgs = state.filter.selected_orgs ^ {action.org}
        return refilter(state, dataclasses.replace(state.filter, selected_orgs=orgs), store, config)
    if isinstance(action, SelectAllOrganizations):
        orgs = frozenset(ALL_ORGANIZATIONS)
        return refilter(state, dataclasses.replace(state.filter, selected_orgs=orgs), store, config)
    if isinstance(action, ClearOrganizations):
        return refilter(state, dataclasses.replace(state.filter, selected_orgs=frozenset()), store, config)
    if isinstance(action, SetYearRange):
        # min > max is left alone; it simply matches nothing
        filter_state = dataclasses.replace(
            state.filter, min_year=action.min_year, max_year=action.max_year,
        )
        return refilter(state, filter_state, store, config)
    if isinstance(action, SetColorMode):
        layer = Layer.HEATMAP if action.mode == ColorMode.HEATMAP else Layer.POINTS
        filter_state = dataclasses.replace(state.filter, color_mode=action.mode)
        return refilter(state, filter_state, store, config, layer=layer)

    if isinstance(action, ToggleSection):
        sections = state.tooltip_sections ^ {action.section}
        return refresh_hover(dataclasses.replace(state, tooltip_sections=sections), config)
    if isinstance(action, Hover):
        return refresh_hover(dataclasses.replace(state, hover_uv=(action.u, action.v)), config)
    if isinstance(action, ClearHover):
        return dataclasses.replace(state, hover_uv=None, hover=None)
    if isinstance(action, SetHoverRadius):
        if action.radius is not None and action.radius <= 0:
            raise ValueError(f"hover radius must be positive, got {action.radius}")
        return refresh_hover(dataclasses.replace(state, hover_radius=action.radius), config)

    raise TypeError(f"Unknown action: {action!r}")


class Session:
    """One viewer's interactive session over a loaded RecordStore."""

    def __init__(
        self,
        store: RecordStore,
        config: Config | None = None,
        chapters: list[ChapterSpec] | None = None,
    ) -> None:
        self.store = store
        self.config = config or Config()
        self.chapters = chapters or chapter_ops.chapter_list(self.config)
        self.state = chapter_ops.enter(0, self.chapters, store, self.config)
        self._listeners: list[Callable[[SessionState], None]] = []

    def subscribe(self, listener: Callable[[SessionState], None]) -> None:
        """Call ``listener`` with every new state once it has been swapped in."""
        self._listeners.append(listener)

    def dispatch(self, action: Action) -> SessionState:
        new_state = reduce(self.state, action, self.store, self.config, self.chapters)
        if new_state is not self.state:
            self.state = new_state
            for listener in self._listeners:
                listener(new_state)
        return self.state

    @property
    def chapter(self) -> ChapterSpec:
        return chapter_ops.current_spec(self.state, self.chapters)

    def ui_config(self) -> dict[str, Any]:
        """Declarative panel/legend configuration for the UI layer."""
        state = self.state
        spec = self.chapter
        return {
            "chapter": {
                "index": state.chapter_index,
                "count": len(self.chapters),
                "identifier": spec.identifier,
                "title": spec.title,
                "narrative": spec.narrative,
                "has_next": state.chapter_index < len(self.chapters) - 1,
                "has_previous": state.chapter_index > 0,
            },
            "filter": {
                "min_year": state.filter.min_year,
                "max_year": state.filter.max_year,
                "organizations": sorted(o.value for o in state.filter.selected_orgs),
                "color_mode": state.filter.color_mode.value,
            },
            "layer": state.layer.value,
            "camera": state.camera.model_dump(),
            "legend_visible": state.legend_visible,
            "tooltip_sections": sorted(s.value for s in state.tooltip_sections),
            "hover_radius": state.hover_radius,
            "timeline": {
                **state.timeline.model_dump(),
                "running": state.playback.running,
                "current_year": state.playback.current_year,
            },
            "year_bounds": list(self.store.year_bounds) if self.store.year_bounds else None,
            "incident_count": len(state.view),
            "heat_cell_count": len(state.heatmap) if state.heatmap is not None else None,
        }
