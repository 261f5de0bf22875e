"""Guided narrative: a fixed, ordered list of chapters.

Entering a chapter rebuilds the whole SessionState from the chapter spec
and the record store, so the displayed state depends only on which chapter
is current, never on how we got there. Navigating past either end returns
the state unchanged (the same object).
"""

import dataclasses
import logging

from incidentglobe.config import Config
from incidentglobe.display import build_display
from incidentglobe.models import (
    CameraTarget,
    ChapterEntry,
    ChapterSpec,
    ColorMode,
    FilterState,
    Layer,
    Organization,
    PlaybackState,
    SessionState,
    TimelineConfig,
    TooltipSection,
)
from incidentglobe.store import RecordStore

logger = logging.getLogger(__name__)


DEFAULT_CHAPTERS: list[ChapterSpec] = [
    ChapterSpec(
        identifier="overview",
        title="Attacks on aid workers",
        narrative={"body": "Every point is a recorded attack on humanitarian staff."},
        entry=ChapterEntry(
            color_mode=ColorMode.SINGLE,
            camera=CameraTarget(lat=15.0, lon=20.0),
            tooltip_sections=[TooltipSection.COUNTRY, TooltipSection.IMPACT],
        ),
    ),
    ChapterSpec(
        identifier="decades",
        title="Then and now",
        narrative={"body": "Incidents before and after 2010."},
        entry=ChapterEntry(
            color_mode=ColorMode.DUAL_BY_DECADE,
            camera=CameraTarget(lat=15.0, lon=35.0),
            tooltip_sections=[TooltipSection.COUNTRY, TooltipSection.CONTEXT, TooltipSection.IMPACT],
        ),
    ),
    ChapterSpec(
        identifier="perpetrators",
        title="Who attacks",
        narrative={"body": "Colored by the type of actor responsible."},
        entry=ChapterEntry(
            color_mode=ColorMode.BY_ACTOR,
            camera=CameraTarget(lat=10.0, lon=30.0),
            tooltip_sections=[TooltipSection.ACTOR, TooltipSection.ACTOR_TARGET],
        ),
    ),
    ChapterSpec(
        identifier="organizations",
        title="Who is targeted",
        narrative={"body": "Colored by the organization whose staff were affected."},
        entry=ChapterEntry(
            color_mode=ColorMode.BY_ORG,
            camera=CameraTarget(lat=5.0, lon=25.0),
            tooltip_sections=[TooltipSection.ORGANIZATION, TooltipSection.ACTOR_TARGET],
        ),
    ),
    ChapterSpec(
        identifier="un-staff",
        title="United Nations staff",
        narrative={"body": "Incidents involving UN personnel only."},
        entry=ChapterEntry(
            organizations=[Organization.UN],
            color_mode=ColorMode.BY_ORG,
            camera=CameraTarget(lat=33.0, lon=44.0),
            tooltip_sections=[TooltipSection.COUNTRY, TooltipSection.IMPACT],
        ),
    ),
    ChapterSpec(
        identifier="gender",
        title="Who is affected",
        narrative={"body": "Colored by the majority gender of victims."},
        entry=ChapterEntry(
            color_mode=ColorMode.BY_GENDER_MAJORITY,
            camera=CameraTarget(lat=10.0, lon=40.0),
            tooltip_sections=[TooltipSection.GENDER, TooltipSection.IMPACT],
        ),
    ),
    ChapterSpec(
        identifier="hotspots",
        title="Hotspots",
        narrative={"body": "People affected per grid cell, log scaled."},
        entry=ChapterEntry(
            color_mode=ColorMode.HEATMAP,
            layer=Layer.HEATMAP,
            camera=CameraTarget(lat=5.0, lon=30.0, distance=3.0),
            tooltip_sections=[TooltipSection.COUNTRY, TooltipSection.IMPACT],
            legend_visible=False,
        ),
    ),
    ChapterSpec(
        identifier="accumulation",
        title="Year by year",
        narrative={"body": "Press play to watch incidents accumulate."},
        entry=ChapterEntry(
            color_mode=ColorMode.SINGLE,
            camera=CameraTarget(lat=15.0, lon=20.0),
            tooltip_sections=[
                TooltipSection.COUNTRY, TooltipSection.CONTEXT,
                TooltipSection.ACTOR, TooltipSection.IMPACT,
            ],
            timeline=TimelineConfig(visible=True),
        ),
    ),
]


def chapter_list(config: Config) -> list[ChapterSpec]:
    return config.chapters if config.chapters else DEFAULT_CHAPTERS


def _resolve_years(
    min_year: int | None,
    max_year: int | None,
    store: RecordStore,
) -> tuple[int, int]:
    bounds = store.year_bounds or (0, 0)
    return (
        bounds[0] if min_year is None else min_year,
        bounds[1] if max_year is None else max_year,
    )


def enter(
    index: int,
    chapters: list[ChapterSpec],
    store: RecordStore,
    config: Config,
) -> SessionState:
    """Run chapter ``index``'s entry action and return the resulting state.

    A chapter with a visible timeline shows only its first timeline year,
    with playback paused there.
    """
    spec = chapters[index]
    entry = spec.entry
    min_year, max_year = _resolve_years(entry.min_year, entry.max_year, store)
    tl_min, tl_max = _resolve_years(entry.timeline.min_year, entry.timeline.max_year, store)
    timeline = TimelineConfig(visible=entry.timeline.visible, min_year=tl_min, max_year=tl_max)
    current_year = None
    if timeline.visible:
        min_year = max_year = current_year = tl_min

    filter_state = FilterState(
        min_year=min_year,
        max_year=max_year,
        selected_orgs=frozenset(entry.organizations),
        color_mode=entry.color_mode,
    )
    view, heatmap = build_display(store, filter_state, entry.layer, config)

    logger.info(
        "Entered chapter %d/%d '%s': %d incidents%s",
        index + 1, len(chapters), spec.identifier, len(view),
        f", {len(heatmap)} heat cells" if heatmap is not None else "",
    )
    return SessionState(
        chapter_index=index,
        filter=filter_state,
        layer=entry.layer,
        camera=entry.camera.model_copy(),
        tooltip_sections=frozenset(entry.tooltip_sections),
        timeline=timeline,
        legend_visible=entry.legend_visible,
        view=view,
        heatmap=heatmap,
        playback=PlaybackState(
            running=False,
            current_year=current_year,
        ),
    )


def goto(
    state: SessionState,
    index: int,
    chapters: list[ChapterSpec],
    store: RecordStore,
    config: Config,
) -> SessionState:
    if not 0 <= index < len(chapters) or index == state.chapter_index:
        return state
    # a viewer-chosen hover radius outlives the chapter
    entered = enter(index, chapters, store, config)
    return dataclasses.replace(entered, hover_radius=state.hover_radius)


def advance(
    state: SessionState,
    chapters: list[ChapterSpec],
    store: RecordStore,
    config: Config,
) -> SessionState:
    return goto(state, state.chapter_index + 1, chapters, store, config)


def retreat(
    state: SessionState,
    chapters: list[ChapterSpec],
    store: RecordStore,
    config: Config,
) -> SessionState:
    return goto(state, state.chapter_index - 1, chapters, store, config)


def current_spec(state: SessionState, chapters: list[ChapterSpec]) -> ChapterSpec:
    return chapters[state.chapter_index]
