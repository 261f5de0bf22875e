"""Year-by-year playback.

The reducers (``start``, ``stop``, ``tick``, ``scrub_to``) are pure functions
of the SessionState. ``PlaybackController`` owns the repeating timer and
feeds Tick actions into a session; it keeps at most one pending timer.
"""

import dataclasses
import logging
from typing import Any, Callable, Protocol

from incidentglobe.actions import Pause, Play, Scrub, Tick
from incidentglobe.config import Config
from incidentglobe.display import refilter
from incidentglobe.models import SessionState
from incidentglobe.store import RecordStore

logger = logging.getLogger(__name__)


def playback_range(state: SessionState) -> tuple[int, int]:
    lo = state.timeline.min_year if state.timeline.min_year is not None else state.filter.min_year
    hi = state.timeline.max_year if state.timeline.max_year is not None else state.filter.max_year
    return lo, hi


def _show_through(
    state: SessionState,
    year: int,
    running: bool,
    store: RecordStore,
    config: Config,
) -> SessionState:
    lo, _ = playback_range(state)
    filter_state = dataclasses.replace(state.filter, min_year=lo, max_year=year)
    return refilter(
        state, filter_state, store, config,
        playback=dataclasses.replace(state.playback, running=running, current_year=year),
    )


def scrub_to(state: SessionState, year: int, store: RecordStore, config: Config) -> SessionState:
    """Show [range start, year], clamping year into the playback range."""
    lo, hi = playback_range(state)
    year = max(lo, min(hi, year))
    return _show_through(state, year, state.playback.running, store, config)


def start(state: SessionState, store: RecordStore, config: Config) -> SessionState:
    """Begin playback. From the end of the range (or nowhere), rewind first."""
    if state.playback.running:
        return state
    lo, hi = playback_range(state)
    current = state.playback.current_year
    if current is None or current >= hi or current < lo:
        current = lo
    logger.info("Playback started at %d (range %d-%d)", current, lo, hi)
    return _show_through(state, current, current < hi, store, config)


def stop(state: SessionState) -> SessionState:
    if not state.playback.running:
        return state
    logger.info("Playback stopped at %s", state.playback.current_year)
    return dataclasses.replace(state, playback=dataclasses.replace(state.playback, running=False))


def tick(state: SessionState, store: RecordStore, config: Config) -> SessionState:
    """Advance one year; halts itself on reaching the end of the range."""
    if not state.playback.running:
        return state
    lo, hi = playback_range(state)
    current = state.playback.current_year
    year = lo if current is None else min(hi, current + 1)
    running = year < hi
    if not running:
        logger.info("Playback reached %d and halted", year)
    return _show_through(state, year, running, store, config)


# --- Timer driver ---


class TimerHandle(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    """Anything with asyncio's ``loop.call_later`` signature."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class PlaybackController:
    """Drives a session's playback from a scheduler (an asyncio loop in practice)."""

    def __init__(self, session: Any, scheduler: Scheduler, interval: float | None = None) -> None:
        self.session = session
        self.scheduler = scheduler
        self.interval = interval if interval is not None else session.config.playback.interval_seconds
        self._handle: TimerHandle | None = None

    @property
    def running(self) -> bool:
        return self.session.state.playback.running

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        self.session.dispatch(Play())
        self._arm()

    def stop(self) -> None:
        """Cancel the pending tick and pause. Safe to call at any time."""
        self._cancel()
        self.session.dispatch(Pause())

    def scrub_to(self, year: int) -> None:
        self.session.dispatch(Scrub(year))

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _arm(self) -> None:
        self._cancel()
        if self.running:
            self._handle = self.scheduler.call_later(self.interval, self._on_tick)

    def _on_tick(self) -> None:
        self._handle = None
        self.session.dispatch(Tick())
        self._arm()
