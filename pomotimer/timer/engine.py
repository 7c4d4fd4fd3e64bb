"""Session engine for pomotimer.

States
------
IDLE        Waiting for the first ``start()``.
RUNNING     Counting down the current session.
PAUSED      Frozen; remembers the remaining time, not a timestamp.
COMPLETED   Every configured set is done.

Transitions
-----------
IDLE | COMPLETED → RUNNING            (start, current session from the top)
RUNNING → PAUSED                      (pause)
PAUSED → RUNNING                      (start, resumes)
RUNNING | PAUSED → RUNNING            (countdown hits 0 / skip, more sets left)
RUNNING | PAUSED → COMPLETED          (countdown hits 0 / skip, last set)
Any → IDLE                            (reset)

Timing
------
The countdown never decrements a counter.  Entering RUNNING records an
absolute end timestamp on a monotonic clock; every poll recomputes
``remaining = end - now``.  Late or skipped polls therefore cost display
smoothness only, never accuracy.

Events
------
Every notification is emitted twice: on its own signal (``tick``,
``session_ended``, ``completed``, ``state_changed``) and as an
``EngineEvent`` on ``engine_event``, so a single subscriber can observe the
exact order.  Within one transition the order is always
SESSION_END → COMPLETE (terminal only) → STATE_CHANGE.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Mapping
from typing import Any, Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..settings import DEFAULT_SETTINGS, Settings, merge_settings
from .state import (
    EngineEvent,
    EventKind,
    SessionType,
    TimerState,
    TimerStatus,
    initial_state,
    next_session,
    session_duration_ms,
)

logger = logging.getLogger(__name__)


POLL_INTERVAL_MS = 100


def format_time(ms: float) -> str:
    """Render *ms* as ``MM:SS``, rounding partial seconds up.

    Minutes are not wrapped into hours: ``format_time(3_600_000)`` is
    ``"60:00"``.
    """
    total_seconds = max(0, math.ceil(ms / 1000))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


class SessionEngine(QObject):
    """Work/break sequencer with a drift-free countdown.

    Signals
    -------
    tick(state: TimerState)
        Emitted on each poll while running, unless that poll ends the
        session.
    session_ended(ended: SessionType, next: SessionType | None)
        Emitted once per transition, natural or skipped.
    completed()
        Emitted once when the final session ends.
    state_changed(state: TimerState)
        Emitted after start, pause, resume, reset and every transition.
    engine_event(event: EngineEvent)
        All of the above, in dispatch order.
    """

    tick = pyqtSignal(object)
    session_ended = pyqtSignal(object, object)
    completed = pyqtSignal()
    state_changed = pyqtSignal(object)
    engine_event = pyqtSignal(object)

    def __init__(
        self,
        settings: Settings | Mapping[str, Any] | None = None,
        parent: QObject | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        poll_interval_ms: int = POLL_INTERVAL_MS,
        on_tick: Optional[Callable[[TimerState], None]] = None,
        on_session_end: Optional[
            Callable[[SessionType, Optional[SessionType]], None]
        ] = None,
        on_complete: Optional[Callable[[], None]] = None,
        on_state_change: Optional[Callable[[TimerState], None]] = None,
    ) -> None:
        super().__init__(parent)

        self._settings: Settings = merge_settings(DEFAULT_SETTINGS, settings)
        self._state: TimerState = initial_state(self._settings)

        # ── countdown anchors (ms on the monotonic clock) ─────────────
        self._clock = clock
        self._start_ms: float = 0.0
        self._end_ms: float = 0.0
        self._paused_remaining: int = 0

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(poll_interval_ms)
        self._poll_timer.timeout.connect(self._poll)

        self.update_callbacks(
            on_tick=on_tick,
            on_session_end=on_session_end,
            on_complete=on_complete,
            on_state_change=on_state_change,
        )

    # ══════════════════════════════════════════════════════════════════
    #  ACCESSORS
    # ══════════════════════════════════════════════════════════════════

    def get_state(self) -> TimerState:
        return self._state.copy()

    def get_settings(self) -> Settings:
        return merge_settings(self._settings, None)

    def get_progress(self) -> float:
        """Percent of the current session elapsed, 0–100."""
        total = self._state.total_duration
        if total == 0:
            return 0.0
        elapsed = total - self._state.remaining_time
        return elapsed / total * 100

    def is_running(self) -> bool:
        return self._state.status is TimerStatus.RUNNING

    def is_paused(self) -> bool:
        return self._state.status is TimerStatus.PAUSED

    def is_completed(self) -> bool:
        return self._state.status is TimerStatus.COMPLETED

    def is_idle(self) -> bool:
        return self._state.status is TimerStatus.IDLE

    @property
    def poll_active(self) -> bool:
        """True while the polling loop is scheduled."""
        return self._poll_timer.isActive()

    format_time = staticmethod(format_time)

    # ══════════════════════════════════════════════════════════════════
    #  CONFIGURATION
    # ══════════════════════════════════════════════════════════════════

    def update_settings(
        self, partial: Settings | Mapping[str, Any]
    ) -> None:
        """Merge *partial* into the configuration.

        A session already in progress keeps its duration; the new values
        apply from the next duration lookup.
        """
        self._settings = merge_settings(self._settings, partial)
        logger.debug("Settings updated: %s", self._settings)

    def update_callbacks(
        self,
        *,
        on_tick: Optional[Callable[[TimerState], None]] = None,
        on_session_end: Optional[
            Callable[[SessionType, Optional[SessionType]], None]
        ] = None,
        on_complete: Optional[Callable[[], None]] = None,
        on_state_change: Optional[Callable[[TimerState], None]] = None,
    ) -> None:
        """Connect plain callables to the matching signals."""
        if on_tick is not None:
            self.tick.connect(on_tick)
        if on_session_end is not None:
            self.session_ended.connect(on_session_end)
        if on_complete is not None:
            self.completed.connect(on_complete)
        if on_state_change is not None:
            self.state_changed.connect(on_state_change)

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Start the current session, or resume it when paused.

        From COMPLETED the last session runs again at full length; use
        ``reset()`` to go back to set 1.
        """
        status = self._state.status
        if status is TimerStatus.RUNNING:
            logger.debug("start() ignored: status=%s", status.value)
            return
        if status is TimerStatus.PAUSED:
            self._resume()
            return

        duration = session_duration_ms(
            self._settings, self._state.current_session
        )
        self._state.status = TimerStatus.RUNNING
        self._state.total_duration = duration
        self._state.remaining_time = duration
        logger.info(
            "Session started: %s set=%d duration=%dms",
            self._state.current_session.value,
            self._state.current_set,
            duration,
        )
        self._start_countdown(duration)
        self._emit_state_change()

    def pause(self) -> None:
        if self._state.status is not TimerStatus.RUNNING:
            logger.debug("pause() ignored: status=%s", self._state.status.value)
            return
        self._stop_countdown()
        self._paused_remaining = self._state.remaining_time
        self._state.status = TimerStatus.PAUSED
        logger.info("Paused with %dms remaining", self._paused_remaining)
        self._emit_state_change()

    def _resume(self) -> None:
        self._state.status = TimerStatus.RUNNING
        logger.info("Resumed with %dms remaining", self._paused_remaining)
        self._start_countdown(self._paused_remaining)
        self._emit_state_change()

    def reset(self) -> None:
        """Back to set 1, idle, full work duration.  Always succeeds."""
        self._stop_countdown()
        self._paused_remaining = 0
        self._state = initial_state(self._settings)
        logger.info("Timer reset")
        self._emit_state_change()

    def skip(self) -> None:
        """End the current session now, exactly as if it had run out."""
        if self._state.status in (TimerStatus.IDLE, TimerStatus.COMPLETED):
            logger.debug("skip() ignored: status=%s", self._state.status.value)
            return
        logger.info("Skipping %s", self._state.current_session.value)
        self._end_session()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: countdown
    # ══════════════════════════════════════════════════════════════════

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    def _start_countdown(self, duration_ms: int) -> None:
        # one loop per engine: always clear the previous handle first
        self._poll_timer.stop()
        self._start_ms = self._now_ms()
        self._end_ms = self._start_ms + duration_ms
        self._poll_timer.start()

    def _stop_countdown(self) -> None:
        self._poll_timer.stop()

    def _poll(self) -> None:
        if self._state.status is not TimerStatus.RUNNING:
            return
        remaining = max(0, math.ceil(self._end_ms - self._now_ms()))
        self._state.remaining_time = remaining

        if remaining == 0:
            self._end_session()
        else:
            self.tick.emit(self._state.copy())
            self.engine_event.emit(
                EngineEvent(EventKind.TICK, state=self._state.copy())
            )

    def _end_session(self) -> None:
        self._stop_countdown()

        ended = self._state.current_session
        upcoming = next_session(
            ended,
            self._state.current_set,
            self._settings.total_sets,
            self._settings.long_break_interval,
        )
        logger.info(
            "Session ended: %s set=%d next=%s",
            ended.value,
            self._state.current_set,
            upcoming.value if upcoming is not None else None,
        )

        self.session_ended.emit(ended, upcoming)
        self.engine_event.emit(
            EngineEvent(EventKind.SESSION_END, ended=ended, next_session=upcoming)
        )

        if upcoming is None:
            self._state.status = TimerStatus.COMPLETED
            self._state.remaining_time = 0
            logger.info("All %d sets complete", self._settings.total_sets)
            self.completed.emit()
            self.engine_event.emit(EngineEvent(EventKind.COMPLETE))
        else:
            self._state.current_session = upcoming
            # the set only advances when a break hands back to work
            if ended.is_break and upcoming is SessionType.WORK:
                self._state.current_set += 1

            duration = session_duration_ms(self._settings, upcoming)
            self._state.total_duration = duration
            self._state.remaining_time = duration
            self._state.status = TimerStatus.RUNNING
            self._start_countdown(duration)

        self._emit_state_change()

    def _emit_state_change(self) -> None:
        # each channel gets its own copy
        self.state_changed.emit(self._state.copy())
        self.engine_event.emit(
            EngineEvent(EventKind.STATE_CHANGE, state=self._state.copy())
        )
