"""Timer data model: status and session enums, the state snapshot,
engine events, and the session-sequencing table.

Sequencing
----------
work      → terminal        if current_set >= total_sets
work      → long_break      if current_set % long_break_interval == 0
work      → break           otherwise
break     → terminal        if current_set >= total_sets
break     → work            otherwise (current_set advances by one)

``long_break`` follows the same rule as ``break``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from ..settings import Settings


MS_PER_MINUTE = 60 * 1000


# ── enums ─────────────────────────────────────────────────────────────────


class TimerStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class SessionType(str, Enum):
    WORK = "work"
    BREAK = "break"
    LONG_BREAK = "long_break"

    @property
    def is_break(self) -> bool:
        return self is not SessionType.WORK


class EventKind(str, Enum):
    TICK = "tick"
    SESSION_END = "session_end"
    COMPLETE = "complete"
    STATE_CHANGE = "state_change"


# ── snapshots ─────────────────────────────────────────────────────────────


@dataclass
class TimerState:
    """Mutable timer state.  Only the engine writes to it; everyone else
    gets a ``copy()``."""

    status: TimerStatus
    current_session: SessionType
    current_set: int
    remaining_time: int   # ms
    total_duration: int   # ms

    def copy(self) -> TimerState:
        return replace(self)


@dataclass(frozen=True)
class EngineEvent:
    """One notification from the engine, in dispatch order.

    ``state`` is set for TICK and STATE_CHANGE.  ``ended`` and
    ``next_session`` are set for SESSION_END (``next_session`` is None
    when the run is over).
    """

    kind: EventKind
    state: Optional[TimerState] = None
    ended: Optional[SessionType] = None
    next_session: Optional[SessionType] = None


# ── sequencing ────────────────────────────────────────────────────────────


def next_session(
    session: SessionType,
    current_set: int,
    total_sets: int,
    long_break_interval: int,
) -> Optional[SessionType]:
    """Return the session after *session*, or None when the run is over."""
    if current_set >= total_sets:
        return None
    if session is not SessionType.WORK:
        return SessionType.WORK
    if long_break_interval > 0 and current_set % long_break_interval == 0:
        return SessionType.LONG_BREAK
    return SessionType.BREAK


def session_duration_ms(settings: Settings, session: SessionType) -> int:
    minutes = {
        SessionType.WORK: settings.work_duration,
        SessionType.BREAK: settings.break_duration,
        SessionType.LONG_BREAK: settings.long_break_duration,
    }[session]
    return int(minutes * MS_PER_MINUTE)


def initial_state(settings: Settings) -> TimerState:
    duration = session_duration_ms(settings, SessionType.WORK)
    return TimerState(
        status=TimerStatus.IDLE,
        current_session=SessionType.WORK,
        current_set=1,
        remaining_time=duration,
        total_duration=duration,
    )
