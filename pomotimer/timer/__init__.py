"""Timer package."""

from .engine import POLL_INTERVAL_MS, SessionEngine, format_time
from .state import (
    EngineEvent,
    EventKind,
    SessionType,
    TimerState,
    TimerStatus,
    next_session,
    session_duration_ms,
)

__all__ = [
    "SessionEngine",
    "format_time",
    "POLL_INTERVAL_MS",
    "EngineEvent",
    "EventKind",
    "SessionType",
    "TimerState",
    "TimerStatus",
    "next_session",
    "session_duration_ms",
]
