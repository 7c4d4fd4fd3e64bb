"""Shared test helpers for pomotimer."""

from pomotimer.timer.engine import SessionEngine
from pomotimer.timer.state import EventKind


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Monotonic clock the tests move by hand (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSoundManager:
    """Stands in for SoundManager where only the cue names matter."""

    def __init__(self):
        self.played: list[str] = []
        self.enabled = True
        self.tests = 0

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled

    def play(self, name: str) -> None:
        if self.enabled:
            self.played.append(name)

    def play_test(self) -> None:
        self.tests += 1


def expire_session(engine: SessionEngine, clock: FakeClock) -> None:
    """Let the current session run out and deliver the final poll."""
    clock.advance((engine._end_ms - engine._now_ms()) / 1000 + 0.001)
    engine._poll()


def event_kinds(collector: SignalCollector, *, skip_ticks: bool = True) -> list:
    return [
        e.kind for e in collector.items
        if not (skip_ticks and e.kind is EventKind.TICK)
    ]
