"""Tests for the pomotimer session engine.

Covers: construction defaults, start/pause/resume/reset/skip, the
wall-clock countdown (drift, monotonicity, pause exactness), the
work/break/long-break sequence, event ordering and cardinality, and
time formatting.
"""

import time

import pytest

from pomotimer.settings import Settings, ThemeMode
from pomotimer.timer.engine import POLL_INTERVAL_MS, SessionEngine, format_time
from pomotimer.timer.state import (
    EventKind, SessionType, TimerState, TimerStatus,
)

from helpers import SignalCollector, event_kinds, expire_session

MIN = 60 * 1000


# ═══════════════════════════════════════════════════════════════════════════
#  CONSTRUCTION
# ═══════════════════════════════════════════════════════════════════════════


class TestConstruction:

    def test_initial_state_is_idle_work_set_1(self, engine):
        state = engine.get_state()
        assert state.status == TimerStatus.IDLE
        assert state.current_session == SessionType.WORK
        assert state.current_set == 1
        assert state.remaining_time == 25 * MIN
        assert state.total_duration == 25 * MIN

    def test_default_settings(self, engine):
        s = engine.get_settings()
        assert s.work_duration == 25
        assert s.break_duration == 5
        assert s.long_break_duration == 15
        assert s.total_sets == 4
        assert s.long_break_interval == 4
        assert s.sound_enabled is True
        assert s.notification_enabled is True
        assert s.theme_mode == ThemeMode.SYSTEM

    def test_partial_mapping_fills_defaults(self, make_engine):
        eng = make_engine(work_duration=10, total_sets=2)
        s = eng.get_settings()
        assert s.work_duration == 10
        assert s.total_sets == 2
        assert s.break_duration == 5
        assert eng.get_state().remaining_time == 10 * MIN

    def test_unknown_keys_ignored(self, qapp, clock):
        eng = SessionEngine({"work_duration": 3, "colour": "red"}, clock=clock)
        assert eng.get_settings().work_duration == 3
        assert not hasattr(eng.get_settings(), "colour")

    def test_accepts_settings_instance(self, qapp, clock):
        eng = SessionEngine(Settings(break_duration=7), clock=clock)
        assert eng.get_settings().break_duration == 7

    def test_poll_interval_is_100ms(self, engine):
        assert POLL_INTERVAL_MS == 100
        assert engine._poll_timer.interval() == 100

    def test_constructor_callbacks_are_connected(self, qapp, clock):
        calls = []
        eng = SessionEngine(
            {"total_sets": 1},
            clock=clock,
            on_tick=lambda s: calls.append("tick"),
            on_session_end=lambda e, n: calls.append(("end", e, n)),
            on_complete=lambda: calls.append("complete"),
            on_state_change=lambda s: calls.append(("state", s.status)),
        )
        eng.start()
        clock.advance(1)
        eng._poll()
        eng.skip()
        assert calls == [
            ("state", TimerStatus.RUNNING),
            "tick",
            ("end", SessionType.WORK, None),
            "complete",
            ("state", TimerStatus.COMPLETED),
        ]

    def test_update_callbacks_adds_handlers(self, engine):
        seen = []
        engine.update_callbacks(on_state_change=seen.append)
        engine.start()
        assert len(seen) == 1


# ═══════════════════════════════════════════════════════════════════════════
#  CONTROLS
# ═══════════════════════════════════════════════════════════════════════════


class TestControls:

    def test_start_runs_and_fires_state_change(self, engine):
        c = SignalCollector()
        engine.state_changed.connect(c)
        engine.start()
        assert engine.is_running()
        assert engine.poll_active
        assert len(c) == 1
        assert c.last.status == TimerStatus.RUNNING

    def test_start_is_noop_when_running(self, engine, clock):
        engine.start()
        c = SignalCollector()
        engine.state_changed.connect(c)
        clock.advance(30)
        engine._poll()
        engine.start()
        assert len(c) == 0
        assert engine.get_state().remaining_time == 25 * MIN - 30_000

    def test_start_picks_up_updated_duration(self, engine):
        engine.update_settings({"work_duration": 50})
        engine.start()
        state = engine.get_state()
        assert state.total_duration == 50 * MIN
        assert state.remaining_time == 50 * MIN

    def test_pause_stops_loop(self, engine, clock):
        engine.start()
        clock.advance(60)
        engine._poll()
        engine.pause()
        assert engine.is_paused()
        assert not engine.poll_active
        assert engine.get_state().remaining_time == 24 * MIN

    def test_pause_is_noop_when_idle(self, engine):
        c = SignalCollector()
        engine.state_changed.connect(c)
        engine.pause()
        assert engine.is_idle()
        assert len(c) == 0

    def test_pause_is_noop_when_paused(self, engine):
        engine.start()
        engine.pause()
        c = SignalCollector()
        engine.state_changed.connect(c)
        engine.pause()
        assert len(c) == 0

    def test_polls_ignored_while_paused(self, engine, clock):
        engine.start()
        engine.pause()
        before = engine.get_state()
        clock.advance(600)
        engine._poll()
        assert engine.get_state() == before

    def test_start_resumes_from_pause(self, engine):
        engine.start()
        engine.pause()
        c = SignalCollector()
        engine.state_changed.connect(c)
        engine.start()
        assert engine.is_running()
        assert engine.poll_active
        assert c.last.status == TimerStatus.RUNNING

    def test_start_from_completed_reruns_last_session(self, make_engine):
        eng = make_engine(total_sets=1)
        eng.start()
        eng.skip()
        assert eng.is_completed()
        assert eng.get_state().remaining_time == 0
        c = SignalCollector()
        eng.state_changed.connect(c)
        eng.start()
        state = eng.get_state()
        assert eng.is_running()
        assert eng.poll_active
        assert state.current_session is SessionType.WORK
        assert state.total_duration == 25 * MIN
        assert state.remaining_time == state.total_duration
        assert len(c) == 1
        assert c.last.status == TimerStatus.RUNNING

    def test_skip_is_noop_when_idle(self, engine):
        c = SignalCollector()
        engine.session_ended.connect(c)
        engine.skip()
        assert engine.is_idle()
        assert len(c) == 0

    def test_skip_is_noop_when_completed(self, make_engine):
        eng = make_engine(total_sets=1)
        eng.start()
        eng.skip()
        c = SignalCollector()
        eng.session_ended.connect(c)
        eng.skip()
        assert len(c) == 0

    def test_skip_from_pause_moves_on_and_runs(self, engine):
        engine.start()
        engine.pause()
        engine.skip()
        state = engine.get_state()
        assert state.status == TimerStatus.RUNNING
        assert state.current_session == SessionType.BREAK
        assert engine.poll_active


# ═══════════════════════════════════════════════════════════════════════════
#  RESET
# ═══════════════════════════════════════════════════════════════════════════


class TestReset:

    @pytest.fixture
    def fresh_state(self, qapp, clock):
        return SessionEngine({"work_duration": 20}, clock=clock).get_state()

    def _engine(self, clock):
        return SessionEngine({"work_duration": 20}, clock=clock)

    def test_reset_from_idle(self, qapp, clock, fresh_state):
        eng = self._engine(clock)
        eng.reset()
        assert eng.get_state() == fresh_state

    def test_reset_from_running(self, qapp, clock, fresh_state):
        eng = self._engine(clock)
        eng.start()
        eng.skip()
        clock.advance(12)
        eng._poll()
        eng.reset()
        assert eng.get_state() == fresh_state
        assert not eng.poll_active

    def test_reset_from_paused(self, qapp, clock, fresh_state):
        eng = self._engine(clock)
        eng.start()
        eng.pause()
        eng.reset()
        assert eng.get_state() == fresh_state

    def test_reset_from_completed(self, qapp, clock):
        eng = SessionEngine({"work_duration": 20, "total_sets": 1}, clock=clock)
        fresh = eng.get_state()
        eng.start()
        eng.skip()
        eng.reset()
        assert eng.get_state() == fresh

    def test_reset_fires_state_change(self, engine):
        engine.start()
        c = SignalCollector()
        engine.state_changed.connect(c)
        engine.reset()
        assert len(c) == 1
        assert c.last.status == TimerStatus.IDLE

    def test_reset_then_start_runs_from_set_1(self, engine):
        engine.start()
        engine.skip()
        engine.skip()
        assert engine.get_state().current_set == 2
        engine.reset()
        engine.start()
        state = engine.get_state()
        assert state.current_set == 1
        assert state.current_session == SessionType.WORK


# ═══════════════════════════════════════════════════════════════════════════
#  COUNTDOWN / DRIFT
# ═══════════════════════════════════════════════════════════════════════════


class TestCountdown:

    def test_poll_recomputes_from_clock(self, engine, clock):
        engine.start()
        clock.advance(1.5)
        engine._poll()
        assert engine.get_state().remaining_time == 25 * MIN - 1500

    def test_tick_carries_snapshot(self, engine, clock):
        c = SignalCollector()
        engine.tick.connect(c)
        engine.start()
        clock.advance(2)
        engine._poll()
        assert len(c) == 1
        assert isinstance(c.last, TimerState)
        assert c.last.remaining_time == 25 * MIN - 2000

    def test_starved_loop_reports_true_elapsed_time(self, engine, clock):
        """Fifty missed polls cost nothing: one late poll is exact."""
        engine.start()
        clock.advance(50 * POLL_INTERVAL_MS / 1000)
        engine._poll()
        assert engine.get_state().remaining_time == 25 * MIN - 5000

    def test_long_suspension_recomputes_remaining(self, engine, clock):
        engine.start()
        clock.advance(20 * 60)
        engine._poll()
        assert engine.get_state().remaining_time == 5 * MIN

    def test_remaining_never_increases(self, engine, clock):
        engine.start()
        seen = [engine.get_state().remaining_time]
        for step in (0.25, 0.0, 3.5, 0.125, 10.0, 0.0, 0.5):
            clock.advance(step)
            engine._poll()
            seen.append(engine.get_state().remaining_time)
        assert all(a >= b for a, b in zip(seen, seen[1:]))

    def test_partial_millisecond_rounds_up(self, engine, clock):
        engine.start()
        clock.advance(0.0005)
        engine._poll()
        assert engine.get_state().remaining_time == 25 * MIN

    def test_expiry_fires_transition_once(self, engine, clock):
        ends = SignalCollector()
        ticks = SignalCollector()
        engine.session_ended.connect(ends)
        engine.tick.connect(ticks)
        engine.start()
        clock.advance(25 * 60 + 30)
        engine._poll()
        engine._poll()
        assert len(ends) == 1
        assert ticks.last.current_session == SessionType.BREAK
        assert len(ticks) == 1  # only the second poll, in the break

    def test_expiry_poll_emits_no_tick(self, engine, clock):
        ticks = SignalCollector()
        engine.tick.connect(ticks)
        engine.start()
        expire_session(engine, clock)
        assert len(ticks) == 0

    def test_next_session_anchored_at_transition(self, engine, clock):
        engine.start()
        clock.advance(25 * 60 + 90)  # poll arrives 90 s late
        engine._poll()
        clock.advance(60)
        engine._poll()
        assert engine.get_state().remaining_time == 4 * MIN


# ═══════════════════════════════════════════════════════════════════════════
#  PAUSE / RESUME EXACTNESS
# ═══════════════════════════════════════════════════════════════════════════


class TestPauseResume:

    def test_paused_time_is_excluded(self, engine, clock):
        engine.start()
        clock.advance(60)
        engine._poll()
        engine.pause()

        clock.advance(3600)
        engine.start()
        assert engine.get_state().remaining_time == 24 * MIN

        clock.advance(24 * 60 - 0.5)
        engine._poll()
        assert engine.get_state().remaining_time == 500
        assert engine.get_state().current_session == SessionType.WORK

        clock.advance(0.5)
        engine._poll()
        assert engine.get_state().current_session == SessionType.BREAK

    def test_pause_freezes_last_polled_remaining(self, engine, clock):
        engine.start()
        clock.advance(10)
        engine._poll()
        clock.advance(5)  # no poll before the pause
        engine.pause()
        engine.start()
        assert engine.get_state().remaining_time == 25 * MIN - 10_000

    def test_repeated_pause_cycles(self, engine, clock):
        engine.start()
        for _ in range(3):
            clock.advance(30)
            engine._poll()
            engine.pause()
            clock.advance(500)
            engine.start()
        clock.advance(1)
        engine._poll()
        assert engine.get_state().remaining_time == 25 * MIN - 91_000


# ═══════════════════════════════════════════════════════════════════════════
#  SESSION SEQUENCE
# ═══════════════════════════════════════════════════════════════════════════


def _walk(engine) -> list:
    """Skip through a whole run; return (session, set) for each session."""
    engine.start()
    seen = []
    while not engine.is_completed():
        s = engine.get_state()
        seen.append((s.current_session, s.current_set))
        engine.skip()
    return seen


class TestSequence:

    def test_four_sets_interval_four(self, make_engine):
        seen = _walk(make_engine(total_sets=4, long_break_interval=4))
        W, B = SessionType.WORK, SessionType.BREAK
        assert seen == [
            (W, 1), (B, 1), (W, 2), (B, 2), (W, 3), (B, 3), (W, 4),
        ]

    def test_six_sets_interval_three(self, make_engine):
        seen = _walk(make_engine(total_sets=6, long_break_interval=3))
        W, B, L = SessionType.WORK, SessionType.BREAK, SessionType.LONG_BREAK
        assert seen == [
            (W, 1), (B, 1), (W, 2), (B, 2), (W, 3), (L, 3),
            (W, 4), (B, 4), (W, 5), (B, 5), (W, 6),
        ]

    def test_set_unchanged_during_break(self, engine):
        engine.start()
        engine.skip()
        state = engine.get_state()
        assert state.current_session == SessionType.BREAK
        assert state.current_set == 1

    def test_break_uses_break_duration(self, make_engine):
        eng = make_engine(break_duration=3, long_break_duration=20,
                          total_sets=3, long_break_interval=2)
        eng.start()
        eng.skip()
        assert eng.get_state().total_duration == 3 * MIN
        eng.skip()
        eng.skip()
        assert eng.get_state().current_session == SessionType.LONG_BREAK
        assert eng.get_state().total_duration == 20 * MIN

    def test_single_set_completes_after_work(self, make_engine):
        eng = make_engine(total_sets=1)
        assert _walk(eng) == [(SessionType.WORK, 1)]

    def test_zero_sets_completes_immediately(self, make_engine):
        eng = make_engine(total_sets=0)
        eng.start()
        eng.skip()
        assert eng.is_completed()

    def test_zero_interval_does_not_crash(self, make_engine):
        eng = make_engine(total_sets=3, long_break_interval=0)
        sessions = {s for s, _ in _walk(eng)}
        assert SessionType.LONG_BREAK not in sessions

    def test_completed_state(self, make_engine):
        eng = make_engine(total_sets=2)
        _walk(eng)
        state = eng.get_state()
        assert state.status == TimerStatus.COMPLETED
        assert state.remaining_time == 0
        assert not eng.poll_active
        assert eng.get_progress() == pytest.approx(100.0)

    def test_natural_run_to_completion(self, make_engine, clock):
        eng = make_engine(total_sets=2)
        eng.start()
        for _ in range(3):
            expire_session(eng, clock)
        assert eng.is_completed()


# ═══════════════════════════════════════════════════════════════════════════
#  EVENTS
# ═══════════════════════════════════════════════════════════════════════════


class TestEvents:

    @pytest.mark.parametrize("sets", [1, 2, 4, 7])
    def test_cardinality(self, make_engine, sets):
        eng = make_engine(total_sets=sets)
        ends = SignalCollector()
        done = SignalCollector()
        eng.session_ended.connect(ends)
        eng.completed.connect(done)
        _walk(eng)
        assert len(ends) == 2 * sets - 1
        assert len(done) == 1

    def test_session_end_payloads(self, make_engine):
        eng = make_engine(total_sets=2)
        ends = SignalCollector()
        eng.session_ended.connect(ends)
        _walk(eng)
        assert ends.items == [
            (SessionType.WORK, SessionType.BREAK),
            (SessionType.BREAK, SessionType.WORK),
            (SessionType.WORK, None),
        ]

    def test_order_on_transition(self, engine):
        events = SignalCollector()
        engine.start()
        engine.engine_event.connect(events)
        engine.skip()
        assert event_kinds(events) == [
            EventKind.SESSION_END, EventKind.STATE_CHANGE,
        ]

    def test_order_on_completion(self, make_engine):
        eng = make_engine(total_sets=1)
        eng.start()
        events = SignalCollector()
        eng.engine_event.connect(events)
        eng.skip()
        assert event_kinds(events) == [
            EventKind.SESSION_END, EventKind.COMPLETE, EventKind.STATE_CHANGE,
        ]
        assert events.last.state.status == TimerStatus.COMPLETED

    def test_session_end_event_fields(self, engine):
        events = SignalCollector()
        engine.start()
        engine.engine_event.connect(events)
        engine.skip()
        end = events[0]
        assert end.ended == SessionType.WORK
        assert end.next_session == SessionType.BREAK
        assert end.state is None

    def test_state_change_on_every_operation(self, engine):
        c = SignalCollector()
        engine.state_changed.connect(c)
        engine.start()
        engine.pause()
        engine.start()
        engine.skip()
        engine.reset()
        assert [s.status for s in c.items] == [
            TimerStatus.RUNNING, TimerStatus.PAUSED, TimerStatus.RUNNING,
            TimerStatus.RUNNING, TimerStatus.IDLE,
        ]

    def test_skip_matches_natural_expiry(self, qapp, clock):
        skipped = SessionEngine({"total_sets": 3}, clock=clock)
        natural = SessionEngine({"total_sets": 3}, clock=clock)
        for eng in (skipped, natural):
            eng.start()
        clock.advance(90)
        skipped._poll()
        natural._poll()

        a, b = SignalCollector(), SignalCollector()
        skipped.engine_event.connect(a)
        natural.engine_event.connect(b)

        skipped.skip()
        expire_session(natural, clock)

        assert skipped.get_state() == natural.get_state()
        assert event_kinds(a) == event_kinds(b)
        assert a[0] == b[0]


# ═══════════════════════════════════════════════════════════════════════════
#  SETTINGS UPDATES & SNAPSHOTS
# ═══════════════════════════════════════════════════════════════════════════


class TestSettingsAndSnapshots:

    def test_update_does_not_rescale_current_session(self, engine, clock):
        engine.start()
        clock.advance(60)
        engine._poll()
        engine.update_settings({"work_duration": 50, "break_duration": 9})
        state = engine.get_state()
        assert state.total_duration == 25 * MIN
        assert state.remaining_time == 24 * MIN
        clock.advance(30)
        engine._poll()
        assert engine.get_state().remaining_time == 24 * MIN - 30_000

    def test_update_applies_on_next_transition(self, engine):
        engine.start()
        engine.update_settings({"break_duration": 9})
        engine.skip()
        assert engine.get_state().total_duration == 9 * MIN

    def test_update_merges(self, engine):
        engine.update_settings({"total_sets": 8})
        engine.update_settings(Settings(total_sets=8, work_duration=30))
        s = engine.get_settings()
        assert s.total_sets == 8
        assert s.work_duration == 30

    def test_get_state_is_a_copy(self, engine):
        state = engine.get_state()
        state.current_set = 99
        state.status = TimerStatus.COMPLETED
        assert engine.get_state().current_set == 1
        assert engine.is_idle()

    def test_signal_snapshots_are_copies(self, engine):
        c = SignalCollector()
        engine.state_changed.connect(c)
        engine.start()
        c.last.remaining_time = 0
        assert engine.get_state().remaining_time == 25 * MIN

    def test_channels_do_not_share_snapshots(self, engine, clock):
        states = SignalCollector()
        ticks = SignalCollector()
        events = SignalCollector()
        engine.state_changed.connect(states)
        engine.tick.connect(ticks)
        engine.engine_event.connect(events)
        engine.start()
        clock.advance(2)
        engine._poll()
        states.last.remaining_time = 0
        ticks.last.remaining_time = 0
        change, tick = events[0], events[1]
        assert change.kind is EventKind.STATE_CHANGE
        assert tick.kind is EventKind.TICK
        assert change.state.remaining_time == 25 * MIN
        assert tick.state.remaining_time == 25 * MIN - 2000

    def test_get_settings_is_a_copy(self, engine):
        s = engine.get_settings()
        s.total_sets = 1
        assert engine.get_settings().total_sets == 4


# ═══════════════════════════════════════════════════════════════════════════
#  PROGRESS & PREDICATES
# ═══════════════════════════════════════════════════════════════════════════


class TestProgress:

    def test_zero_at_start(self, engine):
        engine.start()
        assert engine.get_progress() == 0.0

    def test_halfway(self, make_engine, clock):
        eng = make_engine(work_duration=10)
        eng.start()
        clock.advance(5 * 60)
        eng._poll()
        assert eng.get_progress() == pytest.approx(50.0)

    def test_zero_total_duration_guard(self, make_engine):
        eng = make_engine(work_duration=0)
        assert eng.get_state().total_duration == 0
        assert eng.get_progress() == 0.0

    def test_predicates_follow_status(self, engine):
        assert engine.is_idle()
        engine.start()
        assert engine.is_running() and not engine.is_idle()
        engine.pause()
        assert engine.is_paused() and not engine.is_running()
        engine.reset()
        assert engine.is_idle() and not engine.is_completed()


# ═══════════════════════════════════════════════════════════════════════════
#  FORMAT TIME
# ═══════════════════════════════════════════════════════════════════════════


class TestFormatTime:

    @pytest.mark.parametrize("ms, text", [
        (0, "00:00"),
        (1, "00:01"),
        (999, "00:01"),
        (1000, "00:01"),
        (1001, "00:02"),
        (59_001, "01:00"),
        (60_000, "01:00"),
        (25 * MIN, "25:00"),
        (3_600_000, "60:00"),
        (125 * MIN, "125:00"),
    ])
    def test_values(self, ms, text):
        assert format_time(ms) == text

    def test_available_on_engine_class(self):
        assert SessionEngine.format_time(61_000) == "01:01"


# ═══════════════════════════════════════════════════════════════════════════
#  REAL EVENT LOOP
# ═══════════════════════════════════════════════════════════════════════════


class TestQtLoop:

    def test_qtimer_drives_the_countdown(self, qapp):
        """A 60 ms session completes through real QTimer polls."""
        eng = SessionEngine({"work_duration": 0.001, "total_sets": 1})
        done = SignalCollector()
        eng.completed.connect(done)
        eng.start()
        deadline = time.monotonic() + 5.0
        while not done and time.monotonic() < deadline:
            qapp.processEvents()
            time.sleep(0.01)
        assert len(done) == 1
        assert eng.is_completed()
