import time

import pytest

from flight_clock import FlightClock
from flight_state import FlightState
from periodic_task import PeriodicTask


def wait_until(predicate, timeout_s: float = 2.0, step_s: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(step_s)
    return predicate()


@pytest.fixture
def state():
    s = FlightState()
    s.motors_engaged = True
    return s


@pytest.fixture
def clock(state):
    # Long period: firings in these tests are driven by hand.
    c = FlightClock(state, period_s=60.0)
    yield c
    c.stop(wait=True)


class TestFlightClockTokens:
    def test_fire_with_active_token_advances_flight_time(self, clock, state):
        token = clock.start()
        assert clock.fire(token) is True
        assert clock.fire(token) is True
        assert state.flight_time_s == 2

    def test_stale_token_from_previous_flight_is_ignored(self, clock, state):
        first = clock.start()
        clock.stop()
        second = clock.start()

        assert first != second
        assert clock.fire(first) is False
        assert state.flight_time_s == 0
        assert clock.fire(second) is True
        assert state.flight_time_s == 1

    def test_stop_invalidates_token(self, clock, state):
        token = clock.start()
        clock.stop()
        assert clock.active_token is None
        assert clock.fire(token) is False
        assert state.flight_time_s == 0

    def test_no_advance_while_motors_disengaged(self, clock, state):
        token = clock.start()
        state.motors_engaged = False
        assert clock.fire(token) is False
        assert state.flight_time_s == 0

    def test_restart_replaces_schedule(self, clock):
        clock.start()
        clock.start()
        assert clock.running is True
        clock.stop()
        assert clock.running is False


def test_schedule_counts_seconds_while_flying(state):
    clock = FlightClock(state, period_s=0.05)
    try:
        clock.start()
        assert wait_until(lambda: state.flight_time_s >= 3)
    finally:
        clock.stop(wait=True)

    frozen = state.flight_time_s
    time.sleep(0.2)
    assert state.flight_time_s == frozen


# -----------------------------
# periodic_task
# -----------------------------

class TestPeriodicTask:
    def test_start_is_idempotent_while_running(self):
        task = PeriodicTask(lambda: None, 60.0)
        try:
            assert task.start() is True
            assert task.start() is False
            assert task.running is True
        finally:
            task.stop()
        assert task.running is False

    def test_start_after_stop_creates_new_schedule(self):
        calls = []
        task = PeriodicTask(lambda: calls.append(1), 60.0, initial_delay_s=0.0)
        task.start()
        assert wait_until(lambda: len(calls) == 1)
        task.stop()
        assert task.start() is True
        assert wait_until(lambda: len(calls) == 2)
        task.stop()

    def test_step_runs_action_synchronously(self):
        calls = []
        task = PeriodicTask(lambda: calls.append(1), 60.0)
        task.step(3)
        assert calls == [1, 1, 1]
        assert task.running is False

    def test_action_exception_does_not_end_schedule(self):
        calls = []

        def action():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")

        task = PeriodicTask(action, 0.02, initial_delay_s=0.0)
        task.start()
        try:
            assert wait_until(lambda: len(calls) >= 3)
        finally:
            task.stop()

    def test_action_may_stop_its_own_schedule(self):
        holder = {}

        def action():
            holder["task"].stop()

        task = PeriodicTask(action, 0.02, initial_delay_s=0.0)
        holder["task"] = task
        task.start()
        assert wait_until(lambda: not task.running)

    def test_stop_without_start_is_noop(self):
        PeriodicTask(lambda: None, 1.0).stop()
