"""
Title: Flight Time Counter (FlightClock)
Author: Alex Cooke
Date Created: 2026-10-13
Last Modified: 2026-10-17
Version: 1.1

Purpose:
Advances FlightState.flight_time_s once per period while the motors are
engaged. Every start() issues a new generation token; a firing only counts
when its token is still the active one, so a late tick from a flight that was
already landed cannot bump the timer of the next flight.

Scope and Limitations:
- At most one schedule is live; start() replaces any previous one.
- stop() invalidates the token and signals the schedule without joining it
  unless asked to (shutdown joins).

Dependencies:
- Python 3.10+
- threading (standard library)
- periodic_task.py
- flight_state.py
"""

import itertools
import threading

from flight_state import FlightState
from periodic_task import PeriodicTask


class FlightClock:
    def __init__(self, state: FlightState, period_s: float = 1.0, join_timeout_s: float = 1.0):
        self._state = state
        self._period_s = float(period_s)
        self._join_timeout_s = float(join_timeout_s)

        self._lock = threading.Lock()
        self._tokens = itertools.count(1)
        self._active_token: int | None = None
        self._task: PeriodicTask | None = None

    @property
    def active_token(self) -> int | None:
        with self._lock:
            return self._active_token

    @property
    def running(self) -> bool:
        with self._lock:
            return self._task is not None and self._task.running

    def start(self) -> int:
        with self._lock:
            token = next(self._tokens)
            previous, self._active_token = self._task, token
            self._task = PeriodicTask(
                lambda: self.fire(token),
                self._period_s,
                name=f"flight-clock-{token}",
                join_timeout_s=self._join_timeout_s,
            )
            task = self._task
        if previous is not None:
            previous.stop(wait=False)
        task.start()
        return token

    def stop(self, wait: bool = False) -> None:
        # Callers may hold the state lock, so by default the schedule is only
        # signalled; the invalidated token already neutralizes a late firing.
        with self._lock:
            self._active_token = None
            task, self._task = self._task, None
        if task is not None:
            task.stop(wait=wait)

    def fire(self, token: int) -> bool:
        # One tick. Returns True when the flight time advanced.
        # Lock order is state then clock, the same order takeoff/land use.
        with self._state.lock:
            with self._lock:
                if token != self._active_token:
                    return False
            if not self._state.motors_engaged:
                return False
            self._state.flight_time_s += 1
            return True
