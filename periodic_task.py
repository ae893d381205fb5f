"""
Title: Periodic Task Scheduler
Author: Alex Cooke
Date Created: 2026-10-13
Last Modified: 2026-10-19
Version: 1.3

Purpose:
Runs a callable on a fixed period in a background thread. Used for the 10 Hz
telemetry broadcast and the 1 Hz flight clock. Each start() creates a fresh
schedule with its own stop event, so a schedule that is winding down never
interferes with the one that replaced it.

Scope and Limitations:
- Timing is approximate: deadlines are tracked against time.monotonic but
  are not real-time deterministic.
- stop() is cooperative. A schedule whose action does not return within the
  join timeout is abandoned (left to finish as a daemon thread), never killed.
- stop() may be called from inside the action; it then only signals.

Dependencies:
- Python 3.10+
- threading (standard library)
- time (standard library)
- logging (standard library)
"""

import logging
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)


class PeriodicTask:
    def __init__(
        self,
        action: Callable[[], None],
        period_s: float,
        initial_delay_s: float | None = None,
        name: str = "periodic-task",
        join_timeout_s: float = 1.0,
    ):
        self._action = action
        self._period_s = float(period_s)
        self._initial_delay_s = self._period_s if initial_delay_s is None else float(initial_delay_s)
        self._name = name
        self._join_timeout_s = float(join_timeout_s)

        self._lock = threading.Lock()
        self._stop_evt: threading.Event | None = None
        self._thread: threading.Thread | None = None

    @property
    def period_s(self) -> float:
        return self._period_s

    @property
    def running(self) -> bool:
        with self._lock:
            return self._stop_evt is not None and not self._stop_evt.is_set()

    def start(self) -> bool:
        # Returns False when a live schedule already exists.
        with self._lock:
            if self._stop_evt is not None and not self._stop_evt.is_set():
                return False
            stop_evt = threading.Event()
            thread = threading.Thread(
                target=self._run, args=(stop_evt,), name=self._name, daemon=True
            )
            self._stop_evt = stop_evt
            self._thread = thread
            thread.start()
            return True

    def stop(self, wait: bool = True, timeout_s: float | None = None) -> None:
        with self._lock:
            stop_evt, thread = self._stop_evt, self._thread
            self._stop_evt = None
            self._thread = None

        if stop_evt is None:
            return
        stop_evt.set()

        if not wait or thread is None or thread is threading.current_thread():
            return
        thread.join(self._join_timeout_s if timeout_s is None else timeout_s)
        if thread.is_alive():
            logger.warning("%s did not stop in time; abandoning it", self._name)

    def step(self, n: int = 1) -> None:
        # Runs the action synchronously, outside any schedule.
        for _ in range(max(1, int(n))):
            self._action()

    def _run(self, stop_evt: threading.Event) -> None:
        next_at = time.monotonic() + self._initial_delay_s
        while not stop_evt.wait(max(0.0, next_at - time.monotonic())):
            try:
                self._action()
            except Exception:
                logger.exception("Unhandled exception in %s", self._name)
            next_at += self._period_s
            # Skip missed deadlines rather than bursting to catch up.
            now = time.monotonic()
            if next_at < now:
                next_at = now
