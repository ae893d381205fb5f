"""
Title: Telemetry Broadcaster (10 Hz state stream)
Author: Alex Cooke
Date Created: 2026-10-13
Last Modified: 2026-10-19
Version: 1.2

Purpose:
Serializes the FlightState into the fixed telemetry line and unicasts it to
every peer holding a session. Sessions older than the timeout, and peers whose
send fails at the transport level, are removed after the send pass. When the
last session goes away the schedule stops itself; the next fresh handshake
starts a new one.

Scope and Limitations:
- The broadcaster keeps no state beyond its schedule.
- Field order and number formatting are fixed by existing ground-station
  parsers and must not change.

Dependencies:
- Python 3.10+
- threading (standard library)
- logging (standard library)
- periodic_task.py
- session_registry.py
- flight_state.py
- wire_format.py
"""

import logging
import threading
from typing import Callable

from flight_state import FlightState
from periodic_task import PeriodicTask
from session_registry import Endpoint, SessionRegistry
from wire_format import format_fixed, format_trimmed

logger = logging.getLogger(__name__)


def format_telemetry(state: FlightState) -> str:
    with state.lock:
        pos, pad, vel, acc = state.position, state.mission_pad_pose, state.velocity, state.acceleration
        fields = [
            ("mid", str(state.mission_pad_id)),
            ("x", format_fixed(pos.x, 0)),
            ("y", format_fixed(pos.y, 0)),
            ("z", format_fixed(pos.z, 0)),
            ("mpry", ",".join(format_fixed(v, 0) for v in (pad.x, pad.y, pad.z))),
            ("pitch", str(state.pitch_deg)),
            ("roll", str(state.roll_deg)),
            ("yaw", str(state.yaw_deg)),
            ("vgx", format_fixed(vel.x, 0)),
            ("vgy", format_fixed(vel.y, 0)),
            ("vgz", format_fixed(vel.z, 0)),
            ("templ", str(state.temp_low_c)),
            ("temph", str(state.temp_high_c)),
            ("tof", str(state.tof_cm)),
            ("h", str(state.height_cm // 10)),
            ("bat", str(state.battery_pct)),
            ("baro", format_trimmed(state.barometer)),
            ("time", str(state.flight_time_s)),
            ("agx", format_fixed(acc.x, 2)),
            ("agy", format_fixed(acc.y, 2)),
            ("agz", format_fixed(acc.z, 2)),
        ]
    return "".join(f"{name}:{value};" for name, value in fields)


class TelemetryBroadcaster:
    def __init__(
        self,
        state: FlightState,
        sessions: SessionRegistry,
        send: Callable[[bytes, Endpoint], object],
        period_s: float = 0.1,
        session_timeout_s: float = 60.0,
        join_timeout_s: float = 1.0,
    ):
        self._state = state
        self._sessions = sessions
        self._send = send
        self._session_timeout_s = float(session_timeout_s)

        # Serializes "last session gone -> stop" against "new session -> start".
        self._lifecycle_lock = threading.Lock()
        self._task = PeriodicTask(
            self.tick,
            period_s,
            initial_delay_s=0.0,
            name="telemetry-broadcaster",
            join_timeout_s=join_timeout_s,
        )

    @property
    def running(self) -> bool:
        return self._task.running

    def start(self) -> bool:
        with self._lifecycle_lock:
            started = self._task.start()
        if started:
            logger.info("Starting telemetry transmission every %.0f ms", self._task.period_s * 1000.0)
        return started

    def stop(self, wait: bool = True) -> None:
        was_running = self._task.running
        self._task.stop(wait=wait)
        if was_running:
            logger.info("Telemetry transmission stopped")

    def tick(self) -> list[Endpoint]:
        """
        One broadcast pass. Returns the endpoints removed during this pass.
        """
        entries = self._sessions.snapshot()
        payload = format_telemetry(self._state).encode("ascii")
        now = self._sessions.now()

        garbage: list[tuple[Endpoint, float]] = []
        for endpoint, last_seen in entries:
            if now - last_seen > self._session_timeout_s:
                garbage.append((endpoint, last_seen))
                continue
            try:
                self._send(payload, endpoint)
            except OSError as exc:
                logger.warning("Telemetry send to %s failed (%s); dropping session", endpoint, exc)
                garbage.append((endpoint, last_seen))

        with self._lifecycle_lock:
            removed = self._sessions.remove(garbage) if garbage else []
            if removed:
                logger.info("Sessions removed: %s", ", ".join(f"{h}:{p}" for h, p in removed))
            if len(self._sessions) == 0 and self._task.running:
                self._task.stop(wait=False)
                logger.info("Telemetry transmission stopped (no sessions left)")
        return removed
