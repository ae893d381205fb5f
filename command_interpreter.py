"""
Title: Remote Command Interpreter (CommandInterpreter)
Author: Alex Cooke
Date Created: 2026-10-12
Last Modified: 2026-10-19
Version: 1.4

Purpose:
Validates one remote command line against the emulated drone protocol and
applies it to a FlightState, returning a CommandResult. The interpreter owns
every protocol rule: argument counts, numeric domains, the motors-engaged
interlock, height clamping, and yaw wrap-around.

Validation order (observable by clients, must not be reordered):
1. Argument count for the verb. A mismatch answers "unknown command: <verb>",
   the same text used for verbs that do not exist.
2. Numeric argument parse and range check -> "out of range".
3. Motors-engaged check for movement and rotation -> "error Motor stop".
4. Apply the change.

Scope and Limitations:
- left/right/forward/backward all accumulate into the single tof register.
- land blocks the calling thread for the configured descent delay when the
  motors are engaged; the state lock is not held while waiting.
- No flight dynamics: position, velocity and acceleration are never changed
  by commands.

Dependencies:
- Python 3.10+
- re (standard library)
- time (standard library)
- command_outcomes.py
- flight_state.py
- flight_clock.py
- wire_format.py
"""

import logging
import re
import time
from typing import Callable, Sequence

from command_outcomes import CommandResult
from flight_clock import FlightClock
from flight_state import FlightState
from wire_format import format_fixed

logger = logging.getLogger(__name__)

SERIAL_NUMBER = "0TQDG7REDBD9ZC"
SDK_VERSION = "20"

TAKEOFF_HEIGHT_CM = 1
MAX_HEIGHT_CM = 500
MIN_HEIGHT_AFTER_DOWN_CM = 10

MOVE_RANGE_CM = (20, 500)
ROTATE_RANGE_DEG = (1, 3600)
SPEED_RANGE_PCT = (10, 100)
RC_RANGE = (-100, 100)
RC_CHANNELS = 4

FLIP_DIRECTIONS = frozenset({"l", "r", "f", "b"})

_INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_int(token: str, lo: int, hi: int) -> int | None:
    # Signed decimal integer within [lo, hi], else None.
    if not _INTEGER.fullmatch(token):
        return None
    value = int(token)
    if value < lo or value > hi:
        return None
    return value


def wrap_degrees(value: int) -> int:
    while value >= 180:
        value -= 360
    while value < -180:
        value += 360
    return value


class CommandInterpreter:
    def __init__(
        self,
        flight_clock: FlightClock | None = None,
        sleep: Callable[[float], None] = time.sleep,
        land_delay_s: float = 1.0,
    ):
        self._flight_clock = flight_clock
        self._sleep = sleep
        self._land_delay_s = float(land_delay_s)

        # verb -> (min args, max args or None for unbounded, handler)
        self._commands: dict[str, tuple[int, int | None, Callable]] = {
            "command": (0, 0, self._ok),
            "takeoff": (0, 0, self._takeoff),
            "land": (0, 0, self._land),
            "emergency": (0, 0, self._emergency),
            "battery?": (0, 0, lambda s, a: CommandResult.value(str(s.battery_pct))),
            "wifi?": (0, 0, lambda s, a: CommandResult.value(str(s.wifi_snr_db))),
            "speed?": (0, 0, lambda s, a: CommandResult.value(f"{s.speed_pct}.0")),
            "sn?": (0, 0, lambda s, a: CommandResult.value(SERIAL_NUMBER)),
            "height?": (0, 0, lambda s, a: CommandResult.value(f"{s.height_cm // 10}dm")),
            "temp?": (0, 0, lambda s, a: CommandResult.value(f"{s.temp_low_c}~{s.temp_high_c}C")),
            "baro?": (0, 0, lambda s, a: CommandResult.value(format_fixed(s.barometer, 6))),
            "tof?": (0, 0, lambda s, a: CommandResult.value(f"{s.tof_cm * 10}mm")),
            "time?": (0, 0, lambda s, a: CommandResult.value(f"{s.flight_time_s}s")),
            "attitude?": (0, 0, self._query_attitude),
            "acceleration?": (0, 0, self._query_acceleration),
            "sdk?": (0, 0, lambda s, a: CommandResult.value(SDK_VERSION)),
            "mon": (0, 0, self._ok),
            "moff": (0, 0, self._ok),
            "streamon": (0, 0, self._ok),
            "streamoff": (0, 0, self._ok),
            "up": (1, 1, self._up),
            "down": (1, 1, self._down),
            "right": (1, 1, lambda s, a: self._move_tof(s, a, +1)),
            "left": (1, 1, lambda s, a: self._move_tof(s, a, -1)),
            "forward": (1, 1, lambda s, a: self._move_tof(s, a, +1)),
            "backward": (1, 1, lambda s, a: self._move_tof(s, a, -1)),
            "cw": (1, 1, lambda s, a: self._rotate(s, a, +1)),
            "ccw": (1, 1, lambda s, a: self._rotate(s, a, -1)),
            "speed": (1, 1, self._speed),
            "flip": (1, 1, self._flip),
            "rc": (2, None, self._rc),
            "wifi": (2, 2, self._wifi),
        }

    @property
    def verbs(self) -> frozenset[str]:
        return frozenset(self._commands)

    def apply(self, state: FlightState, command_line: str | None) -> CommandResult:
        if command_line is None:
            return CommandResult.no_response()

        words = command_line.split()
        if not words:
            return CommandResult.error()

        verb, args = words[0], words[1:]
        entry = self._commands.get(verb)
        if entry is None:
            return CommandResult.unknown(verb)

        min_args, max_args, handler = entry
        if len(args) < min_args or (max_args is not None and len(args) > max_args):
            return CommandResult.unknown(verb)

        if verb == "land":
            # Takes the state lock itself around the descent delay.
            return handler(state, args)

        with state.lock:
            return handler(state, args)

    # -------------------------
    # Flight control
    # -------------------------

    def _ok(self, state: FlightState, args: Sequence[str]) -> CommandResult:
        return CommandResult.ok()

    def _takeoff(self, state: FlightState, args: Sequence[str]) -> CommandResult:
        state.motors_engaged = True
        state.height_cm = TAKEOFF_HEIGHT_CM
        if self._flight_clock is not None:
            self._flight_clock.start()
        return CommandResult.ok()

    def _land(self, state: FlightState, args: Sequence[str]) -> CommandResult:
        with state.lock:
            descending = state.motors_engaged
        if descending:
            self._sleep(self._land_delay_s)
        with state.lock:
            self.touch_down(state)
        return CommandResult.ok()

    def _emergency(self, state: FlightState, args: Sequence[str]) -> CommandResult:
        self.touch_down(state)
        return CommandResult.no_response()

    def touch_down(self, state: FlightState) -> None:
        state.touch_down()
        if self._flight_clock is not None:
            self._flight_clock.stop()

    def reset(self, state: FlightState) -> None:
        # Same as a device reboot: lands without delay and restores defaults.
        with state.lock:
            if self._flight_clock is not None:
                self._flight_clock.stop()
            state.reset()
        logger.info("Flight state reset to defaults")

    # -------------------------
    # Movement
    # -------------------------

    def _check_move(self, state: FlightState, args: Sequence[str]) -> tuple[int | None, CommandResult | None]:
        cm = parse_int(args[0], *MOVE_RANGE_CM)
        if cm is None:
            return None, CommandResult.out_of_range()
        if not state.motors_engaged:
            return None, CommandResult.motors_off()
        return cm, None

    def _up(self, state: FlightState, args: Sequence[str]) -> CommandResult:
        cm, failure = self._check_move(state, args)
        if failure is not None:
            return failure
        state.height_cm = min(state.height_cm + cm, MAX_HEIGHT_CM)
        return CommandResult.ok()

    def _down(self, state: FlightState, args: Sequence[str]) -> CommandResult:
        cm, failure = self._check_move(state, args)
        if failure is not None:
            return failure
        state.height_cm = max(state.height_cm - cm, MIN_HEIGHT_AFTER_DOWN_CM)
        return CommandResult.ok()

    def _move_tof(self, state: FlightState, args: Sequence[str], sign: int) -> CommandResult:
        cm, failure = self._check_move(state, args)
        if failure is not None:
            return failure
        state.tof_cm += sign * cm
        return CommandResult.ok()

    def _rotate(self, state: FlightState, args: Sequence[str], sign: int) -> CommandResult:
        degrees = parse_int(args[0], *ROTATE_RANGE_DEG)
        if degrees is None:
            return CommandResult.out_of_range()
        if not state.motors_engaged:
            return CommandResult.motors_off()
        state.yaw_deg = wrap_degrees(state.yaw_deg + sign * degrees)
        return CommandResult.ok()

    # -------------------------
    # Settings / misc
    # -------------------------

    def _speed(self, state: FlightState, args: Sequence[str]) -> CommandResult:
        speed = parse_int(args[0], *SPEED_RANGE_PCT)
        if speed is None:
            return CommandResult.out_of_range()
        state.speed_pct = speed
        return CommandResult.ok()

    def _flip(self, state: FlightState, args: Sequence[str]) -> CommandResult:
        if args[0] in FLIP_DIRECTIONS:
            return CommandResult.ok()
        return CommandResult.error()

    def _rc(self, state: FlightState, args: Sequence[str]) -> CommandResult:
        # Every given channel is checked, and the first four must all be present.
        if len(args) < RC_CHANNELS:
            return CommandResult.out_of_range()
        for token in args:
            if parse_int(token, *RC_RANGE) is None:
                return CommandResult.out_of_range()
        return CommandResult.no_response()

    def _wifi(self, state: FlightState, args: Sequence[str]) -> CommandResult:
        self.reset(state)
        return CommandResult.ok()

    # -------------------------
    # Queries
    # -------------------------

    def _query_attitude(self, state: FlightState, args: Sequence[str]) -> CommandResult:
        return CommandResult.value(
            f"pitch:{state.pitch_deg};roll:{state.roll_deg};yaw:{state.yaw_deg};"
        )

    def _query_acceleration(self, state: FlightState, args: Sequence[str]) -> CommandResult:
        acc = state.acceleration
        return CommandResult.value(
            f"agx:{format_fixed(acc.x, 2)};agy:{format_fixed(acc.y, 2)};agz:{format_fixed(acc.z, 2)};"
        )
