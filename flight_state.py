"""
Title: Emulated Drone Flight State Model (FlightState)
Author: Alex Cooke
Date Created: 2026-10-12
Last Modified: 2026-10-19
Version: 1.2

Purpose:
Defines the single mutable record of every telemetry and configuration field
exposed by the emulated drone. The command interpreter, the flight clock and
the telemetry broadcaster all read and write the same FlightState instance;
multi-field reads and writes are serialized through the instance lock so a
telemetry snapshot never observes a half-applied command.

Scope and Limitations:
- Storage only. Protocol validation, clamping and wrap rules live in the
  command interpreter.
- Operator accessors (read_operator_field / write_operator_field) enforce the
  console value domains; they are not used by the wire protocol.
- Kinematic vectors are static values; no flight dynamics are simulated.

Dependencies:
- Python 3.10+
- dataclasses (standard library)
- threading (standard library)
"""

import threading
from dataclasses import dataclass, field

DEFAULT_BATTERY_PCT = 67
DEFAULT_SPEED_PCT = 100
DEFAULT_ROLL_DEG = 2
DEFAULT_MISSION_PAD_ID = -1
DEFAULT_BAROMETER = 0.795338
DEFAULT_TEMP_LOW_C = 58
DEFAULT_TEMP_HIGH_C = 62


@dataclass(frozen=True)
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


DEFAULT_ACCELERATION = Vector3(-1.0, 5.0, -1001.0)


@dataclass(frozen=True)
class OperatorField:
    # Console-visible field. Bounds are either integers or the attribute name
    # of another field whose current value is the bound.
    attribute: str
    units: str
    minimum: int | str
    maximum: int | str


OPERATOR_FIELDS: dict[str, OperatorField] = {
    "battery": OperatorField("battery_pct", "%", 0, 100),
    "height": OperatorField("height_cm", "cm", 0, 500),
    "yaw": OperatorField("yaw_deg", "°", -180, 179),
    "pitch": OperatorField("pitch_deg", "°", -90, 90),
    "roll": OperatorField("roll_deg", "°", -90, 90),
    "wifi": OperatorField("wifi_snr_db", "dBm", -99, 0),
    "templ": OperatorField("temp_low_c", "°C", 10, "temp_high_c"),
    "temph": OperatorField("temp_high_c", "°C", "temp_low_c", 100),
}


@dataclass
class FlightState:
    motors_engaged: bool = False
    height_cm: int = 0
    battery_pct: int = DEFAULT_BATTERY_PCT
    speed_pct: int = DEFAULT_SPEED_PCT

    pitch_deg: int = 0
    roll_deg: int = DEFAULT_ROLL_DEG
    yaw_deg: int = 0

    # Shared by left/right/forward/backward; reported as tof.
    tof_cm: int = 0
    flight_time_s: int = 0

    mission_pad_id: int = DEFAULT_MISSION_PAD_ID
    mission_pad_pose: Vector3 = field(default_factory=Vector3)

    barometer: float = DEFAULT_BAROMETER
    position: Vector3 = field(default_factory=Vector3)
    velocity: Vector3 = field(default_factory=Vector3)
    acceleration: Vector3 = DEFAULT_ACCELERATION

    temp_low_c: int = DEFAULT_TEMP_LOW_C
    temp_high_c: int = DEFAULT_TEMP_HIGH_C
    wifi_snr_db: int = 0

    lock: threading.RLock = field(
        default_factory=threading.RLock, repr=False, compare=False
    )

    def touch_down(self) -> None:
        # Motors off and on the ground. No descent delay.
        with self.lock:
            self.motors_engaged = False
            self.height_cm = 0

    def reset(self) -> None:
        # Reboot defaults. Battery and temperatures are sensor readings and survive.
        with self.lock:
            self.touch_down()
            self.mission_pad_id = DEFAULT_MISSION_PAD_ID
            self.speed_pct = DEFAULT_SPEED_PCT
            self.yaw_deg = 0
            self.pitch_deg = 0
            self.roll_deg = DEFAULT_ROLL_DEG
            self.tof_cm = 0
            self.flight_time_s = 0
            self.barometer = DEFAULT_BAROMETER
            self.wifi_snr_db = 0
            self.acceleration = DEFAULT_ACCELERATION
            self.velocity = Vector3()
            self.position = Vector3()
            self.mission_pad_pose = Vector3()

    # -------------------------
    # Operator accessors
    # -------------------------

    def operator_field_bounds(self, name: str) -> tuple[int, int]:
        entry = OPERATOR_FIELDS[name]
        with self.lock:
            return self._resolve_bound(entry.minimum), self._resolve_bound(entry.maximum)

    def read_operator_field(self, name: str) -> int:
        entry = OPERATOR_FIELDS[name]
        with self.lock:
            return getattr(self, entry.attribute)

    def write_operator_field(self, name: str, value: int) -> None:
        """
        Sets a console-visible field after checking it against its domain.

        Raises KeyError for an unknown field name and ValueError when the value
        lies outside the (possibly field-dependent) bounds.
        """
        entry = OPERATOR_FIELDS[name]
        with self.lock:
            lo = self._resolve_bound(entry.minimum)
            hi = self._resolve_bound(entry.maximum)
            if not lo <= value <= hi:
                raise ValueError(f"{name} must be between {lo} and {hi}, got {value}")
            setattr(self, entry.attribute, int(value))

    def _resolve_bound(self, bound: int | str) -> int:
        if isinstance(bound, str):
            return getattr(self, bound)
        return bound
