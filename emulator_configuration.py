"""
Title: Emulator Runtime Configuration (EmulatorConfiguration)
Author: Alex Cooke
Date Created: 2026-10-12
Last Modified: 2026-10-16
Version: 1.1

Purpose:
Defines an immutable data model holding the network endpoint and every timing
constant of the emulated protocol. Defaults reproduce the real device; tests
shorten the delays and use an ephemeral port.

Scope and Limitations:
- No configuration file is read; main.py builds this from command-line options.
- Configuration values are static and immutable once instantiated.

Dependencies:
- Python 3.10+
- dataclasses (standard library)
"""

from dataclasses import dataclass

DEFAULT_COMMAND_PORT = 8889


@dataclass(frozen=True)
class EmulatorConfiguration:
    # Immutable emulator configuration.
    host: str = "0.0.0.0"
    command_port: int = DEFAULT_COMMAND_PORT
    receive_buffer_bytes: int = 1024

    telemetry_period_ms: int = 100
    flight_clock_period_ms: int = 1000
    session_timeout_s: float = 60.0

    land_delay_ms: int = 1000
    wifi_reconfigure_delay_ms: int = 6000

    startup_timeout_s: float = 3.0
    shutdown_timeout_s: float = 10.0
    receive_poll_s: float = 0.25

    def validate(self) -> "EmulatorConfiguration":
        # Raises ValueError naming the first offending field.
        if not 0 <= self.command_port <= 65535:
            raise ValueError(f"command_port must be within 0..65535, got {self.command_port}")

        for name in (
            "receive_buffer_bytes",
            "telemetry_period_ms",
            "flight_clock_period_ms",
            "session_timeout_s",
            "startup_timeout_s",
            "shutdown_timeout_s",
            "receive_poll_s",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0, got {getattr(self, name)}")

        for name in ("land_delay_ms", "wifi_reconfigure_delay_ms"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")

        return self

    def telemetry_period_s(self) -> float:
        return self.telemetry_period_ms / 1000.0

    def flight_clock_period_s(self) -> float:
        return self.flight_clock_period_ms / 1000.0

    def land_delay_s(self) -> float:
        return self.land_delay_ms / 1000.0

    def wifi_reconfigure_delay_s(self) -> float:
        return self.wifi_reconfigure_delay_ms / 1000.0
