"""
Title: Application Context Container for the Drone Emulator
Author: Alex Cooke
Date Created: 2026-10-14
Last Modified: 2026-10-14
Version: 1.0

Purpose:
Aggregates the running command server, its configuration and the shutdown
event into one explicit container shared by the bootstrap and the operator
console.

Scope and Limitations:
- Acts purely as a dependency container; contains no protocol logic.

Dependencies:
- Python 3.10+
- dataclasses (standard library)
- threading (standard library)
- command_server.py
- emulator_configuration.py
"""

from dataclasses import dataclass
from threading import Event

from command_server import CommandServer
from emulator_configuration import EmulatorConfiguration
from flight_state import FlightState


@dataclass
class AppContext:
    server: CommandServer
    config: EmulatorConfiguration
    shutdown_event: Event

    @property
    def state(self) -> FlightState:
        return self.server.state

    def shutdown(self) -> None:
        self.shutdown_event.set()
