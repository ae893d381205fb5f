"""
Title: Command Outcome Definitions (Outcome Enum, CommandResult)
Author: Alex Cooke
Date Created: 2026-10-12
Last Modified: 2026-10-14
Version: 1.1

Purpose:
Defines the authoritative set of results a remote command can produce and
their mapping onto the UDP reply text. NO_RESPONSE is a valid, intentionally
unacknowledged command and maps to "send nothing".

Scope and Limitations:
- UNKNOWN_COMMAND carries its own text because the reply quotes the verb.
- VALUE carries the formatted query reply.

Dependencies:
- Python 3.10+
- enum (standard library)
- dataclasses (standard library)
"""

from dataclasses import dataclass
from enum import Enum, auto


class Outcome(Enum):
    OK = auto()
    VALUE = auto()
    ERROR = auto()
    OUT_OF_RANGE = auto()
    MOTORS_OFF = auto()
    UNKNOWN_COMMAND = auto()
    NO_RESPONSE = auto()


_FIXED_REPLIES = {
    Outcome.OK: "ok",
    Outcome.ERROR: "error",
    Outcome.OUT_OF_RANGE: "out of range",
    Outcome.MOTORS_OFF: "error Motor stop",
}


@dataclass(frozen=True)
class CommandResult:
    outcome: Outcome
    text: str | None = None

    @property
    def reply(self) -> str | None:
        if self.outcome is Outcome.NO_RESPONSE:
            return None
        if self.outcome in _FIXED_REPLIES:
            return _FIXED_REPLIES[self.outcome]
        return self.text

    @property
    def is_ok(self) -> bool:
        return self.outcome is Outcome.OK

    @classmethod
    def ok(cls) -> "CommandResult":
        return cls(Outcome.OK)

    @classmethod
    def value(cls, text: str) -> "CommandResult":
        return cls(Outcome.VALUE, text)

    @classmethod
    def error(cls) -> "CommandResult":
        return cls(Outcome.ERROR)

    @classmethod
    def out_of_range(cls) -> "CommandResult":
        return cls(Outcome.OUT_OF_RANGE)

    @classmethod
    def motors_off(cls) -> "CommandResult":
        return cls(Outcome.MOTORS_OFF)

    @classmethod
    def unknown(cls, verb: str) -> "CommandResult":
        # Also used for known verbs given the wrong number of arguments.
        return cls(Outcome.UNKNOWN_COMMAND, f"unknown command: {verb}")

    @classmethod
    def no_response(cls) -> "CommandResult":
        return cls(Outcome.NO_RESPONSE)
