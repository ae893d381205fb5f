#!/usr/bin/env python3
"""
Title: Operator Console for the Drone Emulator
Author: Alex Cooke
Date Created: 2026-10-14
Last Modified: 2026-10-18
Version: 1.1

Purpose:
Interactive local console used to inspect and override emulated sensor
fields (battery, height, attitude, wifi SNR, temperatures) while a ground
station is connected, and to reset the emulated drone.

Scope and Limitations:
- Field writes go through FlightState.write_operator_field and share its
  range checks; the console only formats the results.
- Runs on the main thread; the command worker and periodic tasks keep
  running in the background.

Dependencies:
- Python 3.10+
- app_context.py
- flight_state.py
- telemetry_broadcaster.py
"""

from typing import Callable

from app_context import AppContext
from flight_state import OPERATOR_FIELDS, FlightState
from telemetry_broadcaster import format_telemetry

PROMPT = "tello> "


def _print_help() -> None:
    print(
        """
Commands
  help                         Print help
  quit | exit                  Stop the emulator
  reset                        Restore flight state defaults
  status                       Print the current telemetry line

Fields (no value prints the field, a value sets it)
  battery [0..100]             Battery level in %
  height [0..500]              Height in cm
  yaw [-180..179]              Yaw in degrees
  pitch [-90..90]              Pitch in degrees
  roll [-90..90]               Roll in degrees
  wifi [-99..0]                Wifi SNR in dBm
  templ [10..temph]            Lowest temperature in °C
  temph [templ..100]           Highest temperature in °C
"""
    )


def handle_field(state: FlightState, words: list[str]) -> None:
    name = words[0].lower()
    units = OPERATOR_FIELDS[name].units

    if len(words) == 1:
        print(f"Field '{words[0]}' value is {state.read_operator_field(name)}{units}.")
        return

    try:
        if len(words) != 2:
            raise ValueError("expected a single value")
        value = int(words[1])
        state.write_operator_field(name, value)
    except ValueError:
        lo, hi = state.operator_field_bounds(name)
        print(
            f"Usage: {words[0]} [value]\n"
            f"       where 'value' must be an integer between {lo} and {hi}."
        )
        return

    print(f"Field '{words[0]}' set to {value}{units}")


def handle_line(ctx: AppContext, line: str) -> bool:
    # Returns False when the operator asked to quit.
    words = line.split()
    if not words:
        return True

    op = words[0].lower()

    if op in ("exit", "quit"):
        return False

    if op in ("help", "?"):
        _print_help()
        return True

    if op == "reset":
        ctx.server.reset_state()
        print("Flight state reset.")
        return True

    if op == "status":
        print(format_telemetry(ctx.state))
        return True

    if op in OPERATOR_FIELDS:
        handle_field(ctx.state, words)
        return True

    print("Unsupported command.")
    return True


def command_loop(ctx: AppContext, read_line: Callable[[str], str] = input) -> None:
    while not ctx.shutdown_event.is_set():
        try:
            line = read_line(PROMPT)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not handle_line(ctx, line):
            break

    ctx.shutdown()
