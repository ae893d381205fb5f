"""
Title: Operator Console and Bootstrap Unit Tests
Author: Alex Cooke
Date Created: 2026-10-15
Last Modified: 2026-10-18
Version: 1.0

Purpose:
Verifies the operator console output (field inspection, range-checked
overrides, reset, unsupported input), the console loop exit paths, the
configuration validation, and the bootstrap's distinct port-in-use exit.

Scope and Limitations:
- The command server is constructed but not started for console tests.
- Output verification is limited to stdout/stderr via capsys.

Dependencies:
- Python 3.10+
- pytest
- console.py, app_context.py, command_server.py
- emulator_configuration.py, main.py
"""

import socket
from threading import Event

import pytest

import main
from app_context import AppContext
from command_server import CommandServer
from console import command_loop, handle_line
from emulator_configuration import EmulatorConfiguration


@pytest.fixture
def ctx():
    config = EmulatorConfiguration(host="127.0.0.1", command_port=0)
    return AppContext(server=CommandServer(config=config), config=config, shutdown_event=Event())


def lines_of(capsys):
    return capsys.readouterr().out.strip().splitlines()


# -----------------------------
# Field inspection / override
# -----------------------------

def test_field_without_value_prints_current(ctx, capsys):
    assert handle_line(ctx, "battery") is True
    assert lines_of(capsys) == ["Field 'battery' value is 67%."]


def test_field_with_valid_value_sets_it(ctx, capsys):
    handle_line(ctx, "battery 15")
    assert lines_of(capsys) == ["Field 'battery' set to 15%"]
    assert ctx.state.battery_pct == 15


def test_field_names_are_case_insensitive(ctx, capsys):
    handle_line(ctx, "HEIGHT 120")
    assert lines_of(capsys) == ["Field 'HEIGHT' set to 120cm"]
    assert ctx.state.height_cm == 120


@pytest.mark.parametrize("line", ["battery 101", "battery -1", "battery full", "battery 1 2"])
def test_invalid_value_prints_usage(ctx, capsys, line):
    handle_line(ctx, line)
    assert lines_of(capsys) == [
        "Usage: battery [value]",
        "       where 'value' must be an integer between 0 and 100.",
    ]
    assert ctx.state.battery_pct == 67


def test_temperature_usage_reflects_other_bound(ctx, capsys):
    handle_line(ctx, "templ 70")
    assert lines_of(capsys)[1] == "       where 'value' must be an integer between 10 and 62."
    handle_line(ctx, "temph 70")
    handle_line(ctx, "templ 70")
    assert ctx.state.temp_low_c == 70


def test_yaw_units(ctx, capsys):
    handle_line(ctx, "yaw -45")
    assert lines_of(capsys) == ["Field 'yaw' set to -45°"]


# -----------------------------
# Other console commands
# -----------------------------

def test_reset_restores_defaults(ctx, capsys):
    ctx.state.yaw_deg = 90
    ctx.state.motors_engaged = True
    handle_line(ctx, "reset")
    assert ctx.state.yaw_deg == 0
    assert ctx.state.motors_engaged is False
    assert lines_of(capsys) == ["Flight state reset."]


def test_status_prints_telemetry_line(ctx, capsys):
    handle_line(ctx, "status")
    out = lines_of(capsys)
    assert out[0].startswith("mid:-1;x:0;")


def test_unsupported_command(ctx, capsys):
    handle_line(ctx, "takeoff")
    assert lines_of(capsys) == ["Unsupported command."]


def test_blank_line_is_ignored(ctx, capsys):
    assert handle_line(ctx, "   ") is True
    assert capsys.readouterr().out == ""


@pytest.mark.parametrize("word", ["quit", "exit", "QUIT"])
def test_quit_words_end_the_loop(ctx, word):
    assert handle_line(ctx, word) is False


def test_command_loop_stops_on_eof_and_signals_shutdown(ctx):
    inputs = iter(["battery 40", "wifi -50"])

    def read_line(prompt):
        assert prompt == "tello> "
        try:
            return next(inputs)
        except StopIteration:
            raise EOFError

    command_loop(ctx, read_line=read_line)

    assert ctx.state.battery_pct == 40
    assert ctx.state.wifi_snr_db == -50
    assert ctx.shutdown_event.is_set()


# -----------------------------
# Configuration / bootstrap
# -----------------------------

def test_default_configuration_matches_device():
    cfg = EmulatorConfiguration().validate()
    assert cfg.command_port == 8889
    assert cfg.telemetry_period_s() == pytest.approx(0.1)
    assert cfg.flight_clock_period_s() == pytest.approx(1.0)
    assert cfg.land_delay_s() == pytest.approx(1.0)
    assert cfg.wifi_reconfigure_delay_s() == pytest.approx(6.0)
    assert cfg.session_timeout_s == 60.0


@pytest.mark.parametrize(
    "overrides",
    [
        {"command_port": 70000},
        {"command_port": -1},
        {"telemetry_period_ms": 0},
        {"receive_buffer_bytes": 0},
        {"land_delay_ms": -1},
    ],
)
def test_invalid_configuration_rejected(overrides):
    with pytest.raises(ValueError):
        EmulatorConfiguration(**overrides).validate()


def test_main_reports_port_in_use(capsys):
    blocker = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    blocker.bind(("127.0.0.1", 0))
    port = blocker.getsockname()[1]
    try:
        status = main.main(["--host", "127.0.0.1", "--port", str(port)])
    finally:
        blocker.close()

    captured = capsys.readouterr()
    assert status == 2
    assert f"Another process is already bound to UDP port {port}" in captured.err


def test_main_rejects_invalid_port(capsys):
    assert main.main(["--port", "99999"]) == 1
