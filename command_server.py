"""
Title: UDP Command Server (CommandServer)
Author: Alex Cooke
Date Created: 2026-10-13
Last Modified: 2026-10-19
Version: 1.3

Purpose:
Owns the emulator's UDP socket, the shared FlightState and the session
registry. A single worker thread receives one command per datagram, runs it
through the CommandInterpreter strictly in arrival order, replies (unless the
outcome is NO_RESPONSE) and applies the server-level side effects:

- an accepted `command` handshake opens or refreshes the sender's session and
  starts the telemetry broadcaster for a new session;
- an accepted `wifi <ssid> <password>` drops every session and then holds the
  worker for the reconfiguration delay, during which no datagram is serviced.

Scope and Limitations:
- Telemetry is sent from the command socket to each session endpoint.
- The descent (land) and reconfiguration (wifi) waits block only the worker.
  Both are interrupted by stop().
- Shutdown is cooperative: stop event, bounded join, socket close. A worker
  that fails to stop in time is abandoned as a daemon thread.

Dependencies:
- Python 3.10+
- socket, errno, threading, time, logging (standard library)
- command_interpreter.py, flight_clock.py, flight_state.py
- session_registry.py, telemetry_broadcaster.py
- emulator_configuration.py, command_recorder.py
"""

import errno
import logging
import socket
import threading
import time
from typing import Callable

from command_interpreter import CommandInterpreter
from command_outcomes import CommandResult
from command_recorder import CommandRecorder
from emulator_configuration import EmulatorConfiguration
from flight_clock import FlightClock
from flight_state import FlightState
from session_registry import Endpoint, SessionRegistry
from telemetry_broadcaster import TelemetryBroadcaster

logger = logging.getLogger(__name__)

_WSAEADDRINUSE = 10048


class EmulatorStartupError(RuntimeError):
    pass


class PortInUseError(EmulatorStartupError):
    def __init__(self, port: int):
        self.port = port
        super().__init__(f"another process is already bound to UDP port {port}")


class CommandServer:
    def __init__(
        self,
        config: EmulatorConfiguration | None = None,
        state: FlightState | None = None,
        clock: Callable[[], float] = time.monotonic,
        recorder: CommandRecorder | None = None,
    ):
        self.config = (config or EmulatorConfiguration()).validate()
        self.state = state if state is not None else FlightState()
        self.sessions = SessionRegistry(clock=clock)
        self.flight_clock = FlightClock(
            self.state,
            period_s=self.config.flight_clock_period_s(),
            join_timeout_s=self.config.shutdown_timeout_s,
        )
        self.interpreter = CommandInterpreter(
            flight_clock=self.flight_clock,
            sleep=self._pause,
            land_delay_s=self.config.land_delay_s(),
        )
        self.broadcaster = TelemetryBroadcaster(
            self.state,
            self.sessions,
            send=self._send_telemetry,
            period_s=self.config.telemetry_period_s(),
            session_timeout_s=self.config.session_timeout_s,
            join_timeout_s=self.config.shutdown_timeout_s,
        )
        self._recorder = recorder

        self._sock: socket.socket | None = None
        self._worker: threading.Thread | None = None
        self._ready = threading.Event()
        self._stopping = threading.Event()

    # -------------------------
    # Lifecycle
    # -------------------------

    @property
    def address(self) -> Endpoint | None:
        if self._sock is None:
            return None
        host, port = self._sock.getsockname()[:2]
        return host, port

    @property
    def running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> Endpoint:
        if self._worker is not None:
            raise EmulatorStartupError("command server already started")

        host, port = self.config.host, self.config.command_port
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind((host, port))
        except OSError as exc:
            sock.close()
            if exc.errno == errno.EADDRINUSE or getattr(exc, "winerror", None) == _WSAEADDRINUSE:
                raise PortInUseError(port) from exc
            raise EmulatorStartupError(f"cannot bind UDP {host}:{port}: {exc}") from exc

        sock.settimeout(self.config.receive_poll_s)
        self._sock = sock
        self._stopping.clear()
        self._ready.clear()
        logger.info("UDP server bound to %s:%d", *self.address)

        self._worker = threading.Thread(target=self._serve, name="command-worker", daemon=True)
        self._worker.start()
        if not self._ready.wait(self.config.startup_timeout_s):
            self.stop()
            raise EmulatorStartupError("timeout while waiting for the command thread to start")
        return self.address

    def stop(self) -> None:
        self._stopping.set()

        worker, self._worker = self._worker, None
        if worker is not None and worker is not threading.current_thread():
            worker.join(self.config.shutdown_timeout_s)
            if worker.is_alive():
                logger.warning("Command thread did not stop in time; abandoning it")

        sock, self._sock = self._sock, None
        if sock is not None:
            sock.close()

        self.broadcaster.stop()
        self.flight_clock.stop(wait=True)
        self.sessions.clear()

    def reset_state(self) -> None:
        # Operator reset: defaults restored, sessions and telemetry untouched.
        self.interpreter.reset(self.state)

    # -------------------------
    # Command path
    # -------------------------

    def handle_datagram(self, data: bytes, endpoint: Endpoint) -> CommandResult:
        command = data.decode("ascii", errors="replace")
        result = self.interpreter.apply(self.state, command)
        reply = result.reply

        logger.info("Remote command: %r from %s:%d, response: %r", command, endpoint[0], endpoint[1], reply)
        if reply is not None:
            self._reply(reply, endpoint)
        if self._recorder is not None:
            self._recorder.record(endpoint=endpoint, command=command, response=reply)

        if result.is_ok:
            verb = command.split()[0]
            if verb == "command":
                self.open_session(endpoint)
            elif verb == "wifi":
                self._drop_sessions()
                self._pause(self.config.wifi_reconfigure_delay_s())
        return result

    def open_session(self, endpoint: Endpoint) -> bool:
        is_new = self.sessions.touch(endpoint)
        if is_new:
            logger.info("Command channel established with %s:%d", endpoint[0], endpoint[1])
            self.broadcaster.start()
        return is_new

    def _drop_sessions(self) -> None:
        self.broadcaster.stop()
        dropped = self.sessions.clear()
        if dropped:
            logger.info("Network reconfigured; dropped %d session(s)", len(dropped))

    def _serve(self) -> None:
        logger.info("Command thread started")
        sock = self._sock
        self._ready.set()
        while not self._stopping.is_set():
            try:
                data, endpoint = sock.recvfrom(self.config.receive_buffer_bytes)
            except socket.timeout:
                continue
            except ConnectionResetError:
                # ICMP port-unreachable from an earlier reply (Windows).
                continue
            except OSError as exc:
                if not self._stopping.is_set():
                    logger.error("Receive failed: %s", exc)
                break

            try:
                self.handle_datagram(data, endpoint[:2])
            except Exception:
                logger.exception("Unhandled exception while processing %r", data)
        logger.info("Command thread stopped")

    def _pause(self, seconds: float) -> None:
        # Blocks the worker; returns early only on shutdown.
        if seconds > 0:
            self._stopping.wait(seconds)

    def _reply(self, reply: str, endpoint: Endpoint) -> None:
        sock = self._sock
        if sock is None:
            return
        try:
            sock.sendto(reply.encode("ascii", errors="replace"), endpoint)
        except OSError as exc:
            logger.warning("Reply to %s:%d failed: %s", endpoint[0], endpoint[1], exc)

    def _send_telemetry(self, payload: bytes, endpoint: Endpoint) -> None:
        sock = self._sock
        if sock is None:
            raise OSError(errno.EBADF, "command socket closed")
        sock.sendto(payload, endpoint)
