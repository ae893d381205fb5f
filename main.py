#!/usr/bin/env python3
import argparse
import logging
import signal
import sys
import time
from pathlib import Path
from threading import Event

from app_context import AppContext
from command_recorder import CommandRecorder
from command_server import CommandServer, EmulatorStartupError, PortInUseError
from console import command_loop
from emulator_configuration import DEFAULT_COMMAND_PORT, EmulatorConfiguration

BANNER = "DJI Tello Drone Emulator v1.0"


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def setup_signal_handlers(ctx: AppContext):
    def _handle_shutdown(signum, frame):
        logging.info("Shutdown signal received (%s)", signum)
        ctx.shutdown()
        # Unblocks the console's input() call.
        raise KeyboardInterrupt

    signal.signal(signal.SIGINT, _handle_shutdown)
    signal.signal(signal.SIGTERM, _handle_shutdown)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=BANNER)
    parser.add_argument("--host", default="0.0.0.0", help="address to bind (default: %(default)s)")
    parser.add_argument("--port", type=int, default=DEFAULT_COMMAND_PORT, help="UDP command port (default: %(default)s)")
    parser.add_argument("--record", type=Path, default=None, help="append every remote command to this CSV file")
    parser.add_argument("--log-level", default="INFO", help="logging level (default: %(default)s)")
    return parser.parse_args(argv)


def initialize(args: argparse.Namespace) -> AppContext:
    logging.info("Initializing emulator")

    config = EmulatorConfiguration(host=args.host, command_port=args.port).validate()

    recorder = None
    if args.record is not None:
        recorder = CommandRecorder(filepath=args.record, clock=time.time)

    server = CommandServer(config=config, recorder=recorder)
    return AppContext(server=server, config=config, shutdown_event=Event())


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)
    print(f"{BANNER}\n")

    try:
        ctx = initialize(args)
    except ValueError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    try:
        host, port = ctx.server.start()
    except PortInUseError as exc:
        print(
            f"ERROR: Another process is already bound to UDP port {exc.port}\n"
            "Is there another instance of the emulator running?",
            file=sys.stderr,
        )
        return 2
    except EmulatorStartupError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    logging.info("Listening for commands on UDP %s:%d", host, port)
    setup_signal_handlers(ctx)

    try:
        command_loop(ctx)
    except KeyboardInterrupt:
        ctx.shutdown()

    print("Terminating - Please wait...")
    ctx.server.stop()
    print("Goodbye.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
