"""Command-line entry point.

Usage::

    nad-volume-sync CARD_NAME RECEIVER_ADDRESS
"""

from __future__ import annotations

import argparse
import logging
import os
import queue
import sys
import threading

from . import __version__
from .config import SyncSettings
from .errors import ConfigError
from .sync.engine import SyncEngine
from .sync.producers import LocalListener, Poller, RemoteListener
from .transport.alsa_mixer import AlsaMixer
from .transport.tcp_connection import ReceiverConnection

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nad-volume-sync",
        description="Keep an ALSA mixer and a NAD receiver at the same volume",
    )
    parser.add_argument("device", help="ALSA card name, e.g. hw:1 or default")
    parser.add_argument("host", help="receiver host name or IP address")
    return parser


def _fatal(exc_type, exc_value, exc_traceback) -> None:
    logger.critical(
        "Fatal error: %s", exc_value, exc_info=(exc_type, exc_value, exc_traceback)
    )
    logging.shutdown()
    os._exit(1)


def _fatal_thread(args: threading.ExceptHookArgs) -> None:
    if args.exc_type is SystemExit:
        return
    _fatal(args.exc_type, args.exc_value, args.exc_traceback)


def install_failure_hook() -> None:
    """Terminate the whole process on any uncaught exception, in any thread."""
    sys.excepthook = _fatal
    threading.excepthook = _fatal_thread


def run(settings: SyncSettings) -> None:
    """Connect both devices and sync volumes until the process dies."""
    connection = ReceiverConnection(settings.host, settings.port)
    connection.open()

    mixer = AlsaMixer(settings.device, control=settings.mixer_control)
    mixer.open()

    commands: queue.Queue = queue.Queue()

    Poller(commands, settings.poll_interval).start()
    RemoteListener(connection, commands, settings.read_size).start()
    engine = SyncEngine(connection, mixer, commands, settings)
    threading.Thread(target=engine.run_forever, name="sync-engine", daemon=True).start()

    logger.info(
        "Syncing '%s' on %s with receiver %s",
        settings.mixer_control,
        settings.device,
        connection.address,
    )
    LocalListener(mixer, commands, settings.event_timeout).run_forever()


def main(argv: list[str] | None = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(threadName)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        settings = SyncSettings(device=args.device, host=args.host).validate()
    except ConfigError as e:
        parser.print_usage(sys.stderr)
        logger.error("%s", e)
        return 1

    logger.info("nad-volume-sync %s", __version__)
    install_failure_hook()
    run(settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
