# src/daily_tracker/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, runs the startup rollover check, then
starts connectors:
- HTTP API in a background thread (optional, on by default),
- rollover scheduler in a background thread (optional),
- console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..connectors.http_api import serve_in_background
from ..core.errors import PersistenceError
from ..logging_setup import setup_logging
from ..tasks.task_scheduler import start_rollover_in_background

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    try:
        state = create_initial_state(settings=settings)
        if state.service.check_rollover():
            logger.info("Daily reset performed on startup")
    except PersistenceError:
        logger.exception("Cannot open task document; refusing to start.")
        return 1

    try:
        http_runner = serve_in_background(state)
    except OSError:
        logger.exception("Failed to start HTTP API on %s:%s", settings.host, settings.port)
        return 1

    scheduler = start_rollover_in_background(
        state.service, interval_seconds=settings.rollover_interval_seconds
    )

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError, AttributeError):
        # Some platforms may not support SIGTERM, etc.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        elif http_runner is None and scheduler is None:
            logger.warning("Nothing to run: console and HTTP are both disabled.")
        else:
            logger.info("Running in the background. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        if scheduler is not None:
            scheduler.stop()
            scheduler.join(timeout=5.0)
        if http_runner is not None:
            http_runner.stop()
            http_runner.join(timeout=5.0)
        logger.info("Bye.")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
