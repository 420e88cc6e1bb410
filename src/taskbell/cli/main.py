# src/taskbell/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppServices, then starts:
- the status poller in a background thread,
- the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import sys
import threading

from ..config import get_settings
from ..connectors.console_connector import ConsoleNotifier, run_console_loop
from ..core.rules import RuleConfigurationError
from ..logging_setup import setup_logging
from ..tasks.task_scheduler import NagDispatcher, start_poller_in_background
from .bootstrap import create_services

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    try:
        services = create_services(settings=settings)
    except RuleConfigurationError as e:
        logger.error("Invalid rules file %s: %s", settings.rules_path, e)
        return 2

    nagger = NagDispatcher(
        ConsoleNotifier(),
        interval_seconds=settings.nag_interval_seconds,
        title=settings.app_name,
    )
    poller = start_poller_in_background(
        services.task_source,
        services.app_state,
        nagger,
        services.disabled,
        interval_seconds=settings.poll_interval_seconds,
    )
    if poller is None:
        return 1

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        if settings.console_enabled:
            run_console_loop(services)
            stop_main.set()
        else:
            signal.signal(signal.SIGINT, _handle_signal)
            signal.signal(signal.SIGTERM, _handle_signal)
            logger.info("Console disabled. Running the poller only. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        poller.stop()
        poller.join(timeout=10.0)
        logger.info("Bye.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
