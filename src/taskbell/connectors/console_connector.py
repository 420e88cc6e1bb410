# src/taskbell/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.bootstrap import AppServices
from ..cli.commands import registry as command_registry

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleNotifier:
    """Notifier that prints nag reminders into the terminal."""

    async def notify(self, *, title: str, text: str) -> None:
        _print_ts(f"[{title}] {text}")


def run_console_loop(services: AppServices) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /status to see the current task, /help for commands, /exit to quit.\n")

    while True:
        try:
            user_input = input("> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            response = command_registry.handle(services, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is None:
            response = "Commands start with '/'. Use /help to list available commands."

        _print_ts(response)

    logger.info("Console connector finished.")
