# src/taskbell/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..core.rules import RuleConfigurationError
from .bootstrap import AppServices, reload_rules

CommandHandler = Callable[[AppServices, list[str], datetime], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /status, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, services: AppServices, line: str, now: datetime | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(services, args, now or datetime.now().astimezone())

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _hhmm(dt: datetime) -> str:
    return dt.strftime("%H:%M")


def cmd_help(services: AppServices, args: list[str], now: datetime) -> str:
    return registry.build_help()


def cmd_status(services: AppServices, args: list[str], now: datetime) -> str:
    snapshot = services.app_state.get_snapshot()
    services.disabled.update(now)
    until = services.disabled.disabled_until()

    lines = [
        "Status:",
        f"  {snapshot.status.value.upper()}: {snapshot.message}",
        f"  Nagging: {'ON' if snapshot.nagging_enabled else 'OFF'}",
        f"  Downtime: {'ON' if snapshot.downtime_enabled else 'OFF'}",
    ]
    if until is not None:
        lines.append(f"  Disabled until {_hhmm(until)}")
    return "\n".join(lines)


def cmd_disable(services: AppServices, args: list[str], now: datetime) -> str:
    """
    /disable       -> disable reminders for 15 minutes
    /disable <N>   -> disable reminders for N minutes
    """
    minutes = 15
    if args:
        try:
            minutes = int(args[0])
        except ValueError:
            return "Usage: /disable <minutes>"
    if minutes <= 0:
        return "Minutes must be a positive number."

    try:
        until = services.disabled.disable_for_minutes(minutes, now)
    except OverflowError:
        return "That is too many minutes."
    logger.info("Reminders disabled for %d minutes", minutes)
    return f"Reminders disabled until {_hhmm(until)}."


def cmd_enable(services: AppServices, args: list[str], now: datetime) -> str:
    if not services.disabled.is_app_disabled():
        return "Reminders are already enabled."
    services.disabled.enable_app()
    logger.info("Reminders re-enabled")
    return "Reminders enabled."


def cmd_reload(services: AppServices, args: list[str], now: datetime) -> str:
    try:
        rule_set = reload_rules(services)
    except RuleConfigurationError as e:
        logger.warning("Rules reload failed: %s", e)
        return f"Rules not reloaded, keeping previous rules: {e}"

    return (
        "Rules reloaded "
        f"(status rules: {len(rule_set.custom_state_rules)}, "
        f"nagging: {len(rule_set.nagging_conditions)}, "
        f"downtime: {len(rule_set.downtime_conditions)}). "
        "They apply from the next update."
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show current status, nagging and downtime.")
registry.register("disable", cmd_disable, help_text="Disable reminders: /disable [minutes] (default 15).")
registry.register("enable", cmd_enable, help_text="Enable reminders again.")
registry.register("reload", cmd_reload, help_text="Reload the rules file.")
