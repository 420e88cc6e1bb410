# tests/test_commands.py

from __future__ import annotations

import json
from datetime import timedelta

from taskbell.cli.bootstrap import AppServices
from taskbell.cli.commands import CommandRegistry, registry
from taskbell.core.models import Severity
from taskbell.tasks.task_scheduler import poll_once


def test_command_registry_routes_and_aliases(services: AppServices, now) -> None:
    reg = CommandRegistry()
    called: list[list[str]] = []

    def handler(services, args, now):
        called.append(args)
        return "ok"

    reg.register("a", handler, "a", aliases=["alpha"])

    assert reg.handle(services, "/a x y", now) == "ok"
    assert reg.handle(services, "/ALPHA", now) == "ok"
    assert called == [["x", "y"], []]


def test_command_registry_unknown_and_non_command(services: AppServices) -> None:
    reg = CommandRegistry()
    assert reg.handle(services, "hello") is None
    assert "Unknown command" in (reg.handle(services, "/nope") or "")
    assert "Empty command" in (reg.handle(services, "/") or "")


def test_help_lists_commands(services: AppServices) -> None:
    text = registry.handle(services, "/help") or ""
    for name in ("/status", "/disable", "/enable", "/reload"):
        assert name in text


def test_status_shows_error_from_missing_tasks_file(services: AppServices, now) -> None:
    poll_once(services.task_source, services.app_state, now=now)

    text = registry.handle(services, "/status", now) or ""

    assert services.app_state.get_snapshot().status == Severity.ERROR
    assert "ERROR: Tasks file not found" in text
    assert "Nagging: OFF" in text


def test_disable_and_enable(services: AppServices, now) -> None:
    reply = registry.handle(services, "/disable 30", now) or ""
    assert "disabled until" in reply
    assert services.disabled.disabled_until() == now + timedelta(minutes=30)
    assert "Disabled until" in (registry.handle(services, "/status", now) or "")

    assert registry.handle(services, "/enable", now) == "Reminders enabled."
    assert services.disabled.is_app_disabled() is False
    assert registry.handle(services, "/enable", now) == "Reminders are already enabled."


def test_disable_rejects_bad_minutes(services: AppServices, now) -> None:
    assert registry.handle(services, "/disable soon", now) == "Usage: /disable <minutes>"
    assert registry.handle(services, "/disable 0", now) == "Minutes must be a positive number."
    assert registry.handle(services, "/disable 99999999999", now) == "That is too many minutes."
    assert services.disabled.is_app_disabled() is False


def test_reload_applies_rules_on_next_update(services: AppServices, now) -> None:
    services.settings.tasks_path.write_text(json.dumps([]), "utf-8")
    services.settings.rules_path.write_text(
        json.dumps(
            {
                "customStateRules": [
                    {"condition": {"numberMarkedCurrent": 0}, "resultingStatus": "warning", "resultingMessage": "Pick a task"}
                ],
                "naggingConditions": [{"numberMarkedCurrent": 0}],
                "downtimeConditions": [{"daysOfWeek": "sat,sun"}],
            }
        ),
        "utf-8",
    )

    reply = registry.handle(services, "/reload", now) or ""
    assert "status rules: 1, nagging: 1, downtime: 1" in reply

    poll_once(services.task_source, services.app_state, now=now)
    snapshot = services.app_state.get_snapshot()
    assert snapshot.status == Severity.WARNING
    assert snapshot.message == "Pick a task"
    assert snapshot.nagging_enabled is True
    assert snapshot.downtime_enabled is False


def test_reload_keeps_previous_rules_when_invalid(services: AppServices, now) -> None:
    services.settings.tasks_path.write_text(json.dumps([]), "utf-8")
    services.settings.rules_path.write_text(json.dumps({"naggingConditions": [{}]}), "utf-8")
    registry.handle(services, "/reload", now)

    services.settings.rules_path.write_text(json.dumps({"naggingConditions": [{"hourz": "9"}]}), "utf-8")
    reply = registry.handle(services, "/reload", now) or ""
    assert reply.startswith("Rules not reloaded")

    poll_once(services.task_source, services.app_state, now=now)
    assert services.app_state.get_snapshot().nagging_enabled is True
