# src/taskbell/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations (matcher, task source, rules) into AppServices.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..conditions.matcher import ConditionMatcher
from ..config import Settings, get_settings
from ..core.disabled import DisabledState
from ..core.models import RuleSetConfiguration
from ..core.ports import TasksProvider
from ..core.rules import load_rule_set
from ..core.state import AppState
from ..tasks.task_source import JsonFileTaskSource

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    settings: Settings
    matcher: ConditionMatcher
    app_state: AppState
    disabled: DisabledState
    task_source: TasksProvider


def _ensure_local_dirs(settings: Settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.rules_path.parent.mkdir(parents=True, exist_ok=True)
    settings.tasks_path.parent.mkdir(parents=True, exist_ok=True)


def load_rules(services: AppServices) -> RuleSetConfiguration:
    """Read the rules file; raises RuleConfigurationError if it is malformed."""
    return load_rule_set(services.settings.rules_path, validate_condition=services.matcher.validate)


def reload_rules(services: AppServices) -> RuleSetConfiguration:
    """Re-read the rules file and hand it to AppState (applies on the next poll)."""
    rule_set = load_rules(services)
    services.app_state.configure(rule_set)
    return rule_set


def create_services(*, settings: Settings | None = None) -> AppServices:
    """
    Create AppServices from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    matcher = ConditionMatcher()
    services = AppServices(
        settings=settings,
        matcher=matcher,
        app_state=AppState(matcher),
        disabled=DisabledState(),
        task_source=JsonFileTaskSource(settings.tasks_path),
    )
    reload_rules(services)
    return services
