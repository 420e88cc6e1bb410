# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from taskbell.cli.bootstrap import AppServices, create_services
from taskbell.config import Settings
from taskbell.core.state import AppState

from .fakes import FakeConditionMatcher


@pytest.fixture()
def now() -> datetime:
    # Monday 2026-10-19 10:30 UTC
    return datetime(2026, 10, 19, 10, 30, tzinfo=timezone.utc)


@pytest.fixture()
def matcher() -> FakeConditionMatcher:
    return FakeConditionMatcher()


@pytest.fixture()
def app_state(matcher: FakeConditionMatcher) -> AppState:
    return AppState(matcher)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings pointing at a tmp data dir.

    Built directly rather than from env, to keep unit tests isolated and deterministic.
    """
    data_dir = tmp_path / "data"
    return Settings(
        app_name="taskbell-test",
        log_level="DEBUG",
        console_enabled=False,
        poll_interval_seconds=0.01,
        nag_interval_seconds=60.0,
        data_dir=data_dir,
        rules_path=data_dir / "rules.json",
        tasks_path=data_dir / "tasks.json",
    )


@pytest.fixture()
def services(settings: Settings) -> AppServices:
    """AppServices wired with the real matcher, JSON task source and (empty) rules file."""
    return create_services(settings=settings)
