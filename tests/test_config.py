# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskbell.config import Settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "TASKBELL_APP_NAME",
        "TASKBELL_LOG_LEVEL",
        "TASKBELL_CONSOLE_ENABLED",
        "TASKBELL_POLL_INTERVAL_SECONDS",
        "TASKBELL_NAG_INTERVAL_SECONDS",
        "TASKBELL_DATA_DIR",
        "TASKBELL_RULES_PATH",
        "TASKBELL_TASKS_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    s = Settings.from_env()

    assert s.app_name == "taskbell"
    assert s.log_level == "INFO"
    assert s.console_enabled is True
    assert s.poll_interval_seconds == 60.0
    assert s.nag_interval_seconds == 300.0
    assert s.data_dir == Path(".local/taskbell")
    assert s.rules_path == Path(".local/taskbell/rules.json")
    assert s.tasks_path == Path(".local/taskbell/tasks.json")


def test_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKBELL_APP_NAME", "focus")
    monkeypatch.setenv("TASKBELL_CONSOLE_ENABLED", "no")
    monkeypatch.setenv("TASKBELL_POLL_INTERVAL_SECONDS", "15")
    monkeypatch.setenv("TASKBELL_NAG_INTERVAL_SECONDS", "not-a-number")
    monkeypatch.setenv("TASKBELL_DATA_DIR", str(tmp_path))

    s = Settings.from_env()

    assert s.app_name == "focus"
    assert s.console_enabled is False
    assert s.poll_interval_seconds == 15.0
    assert s.nag_interval_seconds == 300.0
    assert s.rules_path == tmp_path / "rules.json"
    assert s.tasks_path == tmp_path / "tasks.json"
