# src/taskbell/tasks/task_source.py

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

from .task_models import Task

logger = logging.getLogger(__name__)


class TaskSourceError(RuntimeError):
    """
    Tasks could not be fetched.

    str(error) is shown to the user as the status message, keep it short and readable.
    """


def _parse_date(raw: Any, field: str, index: int) -> date | None:
    if raw is None or raw == "":
        return None
    try:
        return date.fromisoformat(str(raw))
    except ValueError:
        raise TaskSourceError(f"Invalid {field} in task #{index}") from None


def _parse_datetime(raw: Any, field: str, index: int) -> datetime | None:
    if raw is None or raw == "":
        return None
    try:
        dt = datetime.fromisoformat(str(raw))
    except ValueError:
        raise TaskSourceError(f"Invalid {field} in task #{index}") from None
    # Naive timestamps are local time.
    return dt if dt.tzinfo is not None else dt.astimezone()


def task_from_dict(data: Any, index: int) -> Task:
    if not isinstance(data, dict):
        raise TaskSourceError(f"Task #{index} is not an object")

    title = data.get("title")
    if not isinstance(title, str):
        raise TaskSourceError(f"Task #{index} has no title")

    marked_current = data.get("markedCurrent", False)
    if not isinstance(marked_current, bool):
        raise TaskSourceError(f"Task #{index} has an invalid markedCurrent")

    return Task(
        id=str(data.get("id", index)),
        title=title,
        marked_current=marked_current,
        due_date=_parse_date(data.get("dueDate"), "dueDate", index),
        due_datetime=_parse_datetime(data.get("dueDatetime"), "dueDatetime", index),
    )


class JsonFileTaskSource:
    """
    Local task source: a JSON list of tasks kept up to date by some other tool.

        [{"id": "1", "title": "Write report", "markedCurrent": true,
          "dueDate": "2026-10-19", "dueDatetime": "2026-10-19T15:00:00"}]
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get_relevant_tasks(self) -> list[Task]:
        logger.debug("Reading tasks from %s", self._path)

        if not self._path.exists():
            raise TaskSourceError(f"Tasks file not found: {self._path}")

        try:
            raw = self._path.read_text("utf-8")
        except OSError as e:
            logger.debug("Tasks file read failed: %s", e)
            raise TaskSourceError(f"Problem reading tasks file: {self._path}") from e

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.debug("Tasks file is not valid JSON: %s", e)
            raise TaskSourceError("Tasks file is not valid JSON") from e

        if not isinstance(data, list):
            raise TaskSourceError("Tasks file must contain a list of tasks")

        tasks = [task_from_dict(item, i) for i, item in enumerate(data)]
        logger.debug("Read %d tasks from %s", len(tasks), self._path)
        return tasks
