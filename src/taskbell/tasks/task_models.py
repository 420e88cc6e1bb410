# tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True, slots=True)
class Task:
    """
    Provider-neutral task, already transformed from the provider's format.

    Notes:
    - due_datetime is set when the task is due at a specific time
    - due_date is set for date-only due dates (and may also be set alongside due_datetime)
    """

    id: str
    title: str
    marked_current: bool = False
    due_date: date | None = None
    due_datetime: datetime | None = None

    @property
    def has_date(self) -> bool:
        return self.due_date is not None or self.due_datetime is not None

    @property
    def has_time(self) -> bool:
        return self.due_datetime is not None
