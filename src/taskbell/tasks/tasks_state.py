# src/taskbell/tasks/tasks_state.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime

from ..core.models import TasksState
from .task_models import Task


def is_overdue(task: Task, now: datetime) -> bool:
    if task.due_datetime is not None:
        return task.due_datetime < now
    if task.due_date is not None:
        return task.due_date < now.date()
    return False


def calculate_tasks_state(tasks: Iterable[Task], now: datetime) -> TasksState:
    """Summarize relevant tasks into the facts the status rules are evaluated against."""
    tasks = list(tasks)

    current = [t for t in tasks if t.marked_current]
    overdue_with_time = [t for t in tasks if t.due_datetime is not None and t.due_datetime < now]
    overdue_current = sum(1 for t in overdue_with_time if t.marked_current)

    state = TasksState(
        number_overdue_with_time=len(overdue_with_time),
        number_overdue_with_time_marked_current=overdue_current,
        number_overdue_with_time_not_marked_current=len(overdue_with_time) - overdue_current,
        number_marked_current=len(current),
    )

    if len(current) != 1:
        return state

    task = current[0]
    return replace(
        state,
        current_task_title=task.title,
        current_task_has_date=task.has_date,
        current_task_has_time=task.has_time,
        current_task_is_overdue=is_overdue(task, now),
    )
