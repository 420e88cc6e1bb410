# src/taskbell/core/models.py

"""
Value objects shared by the state aggregator and its collaborators.

Everything here is frozen: the aggregator replaces values wholesale, it never
patches them in place.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

Condition = Mapping[str, Any]
# Opaque to the core; only the ConditionMatcher interprets it.


class Severity(StrEnum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class TasksState:
    """
    Point-in-time facts about the current task universe.

    current_task_* fields are only meaningful when exactly one task is
    marked current.
    """

    number_overdue_with_time: int = 0
    number_overdue_with_time_marked_current: int = 0
    number_overdue_with_time_not_marked_current: int = 0
    number_marked_current: int = 0
    current_task_title: str = ""
    current_task_has_date: bool = False
    current_task_has_time: bool = False
    current_task_is_overdue: bool = False


@dataclass(frozen=True, slots=True)
class TasksStateContext:
    tasks_state: TasksState
    now: datetime


@dataclass(frozen=True, slots=True)
class TasksErrorContext:
    error_message: str
    now: datetime


EvaluationContext = TasksStateContext | TasksErrorContext


@dataclass(frozen=True, slots=True)
class CustomStatusRule:
    condition: Condition
    resulting_status: Severity
    resulting_message: str


@dataclass(frozen=True, slots=True)
class RuleSetConfiguration:
    custom_state_rules: tuple[CustomStatusRule, ...] = ()
    nagging_conditions: tuple[Condition, ...] = ()
    downtime_conditions: tuple[Condition, ...] = ()


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    status: Severity = Severity.OK
    message: str = ""
    nagging_enabled: bool = False
    downtime_enabled: bool = False
