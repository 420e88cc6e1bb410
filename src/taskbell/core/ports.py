# src/taskbell/core/ports.py

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps condition matching, task providers and notification channels
swappable and makes testing easier.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Protocol

from .models import Condition, EvaluationContext

if TYPE_CHECKING:
    from ..tasks.task_models import Task


class ConditionMatcher(Protocol):
    """
    Decides whether a configured condition holds for one evaluation context.

    Must be pure from the aggregator's point of view. Raising is allowed;
    the aggregator propagates the error and keeps its previous snapshot.
    """

    def match(self, condition: Condition, context: EvaluationContext) -> bool: ...


class TasksProvider(Protocol):
    """
    Source of the tasks relevant for the status (marked current or due).

    Implementations raise TaskSourceError with a user-readable message
    when the tasks cannot be fetched.
    """

    def get_relevant_tasks(self) -> list[Task]: ...


class Notifier(Protocol):
    """Channel used to deliver nag reminders (console, desktop popup, chat, ...)."""

    def notify(self, *, title: str, text: str) -> Awaitable[None]: ...
