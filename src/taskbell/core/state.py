# src/taskbell/core/state.py

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from datetime import datetime

from .models import (
    Condition,
    EvaluationContext,
    RuleSetConfiguration,
    Severity,
    StatusSnapshot,
    TasksErrorContext,
    TasksState,
    TasksStateContext,
)
from .ports import ConditionMatcher

logger = logging.getLogger(__name__)

NO_CURRENT_TASK_MESSAGE = "(no current task)"


def default_status_message(tasks_state: TasksState) -> str:
    n = tasks_state.number_marked_current
    if n == 1:
        return tasks_state.current_task_title
    if n == 0:
        return NO_CURRENT_TASK_MESSAGE
    return f"({n} tasks marked current)"


class AppState:
    """
    State aggregator: turns tasks facts (or a fetch error) plus time into the
    single StatusSnapshot read by the tray/console/notification layers.

    Every update recomputes the whole snapshot and swaps it in at the end,
    so a failing ConditionMatcher leaves the previous snapshot untouched.

    Thread-safety:
    - one lock guards evaluation, snapshot swap and reconfiguration
    """

    def __init__(
        self,
        matcher: ConditionMatcher,
        configuration: RuleSetConfiguration | None = None,
    ) -> None:
        self._matcher = matcher
        self._configuration = configuration or RuleSetConfiguration()
        self._snapshot = StatusSnapshot()
        self._lock = threading.Lock()

    def configure(self, configuration: RuleSetConfiguration) -> None:
        """Replace the rule set. Takes effect on the next update, nothing is re-evaluated."""
        with self._lock:
            self._configuration = configuration
        logger.info(
            "Rule set configured: rules=%d nagging=%d downtime=%d",
            len(configuration.custom_state_rules),
            len(configuration.nagging_conditions),
            len(configuration.downtime_conditions),
        )

    def get_snapshot(self) -> StatusSnapshot:
        with self._lock:
            return self._snapshot

    def update_from_tasks_state(self, tasks_state: TasksState, now: datetime) -> None:
        context = TasksStateContext(tasks_state=tasks_state, now=now)

        with self._lock:
            configuration = self._configuration

            status = Severity.OK
            message = default_status_message(tasks_state)

            # First matching rule wins, later ones are not evaluated.
            for rule in configuration.custom_state_rules:
                if self._matcher.match(rule.condition, context):
                    status = rule.resulting_status
                    message = rule.resulting_message
                    break

            self._commit(status, message, context, configuration)

    def update_from_task_state_error(self, error_message: str, now: datetime) -> None:
        """Fetch errors always win over custom rules; nagging/downtime still apply."""
        context = TasksErrorContext(error_message=error_message, now=now)

        with self._lock:
            self._commit(Severity.ERROR, error_message, context, self._configuration)

    # ---- internals (caller holds the lock) ----

    def _any_match(self, conditions: Iterable[Condition], context: EvaluationContext) -> bool:
        return any(self._matcher.match(c, context) for c in conditions)

    def _commit(
        self,
        status: Severity,
        message: str,
        context: EvaluationContext,
        configuration: RuleSetConfiguration,
    ) -> None:
        downtime = self._any_match(configuration.downtime_conditions, context)
        nagging = not downtime and self._any_match(configuration.nagging_conditions, context)

        previous = self._snapshot
        snapshot = StatusSnapshot(
            status=status,
            message=message,
            nagging_enabled=nagging,
            downtime_enabled=downtime,
        )
        self._snapshot = snapshot

        logger.debug(
            "Snapshot updated status=%s nagging=%s downtime=%s message=%r",
            snapshot.status.value,
            snapshot.nagging_enabled,
            snapshot.downtime_enabled,
            snapshot.message,
        )
        if previous.status != snapshot.status:
            logger.info("Status %s -> %s", previous.status.value, snapshot.status.value)
        if previous.nagging_enabled != snapshot.nagging_enabled:
            logger.info("Nagging %s", "enabled" if snapshot.nagging_enabled else "disabled")
        if previous.downtime_enabled != snapshot.downtime_enabled:
            logger.info("Downtime %s", "started" if snapshot.downtime_enabled else "ended")
