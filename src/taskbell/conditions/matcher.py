# src/taskbell/conditions/matcher.py

"""
Default condition matcher.

A condition is a JSON object. Every key present must hold; `{}` always holds.

Time keys (range expression, e.g. "9-12,14-17"):
- hours        -> now.hour
- minutes      -> now.minute
- daysOfWeek   -> weekday, 0 = Sunday .. 6 = Saturday; "sun".."sat" also accepted

Task-state keys:
- numberOverdueWithTime, numberOverdueWithTimeMarkedCurrent,
  numberOverdueWithTimeNotMarkedCurrent, numberMarkedCurrent
    -> int (equality) or comparison string: ">0", ">=2", "<3", "<=1", "!=0", "=1", "1"
- currentTaskHasDate, currentTaskHasTime, currentTaskIsOverdue -> bool
- currentTaskTitle -> regular expression, searched in the title

Composition:
- not -> nested condition
- or  -> list of nested conditions (empty list never holds)

When the context is a fetch error there is no task data: task-state keys
never hold. Time keys work as usual.
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable, Mapping
from typing import Any

from ..core.models import Condition, EvaluationContext, TasksState, TasksStateContext

_DAY_NAMES = {"sun": 0, "mon": 1, "tue": 2, "wed": 3, "thu": 4, "fri": 5, "sat": 6}

_COMPARISON_RE = re.compile(r"^\s*(>=|<=|!=|>|<|=)?\s*(\d+)\s*$")
_OPERATORS: dict[str, Callable[[int, int], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    "!=": operator.ne,
    ">": operator.gt,
    "<": operator.lt,
    "=": operator.eq,
}

_NUMBER_FIELDS = {
    "numberOverdueWithTime": "number_overdue_with_time",
    "numberOverdueWithTimeMarkedCurrent": "number_overdue_with_time_marked_current",
    "numberOverdueWithTimeNotMarkedCurrent": "number_overdue_with_time_not_marked_current",
    "numberMarkedCurrent": "number_marked_current",
}

_BOOL_FIELDS = {
    "currentTaskHasDate": "current_task_has_date",
    "currentTaskHasTime": "current_task_has_time",
    "currentTaskIsOverdue": "current_task_is_overdue",
}

_TIME_FIELDS = {"hours": (0, 23), "minutes": (0, 59), "daysOfWeek": (0, 6)}


class ConditionError(ValueError):
    """Raised for unknown condition keys or malformed values."""


def _parse_range_value(raw: str, key: str) -> int:
    raw = raw.strip().lower()
    if key == "daysOfWeek" and raw in _DAY_NAMES:
        return _DAY_NAMES[raw]
    try:
        return int(raw)
    except ValueError:
        raise ConditionError(f"{key}: invalid value {raw!r}") from None


def parse_range_expression(expression: Any, key: str) -> list[tuple[int, int]]:
    """Parse "9-12,14" into [(9, 12), (14, 14)], checking bounds for `key`."""
    if isinstance(expression, int) and not isinstance(expression, bool):
        expression = str(expression)
    if not isinstance(expression, str) or not expression.strip():
        raise ConditionError(f"{key}: expected a range expression like '9-17', got {expression!r}")

    low_bound, high_bound = _TIME_FIELDS[key]
    ranges: list[tuple[int, int]] = []

    for item in expression.split(","):
        if "-" in item:
            start_raw, _, end_raw = item.partition("-")
            start = _parse_range_value(start_raw, key)
            end = _parse_range_value(end_raw, key)
        else:
            start = end = _parse_range_value(item, key)

        if start > end:
            raise ConditionError(f"{key}: range {item.strip()!r} is reversed")
        if start < low_bound or end > high_bound:
            raise ConditionError(f"{key}: {item.strip()!r} is outside {low_bound}-{high_bound}")
        ranges.append((start, end))

    return ranges


def parse_comparison(value: Any, key: str) -> tuple[Callable[[int, int], bool], int]:
    if isinstance(value, bool):
        raise ConditionError(f"{key}: expected a number or comparison, got {value!r}")
    if isinstance(value, int):
        return operator.eq, value
    if isinstance(value, str):
        m = _COMPARISON_RE.match(value)
        if m:
            return _OPERATORS[m.group(1) or "="], int(m.group(2))
    raise ConditionError(f"{key}: expected a number or comparison like '>0', got {value!r}")


def _weekday(now) -> int:
    # datetime.weekday(): Monday = 0. Conditions use Sunday = 0.
    return (now.weekday() + 1) % 7


class ConditionMatcher:
    """Evaluates JSON-style conditions against an EvaluationContext."""

    def match(self, condition: Condition, context: EvaluationContext) -> bool:
        if not isinstance(condition, Mapping):
            raise ConditionError(f"condition must be an object, got {type(condition).__name__}")

        tasks_state = context.tasks_state if isinstance(context, TasksStateContext) else None

        # Evaluate every key (not short-circuit) so malformed values always surface.
        results = [self._match_key(key, value, context, tasks_state) for key, value in condition.items()]
        return all(results)

    def validate(self, condition: Condition) -> None:
        """Raise ConditionError if the condition would fail to evaluate."""
        if not isinstance(condition, Mapping):
            raise ConditionError(f"condition must be an object, got {type(condition).__name__}")

        for key, value in condition.items():
            if key in _TIME_FIELDS:
                parse_range_expression(value, key)
            elif key in _NUMBER_FIELDS:
                parse_comparison(value, key)
            elif key in _BOOL_FIELDS:
                if not isinstance(value, bool):
                    raise ConditionError(f"{key}: expected true/false, got {value!r}")
            elif key == "currentTaskTitle":
                self._compile_title(value)
            elif key == "not":
                self.validate(value)
            elif key == "or":
                if not isinstance(value, list):
                    raise ConditionError(f"or: expected a list of conditions, got {value!r}")
                for nested in value:
                    self.validate(nested)
            else:
                raise ConditionError(f"unknown condition key {key!r}")

    # ---- internals ----

    @staticmethod
    def _compile_title(value: Any) -> re.Pattern[str]:
        if not isinstance(value, str):
            raise ConditionError(f"currentTaskTitle: expected a regular expression, got {value!r}")
        try:
            return re.compile(value)
        except re.error as e:
            raise ConditionError(f"currentTaskTitle: invalid regular expression: {e}") from e

    def _match_key(
        self,
        key: str,
        value: Any,
        context: EvaluationContext,
        tasks_state: TasksState | None,
    ) -> bool:
        now = context.now

        if key in _TIME_FIELDS:
            if key == "hours":
                current = now.hour
            elif key == "minutes":
                current = now.minute
            else:
                current = _weekday(now)
            return any(start <= current <= end for start, end in parse_range_expression(value, key))

        if key in _NUMBER_FIELDS:
            op, expected = parse_comparison(value, key)
            if tasks_state is None:
                return False
            return op(getattr(tasks_state, _NUMBER_FIELDS[key]), expected)

        if key in _BOOL_FIELDS:
            if not isinstance(value, bool):
                raise ConditionError(f"{key}: expected true/false, got {value!r}")
            if tasks_state is None:
                return False
            return getattr(tasks_state, _BOOL_FIELDS[key]) == value

        if key == "currentTaskTitle":
            pattern = self._compile_title(value)
            if tasks_state is None:
                return False
            return pattern.search(tasks_state.current_task_title) is not None

        if key == "not":
            return not self.match(value, context)

        if key == "or":
            if not isinstance(value, list):
                raise ConditionError(f"or: expected a list of conditions, got {value!r}")
            return any(self.match(nested, context) for nested in value)

        raise ConditionError(f"unknown condition key {key!r}")
