# src/taskbell/core/rules.py

"""
Rules file loading.

The rules file is JSON with camelCase keys (same shape the tray app stores):

    {
      "customStateRules": [
        {"condition": {...}, "resultingStatus": "warning", "resultingMessage": "..."}
      ],
      "naggingConditions": [{...}],
      "downtimeConditions": [{...}]
    }

Missing lists mean "no rules". Only the shape is checked here; condition
contents are checked by an optional validate_condition callback (usually
ConditionMatcher.validate).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from .models import Condition, CustomStatusRule, RuleSetConfiguration, Severity

logger = logging.getLogger(__name__)

ConditionValidator = Callable[[Condition], None]


class RuleConfigurationError(ValueError):
    """Raised when the rules file (or mapping) has the wrong shape."""


def _as_list(raw: Mapping[str, Any], key: str) -> list[Any]:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise RuleConfigurationError(f"{key} must be a list, got {type(value).__name__}")
    return value


def _parse_condition(value: Any, path: str, validate_condition: ConditionValidator | None) -> Condition:
    if not isinstance(value, Mapping):
        raise RuleConfigurationError(f"{path} must be an object, got {type(value).__name__}")
    if validate_condition is not None:
        try:
            validate_condition(value)
        except ValueError as e:
            raise RuleConfigurationError(f"{path}: {e}") from e
    return value


def _parse_rule(value: Any, path: str, validate_condition: ConditionValidator | None) -> CustomStatusRule:
    if not isinstance(value, Mapping):
        raise RuleConfigurationError(f"{path} must be an object, got {type(value).__name__}")

    if "condition" not in value:
        raise RuleConfigurationError(f"{path}.condition is required")
    condition = _parse_condition(value["condition"], f"{path}.condition", validate_condition)

    raw_status = value.get("resultingStatus")
    try:
        status = Severity(raw_status)
    except ValueError:
        allowed = "|".join(s.value for s in Severity)
        raise RuleConfigurationError(
            f"{path}.resultingStatus must be one of {allowed}, got {raw_status!r}"
        ) from None

    message = value.get("resultingMessage")
    if not isinstance(message, str):
        raise RuleConfigurationError(f"{path}.resultingMessage must be a string")

    return CustomStatusRule(condition=condition, resulting_status=status, resulting_message=message)


def parse_rule_set(
    raw: Mapping[str, Any] | None,
    *,
    validate_condition: ConditionValidator | None = None,
) -> RuleSetConfiguration:
    if raw is None:
        return RuleSetConfiguration()
    if not isinstance(raw, Mapping):
        raise RuleConfigurationError(f"rules must be an object, got {type(raw).__name__}")

    rules = tuple(
        _parse_rule(item, f"customStateRules[{i}]", validate_condition)
        for i, item in enumerate(_as_list(raw, "customStateRules"))
    )
    nagging = tuple(
        _parse_condition(item, f"naggingConditions[{i}]", validate_condition)
        for i, item in enumerate(_as_list(raw, "naggingConditions"))
    )
    downtime = tuple(
        _parse_condition(item, f"downtimeConditions[{i}]", validate_condition)
        for i, item in enumerate(_as_list(raw, "downtimeConditions"))
    )

    return RuleSetConfiguration(
        custom_state_rules=rules,
        nagging_conditions=nagging,
        downtime_conditions=downtime,
    )


def load_rule_set(
    path: str | Path,
    *,
    validate_condition: ConditionValidator | None = None,
) -> RuleSetConfiguration:
    path = Path(path)
    if not path.exists():
        logger.info("No rules file at %s, using empty rule set", path)
        return RuleSetConfiguration()

    try:
        raw = json.loads(path.read_text("utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise RuleConfigurationError(f"Cannot read rules file {path}: {e}") from e

    rule_set = parse_rule_set(raw, validate_condition=validate_condition)
    logger.info(
        "Loaded rules from %s: rules=%d nagging=%d downtime=%d",
        path,
        len(rule_set.custom_state_rules),
        len(rule_set.nagging_conditions),
        len(rule_set.downtime_conditions),
    )
    return rule_set
