"""Recurrence rule model.

A RecurrenceRule is the declarative description of how a task repeats. It is
attached unchanged to every task instance of a series; the mutable state of a
series lives on the tasks themselves, never on the rule.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictInt, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .exceptions import RecurrenceValidationError

# Weekday ordinals use 0=Sunday .. 6=Saturday
WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
WORKWEEK = (1, 2, 3, 4, 5)


class Frequency(StrEnum):
    """How often a rule fires, in calendar units."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class RecurrenceRule(BaseModel):
    """Immutable repeat rule for a task.

    Attributes:
        frequency: Calendar unit between occurrences
        interval: Number of units between occurrences (>= 1)
        days_of_week: Weekday ordinals (0=Sun..6=Sat), weekly rules only
        day_of_month: Target day 1-31, monthly rules only
        end_date: Inclusive last date on which an occurrence may fall
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    frequency: Frequency
    interval: StrictInt = 1
    days_of_week: tuple[int, ...] | None = None
    day_of_month: int | None = None
    end_date: date | None = None

    @field_validator("days_of_week")
    @classmethod
    def normalize_days(cls, v: tuple[int, ...] | None) -> tuple[int, ...] | None:
        """Store selected weekdays as an ascending, de-duplicated tuple."""
        if v is None:
            return None
        return tuple(sorted(set(v)))

    @model_validator(mode="after")
    def check_constraints(self) -> RecurrenceRule:
        problems = rule_problems(self)
        if problems:
            raise ValueError("; ".join(problems))
        return self

    @property
    def is_weekday_set(self) -> bool:
        return self.frequency == Frequency.WEEKLY and bool(self.days_of_week)


def rule_problems(rule: Any) -> list[str]:
    """Return every constraint the given rule violates (empty when valid).

    Works on any object exposing the rule attributes, so it also catches
    rules built without validation (e.g. via ``model_construct``).
    """
    problems: list[str] = []

    try:
        frequency = Frequency(rule.frequency)
    except ValueError:
        problems.append(f"unknown frequency {rule.frequency!r}")
        frequency = None

    interval = rule.interval
    if not isinstance(interval, int) or isinstance(interval, bool) or interval < 1:
        problems.append("interval must be a positive integer")

    days = rule.days_of_week
    if days is not None:
        if frequency is not Frequency.WEEKLY:
            problems.append("days_of_week is only allowed on weekly rules")
        if len(days) == 0:
            problems.append("days_of_week must not be empty")
        elif any(not isinstance(d, int) or not 0 <= d <= 6 for d in days):
            problems.append("days_of_week values must be between 0 (Sun) and 6 (Sat)")

    day_of_month = rule.day_of_month
    if day_of_month is not None:
        if frequency is not Frequency.MONTHLY:
            problems.append("day_of_month is only allowed on monthly rules")
        if not isinstance(day_of_month, int) or not 1 <= day_of_month <= 31:
            problems.append("day_of_month must be between 1 and 31")

    return problems


def _error_message(error: Mapping[str, Any]) -> str:
    message = str(error.get("msg", "")).removeprefix("Value error, ")
    loc = ".".join(str(part) for part in error.get("loc", ()))
    return f"{loc}: {message}" if loc else message


def validate_rule(data: RecurrenceRule | Mapping[str, Any]) -> RecurrenceRule:
    """Return a validated RecurrenceRule or raise RecurrenceValidationError.

    Args:
        data: An existing rule, or a mapping in either snake_case or the
            camelCase shape produced by the web UI

    Returns:
        A frozen, validated RecurrenceRule

    Raises:
        RecurrenceValidationError: If any constraint is violated
    """
    if isinstance(data, RecurrenceRule):
        problems = rule_problems(data)
        if problems:
            raise RecurrenceValidationError(problems)
        return data

    try:
        return RecurrenceRule.model_validate(data)
    except PydanticValidationError as e:
        raise RecurrenceValidationError(
            [_error_message(err) for err in e.errors()]
        ) from e
