"""Recurrence calculations for TaskHub.

Everything in this module is a pure function of its arguments: no function
reads the wall clock, so results are reproducible from stored data.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, TypeVar, assert_never

from dateutil.relativedelta import relativedelta

from taskhub_cli.models.recurrence import (
    WEEKDAY_NAMES,
    WORKWEEK,
    Frequency,
    RecurrenceRule,
    validate_rule,
)

D = TypeVar("D", date, datetime)

_UNITS = {
    Frequency.DAILY: "day",
    Frequency.WEEKLY: "week",
    Frequency.MONTHLY: "month",
    Frequency.YEARLY: "year",
}


def weekday_ordinal(day: date) -> int:
    """Return the weekday of ``day`` as 0=Sunday .. 6=Saturday."""
    return (day.weekday() + 1) % 7


def _as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def _next_selected_weekday(anchor: D, days_of_week: tuple[int, ...], interval: int) -> D:
    days = sorted(days_of_week)
    current = weekday_ordinal(anchor)
    later_this_week = [d for d in days if d > current]
    if later_this_week:
        return anchor + timedelta(days=later_this_week[0] - current)

    # Every selected day of this week is used up: jump to the first selected
    # day of the week ``interval`` weeks ahead (weeks start on Sunday).
    days_to_week_end = 6 - current
    offset = days_to_week_end + 1 + (interval - 1) * 7 + days[0]
    return anchor + timedelta(days=offset)


def compute_next_occurrence(anchor: D, rule: RecurrenceRule) -> D | None:
    """Compute the next occurrence strictly after ``anchor``.

    Args:
        anchor: Due date of the most recent instance. A datetime keeps its
            time of day and tzinfo.
        rule: The recurrence rule

    Returns:
        The next occurrence, or None when it would fall after the rule's
        end date

    Raises:
        RecurrenceValidationError: If the rule is malformed
    """
    rule = validate_rule(rule)
    interval = rule.interval

    match rule.frequency:
        case Frequency.DAILY:
            next_date = anchor + timedelta(days=interval)
        case Frequency.WEEKLY:
            if rule.is_weekday_set:
                next_date = _next_selected_weekday(anchor, rule.days_of_week, interval)
            else:
                next_date = anchor + timedelta(weeks=interval)
        case Frequency.MONTHLY:
            # relativedelta clamps an absolute day to the target month's length,
            # so day 31 lands on Feb 28/29 without changing the rule itself.
            target_day = rule.day_of_month or anchor.day
            next_date = anchor + relativedelta(months=interval, day=target_day)
        case Frequency.YEARLY:
            next_date = anchor + relativedelta(years=interval)
        case _:
            assert_never(rule.frequency)

    if rule.end_date is not None and _as_date(next_date) > rule.end_date:
        return None
    return next_date


def upcoming_occurrences(anchor: D, rule: RecurrenceRule, count: int = 5) -> list[D]:
    """Return up to ``count`` consecutive occurrences following ``anchor``."""
    occurrences: list[D] = []
    current: D | None = anchor
    while len(occurrences) < count:
        current = compute_next_occurrence(current, rule)
        if current is None:
            break
        occurrences.append(current)
    return occurrences


def format_date(value: date) -> str:
    """Format a date as e.g. ``Jun 1, 2024``."""
    return f"{value:%b} {value.day}, {value.year}"


def describe_recurrence(rule: RecurrenceRule) -> str:
    """Convert a rule to a human-readable description.

    Args:
        rule: The recurrence rule

    Returns:
        Description such as "Repeats every 2 weeks on Mon, Wed until Jun 1, 2024"
    """
    unit = _UNITS[Frequency(rule.frequency)]
    if rule.interval == 1:
        description = f"Repeats every {unit}"
    else:
        description = f"Repeats every {rule.interval} {unit}s"

    if rule.is_weekday_set:
        days = sorted(rule.days_of_week)
        description += " on " + ", ".join(WEEKDAY_NAMES[d] for d in days)

    if rule.frequency == Frequency.MONTHLY and rule.day_of_month:
        description += f" on day {rule.day_of_month}"

    if rule.end_date:
        description += f" until {format_date(rule.end_date)}"

    return description


# ----------------------------------------------------------------------------
# Natural-language repeat phrases
# ----------------------------------------------------------------------------

DAY_MAP: dict[str, int] = {
    "sun": 0, "sunday": 0,
    "mon": 1, "monday": 1,
    "tue": 2, "tues": 2, "tuesday": 2,
    "wed": 3, "weds": 3, "wednesday": 3,
    "thu": 4, "thur": 4, "thurs": 4, "thursday": 4,
    "fri": 5, "friday": 5,
    "sat": 6, "saturday": 6,
}  # fmt: skip

_DAY_PATTERN = (
    r"sun(?:day)?|mon(?:day)?|tue(?:s(?:day)?)?|wed(?:s|nesday)?"
    r"|thu(?:r(?:s(?:day)?)?)?|fri(?:day)?|sat(?:urday)?"
)
_FULL_DAY_NAMES = (
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
)  # fmt: skip


@dataclass(frozen=True)
class ParsedRecurrence:
    """Result of parsing a repeat phrase.

    Attributes:
        start_date: Suggested due date of the first instance
        rule: The parsed rule
        summary: Short description for previews
    """

    start_date: date
    rule: RecurrenceRule
    summary: str


def _days_until(today: date, weekday: int) -> int:
    return (weekday - weekday_ordinal(today)) % 7 or 7


def parse_recurrence_phrase(text: str, today: date) -> ParsedRecurrence | None:
    """Parse phrases like "every 2 weeks" or "every mon, wed and fri".

    Args:
        text: User input
        today: Reference date for the first instance and pinned weekdays

    Returns:
        ParsedRecurrence, or None if the text is not a repeat phrase
    """
    phrase = " ".join(text.lower().split())
    if not phrase:
        return None

    if re.fullmatch(r"every day|daily", phrase):
        return ParsedRecurrence(
            today, RecurrenceRule(frequency=Frequency.DAILY), "Repeats every day"
        )

    if match := re.fullmatch(r"every ([1-9]\d*) days?", phrase):
        interval = int(match.group(1))
        return ParsedRecurrence(
            today,
            RecurrenceRule(frequency=Frequency.DAILY, interval=interval),
            f"Repeats every {interval} days",
        )

    if re.fullmatch(r"every week|weekly", phrase):
        return ParsedRecurrence(
            today,
            RecurrenceRule(
                frequency=Frequency.WEEKLY, days_of_week=(weekday_ordinal(today),)
            ),
            "Repeats every week",
        )

    if match := re.fullmatch(r"every ([1-9]\d*) weeks?", phrase):
        interval = int(match.group(1))
        return ParsedRecurrence(
            today,
            RecurrenceRule(
                frequency=Frequency.WEEKLY,
                interval=interval,
                days_of_week=(weekday_ordinal(today),),
            ),
            f"Repeats every {interval} weeks",
        )

    if re.fullmatch(r"every weekday|weekdays", phrase):
        start = today
        if weekday_ordinal(today) == 0:
            start = today + timedelta(days=1)
        elif weekday_ordinal(today) == 6:
            start = today + timedelta(days=2)
        return ParsedRecurrence(
            start,
            RecurrenceRule(frequency=Frequency.WEEKLY, days_of_week=WORKWEEK),
            "Repeats every weekday (Mon-Fri)",
        )

    if match := re.fullmatch(rf"every ({_DAY_PATTERN})", phrase):
        weekday = DAY_MAP[match.group(1)]
        return ParsedRecurrence(
            today + timedelta(days=_days_until(today, weekday)),
            RecurrenceRule(frequency=Frequency.WEEKLY, days_of_week=(weekday,)),
            f"Repeats every {_FULL_DAY_NAMES[weekday]}",
        )

    if match := re.fullmatch(r"every (.+)", phrase):
        names = re.findall(rf"\b({_DAY_PATTERN})\b", match.group(1))
        if len(names) > 1:
            days = tuple(sorted({DAY_MAP[name] for name in names}))
            current = weekday_ordinal(today)
            first = next((d for d in days if d > current), days[0])
            return ParsedRecurrence(
                today + timedelta(days=_days_until(today, first)),
                RecurrenceRule(frequency=Frequency.WEEKLY, days_of_week=days),
                "Repeats every " + ", ".join(WEEKDAY_NAMES[d] for d in days),
            )

    if re.fullmatch(r"every month|monthly", phrase):
        return ParsedRecurrence(
            today,
            RecurrenceRule(frequency=Frequency.MONTHLY, day_of_month=today.day),
            f"Repeats every month on day {today.day}",
        )

    if match := re.fullmatch(r"every ([1-9]\d*) months?", phrase):
        interval = int(match.group(1))
        return ParsedRecurrence(
            today,
            RecurrenceRule(
                frequency=Frequency.MONTHLY, interval=interval, day_of_month=today.day
            ),
            f"Repeats every {interval} months on day {today.day}",
        )

    if re.fullmatch(r"every year|yearly|annually", phrase):
        return ParsedRecurrence(
            today, RecurrenceRule(frequency=Frequency.YEARLY), "Repeats every year"
        )

    return None


# ----------------------------------------------------------------------------
# Storage row mapping
# ----------------------------------------------------------------------------

RECURRENCE_COLUMNS = (
    "recurrence_frequency",
    "recurrence_interval",
    "recurrence_end_date",
    "recurrence_days_of_week",
    "recurrence_day_of_month",
)


def recurrence_to_row(rule: RecurrenceRule | None) -> dict[str, Any]:
    """Flatten a rule into ``recurrence_*`` column values (all None when absent)."""
    if rule is None:
        return dict.fromkeys(RECURRENCE_COLUMNS)

    return {
        "recurrence_frequency": str(rule.frequency),
        "recurrence_interval": rule.interval,
        "recurrence_end_date": rule.end_date.isoformat() if rule.end_date else None,
        "recurrence_days_of_week": (
            json.dumps(list(rule.days_of_week)) if rule.days_of_week else None
        ),
        "recurrence_day_of_month": rule.day_of_month,
    }


def row_to_recurrence(row: dict[str, Any]) -> RecurrenceRule | None:
    """Rebuild a rule from ``recurrence_*`` columns.

    Raises:
        RecurrenceValidationError: If the stored columns describe an invalid rule
    """
    frequency = row.get("recurrence_frequency")
    if not frequency:
        return None

    days = row.get("recurrence_days_of_week")
    if isinstance(days, str):
        days = json.loads(days)

    return validate_rule(
        {
            "frequency": frequency,
            "interval": row.get("recurrence_interval") or 1,
            "end_date": row.get("recurrence_end_date"),
            "days_of_week": days or None,
            "day_of_month": row.get("recurrence_day_of_month"),
        }
    )
