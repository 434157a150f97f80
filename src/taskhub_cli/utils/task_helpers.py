"""Helpers shared by commands: option parsing into rules and dates."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any

import dateparser
from dateutil.tz import gettz

from taskhub_cli.models import (
    ConfigurationError,
    RecurrenceRule,
    RecurrenceValidationError,
    validate_rule,
)
from taskhub_cli.services.config_service import get_config_service
from taskhub_cli.utils.recurrence import DAY_MAP, ParsedRecurrence, parse_recurrence_phrase


def resolve_output(output: str | None) -> str:
    """Return the requested output format, or the configured default."""
    if output:
        return output
    return get_config_service().config.output.format


def local_now() -> datetime:
    """Current wall-clock time in the configured timezone, without tzinfo."""
    name = get_config_service().config.ui.timezone
    tz = gettz(name)
    if tz is None:
        raise ConfigurationError(f"Unknown timezone in config: {name}")
    return datetime.now(tz).replace(tzinfo=None)


def local_today() -> date:
    """Today's date in the configured timezone."""
    return local_now().date()


def parse_date_option(value: str, option: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise RecurrenceValidationError(
            f"{option} must be a date like 2024-06-01, got '{value}'"
        ) from e


def parse_datetime_option(
    value: str, option: str, relative_base: datetime | None = None
) -> datetime:
    """Parse an ISO date/timestamp or a phrase like "tomorrow 5pm".

    Relative phrases are resolved against ``relative_base``, which defaults
    to midnight of the local date so that "tomorrow" is the start of a day.

    Raises:
        RecurrenceValidationError: If the value is not a recognizable date
    """
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass

    parsed = dateparser.parse(
        value,
        settings={
            "PREFER_DATES_FROM": "future",
            "RELATIVE_BASE": relative_base or start_datetime(local_today()),
        },
    )
    if parsed is None:
        raise RecurrenceValidationError(
            f"{option} must be a date like 2024-06-01 or 'tomorrow', got '{value}'"
        )
    return parsed


def parse_days(value: str) -> list[int]:
    """Parse ``mon,wed`` or ``1,3`` into weekday ordinals (0 = Sunday)."""
    days: list[int] = []
    for token in value.replace(" ", ",").split(","):
        token = token.strip().lower()
        if not token:
            continue
        if token.lstrip("-").isdigit():
            days.append(int(token))
        elif token in DAY_MAP:
            days.append(DAY_MAP[token])
        else:
            raise RecurrenceValidationError(f"unknown weekday '{token}'")
    return days


def build_rule(
    *,
    repeat: str | None = None,
    every: int | None = None,
    freq: str | None = None,
    on: str | None = None,
    day: int | None = None,
    until: str | None = None,
    today: date | None = None,
) -> tuple[RecurrenceRule | None, date | None]:
    """Build a validated rule from command options.

    Either a repeat phrase (``--repeat "every mon, wed"``) or the structured
    options (``--freq weekly --every 2 --on mon,wed``) may be used, not both.

    Returns:
        (rule, suggested start date); both None when no repeat option is given

    Raises:
        RecurrenceValidationError: If the options do not form a valid rule
    """
    structured = any(v is not None for v in (every, freq, on, day))

    if repeat is not None:
        if structured:
            raise RecurrenceValidationError(
                "use either --repeat or --freq/--every/--on/--day, not both"
            )
        parsed: ParsedRecurrence | None = parse_recurrence_phrase(
            repeat, today or local_today()
        )
        if parsed is None:
            raise RecurrenceValidationError(f"unrecognized repeat phrase '{repeat}'")
        rule = parsed.rule
        if until is not None:
            rule = validate_rule(
                {**rule.model_dump(), "end_date": parse_date_option(until, "--until")}
            )
        return rule, parsed.start_date

    if not structured:
        if until is not None:
            raise RecurrenceValidationError("--until needs --repeat or --freq")
        return None, None

    if freq is None:
        raise RecurrenceValidationError("--freq is required with --every/--on/--day")

    data: dict[str, Any] = {"frequency": freq.lower(), "interval": every or 1}
    if on is not None:
        data["days_of_week"] = parse_days(on)
    if day is not None:
        data["day_of_month"] = day
    if until is not None:
        data["end_date"] = parse_date_option(until, "--until")
    return validate_rule(data), None


def start_datetime(value: date) -> datetime:
    return datetime.combine(value, time())
