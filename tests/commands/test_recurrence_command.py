"""Unit tests for the 'repeat' command group."""

from __future__ import annotations

import asyncio
import json
from datetime import date, datetime
from unittest.mock import patch

from typer.testing import CliRunner

from taskhub_cli.commands.recurrence_command import app
from taskhub_cli.models import Frequency, RecurrenceRule

runner = CliRunner()

WEEKLY = RecurrenceRule(frequency=Frequency.WEEKLY, days_of_week=(1, 4))


def _add(task_service, **kwargs):
    return asyncio.run(task_service.add_task("Report", **kwargs))


def test_set_makes_task_repeat(cli_env):
    task = _add(cli_env)

    result = runner.invoke(
        app, ["set", task.id, "--freq", "monthly", "--day", "31", "-o", "pretty"]
    )

    assert result.exit_code == 0, result.output
    assert "Repeats every month on day 31" in result.output
    updated = asyncio.run(cli_env.get_task(task.id))
    assert updated.is_recurring
    assert updated.series_id == task.id


def test_set_requires_a_rule(cli_env):
    task = _add(cli_env)

    result = runner.invoke(app, ["set", task.id, "-o", "pretty"])

    assert result.exit_code == 2


def test_set_on_completed_task_is_invalid_state(cli_env):
    task = _add(cli_env)
    asyncio.run(cli_env.complete_task(task.id))

    result = runner.invoke(app, ["set", task.id, "--freq", "daily", "-o", "pretty"])

    assert result.exit_code == 7


def test_off_forks_task_out_of_series(cli_env):
    task = _add(cli_env, due_date=datetime(2024, 1, 1), recurrence=WEEKLY)
    outcome = asyncio.run(cli_env.complete_recurring_task(task.id))

    result = runner.invoke(app, ["off", outcome.next_task.id])

    assert result.exit_code == 0, result.output
    forked = asyncio.run(cli_env.get_task(outcome.next_task.id))
    assert forked.is_recurring is False
    assert forked.series_id is None
    assert forked.previous_instance_id == task.id
    # The earlier completion still replays to the same instance
    replay = asyncio.run(cli_env.complete_recurring_task(task.id))
    assert replay.next_task.id == forked.id


def test_preview_lists_upcoming_dates(cli_env):
    task = _add(cli_env, due_date=datetime(2024, 1, 1), recurrence=WEEKLY)

    result = runner.invoke(app, ["preview", task.id, "--count", "3", "-o", "json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == [
        "2024-01-04T00:00:00",
        "2024-01-08T00:00:00",
        "2024-01-11T00:00:00",
    ]


def test_preview_marks_series_end(cli_env):
    rule = RecurrenceRule(frequency=Frequency.DAILY, end_date=date(2024, 1, 2))
    task = _add(cli_env, due_date=datetime(2024, 1, 1), recurrence=rule)

    result = runner.invoke(app, ["preview", task.id, "-o", "pretty"])

    assert "Jan 2, 2024" in result.output
    assert "series ends" in result.output


def test_preview_of_plain_task(cli_env):
    task = _add(cli_env)

    result = runner.invoke(app, ["preview", task.id, "-o", "pretty"])

    assert result.exit_code == 0
    assert "does not repeat" in result.output


def test_describe_phrase(cli_env):
    with patch("taskhub_cli.commands.recurrence_command.local_today", return_value=date(2024, 6, 5)):
        result = runner.invoke(app, ["describe", "every mon and thu", "-o", "json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["summary"] == "Repeats every Mon, Thu"
    assert data["start_date"] == "2024-06-06"
    assert data["rule"]["daysOfWeek"] == [1, 4]


def test_describe_unknown_phrase(cli_env):
    result = runner.invoke(app, ["describe", "now and then", "-o", "pretty"])

    assert result.exit_code == 2
