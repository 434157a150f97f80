"""Command group 'repeat' of taskhub-cli: manage how a task repeats."""

from datetime import datetime
from typing import Annotated

import typer

from taskhub_cli.models import RecurrenceValidationError
from taskhub_cli.services.context_manager import get_task_service
from taskhub_cli.utils.recurrence import (
    describe_recurrence,
    parse_recurrence_phrase,
    upcoming_occurrences,
)
from taskhub_cli.utils.task_helpers import build_rule, local_today, resolve_output
from taskhub_cli.utils.ui.console import get_console
from taskhub_cli.utils.ui.formatters import (
    format_due,
    format_info,
    format_output,
    format_success,
    short_id,
    task_to_dict,
)

from .decorators import command_wrapper

app = typer.Typer(help="Manage recurring tasks", no_args_is_help=True)
console = get_console()


@app.command("set")
@command_wrapper
async def set_command(
    task_id: Annotated[str, typer.Argument(help="Task ID or unique prefix")],
    repeat: Annotated[
        str | None,
        typer.Option("--repeat", "-r", help='Repeat phrase, e.g. "every 2 weeks"'),
    ] = None,
    every: Annotated[
        int | None, typer.Option("--every", help="Repeat interval (with --freq)")
    ] = None,
    freq: Annotated[
        str | None, typer.Option("--freq", help="daily, weekly, monthly or yearly")
    ] = None,
    on: Annotated[
        str | None, typer.Option("--on", help="Weekdays for weekly rules, e.g. mon,fri")
    ] = None,
    day: Annotated[
        int | None, typer.Option("--day", help="Day of month for monthly rules")
    ] = None,
    until: Annotated[
        str | None, typer.Option("--until", help="Last date an instance may fall on")
    ] = None,
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Output format")
    ] = None,
) -> None:
    """Make a task repeat, or replace its rule."""
    output = resolve_output(output)
    rule, _ = build_rule(
        repeat=repeat, every=every, freq=freq, on=on, day=day, until=until
    )
    if rule is None:
        raise RecurrenceValidationError("give --repeat or --freq to describe the rule")

    task_service = get_task_service()
    resolved_id = await task_service.resolve_task_id(task_id)
    task = await task_service.set_recurrence(resolved_id, rule)

    if output in ("json", "yaml"):
        format_output(task_to_dict(task), output)
        return
    format_success(f"{task.title} [dim]({short_id(task.id)})[/dim]: {describe_recurrence(rule)}")


@app.command("off")
@command_wrapper
async def off_command(
    task_id: Annotated[str, typer.Argument(help="Task ID or unique prefix")],
) -> None:
    """Stop a task from repeating; earlier instances are kept."""
    task_service = get_task_service()
    resolved_id = await task_service.resolve_task_id(task_id)
    task = await task_service.stop_recurrence(resolved_id)
    format_success(f"{task.title} no longer repeats")


@app.command("preview")
@command_wrapper
async def preview_command(
    task_id: Annotated[str, typer.Argument(help="Task ID or unique prefix")],
    count: Annotated[
        int, typer.Option("--count", "-n", min=1, max=100, help="Occurrences to show")
    ] = 5,
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Output format")
    ] = None,
) -> None:
    """Show the next due dates a recurring task will produce."""
    output = resolve_output(output)
    task_service = get_task_service()
    resolved_id = await task_service.resolve_task_id(task_id)
    task = await task_service.get_task(resolved_id)

    if task.recurrence is None:
        format_info(f"{task.title} does not repeat")
        return

    anchor = task.due_date or datetime.combine(local_today(), datetime.min.time())
    occurrences = upcoming_occurrences(anchor, task.recurrence, count)

    if output in ("json", "yaml"):
        format_output([o.isoformat() for o in occurrences], output)
        return

    console.print(f"🔄 {describe_recurrence(task.recurrence)}")
    for index, occurrence in enumerate(occurrences, start=1):
        console.print(f"  {index}. {format_due(occurrence)}")
    if len(occurrences) < count:
        console.print("[dim]  (series ends)[/dim]")


@app.command("describe")
@command_wrapper
def describe_command(
    phrase: Annotated[str, typer.Argument(help='Repeat phrase, e.g. "every weekday"')],
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Output format")
    ] = None,
) -> None:
    """Explain how a repeat phrase would be understood."""
    output = resolve_output(output)
    parsed = parse_recurrence_phrase(phrase, local_today())
    if parsed is None:
        raise RecurrenceValidationError(f"unrecognized repeat phrase '{phrase}'")

    if output in ("json", "yaml"):
        format_output(
            {
                "summary": parsed.summary,
                "start_date": parsed.start_date.isoformat(),
                "rule": parsed.rule.model_dump(mode="json", by_alias=True),
            },
            output,
        )
        return

    console.print(parsed.summary)
    console.print(f"  First due: {format_due(parsed.start_date)}")
    console.print(f"  Rule: {describe_recurrence(parsed.rule)}")
