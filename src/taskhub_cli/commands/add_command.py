"""Command 'add' of taskhub-cli"""

from typing import Annotated

import typer

from taskhub_cli.services.context_manager import get_task_service
from taskhub_cli.utils.recurrence import describe_recurrence
from taskhub_cli.utils.task_helpers import (
    build_rule,
    parse_datetime_option,
    resolve_output,
    start_datetime,
)
from taskhub_cli.utils.ui.console import get_console
from taskhub_cli.utils.ui.formatters import (
    format_due,
    format_output,
    format_success,
    short_id,
    task_to_dict,
)

from .decorators import command_wrapper

app = typer.Typer()
console = get_console()


@app.command("add")
@command_wrapper
async def add_command(
    title: Annotated[str, typer.Argument(help="Task title")],
    due: Annotated[
        str | None,
        typer.Option(
            "--due", "-d", help="Due date: YYYY-MM-DD, ISO timestamp or e.g. 'tomorrow 9am'"
        ),
    ] = None,
    repeat: Annotated[
        str | None,
        typer.Option("--repeat", "-r", help='Repeat phrase, e.g. "every mon, wed"'),
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
    tag: Annotated[
        list[str] | None, typer.Option("--tag", "-t", help="Tag (repeatable)")
    ] = None,
    assignee: Annotated[
        list[str] | None, typer.Option("--assignee", "-a", help="Assignee (repeatable)")
    ] = None,
    description: Annotated[
        str | None, typer.Option("--description", help="Task description")
    ] = None,
    priority: Annotated[
        int, typer.Option("--priority", "-p", min=1, max=4, help="Priority (1=highest)")
    ] = 4,
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Output format")
    ] = None,
) -> None:
    """
    Add a task, optionally repeating.

    Examples:
      taskhub add "Water plants" --repeat "every 3 days"
      taskhub add "Standup" --freq weekly --on mon,wed,fri --due 2024-06-03
      taskhub add "Call supplier" --due "tomorrow 10am"
      taskhub add "Pay rent" --freq monthly --day 31 --until 2025-12-31
    """
    output = resolve_output(output)
    rule, start_date = build_rule(
        repeat=repeat, every=every, freq=freq, on=on, day=day, until=until
    )

    due_date = parse_datetime_option(due, "--due") if due else None
    if due_date is None and start_date is not None:
        due_date = start_datetime(start_date)

    task_service = get_task_service()
    task = await task_service.add_task(
        title,
        description=description,
        due_date=due_date,
        priority=priority,
        assignees=assignee or [],
        tags=tag or [],
        recurrence=rule,
    )

    if output in ("json", "yaml"):
        format_output(task_to_dict(task), output)
        return

    format_success(f"Added: {task.title} [dim]({short_id(task.id)})[/dim]")
    if task.due_date is not None:
        console.print(f"  Due: {format_due(task.due_date)}")
    if task.recurrence is not None:
        console.print(f"  🔄 {describe_recurrence(task.recurrence)}")
