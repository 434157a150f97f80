"""Command 'complete' of taskhub-cli"""

from typing import Annotated

import typer

from taskhub_cli.models import NextInstanceCreated, SeriesEnded
from taskhub_cli.services.context_manager import get_task_service
from taskhub_cli.utils.task_helpers import (
    local_now,
    parse_datetime_option,
    resolve_output,
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


def _truncate(title: str, limit: int = 60) -> str:
    return title if len(title) <= limit else title[: limit - 3] + "..."


@app.command("complete")
@command_wrapper
async def complete_command(
    task_id: Annotated[str, typer.Argument(help="Task ID or unique prefix")],
    at: Annotated[
        str | None,
        typer.Option(
            "--at", help="Completion time: ISO timestamp or e.g. 'yesterday 5pm'"
        ),
    ] = None,
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Output format")
    ] = None,
) -> None:
    """Mark a task as completed.

    Completing a recurring task creates its next instance, or ends the
    series when the rule's end date has been reached.
    """
    output = resolve_output(output)
    completed_at = parse_datetime_option(at, "--at", local_now()) if at else None

    task_service = get_task_service()
    resolved_id = await task_service.resolve_task_id(task_id)
    task = await task_service.get_task(resolved_id)

    if not task.is_recurring:
        completed = await task_service.complete_task(resolved_id)
        if output in ("json", "yaml"):
            format_output(task_to_dict(completed), output)
        else:
            format_success(f"✓ Completed: {_truncate(completed.title)}")
        return

    result = await task_service.complete_recurring_task(
        resolved_id, completed_at=completed_at
    )

    if output in ("json", "yaml"):
        format_output(result.model_dump(mode="json"), output)
        return

    if isinstance(result, NextInstanceCreated):
        next_task = result.next_task
        format_success(
            f"Next instance created: {_truncate(next_task.title)} "
            f"due {format_due(next_task.due_date)} [dim]({short_id(next_task.id)})[/dim]"
        )
    elif isinstance(result, SeriesEnded):
        format_success(
            f"Series completed: {_truncate(task.title)} "
            "[dim](no occurrences left before the end date)[/dim]"
        )

    if result.replayed:
        console.print("[dim]Task was already completed; nothing changed.[/dim]")
