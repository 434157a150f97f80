"""Command 'list' of taskhub-cli"""

from typing import Annotated

import typer

from taskhub_cli.services.context_manager import get_task_service
from taskhub_cli.utils.exit_codes import ERROR_INVALID_ARGS
from taskhub_cli.utils.task_helpers import resolve_output
from taskhub_cli.utils.ui.formatters import (
    format_error,
    format_output,
    format_task_list,
    task_to_dict,
)

from .decorators import command_wrapper

app = typer.Typer()


@app.command("list")
@command_wrapper
async def list_command(
    status: Annotated[
        str, typer.Option("--status", "-s", help="active, completed or all")
    ] = "active",
    series: Annotated[
        str | None,
        typer.Option("--series", help="Show every instance of the series this task belongs to"),
    ] = None,
    recurring: Annotated[
        bool, typer.Option("--recurring", help="Only recurring tasks")
    ] = False,
    tag: Annotated[
        list[str] | None, typer.Option("--tag", "-t", help="Filter by tag")
    ] = None,
    search: Annotated[
        str | None, typer.Option("--search", help="Search title and description")
    ] = None,
    limit: Annotated[
        int | None, typer.Option("--limit", "-n", min=1, help="Maximum tasks to show")
    ] = None,
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Output format")
    ] = None,
) -> None:
    """List tasks."""
    output = resolve_output(output)
    task_service = get_task_service()

    if series:
        resolved_id = await task_service.resolve_task_id(series)
        tasks = await task_service.get_series(resolved_id)
    else:
        if status not in ("active", "completed", "all"):
            format_error(f"Invalid --status '{status}': use active, completed or all")
            raise typer.Exit(code=ERROR_INVALID_ARGS)
        tasks = await task_service.list_tasks(
            status=status,
            is_recurring=True if recurring else None,
            tags=tag,
            search=search,
            include_archived=status != "active",
            limit=limit,
        )

    if output in ("json", "yaml"):
        format_output([task_to_dict(task) for task in tasks], output)
    else:
        format_task_list(tasks)
