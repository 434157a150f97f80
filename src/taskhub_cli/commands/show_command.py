"""Command 'show' of taskhub-cli"""

from typing import Annotated

import typer

from taskhub_cli.services.context_manager import get_task_service
from taskhub_cli.utils.task_helpers import resolve_output
from taskhub_cli.utils.ui.formatters import format_output, format_task_detail, task_to_dict

from .decorators import command_wrapper

app = typer.Typer()


@app.command("show")
@command_wrapper
async def show_command(
    task_id: Annotated[str, typer.Argument(help="Task ID or unique prefix")],
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Output format")
    ] = None,
) -> None:
    """Show a task in detail, including how it repeats."""
    output = resolve_output(output)
    task_service = get_task_service()
    resolved_id = await task_service.resolve_task_id(task_id)
    task = await task_service.get_task(resolved_id)

    if output in ("json", "yaml"):
        format_output(task_to_dict(task), output)
    else:
        format_task_detail(task)
