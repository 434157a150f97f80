"""Output formatters for different formats."""

import json
from datetime import date, datetime
from typing import Any

import yaml
from rich.table import Table

from taskhub_cli.models import Task
from taskhub_cli.utils.recurrence import describe_recurrence, format_date
from taskhub_cli.utils.ui.console import get_console

console = get_console()

# Length of the id prefix shown in listings
SHORT_ID_LENGTH = 8


def format_output(data: Any, output_format: str = "pretty") -> None:
    """Format and display output based on format."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str))
    elif output_format == "yaml":
        print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))
    elif output_format == "table":
        format_table(data)
    else:
        format_pretty(data)


def format_table(data: Any) -> None:
    """Format data as a table."""
    if not data:
        console.print("[yellow]No data to display[/yellow]")
        return

    if isinstance(data, list):
        if isinstance(data[0], dict):
            format_dict_table(data)
        else:
            for item in data:
                console.print(item)
    elif isinstance(data, dict):
        format_single_item(data)
    else:
        console.print(data)


def _cell(value: Any) -> str:
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, default=str)
    if value is None:
        return "-"
    return str(value)


def format_dict_table(items: list[dict]) -> None:
    """Format a list of dictionaries as a table."""
    if not items:
        console.print("[yellow]No items found[/yellow]")
        return

    columns = list(items[0].keys())
    table = Table(show_header=True, header_style="bold magenta")
    for col in columns:
        table.add_column(col.replace("_", " ").title())

    for item in items:
        table.add_row(*(_cell(item.get(col)) for col in columns))

    console.print(table)


def format_single_item(item: dict) -> None:
    """Format a single item as key-value pairs."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    for key, value in item.items():
        table.add_row(key.replace("_", " ").title(), _cell(value))

    console.print(table)


def format_pretty(data: Any) -> None:
    """Fallback pretty output for plain data."""
    if isinstance(data, list | dict):
        format_table(data)
    else:
        console.print(data)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")


# ============================================================================
# Task rendering
# ============================================================================

# Priority 1 is the most urgent
PRIORITY_ICONS = {
    1: "🔴",
    2: "🟠",
    3: "🟡",
    4: "🟢",
}

PRIORITY_COLORS = {
    1: "bold red",
    2: "bold orange3",
    3: "bold yellow",
    4: "green",
}

STATUS_ICONS = {
    "open": "⬜",
    "completed": "☑️",
    "recurring": "🔄",
    "archived": "🗃️",
}


def short_id(task_id: str) -> str:
    return task_id[:SHORT_ID_LENGTH]


def format_due(value: date | datetime | None) -> str:
    if value is None:
        return "-"
    if isinstance(value, datetime) and (value.hour, value.minute) != (0, 0):
        return f"{format_date(value)} {value:%H:%M}"
    return format_date(value)


def task_status_icon(task: Task) -> str:
    if task.archived_at is not None:
        return STATUS_ICONS["archived"]
    if task.is_completed:
        return STATUS_ICONS["completed"]
    return STATUS_ICONS["open"]


def task_to_dict(task: Task) -> dict[str, Any]:
    """JSON-safe representation of a task for json/yaml output."""
    return task.model_dump(mode="json")


def format_task_list(tasks: list[Task]) -> None:
    """Render tasks as a rich table with series information."""
    if not tasks:
        console.print("[yellow]No tasks found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("", no_wrap=True)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title")
    table.add_column("Due", no_wrap=True)
    table.add_column("Priority", no_wrap=True)
    table.add_column("Repeats")

    for task in tasks:
        repeats = "-"
        if task.recurrence is not None:
            repeats = (
                f"{STATUS_ICONS['recurring']} {describe_recurrence(task.recurrence)}"
                f" [dim]#{task.recurrence_index}[/dim]"
            )
        priority = (
            f"[{PRIORITY_COLORS[task.priority]}]"
            f"{PRIORITY_ICONS[task.priority]} P{task.priority}"
            f"[/{PRIORITY_COLORS[task.priority]}]"
        )
        table.add_row(
            task_status_icon(task),
            short_id(task.id),
            task.title,
            format_due(task.due_date),
            priority,
            repeats,
        )

    console.print(table)


def format_task_detail(task: Task) -> None:
    """Render a single task with its recurrence summary."""
    console.print(f"{task_status_icon(task)} [bold]{task.title}[/bold]")
    details: dict[str, Any] = {
        "id": task.id,
        "status": task.status,
        "priority": f"P{task.priority}",
        "due": format_due(task.due_date),
        "description": task.description,
        "project_id": task.project_id,
        "assignees": task.assignees,
        "tags": task.tags,
    }
    if task.recurrence is not None:
        details["repeats"] = describe_recurrence(task.recurrence)
    if task.series_id is not None:
        details["series"] = task.series_id
        details["instance"] = task.recurrence_index
        details["previous_instance"] = task.previous_instance_id
    if task.completed_at is not None:
        details["completed"] = task.completed_at.isoformat()
    if task.archived_at is not None:
        details["archived"] = task.archived_at.isoformat()
    format_single_item(details)
