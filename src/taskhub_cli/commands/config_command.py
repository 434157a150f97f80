"""Command group 'config' of taskhub-cli."""

from typing import Annotated

import typer

from taskhub_cli.services.config_service import get_config_service
from taskhub_cli.utils.exit_codes import ERROR_INVALID_ARGS
from taskhub_cli.utils.ui.formatters import format_error, format_output, format_success

from .decorators import command_wrapper

app = typer.Typer(help="Configuration management commands", no_args_is_help=True)


@app.command("view")
@command_wrapper
def view_config(
    output: Annotated[str, typer.Option("--output", "-o", help="Output format")] = "table",
) -> None:
    """View current configuration."""
    config_service = get_config_service()
    data = config_service.config.model_dump()
    data["database_path"] = config_service.get_database_path()
    format_output(data, output)


@app.command("set")
@command_wrapper
def set_config(
    key: Annotated[str, typer.Argument(help="Configuration key (e.g., output.format)")],
    value: Annotated[str, typer.Argument(help="Configuration value")],
) -> None:
    """Set a configuration value."""
    try:
        get_config_service().set_value(key, value)
    except KeyError:
        format_error(f"Configuration key '{key}' not found")
        raise typer.Exit(code=ERROR_INVALID_ARGS) from None
    except ValueError as e:
        format_error(str(e))
        raise typer.Exit(code=ERROR_INVALID_ARGS) from e
    format_success(f"Configuration '{key}' set to '{value}'")


@app.command("reset")
@command_wrapper
def reset_config(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Reset configuration to defaults."""
    if not yes and not typer.confirm("Reset configuration to defaults?"):
        raise typer.Exit(0)
    get_config_service().reset_config()
    format_success("Configuration reset to defaults")
