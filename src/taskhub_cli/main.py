"""Main entry point for TaskHub CLI."""

import typer

from taskhub_cli.commands import (
    add_command,
    complete_command,
    config_command,
    list_command,
    recurrence_command,
    show_command,
    version_command,
)
from taskhub_cli.models import ConfigurationError
from taskhub_cli.services.config_service import get_config_service
from taskhub_cli.utils.exit_codes import exit_code_for
from taskhub_cli.utils.logger import configure_logging
from taskhub_cli.utils.ui.console import apply_color_setting
from taskhub_cli.utils.ui.formatters import format_error

app = typer.Typer(
    name="taskhub",
    help="Tasks and recurring series from the command line",
    no_args_is_help=True,
)

# Top-level commands
app.command("add")(add_command.add_command)
app.command("complete")(complete_command.complete_command)
app.command("list")(list_command.list_command)
app.command("show")(show_command.show_command)
app.command("version")(version_command.version)

# Command groups
app.add_typer(recurrence_command.app, name="repeat", help="Manage recurring tasks")
app.add_typer(config_command.app, name="config", help="Configuration management")


@app.callback()
def main_callback() -> None:
    """Apply logging and output settings from the config before any command runs."""
    try:
        config = get_config_service().config
    except ConfigurationError as e:
        format_error(str(e))
        raise typer.Exit(code=exit_code_for(e)) from e

    configure_logging(config.logging)
    apply_color_setting(config.output.color)


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
