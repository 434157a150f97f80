"""Shared Rich consoles for TaskHub CLI output."""

from functools import lru_cache

from rich.console import Console


@lru_cache(maxsize=2)
def get_console(highlight: bool = True) -> Console:
    """Get a Rich Console instance for consistent output formatting."""
    return Console(highlight=highlight)


def apply_color_setting(color: bool) -> None:
    """Switch colour output on or off for both shared consoles."""
    for highlight in (True, False):
        get_console(highlight).no_color = not color
