"""TaskHub CLI - recurring task management from the command line."""

__version__ = "0.4.0"
