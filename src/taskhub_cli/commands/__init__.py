"""CLI commands for TaskHub."""
