"""Migration 001: tasks, series end markers and their indexes."""

from taskhub_cli.adapters.sqlite import schema

from .runner import Migration

initial_migration = Migration(
    version=1,
    description="Initial database schema",
    statements=(*schema.ALL_TABLES, *schema.ALL_INDEXES),
)
