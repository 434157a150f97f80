"""SQLite adapter: a local implementation of the task store port."""
