"""Configuration service for managing TaskHub CLI configuration.

This module provides the ConfigService class, the single source of truth for
configuration. It handles:

- Loading and saving config.json in the platform config directory
- Creating a default configuration on first run
- Resolving the task store location (``TASKHUB_DB`` overrides the file)
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir
from pydantic import ValidationError as PydanticValidationError

from taskhub_cli.models import ConfigurationError
from taskhub_cli.models.config_models import AppConfig

DB_ENV_VAR = "TASKHUB_DB"


class ConfigService:
    """Service for managing application configuration."""

    def __init__(self):
        """Initialize the config service."""
        self.config_dir = Path(user_config_dir("taskhub_cli"))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(user_data_dir("taskhub_cli"))

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from storage, creating the default on first run."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # Expected on first run
            self._config = AppConfig()
            self.save_config()
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Invalid config file {self.config_path}: {e}"
            ) from e

        return self._config

    def save_config(self) -> None:
        """Save the current configuration to storage."""
        if self._config is None:
            raise RuntimeError("No configuration to save")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self._config.model_dump_json(indent=4))

            self.config_path.chmod(0o600)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def reset_config(self) -> AppConfig:
        """Reset configuration to defaults."""
        self._config = AppConfig()
        self.save_config()
        return self._config

    def set_value(self, key: str, value: str) -> AppConfig:
        """Set a dotted config key (e.g. ``output.format``) and save.

        Raises:
            KeyError: If the key does not exist
            ValueError: If the value is invalid for the key
        """
        data = self.config.model_dump()
        node = data
        *parents, leaf = key.split(".")
        for part in parents:
            if not isinstance(node.get(part), dict):
                raise KeyError(key)
            node = node[part]
        if leaf not in node:
            raise KeyError(key)
        node[leaf] = value

        try:
            self._config = AppConfig.model_validate(data)
        except PydanticValidationError as e:
            raise ValueError(f"Invalid value for {key}: {value}") from e
        self.save_config()
        return self._config

    def get_database_path(self) -> str:
        """Return the SQLite database path for the task store."""
        env_path = os.environ.get(DB_ENV_VAR)
        if env_path:
            return env_path
        if self.config.database_path:
            return self.config.database_path
        return str(self.data_dir / "taskhub.db")


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
