"""Configuration loader for YAML files."""

import os
import yaml
from pathlib import Path
from typing import Any, Optional

from .config_schema import AppConfig

CONFIG_PATH_ENV = "CAL_ASSISTANT_CONFIG"


def _expand_env(value: Any) -> Any:
    """Replace ${VAR} references in string values with environment variables."""
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, dict):
        return {key: _expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    return value


class ConfigLoader:
    """Load and validate configuration from YAML files."""

    @staticmethod
    def load_config(path: Optional[str] = None) -> AppConfig:
        """
        Load configuration from YAML file.

        Secrets can be kept out of the file as ${VAR} references, which are
        expanded from the environment before validation.

        Args:
            path: Path to configuration file (default: $CAL_ASSISTANT_CONFIG
                or config.yaml)

        Returns:
            Validated AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        config_path = Path(path or os.environ.get(CONFIG_PATH_ENV, "config.yaml"))
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)

        if not config_dict:
            raise ValueError("Configuration file is empty")

        return ConfigLoader.from_dict(config_dict)

    @staticmethod
    def from_dict(config: dict) -> AppConfig:
        """
        Build a validated configuration from a dictionary.

        Raises:
            ValueError: If config is invalid
        """
        app_config = AppConfig(**_expand_env(config))
        app_config.validate()
        return app_config


def load_config(path: Optional[str] = None) -> AppConfig:
    """
    Convenience function to load configuration.

    Args:
        path: Path to configuration file

    Returns:
        Validated AppConfig instance
    """
    return ConfigLoader.load_config(path)
