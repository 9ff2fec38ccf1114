"""Configuration management module."""

from .config_loader import ConfigLoader, load_config
from .config_schema import AgentConfig, AppConfig, BookingConfig, EmailConfig, LLMConfig

__all__ = [
    "ConfigLoader",
    "load_config",
    "AgentConfig",
    "AppConfig",
    "BookingConfig",
    "EmailConfig",
    "LLMConfig",
]
