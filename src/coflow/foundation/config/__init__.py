"""Configuration management using pydantic-settings."""

from .settings import (
    CoflowSettings,
    ExecutionSettings,
    LoggingSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "CoflowSettings",
    "ExecutionSettings",
    "LoggingSettings",
    "clear_settings_cache",
    "get_settings",
]
