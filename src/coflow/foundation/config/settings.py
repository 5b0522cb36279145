"""Environment-based configuration using pydantic-settings.

Example:
    >>> from coflow.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.execution.concurrency
    True
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # COFLOW_EXECUTION_CONCURRENCY=4
    # COFLOW_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, PositiveInt, StrictBool, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExecutionSettings(BaseSettings):
    """Defaults applied to aggregator calls that leave an option unset."""

    model_config = SettingsConfigDict(
        env_prefix="COFLOW_EXECUTION_",
        extra="ignore",
    )

    concurrency: StrictBool | PositiveInt = Field(
        default=True,
        description="true = parallel, false = serial, n = worker pool of n",
    )

    @field_validator("concurrency", mode="before")
    @classmethod
    def _parse_count(cls, v: object) -> object:
        """Read ``true``/``false`` as booleans and integer strings as pool sizes.

        Integers are never read as booleans, so ``0`` fails as a pool size.
        """
        if not isinstance(v, str):
            return v
        text = v.strip()
        if text.lower() in ("true", "false"):
            return text.lower() == "true"
        try:
            return int(text)
        except ValueError:
            return v


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="COFLOW_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"


class CoflowSettings(BaseSettings):
    """Root settings for coflow.

    Example environment variables:
        COFLOW_DEBUG=true
        COFLOW_EXECUTION_CONCURRENCY=8
        COFLOW_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="COFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    debug: bool = Field(default=False, description="Log debug events regardless of log level")

    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @computed_field
    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.logging.level


@lru_cache(maxsize=1)
def get_settings() -> CoflowSettings:
    """Get the global settings instance (cached)."""
    return CoflowSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    The next get_settings() call reloads configuration from the environment.
    """
    get_settings.cache_clear()
