"""Foundation - configuration, errors, results and testing helpers."""

from __future__ import annotations

from .config import CoflowSettings, clear_settings_cache, get_settings
from .errors import CoflowError, ErrorCode, Failure, InvalidOptionsError, Success, TaskResult, wrap_result

__all__ = [
    # Config
    "CoflowSettings", "get_settings", "clear_settings_cache",
    # Errors
    "CoflowError", "ErrorCode", "InvalidOptionsError",
    "TaskResult", "Success", "Failure", "wrap_result",
]
