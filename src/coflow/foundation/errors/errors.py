"""Structured errors raised by coflow itself.

Task errors are never wrapped: an aggregator re-raises the exact exception a
task failed with. The types here cover what coflow adds on top: rejected
options, non-exception task errors that must be raised, and failures of the
unused-result handler (which are logged, never raised).
"""

from __future__ import annotations

import traceback
from enum import StrEnum
from typing import TYPE_CHECKING, Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, computed_field

if TYPE_CHECKING:
    from pydantic import ValidationError


class ErrorCode(StrEnum):
    """Machine-readable classification of coflow errors."""
    INVALID_OPTIONS = "INVALID_OPTIONS"
    TASK_FAILED = "TASK_FAILED"
    HANDLER_FAILED = "HANDLER_FAILED"


class FlowError(BaseModel):
    """Serializable description of a coflow error.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Optional detail text (e.g., stack trace)
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    message: Annotated[str, Field(min_length=1, description="Human-readable error message")]
    code: ErrorCode = Field(default=ErrorCode.TASK_FAILED, description="Error classification")
    details: str | None = Field(default=None, description="Optional detail text")

    @computed_field
    @property
    def severity(self) -> str:
        """Log level this error is reported at."""
        return "warning" if self.code is ErrorCode.INVALID_OPTIONS else "error"

    @classmethod
    def from_exception(cls, exc: BaseException, code: ErrorCode, *, include_trace: bool = True) -> Self:
        """Create from exception, keeping the formatted traceback."""
        details = "".join(traceback.format_exception(exc)) if include_trace else None
        return cls(message=str(exc) or type(exc).__name__, code=code, details=details)


class CoflowError(Exception):
    """Base exception carrying a FlowError."""

    def __init__(self, info: FlowError) -> None:
        self.info = info
        super().__init__(info.message)

    @property
    def code(self) -> ErrorCode:
        return self.info.code


class InvalidOptionsError(CoflowError, ValueError):
    """Aggregator options failed validation."""

    @classmethod
    def from_validation(cls, exc: ValidationError) -> Self:
        reasons = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'options'}: {err['msg']}" for err in exc.errors()
        )
        return cls(FlowError(message=f"invalid options: {reasons}", code=ErrorCode.INVALID_OPTIONS))


class TaskFailedError(CoflowError):
    """Raised in place of a task error that is not an exception.

    Callback-style tasks may signal any truthy value as their error. When
    such a value is the aggregate failure it is raised wrapped in this type;
    the original value is kept in ``error``.
    """

    def __init__(self, error: object) -> None:
        self.error = error
        super().__init__(FlowError(message=f"task failed: {error!r}", code=ErrorCode.TASK_FAILED))


def as_exception(error: object) -> BaseException:
    """Return a task error fit for raising, wrapping it if it is not an exception.

    StopIteration is wrapped too: asyncio futures refuse it and a coroutine
    raising it turns it into a bare RuntimeError.
    """
    if not isinstance(error, BaseException):
        return TaskFailedError(error)
    if isinstance(error, StopIteration):
        wrapped = TaskFailedError(error)
        wrapped.__cause__ = error
        return wrapped
    return error
