"""Validated aggregator options.

Each aggregator call builds one frozen options model from its keyword
arguments. Validation happens once, at entry; invalid values raise
InvalidOptionsError before any task is started.
"""

from __future__ import annotations

from typing import Any, Callable, Self

from pydantic import BaseModel, ConfigDict, Field, InstanceOf, PositiveInt, StrictBool, ValidationError

from coflow.foundation.config import get_settings
from coflow.foundation.errors import InvalidOptionsError
from coflow.runtime.observability import BoundLogger, get_logger

# handler(error, data, context)
UnusedResultHandler = Callable[[object, object, object], object]


def _default_concurrency() -> bool | int:
    return get_settings().execution.concurrency


class AggregateOptions(BaseModel):
    """Options shared by all_of() and any_of().

    Attributes:
        concurrency: True = parallel, False = serial, n = pool of n workers
        fails_when_any_failed: Fail as soon as the policy sees any failure
        fails_when_all_failed: Fail when every task failed
        structured: Return TaskResult values instead of raw data/errors
        context: Passed to callable tasks and to the unused-result handler
        unused_result_handler: Receives every result that was not returned
        logger: Sink for handler failures and debug events
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    concurrency: StrictBool | PositiveInt = Field(default_factory=_default_concurrency)
    fails_when_any_failed: StrictBool
    fails_when_all_failed: StrictBool
    structured: StrictBool = False
    context: Any = None
    unused_result_handler: UnusedResultHandler | None = None
    logger: InstanceOf[BoundLogger] | None = None

    @classmethod
    def parse(cls, **options: object) -> Self:
        """Build options from keyword arguments, dropping those left as None.

        Raises:
            InvalidOptionsError: If any option fails validation
        """
        try:
            return cls(**{k: v for k, v in options.items() if v is not None})
        except ValidationError as exc:
            raise InvalidOptionsError.from_validation(exc) from exc

    def log(self, name: str) -> BoundLogger:
        """Configured logger, or the module logger ``name``."""
        return self.logger or get_logger(name)


class JoinOptions(AggregateOptions):
    """all_of(): fail on any failure by default."""

    fails_when_any_failed: StrictBool = True
    fails_when_all_failed: StrictBool = False


class RaceOptions(AggregateOptions):
    """any_of(): fail only when every task failed by default."""

    fails_when_any_failed: StrictBool = False
    fails_when_all_failed: StrictBool = True
