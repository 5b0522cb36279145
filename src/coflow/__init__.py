"""coflow - JOIN and RACE combinators for batches of asyncio tasks.

Runs a list of independent tasks serially, in parallel or through a bounded
worker pool, and reduces their outcomes to one result according to a small
policy: fail fast or tolerate failures, raw or tagged results, and a side
channel for results that were computed but not returned.

Quick Start:
    >>> from coflow import all_of, any_of
    >>>
    >>> # Wait for everything, at most 4 requests in flight
    >>> pages = await all_of([fetch(u) for u in urls], concurrency=4)
    >>>
    >>> # First mirror to answer wins, losers are closed when they finish
    >>> page = await any_of(
    ...     [fetch(m) for m in mirrors],
    ...     unused_result_handler=lambda err, page, _ctx: page and page.close(),
    ... )

Tasks:
    A task is an awaitable, a callable receiving the run's ``context``
    (returning an awaitable or a plain value), or a callback-style function
    wrapped with from_callback().

Policy:
    >>> await all_of(tasks, fails_when_any_failed=False)    # errors in place
    >>> await all_of(tasks, structured=True)                # TaskResult entries
    >>> await any_of(tasks, fails_when_any_failed=True)     # first error raises
"""

from __future__ import annotations

__version__ = "0.1.0"

# Aggregators
from .runtime.aggregate import (
    AggregateOptions,
    JoinOptions,
    RaceOptions,
    UnusedResultHandler,
    all_of,
    any_of,
)

# Task dispatch
from .runtime.concurrency import (
    CallbackTask,
    Concurrency,
    ExecutionMode,
    Task,
    delay,
    drive,
    from_callback,
    run_tasks,
    wait,
)

# Results & errors
from .foundation.errors import (
    CoflowError,
    ErrorCode,
    Failure,
    InvalidOptionsError,
    Success,
    TaskFailedError,
    TaskResult,
    wrap_result,
)

# Configuration
from .foundation.config import CoflowSettings, clear_settings_cache, get_settings

# Logging
from .runtime.observability import configure_logging, get_logger

__all__ = [
    "__version__",
    # Aggregators
    "all_of",
    "any_of",
    "AggregateOptions",
    "JoinOptions",
    "RaceOptions",
    "UnusedResultHandler",
    # Task dispatch
    "Task",
    "CallbackTask",
    "Concurrency",
    "ExecutionMode",
    "run_tasks",
    "drive",
    "from_callback",
    "wait",
    "delay",
    # Results & errors
    "TaskResult",
    "Success",
    "Failure",
    "wrap_result",
    "CoflowError",
    "ErrorCode",
    "InvalidOptionsError",
    "TaskFailedError",
    # Configuration
    "CoflowSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
]
