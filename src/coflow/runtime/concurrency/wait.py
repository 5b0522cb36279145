"""Delay helpers.

    - wait: pause the current coroutine
    - delay: a task that finishes after a pause, usable inside any_of() to
      put a deadline on a batch

Example:
    >>> await wait(0.5)
    >>>
    >>> # Fail if no mirror answers within two seconds
    >>> page = await any_of(
    ...     [fetch(a), fetch(b), delay(2.0, error=TimeoutError("no mirror answered"))],
    ...     fails_when_any_failed=True,
    ... )
"""

from __future__ import annotations

import asyncio
from typing import Callable, Coroutine


async def wait(delay: float) -> None:
    """Pause for ``delay`` seconds."""
    await asyncio.sleep(delay)


def delay(
    seconds: float,
    value: object = None,
    *,
    error: BaseException | None = None,
) -> Callable[[object], Coroutine[object, object, object]]:
    """Task finishing after ``seconds`` with ``value``, or failing with ``error``.

    The returned callable takes the run's context like any other task and
    can be reused across aggregator calls.
    """
    async def run(_context: object) -> object:
        await asyncio.sleep(seconds)
        if error is not None:
            raise error
        return value

    return run
