"""Test helpers for timing-dependent aggregator scenarios.

Provides:
- after(): tasks finishing after a fixed delay with a given value or error
- ConcurrencyProbe: wraps tasks to record start order and peak in-flight count

Example:
    >>> tasks = [after(0.05).succeed(50), after(0.01).fail(ValueError("fast"))]
    >>> await any_of(tasks)
    50
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Coroutine

if TYPE_CHECKING:
    from collections.abc import Sequence

    from coflow.runtime.concurrency import Task

TimedTask = Callable[[object], Coroutine[object, object, object]]


@dataclass(slots=True, frozen=True)
class after:  # noqa: N801 - reads as after(0.1).succeed(x)
    """Builder for tasks that settle ``delay`` seconds after they start.

    The tasks are plain callables, so the same task can be passed to
    several aggregator calls.
    """

    delay: float

    def succeed(self, value: object = None) -> TimedTask:
        async def task(_context: object) -> object:
            await asyncio.sleep(self.delay)
            return value
        return task

    def fail(self, error: BaseException) -> TimedTask:
        async def task(_context: object) -> object:
            await asyncio.sleep(self.delay)
            raise error
        return task


@dataclass
class ConcurrencyProbe:
    """Records how many wrapped tasks are running at once.

    Attributes:
        in_flight: Tasks currently running
        peak: Highest in_flight seen
        started: Task indices in the order they started
        finished: Task indices in the order they finished
        contexts: Context each task was started with
    """

    in_flight: int = 0
    peak: int = 0
    started: list[int] = field(default_factory=list)
    finished: list[int] = field(default_factory=list)
    contexts: list[object] = field(default_factory=list)

    def wrap(self, index: int, task: TimedTask) -> TimedTask:
        async def probed(context: object) -> object:
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
            self.started.append(index)
            self.contexts.append(context)
            try:
                return await task(context)
            finally:
                self.in_flight -= 1
                self.finished.append(index)
        return probed

    def wrap_all(self, tasks: Sequence[TimedTask]) -> list[Task]:
        return [self.wrap(i, t) for i, t in enumerate(tasks)]
