"""Adapting the things callers pass as tasks into the event loop.

A task is anything that eventually produces one outcome:

    - an awaitable (coroutine object, Future, asyncio.Task): awaited as-is
    - a callable: called with the run's context when its turn comes; an
      awaitable return value is awaited, any other value is the task's data
    - a callback-style task built with from_callback(): the wrapped function
      receives ``done`` and the context, and completes the task by calling
      ``done(error)`` or ``done(None, *values)``

Example:
    >>> def legacy_fetch(done, context):
    ...     client.get(context.url, on_response=lambda r: done(None, r.status, r.body))
    >>>
    >>> task = from_callback(legacy_fetch)
    >>> result = await drive(task, context)   # Success([status, body])
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Callable, TypeAlias

from coflow.foundation.errors import Failure, Success, TaskResult, wrap_result

Done: TypeAlias = Callable[..., None]


@dataclass(slots=True, frozen=True)
class CallbackTask:
    """Task completed through a ``done(error, *values)`` callback.

    Only the first call to ``done`` counts; later calls are ignored. ``done``
    may be called from any thread.
    """

    fn: Callable[[Done, object], object]

    async def run(self, context: object) -> TaskResult[object]:
        loop = asyncio.get_running_loop()
        settled: asyncio.Future[TaskResult[object]] = loop.create_future()

        def _settle(error: object, values: tuple[object, ...]) -> None:
            if not settled.done():
                settled.set_result(wrap_result(error, *values))

        def done(error: object = None, *values: object) -> None:
            loop.call_soon_threadsafe(_settle, error, values)

        self.fn(done, context)
        return await settled


Task: TypeAlias = Awaitable[object] | Callable[[object], object] | CallbackTask


def from_callback(fn: Callable[[Done, object], object]) -> CallbackTask:
    """Wrap a callback-style function as a task."""
    return CallbackTask(fn)


async def drive(task: Task, context: object = None) -> TaskResult[object]:
    """Run one task to completion and capture its outcome.

    Never raises for the task's own failure: exceptions become Failure
    results. A CancelledError is treated as the task's failure unless the
    task driving it is itself being cancelled.
    """
    try:
        if isinstance(task, CallbackTask):
            return await task.run(context)
        if inspect.isawaitable(task):
            return Success(await task)
        if callable(task):
            value = task(context)
            return Success(await value if inspect.isawaitable(value) else value)
        raise TypeError(f"not a task: {task!r}")
    except asyncio.CancelledError as exc:
        if (current := asyncio.current_task()) is not None and current.cancelling():
            raise
        return Failure(exc)
    except Exception as exc:
        return Failure(exc)
