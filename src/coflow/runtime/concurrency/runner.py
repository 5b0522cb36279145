"""Task dispatch: serial, parallel and bounded worker-pool execution.

run_tasks() drives every task of a batch exactly once and reports each
outcome to a handler under its original index, in the order the outcomes
actually arrive.

Modes:
    - SERIAL: one task at a time, strictly in index order
    - PARALLEL: every task started at once
    - BOUNDED: ``limit`` workers pulling the next unstarted index from a
      shared counter as soon as they finish their current task

Example:
    >>> results = [None] * len(tasks)
    >>> await run_tasks(tasks, 4, lambda i, r: results.__setitem__(i, r))
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Callable, Self, TypeAlias

from coflow.foundation.errors import TaskResult
from coflow.runtime.observability import get_logger

from .task import Task, drive

OnComplete: TypeAlias = Callable[[int, TaskResult[object]], None]

_log = get_logger("coflow.runner")


class ExecutionMode(StrEnum):
    """How a batch of tasks is scheduled."""
    SERIAL = "serial"
    PARALLEL = "parallel"
    BOUNDED = "bounded"


@dataclass(slots=True, frozen=True)
class Concurrency:
    """Resolved scheduling plan for one batch.

    Attributes:
        mode: Scheduling mode
        limit: Number of workers; None for PARALLEL
    """

    mode: ExecutionMode
    limit: int | None = None

    @classmethod
    def resolve(cls, concurrency: bool | int, count: int) -> Self:
        """Map a ``concurrency`` option onto a plan for ``count`` tasks.

        ``True`` is parallel, ``False`` and ``1`` are serial, a cap at or
        above the task count is parallel and anything else is a pool.
        """
        if concurrency is True:
            return cls(ExecutionMode.PARALLEL)
        if concurrency is False or concurrency <= 1:
            return cls(ExecutionMode.SERIAL, 1)
        if concurrency >= count:
            return cls(ExecutionMode.PARALLEL)
        return cls(ExecutionMode.BOUNDED, concurrency)


async def run_tasks(
    tasks: Sequence[Task] | None,
    concurrency: bool | int | Concurrency,
    on_complete: OnComplete,
    context: object = None,
) -> None:
    """Run tasks and report each outcome as ``on_complete(index, result)``.

    Returns once every task has been reported. Task failures are reported
    as Failure results; nothing a task does makes this coroutine raise.
    An empty or missing task list is a no-op.
    """
    if not tasks:
        return

    plan = concurrency if isinstance(concurrency, Concurrency) else Concurrency.resolve(concurrency, len(tasks))
    _log.debug("dispatching tasks", mode=plan.mode, limit=plan.limit, tasks=len(tasks))

    match plan.mode:
        case ExecutionMode.SERIAL:
            await _run_serial(tasks, on_complete, context)
        case ExecutionMode.PARALLEL:
            await _run_parallel(tasks, on_complete, context)
        case ExecutionMode.BOUNDED:
            await _run_pool(tasks, on_complete, context, plan.limit or 1)


async def _run_serial(tasks: Sequence[Task], on_complete: OnComplete, context: object) -> None:
    for index, task in enumerate(tasks):
        on_complete(index, await drive(task, context))


async def _run_parallel(tasks: Sequence[Task], on_complete: OnComplete, context: object) -> None:
    async def run_one(index: int, task: Task) -> None:
        on_complete(index, await drive(task, context))

    await asyncio.gather(*(run_one(i, t) for i, t in enumerate(tasks)))


async def _run_pool(tasks: Sequence[Task], on_complete: OnComplete, context: object, limit: int) -> None:
    next_index = 0

    async def worker() -> None:
        nonlocal next_index
        while next_index < len(tasks):
            # Claim and advance with no await in between.
            index = next_index
            next_index += 1
            on_complete(index, await drive(tasks[index], context))

    await asyncio.gather(*(worker() for _ in range(limit)))
