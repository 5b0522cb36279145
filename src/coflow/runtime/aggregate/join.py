"""JOIN aggregator: run every task, then decide for the whole batch.

all_of() always waits for the full batch, even when failing fast, and
decides from the complete set of outcomes:

    - it raises the error of the lowest-index failed task when any task
      failed and ``fails_when_any_failed`` is set, or when every task failed
      and ``fails_when_all_failed`` is set
    - otherwise it returns one entry per task, in task order: the task's
      data or, for a failed task, its error (TaskResult values when
      ``structured``)

When the batch fails, every other result goes to the unused-result handler.

Example:
    >>> pages = await all_of([fetch(url) for url in urls], concurrency=4)
    >>>
    >>> # Collect errors instead of raising
    >>> outcomes = await all_of(tasks, fails_when_any_failed=False, structured=True)
    >>> failed = [r.error for r in outcomes if r.is_err()]
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum
from typing import TYPE_CHECKING

from coflow.foundation.errors import TaskResult, as_exception
from coflow.runtime.concurrency import Task, run_tasks

from .options import JoinOptions, UnusedResultHandler
from .unused import schedule_unused

if TYPE_CHECKING:
    from coflow.runtime.observability import BoundLogger


class JoinState(StrEnum):
    COLLECTING = "collecting"
    DECIDING = "deciding"
    DONE = "done"


class JoinAggregator:
    """One all_of() invocation. Owns its results list; not reusable."""

    __slots__ = ("_tasks", "_options", "_results", "_state", "_log")

    def __init__(self, tasks: Sequence[Task] | None, options: JoinOptions) -> None:
        self._tasks = list(tasks or ())
        self._options = options
        self._results: list[TaskResult[object] | None] = [None] * len(self._tasks)
        self._state = JoinState.COLLECTING
        self._log = options.log("coflow.join")

    @property
    def state(self) -> JoinState:
        return self._state

    async def run(self) -> list[object]:
        if self._tasks:
            await run_tasks(self._tasks, self._options.concurrency, self._on_complete, self._options.context)
        self._state = JoinState.DECIDING
        return self._decide()

    def _on_complete(self, index: int, result: TaskResult[object]) -> None:
        self._results[index] = result

    def _decide(self) -> list[object]:
        opts = self._options
        results: list[TaskResult[object]] = [r for r in self._results if r is not None]
        first_failure = next((i for i, r in enumerate(results) if r.is_err()), None)
        any_succeeded = any(r.is_ok() for r in results)
        self._state = JoinState.DONE

        if first_failure is not None and (
            opts.fails_when_any_failed or (opts.fails_when_all_failed and not any_succeeded)
        ):
            self._log.debug("join failed", tasks=len(results), index=first_failure)
            schedule_unused(results, first_failure, opts.unused_result_handler, opts.context, self._log)
            raise as_exception(results[first_failure].error)

        self._log.debug("join settled", tasks=len(results), failed=sum(r.is_err() for r in results))
        if opts.structured:
            return list(results)
        return [r.error if r.is_err() else r.data for r in results]


async def all_of(
    tasks: Sequence[Task] | None,
    *,
    concurrency: bool | int | None = None,
    fails_when_any_failed: bool | None = None,
    fails_when_all_failed: bool | None = None,
    structured: bool | None = None,
    context: object = None,
    unused_result_handler: UnusedResultHandler | None = None,
    logger: BoundLogger | None = None,
) -> list[object]:
    """Run all tasks and return their results in task order.

    Args:
        tasks: Awaitables, callables taking the context, or callback tasks
        concurrency: True = parallel (default from settings), False = serial,
            n = at most n tasks in flight
        fails_when_any_failed: Raise if any task failed (default True)
        fails_when_all_failed: Raise if every task failed (default False);
            only matters when ``fails_when_any_failed`` is False
        structured: Return TaskResult entries instead of raw data/errors
        context: Passed to callable tasks and to ``unused_result_handler``
        unused_result_handler: ``handler(error, data, context)`` for every
            result not returned, called after this coroutine has returned
        logger: Logger for handler failures and debug events

    Returns:
        One entry per task; an empty list for no tasks

    Raises:
        InvalidOptionsError: If the options fail validation
        BaseException: The error of the lowest-index failed task, when the
            policy says the batch failed
    """
    options = JoinOptions.parse(
        concurrency=concurrency,
        fails_when_any_failed=fails_when_any_failed,
        fails_when_all_failed=fails_when_all_failed,
        structured=structured,
        context=context,
        unused_result_handler=unused_result_handler,
        logger=logger,
    )
    return await JoinAggregator(tasks, options).run()
