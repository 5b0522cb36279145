"""RACE aggregator: resolve with the first qualifying completion.

any_of() records the first success and the first failure in the order
tasks actually finish:

    - without ``fails_when_any_failed`` (default) the first success is
      returned immediately
    - with ``fails_when_any_failed`` the first failure is raised
      immediately, and a success is only returned once every task finished

If nothing resolved early, the decision is made when the batch is
exhausted: a recorded success is returned, otherwise the first failure is
raised (``fails_when_any_failed`` or ``fails_when_all_failed``) or returned
as a value.

Tasks still running after the decision are never cancelled. Once all of
them have finished, every result except the delivered one goes to the
unused-result handler.

Example:
    >>> page = await any_of([fetch(mirror) for mirror in mirrors])
    >>>
    >>> # Close connections opened by the losers
    >>> conn = await any_of(
    ...     [connect(host) for host in hosts],
    ...     unused_result_handler=lambda err, conn, _ctx: conn and conn.close(),
    ... )
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from enum import StrEnum
from typing import TYPE_CHECKING

from coflow.foundation.errors import TaskResult, as_exception
from coflow.runtime.concurrency import Task, run_tasks

from .options import RaceOptions, UnusedResultHandler
from .unused import schedule_unused

if TYPE_CHECKING:
    from coflow.runtime.observability import BoundLogger

# Runners outliving their any_of() call; referenced until they finish.
_draining: set[asyncio.Task[None]] = set()


class RaceState(StrEnum):
    RACING = "racing"
    DONE = "done"
    DRAINING = "draining"


class RaceAggregator:
    """One any_of() invocation. Owns its results; not reusable."""

    __slots__ = (
        "_tasks", "_options", "_results", "_state", "_log",
        "_first_success", "_first_failure", "_used", "_outcome", "_drained",
    )

    def __init__(self, tasks: Sequence[Task] | None, options: RaceOptions) -> None:
        self._tasks = list(tasks or ())
        self._options = options
        self._results: list[TaskResult[object] | None] = [None] * len(self._tasks)
        self._state = RaceState.RACING
        self._log = options.log("coflow.race")
        self._first_success: int | None = None
        self._first_failure: int | None = None
        self._used: int | None = None
        self._outcome: asyncio.Future[object] | None = None
        self._drained: asyncio.Event = asyncio.Event()

    @property
    def state(self) -> RaceState:
        return self._state

    async def drained(self) -> None:
        """Wait until every unused result has been offered to the handler."""
        await self._drained.wait()

    async def run(self) -> object:
        if not self._tasks:
            self._state = RaceState.DONE
            self._drained.set()
            return None

        self._outcome = asyncio.get_running_loop().create_future()
        runner = asyncio.create_task(
            run_tasks(self._tasks, self._options.concurrency, self._on_complete, self._options.context),
            name="coflow.any_of",
        )
        _draining.add(runner)
        runner.add_done_callback(self._on_exhausted)
        return await self._outcome

    def _on_complete(self, index: int, result: TaskResult[object]) -> None:
        self._results[index] = result
        if result.is_err():
            if self._first_failure is None:
                self._first_failure = index
                if self._options.fails_when_any_failed:
                    self._decide(early=True)
        elif self._first_success is None:
            self._first_success = index
            if not self._options.fails_when_any_failed:
                self._decide(early=True)

    def _on_exhausted(self, runner: asyncio.Task[None]) -> None:
        _draining.discard(runner)
        outcome = self._outcome
        if runner.cancelled():
            if outcome is not None and not outcome.done():
                outcome.cancel()
        elif (exc := runner.exception()) is not None:
            if outcome is not None and not outcome.done():
                outcome.set_exception(exc)
        else:
            self._decide(early=False)
        self._state = RaceState.DRAINING
        opts = self._options
        schedule_unused(self._results, self._used, opts.unused_result_handler, opts.context, self._log)
        asyncio.get_running_loop().call_soon(self._finish_drain)

    def _finish_drain(self) -> None:
        self._log.debug("race drained", tasks=len(self._tasks), used=self._used)
        self._drained.set()

    def _decide(self, *, early: bool) -> None:
        outcome = self._outcome
        if outcome is None or outcome.done():
            return
        self._state = RaceState.DONE
        opts = self._options
        failure, success = self._first_failure, self._first_success

        if failure is not None and (opts.fails_when_any_failed or (opts.fails_when_all_failed and success is None)):
            self._used = failure
            self._log.debug("race decided", index=failure, failed=True, early=early)
            outcome.set_exception(as_exception(self._results[failure].error))
            return

        self._used = success if success is not None else failure
        result = self._results[self._used] if self._used is not None else None
        self._log.debug("race decided", index=self._used, failed=False, early=early)
        if result is None or opts.structured:
            outcome.set_result(result)
        else:
            outcome.set_result(result.error if result.is_err() else result.data)


async def any_of(
    tasks: Sequence[Task] | None,
    *,
    concurrency: bool | int | None = None,
    fails_when_any_failed: bool | None = None,
    fails_when_all_failed: bool | None = None,
    structured: bool | None = None,
    context: object = None,
    unused_result_handler: UnusedResultHandler | None = None,
    logger: BoundLogger | None = None,
) -> object:
    """Run all tasks and return the data of the first one to succeed.

    Args:
        tasks: Awaitables, callables taking the context, or callback tasks
        concurrency: True = parallel (default from settings), False = serial,
            n = at most n tasks in flight
        fails_when_any_failed: Raise as soon as any task fails (default False);
            a success is then only returned after all tasks finished
        fails_when_all_failed: Raise if every task failed (default True)
            instead of returning the first error as the result
        structured: Return a TaskResult instead of the raw data/error
        context: Passed to callable tasks and to ``unused_result_handler``
        unused_result_handler: ``handler(error, data, context)`` for every
            result not returned, called once all tasks have finished
        logger: Logger for handler failures and debug events

    Returns:
        The winning data (or error, see ``fails_when_all_failed``); None for
        no tasks

    Raises:
        InvalidOptionsError: If the options fail validation
        BaseException: The first error observed, when the policy says the
            race failed
    """
    options = RaceOptions.parse(
        concurrency=concurrency,
        fails_when_any_failed=fails_when_any_failed,
        fails_when_all_failed=fails_when_all_failed,
        structured=structured,
        context=context,
        unused_result_handler=unused_result_handler,
        logger=logger,
    )
    return await RaceAggregator(tasks, options).run()

