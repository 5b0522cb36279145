"""Delivery of computed-but-unreturned results to the side channel."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from coflow.foundation.errors import ErrorCode, FlowError, TaskResult
from coflow.runtime.observability import BoundLogger

from .options import UnusedResultHandler


def deliver_unused(
    results: Sequence[TaskResult[object] | None],
    used: int | None,
    handler: UnusedResultHandler | None,
    context: object,
    log: BoundLogger,
) -> int:
    """Call ``handler(error, data, context)`` for every result except ``used``.

    Results are offered in index order. A handler exception is logged and
    delivery moves on to the next index. Returns the number of results
    offered.
    """
    if handler is None:
        return 0

    offered = 0
    for index, result in enumerate(results):
        if index == used or result is None:
            continue
        error, data = result.to_tuple()
        offered += 1
        try:
            handler(error, data, context)
        except Exception as exc:
            info = FlowError.from_exception(exc, ErrorCode.HANDLER_FAILED, include_trace=False)
            log.exception("unused result handler failed", index=index, code=info.code, message=info.message)
    return offered


def schedule_unused(
    results: Sequence[TaskResult[object] | None],
    used: int | None,
    handler: UnusedResultHandler | None,
    context: object,
    log: BoundLogger,
) -> None:
    """Deliver unused results on the next loop iteration.

    Scheduled after the outcome has been handed to the awaiting caller, so
    the caller resumes before the handler sees anything.
    """
    if handler is None:
        return
    asyncio.get_running_loop().call_soon(deliver_unused, results, used, handler, context, log)
