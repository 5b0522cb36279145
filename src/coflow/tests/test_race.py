"""Tests for any_of()."""

from __future__ import annotations

import asyncio
import time

import pytest

from coflow import InvalidOptionsError, TaskFailedError, any_of, delay, from_callback
from coflow.foundation.errors import Failure, Success
from coflow.foundation.testing import ConcurrencyProbe, after
from coflow.runtime.aggregate import RaceAggregator, RaceOptions, RaceState

FIRST_ERROR = ValueError("first")
OTHER_ERROR = ValueError("other")
SECOND_FASTEST_ERROR = ValueError("second fastest")
FASTEST_ERROR = ValueError("fastest")


def all_succeed() -> list:
    return [after(0.05).succeed(50), after(0.10).succeed(100), after(0.02).succeed(20), after(0.01).succeed(10)]


def fastest_fails() -> list:
    return [after(0.05).succeed(50), after(0.10).succeed(100), after(0.02).succeed(20), after(0.01).fail(FASTEST_ERROR)]


def all_fail() -> list:
    return [
        after(0.05).fail(FIRST_ERROR),
        after(0.10).fail(OTHER_ERROR),
        after(0.02).fail(SECOND_FASTEST_ERROR),
        after(0.01).fail(FASTEST_ERROR),
    ]


def race(tasks: list, **options: object) -> RaceAggregator:
    return RaceAggregator(tasks, RaceOptions.parse(**options))


# ═════════════════════════════════════════════════════════════════════════════
# Default policy
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_fastest_success_wins() -> None:
    assert await any_of(all_succeed()) == 10


@pytest.mark.asyncio
async def test_resolves_without_waiting_for_the_rest() -> None:
    start = time.perf_counter()

    await any_of(all_succeed())

    assert time.perf_counter() - start < 0.05


@pytest.mark.asyncio
async def test_failures_skipped_until_a_success() -> None:
    assert await any_of(fastest_fails()) == 20


@pytest.mark.asyncio
async def test_all_failed_raises_first_observed() -> None:
    with pytest.raises(ValueError) as exc_info:
        await any_of(all_fail())
    assert exc_info.value is FASTEST_ERROR


@pytest.mark.asyncio
@pytest.mark.parametrize("tasks", [[], None])
async def test_no_tasks(tasks: list | None, handler) -> None:
    agg = race(tasks, unused_result_handler=handler)

    assert await agg.run() is None
    await agg.drained()
    await asyncio.sleep(0)
    assert handler.calls == []
    assert await any_of(tasks, unused_result_handler=handler) is None
    await asyncio.sleep(0)
    assert handler.calls == []


# ═════════════════════════════════════════════════════════════════════════════
# Policy matrix
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_any_failure_raises_immediately() -> None:
    start = time.perf_counter()

    with pytest.raises(ValueError) as exc_info:
        await any_of(fastest_fails(), fails_when_any_failed=True)

    assert exc_info.value is FASTEST_ERROR
    assert time.perf_counter() - start < 0.05


@pytest.mark.asyncio
async def test_success_waits_for_batch_when_failing_on_any() -> None:
    start = time.perf_counter()

    assert await any_of(all_succeed(), fails_when_any_failed=True) == 10
    assert time.perf_counter() - start >= 0.09


@pytest.mark.asyncio
async def test_all_failed_returned_as_value() -> None:
    assert await any_of(all_fail(), fails_when_all_failed=False) is FASTEST_ERROR


@pytest.mark.asyncio
async def test_structured_outcomes() -> None:
    assert await any_of(all_succeed(), structured=True) == Success(10)
    assert await any_of(all_fail(), structured=True, fails_when_all_failed=False) == Failure(FASTEST_ERROR)


@pytest.mark.asyncio
async def test_non_exception_error_raised_wrapped() -> None:
    tasks = [from_callback(lambda done, _ctx: done({"status": 503}))]

    with pytest.raises(TaskFailedError) as exc_info:
        await any_of(tasks)
    assert exc_info.value.error == {"status": 503}


@pytest.mark.asyncio
async def test_stop_iteration_raised_wrapped(handler) -> None:
    stop = StopIteration("exhausted")

    def exhausted(_ctx: object) -> None:
        raise stop

    probe = ConcurrencyProbe()
    agg = race([exhausted, *probe.wrap_all([after(0.05).succeed(2)])], unused_result_handler=handler,
               fails_when_any_failed=True)

    with pytest.raises(TaskFailedError) as exc_info:
        await agg.run()
    assert exc_info.value.error is stop
    assert exc_info.value.__cause__ is stop
    assert probe.finished == []

    await agg.drained()
    assert probe.finished == [0]
    assert handler.calls == [(None, 2, None)]


@pytest.mark.asyncio
async def test_delay_as_deadline() -> None:
    tasks = [after(1.0).succeed("too slow"), delay(0.01, error=TimeoutError("deadline"))]

    with pytest.raises(TimeoutError, match="deadline"):
        await any_of(tasks, fails_when_any_failed=True)


# ═════════════════════════════════════════════════════════════════════════════
# Concurrency
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
@pytest.mark.parametrize(("concurrency", "expected"), [(True, 10), (False, 50), (1, 50), (2, 50), (4, 10)])
async def test_winner_depends_on_concurrency(concurrency: bool | int, expected: int) -> None:
    assert await any_of(all_succeed(), concurrency=concurrency) == expected


@pytest.mark.asyncio
async def test_serial_race_skips_failures_in_order() -> None:
    assert await any_of(fastest_fails()[::-1], concurrency=False) == 20


@pytest.mark.asyncio
async def test_losers_keep_running() -> None:
    probe = ConcurrencyProbe()
    agg = race(probe.wrap_all(all_succeed()))

    assert await agg.run() == 10
    assert probe.finished == [3]

    await agg.drained()
    assert probe.finished == [3, 2, 0, 1]


# ═════════════════════════════════════════════════════════════════════════════
# Unused results
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_unused_results_after_all_finished(handler) -> None:
    ctx = object()
    agg = race(all_succeed(), unused_result_handler=handler, context=ctx)

    assert await agg.run() == 10
    assert handler.calls == []
    assert agg.state is RaceState.DONE

    await agg.drained()
    assert agg.state is RaceState.DRAINING
    assert handler.calls == [(None, 50, ctx), (None, 100, ctx), (None, 20, ctx)]


@pytest.mark.asyncio
async def test_unused_results_mixed(handler) -> None:
    agg = race(fastest_fails(), unused_result_handler=handler)

    assert await agg.run() == 20
    await agg.drained()
    assert handler.calls == [(None, 50, None), (None, 100, None), (FASTEST_ERROR, None, None)]


@pytest.mark.asyncio
async def test_unused_results_after_race_failed(handler) -> None:
    agg = race(all_fail(), unused_result_handler=handler)

    with pytest.raises(ValueError):
        await agg.run()
    assert handler.calls == []

    await agg.drained()
    assert handler.calls == [(FIRST_ERROR, None, None), (OTHER_ERROR, None, None), (SECOND_FASTEST_ERROR, None, None)]


@pytest.mark.asyncio
async def test_caller_resumes_before_handler_when_decided_at_exhaustion(handler) -> None:
    agg = race(all_succeed(), unused_result_handler=handler, fails_when_any_failed=True)

    assert await agg.run() == 10
    assert handler.calls == []

    await agg.drained()
    assert [data for _, data, _ in handler.calls] == [50, 100, 20]


@pytest.mark.asyncio
async def test_handler_failure_logged_and_delivery_continues(logger, capture) -> None:
    seen: list[object] = []

    def flaky(error: object, data: object, _ctx: object) -> None:
        seen.append(data)
        if data == 50:
            raise RuntimeError("handler broke")

    agg = race(all_succeed(), unused_result_handler=flaky, logger=logger)
    await agg.run()
    await agg.drained()

    assert seen == [50, 100, 20]
    assert capture.events("error") == ["unused result handler failed"]
    assert "race drained" in capture.events("debug")


@pytest.mark.asyncio
async def test_caller_cancelled_leaves_every_result_unused(handler) -> None:
    agg = race(all_succeed(), unused_result_handler=handler)
    caller = asyncio.create_task(agg.run())

    await asyncio.sleep(0.001)
    caller.cancel()
    with pytest.raises(asyncio.CancelledError):
        await caller

    await agg.drained()
    assert sorted(data for _, data, _ in handler.calls) == [10, 20, 50, 100]


@pytest.mark.asyncio
async def test_any_of_returns_before_drain(handler) -> None:
    assert await any_of(all_succeed(), unused_result_handler=handler) == 10
    assert handler.calls == []

    await asyncio.sleep(0.15)
    assert len(handler.calls) == 3


# ═════════════════════════════════════════════════════════════════════════════
# Options and state
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_invalid_options_rejected() -> None:
    with pytest.raises(InvalidOptionsError):
        await any_of(all_succeed(), concurrency=0)


@pytest.mark.asyncio
async def test_no_tasks_drains_immediately() -> None:
    agg = race([])

    assert await agg.run() is None
    assert agg.state is RaceState.DONE
    await asyncio.wait_for(agg.drained(), timeout=1)
