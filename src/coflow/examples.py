"""Examples of all_of(), any_of() and the delay helpers.

Demonstrates:
- Fetching several URLs concurrently and waiting for all of them
- Racing mirrors of one document, first response wins
- Pausing between steps with wait()

Run with ``python -m coflow.examples`` (requires httpx).
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING, Callable

from coflow.runtime.aggregate import all_of, any_of
from coflow.runtime.concurrency import wait
from coflow.runtime.observability import get_logger

if TYPE_CHECKING:
    import httpx

README_URLS = (
    "https://raw.githubusercontent.com/fluidsonic/co-flow/master/README.md",
    "https://raw.githubusercontent.com/fluidsonic/co-flow/master/index.js",
    "https://raw.githubusercontent.com/fluidsonic/co-flow/master/package.json",
)

_log = get_logger("coflow.examples")


def _get(url: str) -> Callable[[httpx.AsyncClient], object]:
    """Task fetching ``url`` with the client passed as the run's context."""
    def task(client: httpx.AsyncClient) -> object:
        return client.get(url)
    return task


def _client() -> httpx.AsyncClient:
    try:
        import httpx
    except ImportError as e:
        raise ImportError("httpx is required for the examples. Install with: pip install coflow[http]") from e
    return httpx.AsyncClient(follow_redirects=True, timeout=10.0)


# ═════════════════════════════════════════════════════════════════════════════
# Example 1: Wait for all requests
# ═════════════════════════════════════════════════════════════════════════════


async def fetch_all(
    urls: Sequence[str],
    *,
    client: httpx.AsyncClient | None = None,
    concurrency: bool | int = True,
) -> list[httpx.Response]:
    """Fetch every URL; raise the first (by position) request error."""
    if client is None:
        async with _client() as owned:
            return await fetch_all(urls, client=owned, concurrency=concurrency)
    responses = await all_of([_get(u) for u in urls], concurrency=concurrency, context=client)
    return list(responses)  # type: ignore[arg-type]


# ═════════════════════════════════════════════════════════════════════════════
# Example 2: First mirror to answer wins
# ═════════════════════════════════════════════════════════════════════════════


async def fetch_first(
    urls: Sequence[str],
    *,
    client: httpx.AsyncClient | None = None,
) -> httpx.Response:
    """Fetch the same document from several mirrors, return the fastest answer.

    Responses that lose the race are logged once every request finished.
    """
    if client is None:
        async with _client() as owned:
            return await fetch_first(urls, client=owned)

    def discard(error: object, response: object, _context: object) -> None:
        _log.debug("discarded mirror response", error=repr(error) if error else None,
                   status=getattr(response, "status_code", None))

    return await any_of(  # type: ignore[return-value]
        [_get(u) for u in urls],
        context=client,
        unused_result_handler=discard,
    )


# ═════════════════════════════════════════════════════════════════════════════
# Example 3: Pausing between steps
# ═════════════════════════════════════════════════════════════════════════════


async def countdown(
    words: Sequence[str] = ("Wait", "just", "does", "what", "it", "says."),
    interval: float = 0.5,
    emit: Callable[[str], object] = print,
) -> None:
    """Emit each word, pausing ``interval`` seconds in between."""
    for i, word in enumerate(words):
        if i:
            await wait(interval)
        emit(word)


async def _demo() -> None:
    try:
        responses = await fetch_all(README_URLS)
    except Exception as e:
        print(f"Cannot load request: {e!r}")
    else:
        for response in responses:
            print(f"\n  ###### {response.url} responded:\n")
            print(response.text)

    try:
        first = await fetch_first([README_URLS[0]] * 2 + [README_URLS[0].replace("https://", "http://")])
    except Exception as e:
        print(f"Cannot load README: {e!r}")
    else:
        print(f"\n  ###### {first.url} responded first:\n")
        print(first.text)

    await countdown()


def main() -> None:
    asyncio.run(_demo())


if __name__ == "__main__":
    main()
