"""Utility functions related to async for the assethook package."""

# Python imports
import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


async def async_map(
    func: Callable[[T], Awaitable[R]],
    iterable: Iterable[T],
    limit: int | None = None,
) -> list[R]:
    """
    Run an async function over an iterable with a limit on concurrent executions.

    The function preserves the original order of results, whatever the order in which
    the calls complete. Items are started in input order, so with ``limit=1`` the
    calls run strictly one after another.

    The first call that raises cancels every other call still running, and its
    exception is re-raised once they have all finished unwinding. If the caller is
    cancelled, the calls are cancelled too.

    :param func: An async function to apply to each item.
    :param iterable: An iterable of input items.
    :param limit: Maximum number of concurrent calls.

    :return: A list of results, in the same order as the input iterable.

    :raises ValueError: If limit is less than 1.
    """
    if limit is not None and limit < 1:
        raise ValueError("limit must be at least 1")

    items = list(enumerate(iterable))
    if not items:
        return []

    results: dict[int, R] = {}
    pending = iter(items)

    async def _worker():
        # Workers share one iterator, so each item is taken exactly once.
        for idx, item in pending:
            results[idx] = await func(item)

    num_workers = len(items) if limit is None else min(limit, len(items))
    workers = [asyncio.ensure_future(_worker()) for _ in range(num_workers)]
    try:
        await asyncio.wait(workers, return_when=asyncio.FIRST_EXCEPTION)
        for worker in workers:
            if worker.done() and worker.exception() is not None:
                raise worker.exception()  # type: ignore[misc]
    finally:
        for worker in workers:
            if not worker.done():
                worker.cancel()
        await asyncio.gather(*workers, return_exceptions=True)

    return [results[i] for i in sorted(results)]
