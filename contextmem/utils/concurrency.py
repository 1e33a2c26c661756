"""
Bounded-concurrency helpers.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def bounded_gather(
    func: Callable[[T], Awaitable[R]],
    items: Sequence[T],
    limit: int,
    return_exceptions: bool = False,
) -> list[R | BaseException]:
    """
    Worker-limited parallel map.

    At most ``limit`` calls to ``func`` are in flight at any time. Results are
    returned in input order regardless of completion order.

    Args:
        func: Async callable applied to each item
        items: Input items
        limit: Maximum simultaneous calls
        return_exceptions: Put raised exceptions in the result list instead of
            propagating the first one. When propagating, unfinished calls are
            cancelled.

    Returns:
        List of results (or exceptions) aligned by index with ``items``
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")

    semaphore = asyncio.Semaphore(limit)

    async def run(item: T) -> Any:
        async with semaphore:
            return await func(item)

    tasks = [asyncio.ensure_future(run(item)) for item in items]
    try:
        return await asyncio.gather(*tasks, return_exceptions=return_exceptions)
    except BaseException:
        # cancel calls still pending after the first failure
        for task in tasks:
            task.cancel()
        raise
