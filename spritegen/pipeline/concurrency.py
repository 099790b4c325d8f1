"""
Bounded fan-out helpers.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

T = TypeVar("T")
R = TypeVar("R")

# Caps simultaneous file reads and image decodes regardless of source count
MAX_PARALLEL_FILE_READS = 80


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it as is."""
    if inspect.isawaitable(value):
        return await value
    return value


async def bounded_gather(
    func: Callable[[T], R | Awaitable[R]],
    items: Iterable[T],
    limit: int = MAX_PARALLEL_FILE_READS,
) -> list[R]:
    """
    Apply ``func`` to every item with at most ``limit`` calls in flight.

    Results keep the input order. ``func`` may be sync or async. The first
    failure propagates once every call has settled; calls already running
    are not cancelled.
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    semaphore = asyncio.Semaphore(limit)

    async def run(item: T) -> R:
        async with semaphore:
            return await maybe_await(func(item))

    results = await asyncio.gather(
        *(run(item) for item in items),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


async def settle_pair(first: Awaitable[Any], second: Awaitable[Any]) -> tuple[Any, Any]:
    """
    Run two awaitables concurrently and wait for both to settle.

    Raises the first failure (in argument order) after both are done.
    """
    results = await asyncio.gather(first, second, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results[0], results[1]
