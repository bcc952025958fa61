"""Fail-fast concurrent execution primitives.

Both helpers are built on asyncio.TaskGroup: every awaitable runs as its own
task, the first failure cancels the siblings, and nothing returns until all
tasks have settled. The first error is re-raised as-is (not wrapped in an
ExceptionGroup) so callers catch the same typed errors a single request
would raise. There is no partial result on failure.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def _await(aw: Awaitable[T]) -> T:
    return await aw


def _first_error(group: BaseExceptionGroup) -> BaseException:
    """First failure recorded by a TaskGroup, unwrapping nested groups."""
    error: BaseException = group
    while isinstance(error, BaseExceptionGroup):
        error = error.exceptions[0]
    return error


async def gather_fail_fast(*aws: Awaitable[Any]) -> list[Any]:
    """Run awaitables concurrently; return results in argument order.

    Args:
        *aws: Coroutines or futures to run

    Returns:
        List of results, one per awaitable, in the order given

    Raises:
        The first exception raised by any awaitable, after the remaining
        ones have been cancelled and awaited.

    Example:
        details, stats = await gather_fail_fast(
            client.execute(GetDeviceDetails(site_id, device_id)),
            client.execute(GetDeviceStatistics(site_id, device_id)),
        )
    """
    tasks: list[asyncio.Task] = []
    try:
        async with asyncio.TaskGroup() as tg:
            for aw in aws:
                tasks.append(tg.create_task(_await(aw)))
    except ExceptionGroup as group:
        error = _first_error(group)
        if len(group.exceptions) > 1:
            logger.debug(f"{len(group.exceptions)} concurrent tasks failed; raising the first")
        raise error

    return [task.result() for task in tasks]


async def process_concurrent(
    items: Iterable[T],
    processor: Callable[[T], Awaitable[R]],
    max_concurrent: int = 10,
) -> list[R]:
    """Apply an async processor to every item with bounded concurrency.

    Uses a semaphore to cap in-flight operations. Results keep the input
    order; any failure fails the whole batch (see gather_fail_fast).

    Args:
        items: Items to process
        processor: Async function applied to each item
        max_concurrent: Maximum concurrent operations (default: 10)

    Example:
        infos = await process_concurrent(devices, fetch_info, max_concurrent=5)
    """
    semaphore = asyncio.Semaphore(max(1, max_concurrent))

    async def bounded_processor(item: T) -> R:
        async with semaphore:
            return await processor(item)

    return await gather_fail_fast(*(bounded_processor(item) for item in items))


__all__ = [
    "gather_fail_fast",
    "process_concurrent",
]
