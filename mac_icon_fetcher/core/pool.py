"""Bounded async worker pool.

A fixed number of consumer tasks pull items from a queue, so at most
``concurrency`` workflows (and therefore external processes) are in flight.
The pool returns only after every item has been handled.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def run_bounded(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[R]],
    concurrency: int,
) -> List[R]:
    """Run ``worker`` over ``items`` with at most ``concurrency`` in flight.

    Results are returned in input order. ``worker`` is expected to handle
    its own per-item errors; an exception escaping it cancels the pool and
    propagates.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}")

    indexed = list(enumerate(items))
    results: List[R] = [None] * len(indexed)  # type: ignore[list-item]
    if not indexed:
        return results

    queue: asyncio.Queue = asyncio.Queue()
    for entry in indexed:
        queue.put_nowait(entry)

    async def consume() -> None:
        while True:
            try:
                index, item = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            results[index] = await worker(item)

    consumers = [
        asyncio.create_task(consume())
        for _ in range(min(concurrency, len(indexed)))
    ]
    logger.debug(f"Dispatching {len(indexed)} items to {len(consumers)} workers")

    try:
        await asyncio.gather(*consumers)
    except BaseException:
        for task in consumers:
            task.cancel()
        await asyncio.gather(*consumers, return_exceptions=True)
        raise

    return results
