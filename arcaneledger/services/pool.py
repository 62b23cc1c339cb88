"""Bounded-concurrency runner for async lookups."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

T = TypeVar("T")


async def bounded_gather(
    tasks: Sequence[Callable[[], Awaitable[T]]], concurrency: int
) -> list[T]:
    """
    Run task factories at most `concurrency` at a time.

    Tasks start in submission order. Results are stored by submission
    position, so the returned list lines up with `tasks` whatever order
    they finish in. The first exception propagates and cancels the
    remaining workers.

    Args:
        tasks: Zero-argument callables returning awaitables
        concurrency: Maximum number of tasks in flight

    Returns:
        One result per task, in submission order
    """
    results: list[T | None] = [None] * len(tasks)
    next_index = 0

    async def worker() -> None:
        nonlocal next_index
        while next_index < len(tasks):
            i = next_index
            next_index += 1
            results[i] = await tasks[i]()

    count = min(max(concurrency, 1), len(tasks))
    workers = [asyncio.ensure_future(worker()) for _ in range(count)]
    try:
        await asyncio.gather(*workers)
    except BaseException:
        for w in workers:
            w.cancel()
        raise
    return results  # type: ignore[return-value]
