import asyncio
from typing import Awaitable, Callable, Iterable, TypeVar

T = TypeVar("T")


async def bounded_fanout(
    items: Iterable[T],
    func: Callable[[T], Awaitable[object]],
    limit: int = 10,
) -> list[Exception]:
    """Call ``func`` for every item with at most ``limit`` in flight; return the failures."""
    semaphore = asyncio.Semaphore(limit)

    async def _one(item: T) -> None:
        async with semaphore:
            await func(item)

    results = await asyncio.gather(*(_one(item) for item in items), return_exceptions=True)
    return [r for r in results if isinstance(r, Exception)]
