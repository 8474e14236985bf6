"""Process-wide bounded queue of outbound email."""

import asyncio
import logging
from typing import AsyncIterator

from prediction_league.alerting.email import Email
from prediction_league.errors import ConflictError

logger = logging.getLogger(__name__)

# Sentinel placed behind the last message on close
_CLOSED = object()


class EmailQueue:
    """
    Bounded FIFO with many producers and a single consumer.

    ``close()`` is idempotent; the consumer sees every message offered before
    the close and then its stream ends.
    """

    def __init__(self, max_queue_size: int = 1000):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self._closed = False
        self._sentinels = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_count(self) -> int:
        return self._queue.qsize() - self._sentinels

    async def offer(self, email: Email) -> None:
        if self._closed:
            raise ConflictError("email queue is closed")
        await self._queue.put(email)

    async def stream(self) -> AsyncIterator[Email]:
        while True:
            # A full queue at close time has no room for the sentinel
            if self._closed and self._queue.empty():
                return
            item = await self._queue.get()
            if item is _CLOSED:
                self._sentinels = 0
                return
            yield item

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        pending = self._queue.qsize()
        try:
            self._queue.put_nowait(_CLOSED)
            self._sentinels = 1
        except asyncio.QueueFull:
            pass
        logger.info(f"[EMAIL_QUEUE] Closed (pending={pending})")
