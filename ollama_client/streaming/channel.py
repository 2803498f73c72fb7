"""Single-producer single-consumer delivery channel with backpressure."""

from __future__ import annotations

import asyncio
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")

_CLOSED: Any = object()


class ChannelClosed(Exception):
    """Channel is closed: no more units will arrive (receive) or be accepted (send)."""


class DeliveryChannel(Generic[T]):
    """Bounded conduit between a stream worker and its consumer.

    With capacity 1 the producer's next send() waits until the consumer has
    received the previous unit. close() never blocks: an optional final unit
    and the close marker bypass the capacity limit, so a worker can always
    finish even if the consumer stopped reading.
    """

    def __init__(self, capacity: int = 1) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._credits = asyncio.Semaphore(capacity)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, item: T) -> None:
        if self._closed:
            raise ChannelClosed
        await self._credits.acquire()
        if self._closed:
            self._credits.release()
            raise ChannelClosed
        self._queue.put_nowait(item)

    def close(self, final: Optional[T] = None) -> None:
        """Close the channel; `final` is delivered after everything already sent. Idempotent."""
        if self._closed:
            return
        self._closed = True
        if final is not None:
            self._queue.put_nowait(final)
        self._queue.put_nowait(_CLOSED)

    async def receive(self) -> T:
        item = await self._queue.get()
        if item is _CLOSED:
            # Leave the marker for any later receive().
            self._queue.put_nowait(_CLOSED)
            raise ChannelClosed
        self._credits.release()
        return item
