"""ResponseStream: worker task decoding an HTTP body into a DeliveryChannel, plus the consumer handle."""

from __future__ import annotations

import asyncio
import logging
from contextlib import aclosing
from typing import AsyncIterator, Awaitable, Callable, Generic, Optional, TypeVar

import httpx

from ollama_client.core.errors import DecodeError, StreamCancelledError
from ollama_client.protocol.responses import Record
from ollama_client.streaming.channel import ChannelClosed, DeliveryChannel
from ollama_client.streaming.decoder import decode_stream
from ollama_client.streaming.units import Fault, StreamUnit

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


class ResponseStream(Generic[R]):
    """Live sequence of StreamUnits for one streaming call.

    The worker task owns the response body and closes it exactly once, however
    it exits. Iterate with ``async for unit in stream``; every unit is either
    Value(record) or a terminal Fault. Use ``async with stream:`` (or aclose())
    when you may stop reading early, so the worker is torn down.
    """

    def __init__(
        self,
        response: httpx.Response,
        record_type: type[R],
        *,
        strict_end: bool = True,
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
    ) -> None:
        self._response = response
        self._record_type = record_type
        self._strict_end = strict_end
        self._on_close = on_close
        self._release_task: Optional[asyncio.Task[None]] = None
        self._channel: DeliveryChannel[StreamUnit[R]] = DeliveryChannel(capacity=1)
        self._worker = asyncio.get_running_loop().create_task(
            self._pump(), name=f"ollama-stream-{record_type.__name__}"
        )
        self._worker.add_done_callback(self._worker_done)

    async def _pump(self) -> None:
        try:
            async with aclosing(
                decode_stream(self._response.aiter_bytes(), self._record_type, strict_end=self._strict_end)
            ) as units:
                async for unit in units:
                    await self._channel.send(unit)
        except asyncio.CancelledError:
            logger.info("stream cancelled", extra={"url": str(self._response.url)})
            self._channel.close(Fault(StreamCancelledError("stream cancelled")))
            raise
        except Exception as e:
            logger.exception("stream worker failed", extra={"url": str(self._response.url)})
            self._channel.close(Fault(DecodeError(f"stream worker failed: {e}")))
        finally:
            self._channel.close()
            # Shielded: cancelling the worker now must not cut the body close short.
            await asyncio.shield(self._release())

    def _worker_done(self, task: asyncio.Task[None]) -> None:
        if not self._channel.closed:
            # Cancelled before its first step, so _pump never ran.
            self._channel.close(Fault(StreamCancelledError("stream cancelled")))
        self._release()

    def _release(self) -> asyncio.Task[None]:
        """Start closing the body (once) and return the task doing it."""
        if self._release_task is None:
            self._release_task = asyncio.get_running_loop().create_task(
                self._close_body(), name=f"ollama-release-{self._record_type.__name__}"
            )
        return self._release_task

    async def _close_body(self) -> None:
        try:
            await self._response.aclose()
        finally:
            if self._on_close is not None:
                await self._on_close()

    @property
    def done(self) -> bool:
        """True once the worker has exited and the body is closed."""
        return self._worker.done() and self._release_task is not None and self._release_task.done()

    def __aiter__(self) -> AsyncIterator[StreamUnit[R]]:
        return self

    async def __anext__(self) -> StreamUnit[R]:
        try:
            return await self._channel.receive()
        except ChannelClosed:
            raise StopAsyncIteration from None
        except asyncio.CancelledError:
            # Consumer's scope was cancelled (e.g. asyncio.timeout): take the worker down with it.
            self._worker.cancel()
            raise

    def cancel(self) -> None:
        """Cancel the worker. The consumer then receives a StreamCancelledError fault."""
        self._worker.cancel()

    async def aclose(self) -> None:
        """Stop the worker if it is still producing, then wait for the body to be closed."""
        if not self._channel.closed:
            self._worker.cancel()
        await asyncio.wait([self._worker])
        await asyncio.shield(self._release())

    async def __aenter__(self) -> "ResponseStream[R]":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def records(self) -> AsyncIterator[R]:
        """Yield decoded records, raising the error of the first fault."""
        async for unit in self:
            yield unit.unwrap()

    async def collect(self) -> list[R]:
        return [record async for record in self.records()]
