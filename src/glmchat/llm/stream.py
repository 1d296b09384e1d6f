"""Bounded producer/consumer channel between a background task and a caller.

The producer task ``await``s :meth:`EventStream.send`, so a slow consumer
stalls the producer (and with it the network read) once ``maxsize`` events
are buffered.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from glmchat.types import StreamEvent

_logger = logging.getLogger(__name__)

# Marks the end of the stream inside the queue
_CLOSED = object()

Producer = Callable[["EventStream"], Awaitable[None]]


class EventStream:
    """Async iterator of :class:`StreamEvent` fed by one producer task.

    Usage::

        async with await client.chat("Hello") as stream:
            async for event in stream:
                if event.error:
                    raise event.error
                print(event.text, end="")
    """

    def __init__(self, maxsize: int = 100) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=maxsize)
        self._task: asyncio.Task[None] | None = None
        self._closed = False
        self._finished = False

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def start(self, producer: Producer) -> EventStream:
        """Run *producer* in a background task; the channel closes when it ends."""
        if self._task is not None:
            raise RuntimeError("EventStream already started")
        self._task = asyncio.create_task(self._run(producer))
        return self

    async def send(self, event: StreamEvent) -> None:
        await self._queue.put(event)

    async def _run(self, producer: Producer) -> None:
        try:
            await producer(self)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Producers report failures in-band; this is a last resort.
            _logger.exception("Stream producer crashed")
            await self.send(StreamEvent(error=e))
        finally:
            if not self._closed:
                await self._queue.put(_CLOSED)

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def __aiter__(self) -> EventStream:
        return self

    async def __anext__(self) -> StreamEvent:
        if self._finished:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            self._finished = True
            raise StopAsyncIteration
        return item  # type: ignore[return-value]

    async def collect(self) -> list[StreamEvent]:
        """Drain the stream into a list."""
        return [event async for event in self]

    @property
    def done(self) -> bool:
        """True once the producer task has finished."""
        return self._task is not None and self._task.done()

    async def aclose(self) -> None:
        """Cancel the producer and close the channel."""
        if self._closed:
            return
        self._closed = True
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        # Unblock any consumer still waiting on the queue.
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSED)

    async def __aenter__(self) -> EventStream:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
