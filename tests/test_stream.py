"""Tests for the bounded EventStream channel."""

import asyncio

from glmchat.llm.stream import EventStream
from glmchat.types import StreamEvent


class TestEventStream:
    async def test_events_delivered_in_order(self):
        async def producer(stream: EventStream) -> None:
            for i in range(20):
                await stream.send(StreamEvent(text=str(i)))

        stream = EventStream(maxsize=4).start(producer)
        events = await stream.collect()
        assert [e.text for e in events] == [str(i) for i in range(20)]
        assert stream.done

    async def test_empty_producer_closes(self):
        async def producer(stream: EventStream) -> None:
            return

        stream = EventStream().start(producer)
        assert await stream.collect() == []

    async def test_backpressure(self):
        sent: list[int] = []

        async def producer(stream: EventStream) -> None:
            for i in range(3):
                await stream.send(StreamEvent(text=str(i)))
                sent.append(i)

        stream = EventStream(maxsize=1).start(producer)
        await asyncio.sleep(0.05)
        # First send fits in the queue, the second blocks
        assert sent == [0]

        first = await stream.__anext__()
        assert first.text == "0"
        await asyncio.sleep(0.05)
        assert sent == [0, 1]

        rest = await stream.collect()
        assert [e.text for e in rest] == ["1", "2"]

    async def test_aclose_cancels_blocked_producer(self):
        cancelled = asyncio.Event()

        async def producer(stream: EventStream) -> None:
            try:
                while True:
                    await stream.send(StreamEvent(text="x"))
            except asyncio.CancelledError:
                cancelled.set()
                raise

        stream = EventStream(maxsize=2).start(producer)
        await asyncio.sleep(0.01)
        await stream.aclose()
        assert cancelled.is_set()
        assert stream.done
        assert await stream.collect() == []

    async def test_context_manager_closes(self):
        async def producer(stream: EventStream) -> None:
            await asyncio.sleep(3600)

        async with EventStream().start(producer) as stream:
            pass
        assert stream.done

    async def test_crashing_producer_reports_error(self):
        async def producer(stream: EventStream) -> None:
            await stream.send(StreamEvent(text="a"))
            raise RuntimeError("boom")

        events = await EventStream().start(producer).collect()
        assert events[0].text == "a"
        assert isinstance(events[-1].error, RuntimeError)
        assert len(events) == 2
