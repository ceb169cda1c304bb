"""
Event sinks: where order events go after commit.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from bazaar.events._types import OrderEvent


class EventSink(Protocol):
    """
    Receives committed order events.

    Note: publish() must not block on the consumer. The service logs and
    drops anything a sink raises, so a broken consumer never fails checkout.
    """

    def publish(self, event: OrderEvent) -> None: ...


class NullSink:
    """Discards events."""

    def publish(self, event: OrderEvent) -> None:
        return None


class MemorySink:
    """Records events in order. For tests and local runs."""

    def __init__(self) -> None:
        self.events: list[OrderEvent] = []

    def publish(self, event: OrderEvent) -> None:
        self.events.append(event)

    def __len__(self) -> int:
        return len(self.events)

    def of_type[T](self, kind: type[T]) -> list[T]:
        return [e for e in self.events if isinstance(e, kind)]


class QueueSink:
    """
    Hands events to an asyncio.Queue consumer.

    Example:
        sink = QueueSink(maxsize=1000)
        service = order_service(catalog).events(sink).build()

        async def notifier():
            while True:
                event = await sink.queue.get()
                ...
                sink.queue.task_done()

    Note: put_nowait() raises asyncio.QueueFull on a bounded, full queue.
    The service treats that like any other sink failure.
    """

    def __init__(self, maxsize: int = 0) -> None:
        self.queue: asyncio.Queue[OrderEvent] = asyncio.Queue(maxsize=maxsize)

    def publish(self, event: OrderEvent) -> None:
        self.queue.put_nowait(event)


__all__ = (
    "EventSink",
    "NullSink",
    "MemorySink",
    "QueueSink",
)
