"""
Events: committed order facts for downstream consumers.

    from bazaar import events as V

    sink = V.MemorySink()
    service = order_service(catalog).repository(repo).events(sink).build()

    await service.create_order("u_1", intent)
    sink.of_type(V.OrderCreated)   # [OrderCreated(order_id=..., ...)]
"""

from bazaar.events._types import (
    OrderCreated,
    OrderStatusChanged,
    OrderEvent,
)
from bazaar.events._sink import (
    EventSink,
    NullSink,
    MemorySink,
    QueueSink,
)

__all__ = (
    # Types
    "OrderCreated",
    "OrderStatusChanged",
    "OrderEvent",
    # Sinks
    "EventSink",
    "NullSink",
    "MemorySink",
    "QueueSink",
)
