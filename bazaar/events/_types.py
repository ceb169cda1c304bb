"""
Order events: what billing and notifications consume.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from bazaar._types import MinorUnits, OrderId, UserId
from bazaar.orders._types import OrderStatus


@dataclass(frozen=True, slots=True)
class OrderCreated:
    """A new pending order was committed. Never emitted for duplicates."""

    order_id: OrderId
    user_id: UserId
    total_minor: MinorUnits
    currency: str
    seller_ids: tuple[UserId, ...] = ()
    occurred_at: datetime | None = field(default=None, compare=False)

    @property
    def name(self) -> str:
        return "order.created"


@dataclass(frozen=True, slots=True)
class OrderStatusChanged:
    """tracking_number and notes are only set when the order ships."""

    order_id: OrderId
    user_id: UserId
    previous: OrderStatus
    current: OrderStatus
    occurred_at: datetime | None = field(default=None, compare=False)
    tracking_number: str | None = None
    notes: str | None = None

    @property
    def name(self) -> str:
        return "order.status_changed"


type OrderEvent = OrderCreated | OrderStatusChanged


__all__ = (
    "OrderCreated",
    "OrderStatusChanged",
    "OrderEvent",
)
