"""
Guard types: outcome of admitting an order.
"""

from __future__ import annotations

from dataclasses import dataclass

from bazaar._types import OrderId
from bazaar.orders._types import Order, OrderStatus


@dataclass(frozen=True, slots=True)
class Admitted:
    """This call wrote the order."""

    order: Order

    @property
    def order_id(self) -> OrderId:
        return self.order.id

    @property
    def status(self) -> OrderStatus:
        return self.order.status

    @property
    def duplicate(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Existing:
    """The unique constraint fired; another call already wrote this intent."""

    order_id: OrderId
    status: OrderStatus

    @property
    def duplicate(self) -> bool:
        return True


type Admission = Admitted | Existing


__all__ = (
    "Admitted",
    "Existing",
    "Admission",
)
