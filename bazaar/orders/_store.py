"""
Order repository: typed storage protocol.

All methods return Result for explicit error handling.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol

from kungfu import Result, Ok, Error

from bazaar._types import OrderId, UserId
from bazaar.orders._types import Order, OrderStatus


# ═══════════════════════════════════════════════════════════════════════════════
# Repository Error & Insert Outcome
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class RepositoryError:
    """Storage operation error."""

    message: str
    cause: Exception | None = None


@dataclass(frozen=True, slots=True)
class Inserted:
    """The order was written (header and items)."""

    order: Order


@dataclass(frozen=True, slots=True)
class Conflict:
    """An order with the same idempotency key already exists."""

    order_id: OrderId
    status: OrderStatus


type InsertOutcome = Inserted | Conflict

DEFAULT_LIST_LIMIT = 100


# ═══════════════════════════════════════════════════════════════════════════════
# Repository Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class OrderRepository(Protocol):
    """
    Transactional order storage.

    Note: insert_if_absent() is the only synchronisation point of the whole
    pipeline. It must be atomic: header and items in one transaction, and a
    unique constraint on idempotency_key deciding the winner.

    Example:
        match await repo.insert_if_absent(order):
            case Ok(Inserted(order)): ...
            case Ok(Conflict(order_id, status)): ...
            case Error(e): ...
    """

    async def insert_if_absent(self, order: Order) -> Result[InsertOutcome, RepositoryError]:
        """Insert order unless its idempotency key is taken."""
        ...

    async def find_by_key(self, idempotency_key: str) -> Result[Order | None, RepositoryError]:
        ...

    async def get(self, order_id: OrderId) -> Result[Order | None, RepositoryError]:
        ...

    async def transition_status(
        self,
        order_id: OrderId,
        from_: OrderStatus,
        to: OrderStatus,
        at: datetime,
        *,
        tracking_number: str | None = None,
        notes: str | None = None,
    ) -> Result[bool, RepositoryError]:
        """
        Compare-and-swap the status.

        Returns Ok(True) if applied, Ok(False) if the order was not in
        `from_` any more (or does not exist). Shipment details given as None
        leave the stored values untouched.
        """
        ...

    async def list_for_buyer(
        self,
        user_id: UserId,
        include_cancelled: bool = False,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Result[list[Order], RepositoryError]:
        """Buyer's orders, newest first."""
        ...

    async def list_for_seller(
        self,
        seller_id: UserId,
        include_cancelled: bool = False,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Result[list[Order], RepositoryError]:
        """Orders containing at least one of the seller's listings, newest first."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Repository (tests)
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryOrderRepository:
    """
    In-memory order repository.

    Note: Single-process only. The asyncio.Lock stands in for the unique
    constraint a real database provides; use SQLAlchemyOrderRepository when
    more than one instance serves checkout.
    """

    def __init__(self) -> None:
        self._orders: dict[OrderId, Order] = {}
        self._by_key: dict[str, OrderId] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._orders)

    async def insert_if_absent(self, order: Order) -> Result[InsertOutcome, RepositoryError]:
        async with self._lock:
            existing_id = self._by_key.get(order.idempotency_key)
            if existing_id is not None:
                existing = self._orders[existing_id]
                return Ok(Conflict(existing.id, existing.status))

            if order.id in self._orders:
                return Error(RepositoryError(f"Duplicate order id: {order.id}"))

            self._orders[order.id] = order
            self._by_key[order.idempotency_key] = order.id
            return Ok(Inserted(order))

    async def find_by_key(self, idempotency_key: str) -> Result[Order | None, RepositoryError]:
        async with self._lock:
            order_id = self._by_key.get(idempotency_key)
            return Ok(self._orders.get(order_id) if order_id is not None else None)

    async def get(self, order_id: OrderId) -> Result[Order | None, RepositoryError]:
        async with self._lock:
            return Ok(self._orders.get(order_id))

    async def transition_status(
        self,
        order_id: OrderId,
        from_: OrderStatus,
        to: OrderStatus,
        at: datetime,
        *,
        tracking_number: str | None = None,
        notes: str | None = None,
    ) -> Result[bool, RepositoryError]:
        async with self._lock:
            current = self._orders.get(order_id)
            if current is None or current.status != from_:
                return Ok(False)

            self._orders[order_id] = replace(
                current,
                status=to,
                updated_at=at,
                tracking_number=current.tracking_number if tracking_number is None else tracking_number,
                notes=current.notes if notes is None else notes,
            )
            return Ok(True)

    async def list_for_buyer(
        self,
        user_id: UserId,
        include_cancelled: bool = False,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Result[list[Order], RepositoryError]:
        async with self._lock:
            orders = [o for o in self._orders.values() if o.user_id == user_id]
            return Ok(_newest_first(orders, include_cancelled, limit))

    async def list_for_seller(
        self,
        seller_id: UserId,
        include_cancelled: bool = False,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Result[list[Order], RepositoryError]:
        async with self._lock:
            orders = [o for o in self._orders.values() if seller_id in o.seller_ids]
            return Ok(_newest_first(orders, include_cancelled, limit))


def _newest_first(orders: list[Order], include_cancelled: bool, limit: int) -> list[Order]:
    if not include_cancelled:
        orders = [o for o in orders if o.status != OrderStatus.CANCELLED]
    return sorted(orders, key=lambda o: o.created_at, reverse=True)[:limit]


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "RepositoryError",
    "Inserted",
    "Conflict",
    "InsertOutcome",
    "DEFAULT_LIST_LIMIT",
    "OrderRepository",
    "MemoryOrderRepository",
)
