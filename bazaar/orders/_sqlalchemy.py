"""
SQLAlchemy integration: order repository with storage-enforced idempotency.

Usage:
    session_factory, engine = await create_database("sqlite+aiosqlite:///./bazaar.db")
    repo = SQLAlchemyOrderRepository(session_factory, dialect=engine.dialect.name)

    match await repo.insert_if_absent(order):
        case Ok(Inserted(order)): ...            # we won
        case Ok(Conflict(order_id, status)): ... # someone else did
        case Error(e): ...

Note: the unique index on orders.idempotency_key is the guarantee. The
insert uses the dialect's INSERT ... ON CONFLICT (idempotency_key) DO NOTHING,
so racing writers never raise; the loser reads the winner's row back.
"""

from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any, cast

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    select,
    update,
)
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from kungfu import Result, Ok, Error

from bazaar._types import OrderId, UserId
from bazaar.address import Address
from bazaar.orders._store import (
    DEFAULT_LIST_LIMIT,
    Conflict,
    InsertOutcome,
    Inserted,
    RepositoryError,
)
from bazaar.orders._types import Order, OrderItem, OrderStatus


# ═══════════════════════════════════════════════════════════════════════════════
# Base & Idempotency Mixin
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


class IdempotencyKeyMixin:
    """
    Mixin for tables whose rows are created at most once per key.

    Adds:
    - idempotency_key: unique key for deduplication (purchase fingerprint)
    """

    idempotency_key: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        unique=True,
        index=True,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Tables
# ═══════════════════════════════════════════════════════════════════════════════


class OrderTable(Base, IdempotencyKeyMixin):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    # Checkout choices
    shipping_method: Mapped[str] = mapped_column(String(32), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(32), nullable=False)

    # Money (minor units)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    subtotal_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    shipping_cost_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    payment_fee_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    total_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Delivery address snapshot
    recipient_name: Mapped[str] = mapped_column(String(255), nullable=False)
    full_address: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Shipment
    tracking_number: Mapped[str | None] = mapped_column(String(128), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class OrderItemTable(Base):
    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("orders.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    listing_id: Mapped[str] = mapped_column(String(64), nullable=False)
    seller_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_price_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Database Setup
# ═══════════════════════════════════════════════════════════════════════════════


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
    *,
    echo: bool = False,
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create schema and return (session_factory, engine)."""
    engine = create_async_engine(url, echo=echo)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


# ═══════════════════════════════════════════════════════════════════════════════
# Row Mapping
# ═══════════════════════════════════════════════════════════════════════════════

_INSERTS: dict[str, Callable[..., Any]] = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


def _aware(value: datetime | None) -> datetime | None:
    # SQLite hands datetimes back without tzinfo; everything is stored as UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(UTC)
    return value


def _header_values(order: Order) -> dict[str, Any]:
    return {
        "id": order.id,
        "idempotency_key": order.idempotency_key,
        "user_id": order.user_id,
        "status": order.status.value,
        "shipping_method": order.shipping_method,
        "payment_method": order.payment_method,
        "currency": order.currency,
        "subtotal_minor": order.subtotal_minor,
        "shipping_cost_minor": order.shipping_cost_minor,
        "payment_fee_minor": order.payment_fee_minor,
        "total_minor": order.total_minor,
        "recipient_name": order.address.recipient_name,
        "full_address": order.address.full_address,
        "city": order.address.city,
        "phone": order.address.phone,
        "postal_code": order.address.postal_code,
        "tracking_number": order.tracking_number,
        "notes": order.notes,
        "created_at": _utc(order.created_at),
        "updated_at": _utc(order.updated_at),
    }


def _item_values(order: Order) -> list[dict[str, Any]]:
    return [
        {
            "order_id": order.id,
            "position": position,
            "listing_id": item.listing_id,
            "seller_id": item.seller_id,
            "title": item.title,
            "unit_price_minor": item.unit_price_minor,
            "quantity": item.quantity,
            "image_url": item.image_url,
        }
        for position, item in enumerate(order.items)
    ]


def _to_order(row: OrderTable, items: Sequence[OrderItemTable]) -> Order:
    return Order(
        id=row.id,
        user_id=row.user_id,
        items=tuple(
            OrderItem(
                listing_id=i.listing_id,
                seller_id=i.seller_id,
                title=i.title,
                unit_price_minor=i.unit_price_minor,
                quantity=i.quantity,
                image_url=i.image_url,
            )
            for i in sorted(items, key=lambda i: i.position)
        ),
        address=Address(
            recipient_name=row.recipient_name,
            full_address=row.full_address,
            city=row.city,
            phone=row.phone,
            postal_code=row.postal_code,
        ),
        shipping_method=row.shipping_method,
        payment_method=row.payment_method,
        subtotal_minor=row.subtotal_minor,
        shipping_cost_minor=row.shipping_cost_minor,
        payment_fee_minor=row.payment_fee_minor,
        total_minor=row.total_minor,
        idempotency_key=row.idempotency_key,
        created_at=cast(datetime, _aware(row.created_at)),
        currency=row.currency,
        status=OrderStatus(row.status),
        updated_at=_aware(row.updated_at),
        tracking_number=row.tracking_number,
        notes=row.notes,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Repository
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyOrderRepository:
    """
    Order repository on async SQLAlchemy.

    Example:
        session_factory, engine = await create_database(url)
        repo = SQLAlchemyOrderRepository.from_engine(engine)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        dialect: str = "sqlite",
    ) -> None:
        """
        Args:
            session_factory: SQLAlchemy async session factory
            dialect: "sqlite" or "postgresql"; selects the ON CONFLICT insert
        """
        if dialect not in _INSERTS:
            raise ValueError(f"Unsupported dialect for insert-if-absent: {dialect}")
        self._session_factory = session_factory
        self._insert = _INSERTS[dialect]

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> "SQLAlchemyOrderRepository":
        return cls(
            async_sessionmaker(engine, expire_on_commit=False),
            dialect=engine.dialect.name,
        )

    async def insert_if_absent(self, order: Order) -> Result[InsertOutcome, RepositoryError]:
        """Insert header and items in one transaction, unless the key is taken."""
        try:
            async with self._session_factory() as session, session.begin():
                stmt = (
                    self._insert(OrderTable)
                    .values(**_header_values(order))
                    .on_conflict_do_nothing(index_elements=["idempotency_key"])
                )
                cursor = cast(CursorResult[Any], await session.execute(stmt))

                if cursor.rowcount == 0:
                    existing = (
                        await session.execute(
                            select(OrderTable.id, OrderTable.status).where(
                                OrderTable.idempotency_key == order.idempotency_key
                            )
                        )
                    ).one_or_none()
                    if existing is None:
                        return Error(RepositoryError(
                            f"Insert skipped but no row for key: {order.idempotency_key}"
                        ))
                    return Ok(Conflict(existing.id, OrderStatus(existing.status)))

                await session.execute(OrderItemTable.__table__.insert(), _item_values(order))

            return Ok(Inserted(order))

        except Exception as e:
            return Error(RepositoryError(f"Failed to insert order: {e}", e))

    async def find_by_key(self, idempotency_key: str) -> Result[Order | None, RepositoryError]:
        try:
            async with self._session_factory() as session:
                row = (
                    await session.execute(
                        select(OrderTable).where(OrderTable.idempotency_key == idempotency_key)
                    )
                ).scalar_one_or_none()
                if row is None:
                    return Ok(None)
                return Ok((await self._hydrate(session, [row]))[0])

        except Exception as e:
            return Error(RepositoryError(f"Failed to find by key: {e}", e))

    async def get(self, order_id: OrderId) -> Result[Order | None, RepositoryError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(OrderTable, order_id)
                if row is None:
                    return Ok(None)
                return Ok((await self._hydrate(session, [row]))[0])

        except Exception as e:
            return Error(RepositoryError(f"Failed to get order: {e}", e))

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
        values: dict[str, Any] = {"status": to.value, "updated_at": _utc(at)}
        if tracking_number is not None:
            values["tracking_number"] = tracking_number
        if notes is not None:
            values["notes"] = notes
        try:
            async with self._session_factory() as session, session.begin():
                stmt = (
                    update(OrderTable)
                    .where(OrderTable.id == order_id, OrderTable.status == from_.value)
                    .values(**values)
                )
                cursor = cast(CursorResult[Any], await session.execute(stmt))
                return Ok(cursor.rowcount > 0)

        except Exception as e:
            return Error(RepositoryError(f"Failed to transition order: {e}", e))

    async def list_for_buyer(
        self,
        user_id: UserId,
        include_cancelled: bool = False,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Result[list[Order], RepositoryError]:
        stmt = select(OrderTable).where(OrderTable.user_id == user_id)
        return await self._list(stmt, include_cancelled, limit)

    async def list_for_seller(
        self,
        seller_id: UserId,
        include_cancelled: bool = False,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Result[list[Order], RepositoryError]:
        sold = select(OrderItemTable.order_id).where(OrderItemTable.seller_id == seller_id)
        stmt = select(OrderTable).where(OrderTable.id.in_(sold))
        return await self._list(stmt, include_cancelled, limit)

    async def _list(
        self,
        stmt: Any,
        include_cancelled: bool,
        limit: int,
    ) -> Result[list[Order], RepositoryError]:
        if not include_cancelled:
            stmt = stmt.where(OrderTable.status != OrderStatus.CANCELLED.value)
        stmt = stmt.order_by(OrderTable.created_at.desc(), OrderTable.id.desc()).limit(limit)
        try:
            async with self._session_factory() as session:
                rows = list((await session.execute(stmt)).scalars())
                return Ok(await self._hydrate(session, rows))

        except Exception as e:
            return Error(RepositoryError(f"Failed to list orders: {e}", e))

    async def _hydrate(self, session: AsyncSession, rows: list[OrderTable]) -> list[Order]:
        """Attach items to order rows with one query."""
        if not rows:
            return []
        items = (
            await session.execute(
                select(OrderItemTable).where(
                    OrderItemTable.order_id.in_([r.id for r in rows])
                )
            )
        ).scalars()

        by_order: dict[str, list[OrderItemTable]] = {r.id: [] for r in rows}
        for item in items:
            by_order[item.order_id].append(item)

        return [_to_order(r, by_order[r.id]) for r in rows]


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Base",
    "IdempotencyKeyMixin",
    "OrderTable",
    "OrderItemTable",
    "create_database",
    "SQLAlchemyOrderRepository",
)
