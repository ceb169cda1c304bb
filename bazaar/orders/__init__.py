"""
Orders: checkout pipeline, lifecycle and storage.

    from bazaar import orders as O

    service = (
        O.order_service(catalog)
        .repository(O.SQLAlchemyOrderRepository.from_engine(engine))
        .build()
    )

    intent = O.PurchaseIntent.buy_now("lst_1", address, payment_method="cash_on_delivery")

    match await service.create_order(user_id, intent):
        case Ok(placement): ...     # placement.duplicate tells a replay apart
        case Error(e): ...          # e.code, e.fields

    match await service.transition(order_id, O.OrderStatus.SHIPPED, O.Actor.seller(seller_id)):
        case Ok(change): ...
        case Error(e): ...          # INVALID_TRANSITION, FORBIDDEN, ORDER_NOT_FOUND
"""

from bazaar.orders._types import (
    OrderStatus,
    ActorRole,
    Actor,
    CartItem,
    Cart,
    IntentItem,
    PurchaseIntent,
    OrderItem,
    Order,
    OrderPlacement,
    StatusChange,
)
from bazaar.orders._errors import (
    OrderErrorKind,
    OrderError,
    OrderErrors,
)
from bazaar.orders._store import (
    RepositoryError,
    Inserted,
    Conflict,
    InsertOutcome,
    DEFAULT_LIST_LIMIT,
    OrderRepository,
    MemoryOrderRepository,
)
from bazaar.orders._sqlalchemy import (
    Base,
    OrderTable,
    OrderItemTable,
    create_database,
    SQLAlchemyOrderRepository,
)
from bazaar.orders._service import (
    OrderService,
    new_order_id,
)
from bazaar.orders._builder import (
    OrderServiceBuilder,
    order_service,
)

__all__ = (
    # Types
    "OrderStatus",
    "ActorRole",
    "Actor",
    "CartItem",
    "Cart",
    "IntentItem",
    "PurchaseIntent",
    "OrderItem",
    "Order",
    "OrderPlacement",
    "StatusChange",
    # Errors
    "OrderErrorKind",
    "OrderError",
    "OrderErrors",
    # Storage
    "RepositoryError",
    "Inserted",
    "Conflict",
    "InsertOutcome",
    "DEFAULT_LIST_LIMIT",
    "OrderRepository",
    "MemoryOrderRepository",
    # SQLAlchemy
    "Base",
    "OrderTable",
    "OrderItemTable",
    "create_database",
    "SQLAlchemyOrderRepository",
    # Service
    "OrderService",
    "new_order_id",
    "OrderServiceBuilder",
    "order_service",
)
