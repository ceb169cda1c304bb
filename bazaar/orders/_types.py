"""
Order types: orders, items, intents, status machine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from bazaar._types import DEFAULT_CURRENCY, ListingId, MinorUnits, OrderId, UserId
from bazaar.address import Address
from bazaar.pricing import PaymentMethod, ShippingMethod


# ═══════════════════════════════════════════════════════════════════════════════
# Status Machine
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(StrEnum):
    """
    Order lifecycle.

        pending → confirmed → shipped → delivered
           │          │          │
           └──────────┴──────────┴──→ cancelled

    delivered and cancelled are terminal.
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self]

    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class ActorRole(StrEnum):
    BUYER = "buyer"
    SELLER = "seller"
    SYSTEM = "system"


@dataclass(frozen=True, slots=True)
class Actor:
    """Who is asking for a status change."""

    user_id: UserId | None
    role: ActorRole

    @classmethod
    def buyer(cls, user_id: UserId) -> Actor:
        return cls(user_id, ActorRole.BUYER)

    @classmethod
    def seller(cls, user_id: UserId) -> Actor:
        return cls(user_id, ActorRole.SELLER)

    @classmethod
    def system(cls) -> Actor:
        return cls(None, ActorRole.SYSTEM)


# ═══════════════════════════════════════════════════════════════════════════════
# Cart & Purchase Intent
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartItem:
    """
    Cart line as the buyer last saw it.

    Note: unit_price_minor is for display only. Checkout re-reads the price
    from the catalog.
    """

    listing_id: ListingId
    title: str
    unit_price_minor: MinorUnits
    quantity: int = 1
    image_url: str | None = None

    @property
    def line_total_minor(self) -> MinorUnits:
        return self.unit_price_minor * self.quantity


@dataclass(frozen=True, slots=True)
class Cart:
    user_id: UserId
    items: tuple[CartItem, ...] = ()

    @property
    def subtotal_minor(self) -> MinorUnits:
        return sum(item.line_total_minor for item in self.items)


@dataclass(frozen=True, slots=True)
class IntentItem:
    listing_id: ListingId
    quantity: int = 1


@dataclass(frozen=True, slots=True)
class PurchaseIntent:
    """
    What the buyer asked for, before any authoritative validation.

    Only listing ids and quantities are taken from the caller; everything
    money-bearing is resolved later.
    """

    items: tuple[IntentItem, ...]
    address: Address
    shipping_method: str = ShippingMethod.STANDARD
    payment_method: str = PaymentMethod.CREDIT_CARD

    @classmethod
    def buy_now(
        cls,
        listing_id: ListingId,
        address: Address,
        *,
        quantity: int = 1,
        shipping_method: str = ShippingMethod.STANDARD,
        payment_method: str = PaymentMethod.CREDIT_CARD,
    ) -> PurchaseIntent:
        return cls(
            items=(IntentItem(listing_id, quantity),),
            address=address,
            shipping_method=shipping_method,
            payment_method=payment_method,
        )

    @classmethod
    def from_cart(
        cls,
        cart: Cart,
        address: Address,
        *,
        shipping_method: str = ShippingMethod.STANDARD,
        payment_method: str = PaymentMethod.CREDIT_CARD,
    ) -> PurchaseIntent:
        return cls(
            items=tuple(IntentItem(i.listing_id, i.quantity) for i in cart.items),
            address=address,
            shipping_method=shipping_method,
            payment_method=payment_method,
        )

    def merged_items(self) -> tuple[IntentItem, ...]:
        """Repeated listing ids collapse into one line; first occurrence keeps its place."""
        quantities: dict[ListingId, int] = {}
        for item in self.items:
            quantities[item.listing_id] = quantities.get(item.listing_id, 0) + item.quantity
        return tuple(IntentItem(lid, qty) for lid, qty in quantities.items())


# ═══════════════════════════════════════════════════════════════════════════════
# Order
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderItem:
    """Order line; title, price and image are snapshotted at creation."""

    listing_id: ListingId
    seller_id: UserId
    title: str
    unit_price_minor: MinorUnits
    quantity: int
    image_url: str | None = None

    @property
    def line_total_minor(self) -> MinorUnits:
        return self.unit_price_minor * self.quantity


@dataclass(frozen=True, slots=True)
class Order:
    id: OrderId
    user_id: UserId
    items: tuple[OrderItem, ...]
    address: Address
    shipping_method: str
    payment_method: str
    subtotal_minor: MinorUnits
    shipping_cost_minor: MinorUnits
    payment_fee_minor: MinorUnits
    total_minor: MinorUnits
    idempotency_key: str
    created_at: datetime
    currency: str = DEFAULT_CURRENCY
    status: OrderStatus = OrderStatus.PENDING
    updated_at: datetime | None = None
    tracking_number: str | None = None
    notes: str | None = None

    @property
    def seller_ids(self) -> tuple[UserId, ...]:
        return tuple(dict.fromkeys(item.seller_id for item in self.items))

    def is_visible_to(self, user_id: UserId | None) -> bool:
        return user_id is not None and (user_id == self.user_id or user_id in self.seller_ids)


# ═══════════════════════════════════════════════════════════════════════════════
# Results
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderPlacement:
    """
    Outcome of create_order().

    Note: duplicate=True is a success. The order already existed for this
    purchase intent and nothing new was written.
    """

    order_id: OrderId
    status: OrderStatus
    duplicate: bool = False


@dataclass(frozen=True, slots=True)
class StatusChange:
    order_id: OrderId
    previous: OrderStatus
    current: OrderStatus
    changed_at: datetime = field(compare=False)
    tracking_number: str | None = None


__all__ = (
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
)
