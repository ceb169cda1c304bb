"""
Wire codecs: pydantic request/response bodies mapped to and from domain values.

Requests implement to_domain(); responses implement from_domain().
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from bazaar.address import Address
from bazaar.orders import (
    Actor,
    IntentItem,
    Order,
    OrderError,
    OrderItem,
    OrderPlacement,
    PurchaseIntent,
    StatusChange,
)
from bazaar.pricing import PaymentMethod, ShippingMethod


# ═══════════════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════════════


class AddressBody(BaseModel):
    recipient_name: str | None = None
    full_address: str | None = None
    city: str | None = None
    phone: str | None = None
    postal_code: str | None = None

    def to_domain(self) -> Address:
        return Address.from_mapping(self.model_dump())


class IntentItemBody(BaseModel):
    listing_id: str
    quantity: int = 1


class CreateOrderRequest(BaseModel):
    """Only ids and quantities are accepted; prices always come from the catalog."""

    items: list[IntentItemBody] = Field(default_factory=list)
    address: AddressBody = Field(default_factory=AddressBody)
    shipping_method: str = ShippingMethod.STANDARD.value
    payment_method: str = PaymentMethod.CREDIT_CARD.value

    def to_domain(self) -> PurchaseIntent:
        return PurchaseIntent(
            items=tuple(IntentItem(i.listing_id, i.quantity) for i in self.items),
            address=self.address.to_domain(),
            shipping_method=self.shipping_method,
            payment_method=self.payment_method,
        )


class StatusRequest(BaseModel):
    status: str
    role: Literal["buyer", "seller"] = "seller"
    tracking_number: str | None = Field(default=None, max_length=128)
    notes: str | None = Field(default=None, max_length=2000)

    def to_domain(self, user_id: str) -> Actor:
        if self.role == "buyer":
            return Actor.buyer(user_id)
        return Actor.seller(user_id)


# ═══════════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════════


class PlacementResponse(BaseModel):
    ok: bool = True
    order_id: str
    status: str
    duplicate: bool

    @classmethod
    def from_domain(cls, placement: OrderPlacement) -> "PlacementResponse":
        return cls(
            order_id=placement.order_id,
            status=placement.status.value,
            duplicate=placement.duplicate,
        )


class OrderItemBody(BaseModel):
    listing_id: str
    seller_id: str
    title: str
    unit_price_minor: int
    quantity: int
    line_total_minor: int
    image_url: str | None = None

    @classmethod
    def from_domain(cls, item: OrderItem) -> "OrderItemBody":
        return cls(
            listing_id=item.listing_id,
            seller_id=item.seller_id,
            title=item.title,
            unit_price_minor=item.unit_price_minor,
            quantity=item.quantity,
            line_total_minor=item.line_total_minor,
            image_url=item.image_url,
        )


class OrderBody(BaseModel):
    id: str
    user_id: str
    status: str
    items: list[OrderItemBody]
    address: AddressBody
    shipping_method: str
    payment_method: str
    currency: str
    subtotal_minor: int
    shipping_cost_minor: int
    payment_fee_minor: int
    total_minor: int
    created_at: datetime
    updated_at: datetime | None = None
    tracking_number: str | None = None
    notes: str | None = None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderBody":
        return cls(
            id=order.id,
            user_id=order.user_id,
            status=order.status.value,
            items=[OrderItemBody.from_domain(i) for i in order.items],
            address=AddressBody(
                recipient_name=order.address.recipient_name,
                full_address=order.address.full_address,
                city=order.address.city,
                phone=order.address.phone,
                postal_code=order.address.postal_code,
            ),
            shipping_method=order.shipping_method,
            payment_method=order.payment_method,
            currency=order.currency,
            subtotal_minor=order.subtotal_minor,
            shipping_cost_minor=order.shipping_cost_minor,
            payment_fee_minor=order.payment_fee_minor,
            total_minor=order.total_minor,
            created_at=order.created_at,
            updated_at=order.updated_at,
            tracking_number=order.tracking_number,
            notes=order.notes,
        )


class OrderResponse(BaseModel):
    ok: bool = True
    order: OrderBody

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(order=OrderBody.from_domain(order))


class OrderListResponse(BaseModel):
    ok: bool = True
    orders: list[OrderBody]

    @classmethod
    def from_domain(cls, orders: list[Order]) -> "OrderListResponse":
        return cls(orders=[OrderBody.from_domain(o) for o in orders])


class StatusChangeResponse(BaseModel):
    ok: bool = True
    order_id: str
    previous: str
    status: str
    changed_at: datetime
    tracking_number: str | None = None

    @classmethod
    def from_domain(cls, change: StatusChange) -> "StatusChangeResponse":
        return cls(
            order_id=change.order_id,
            previous=change.previous.value,
            status=change.current.value,
            changed_at=change.changed_at,
            tracking_number=change.tracking_number,
        )


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    fields: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, error: OrderError) -> "ErrorResponse":
        return cls(error=error.code, fields=list(error.fields))


__all__ = (
    "AddressBody",
    "IntentItemBody",
    "CreateOrderRequest",
    "StatusRequest",
    "PlacementResponse",
    "OrderItemBody",
    "OrderBody",
    "OrderResponse",
    "OrderListResponse",
    "StatusChangeResponse",
    "ErrorResponse",
)
