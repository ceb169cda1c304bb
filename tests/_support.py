"""Shared test helpers."""

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from kungfu import Error, Ok, Result

from bazaar.address import Address
from bazaar.orders import Order, OrderItem, OrderStatus

BUYER = "u_buyer"
SELLER = "u_seller"
OTHER_SELLER = "u_seller2"
STRANGER = "u_stranger"

T0 = datetime(2026, 3, 1, 12, 0, 30, tzinfo=UTC)


class FakeClock:
    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def ok(result: Result[Any, Any]) -> Any:
    match result:
        case Ok(value):
            return value
        case Error(e):
            pytest.fail(f"expected Ok, got Error({e!r})")


def err(result: Result[Any, Any]) -> Any:
    match result:
        case Ok(value):
            pytest.fail(f"expected Error, got Ok({value!r})")
        case Error(e):
            return e


def address(**overrides: Any) -> Address:
    fields = {
        "recipient_name": "Ayşe Yılmaz",
        "full_address": "Moda Cad. 12/3, Kadıköy",
        "city": "İstanbul",
        "phone": "+90 555 000 00 00",
        "postal_code": "34710",
    }
    fields.update(overrides)
    return Address(**fields)


def make_order(
    order_id: str = "ord_1",
    key: str = "key_1",
    *,
    user_id: str = "u_buyer",
    seller_id: str = "u_seller",
    status: OrderStatus = OrderStatus.PENDING,
    created_at: datetime = T0,
) -> Order:
    item = OrderItem(
        listing_id="lst_lamp",
        seller_id=seller_id,
        title="Brass lamp",
        unit_price_minor=15000,
        quantity=1,
        image_url="https://img.example/lamp.jpg",
    )
    return Order(
        id=order_id,
        user_id=user_id,
        items=(item,),
        address=address(),
        shipping_method="standard",
        payment_method="credit_card",
        subtotal_minor=15000,
        shipping_cost_minor=999,
        payment_fee_minor=0,
        total_minor=15999,
        idempotency_key=key,
        created_at=created_at,
        status=status,
    )
