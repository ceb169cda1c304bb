"""
Order errors: one stable machine-readable code per failure kind.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class OrderErrorKind(Enum):
    """Kinds of order errors. The value is the wire code."""

    EMPTY_CART = "EMPTY_CART"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    LISTING_NOT_FOUND = "LISTING_NOT_FOUND"
    INVALID_PRICE = "INVALID_PRICE"
    SELF_BUY_FORBIDDEN = "SELF_BUY_FORBIDDEN"
    CURRENCY_MISMATCH = "CURRENCY_MISMATCH"
    AMOUNT_OVERFLOW = "AMOUNT_OVERFLOW"
    INVALID_ADDRESS = "INVALID_ADDRESS"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    INVALID_REQUEST = "INVALID_REQUEST"
    SERVER_ERROR = "SERVER_ERROR"


@dataclass(frozen=True, slots=True)
class OrderError:
    """
    Order pipeline error.

    Note: fields names the offending input fields (missing address fields,
    the listing id that failed) so the caller can fix everything in one
    round trip.
    """

    kind: OrderErrorKind
    message: str
    fields: tuple[str, ...] = ()

    @property
    def code(self) -> str:
        return self.kind.value


class OrderErrors:
    @staticmethod
    def empty_cart() -> OrderError:
        return OrderError(OrderErrorKind.EMPTY_CART, "no items to order")

    @staticmethod
    def invalid_quantity(listing_id: str) -> OrderError:
        return OrderError(
            OrderErrorKind.INVALID_QUANTITY,
            "quantity must be a positive integer",
            (listing_id,),
        )

    @staticmethod
    def listing_not_found(listing_id: str) -> OrderError:
        return OrderError(
            OrderErrorKind.LISTING_NOT_FOUND,
            "listing not found or inactive",
            (listing_id,),
        )

    @staticmethod
    def invalid_price(listing_id: str) -> OrderError:
        return OrderError(OrderErrorKind.INVALID_PRICE, "listing has no valid price", (listing_id,))

    @staticmethod
    def self_buy_forbidden(listing_id: str) -> OrderError:
        return OrderError(
            OrderErrorKind.SELF_BUY_FORBIDDEN,
            "cannot buy your own listing",
            (listing_id,),
        )

    @staticmethod
    def currency_mismatch(currencies: Iterable[str]) -> OrderError:
        return OrderError(
            OrderErrorKind.CURRENCY_MISMATCH,
            "items are priced in different currencies",
            tuple(sorted(set(currencies))),
        )

    @staticmethod
    def amount_overflow(msg: str) -> OrderError:
        return OrderError(OrderErrorKind.AMOUNT_OVERFLOW, msg)

    @staticmethod
    def invalid_address(missing_fields: tuple[str, ...]) -> OrderError:
        return OrderError(
            OrderErrorKind.INVALID_ADDRESS,
            f"missing address fields: {', '.join(missing_fields)}",
            missing_fields,
        )

    @staticmethod
    def unauthorized() -> OrderError:
        return OrderError(OrderErrorKind.UNAUTHORIZED, "no verified user")

    @staticmethod
    def forbidden() -> OrderError:
        return OrderError(OrderErrorKind.FORBIDDEN, "not allowed for this order")

    @staticmethod
    def order_not_found(order_id: str) -> OrderError:
        return OrderError(OrderErrorKind.ORDER_NOT_FOUND, f"order {order_id} not found")

    @staticmethod
    def invalid_transition(current: str, target: str) -> OrderError:
        return OrderError(
            OrderErrorKind.INVALID_TRANSITION,
            f"cannot transition from {current} to {target}",
        )

    @staticmethod
    def invalid_request(fields: Iterable[str], msg: str = "request body is malformed") -> OrderError:
        return OrderError(OrderErrorKind.INVALID_REQUEST, msg, tuple(fields))

    @staticmethod
    def server_error(msg: str) -> OrderError:
        return OrderError(OrderErrorKind.SERVER_ERROR, msg)


__all__ = (
    "OrderErrorKind",
    "OrderError",
    "OrderErrors",
)
