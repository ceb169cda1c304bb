"""
Pricing engine: deterministic totals from a subtotal and checkout choices.

No I/O, no randomness, no floats.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Protocol

from kungfu import Result, Ok, Error

from bazaar._types import MAX_AMOUNT_MINOR, MinorUnits, is_minor_amount
from bazaar.pricing._rules import DEFAULT_RULES, PricingRules


# ═══════════════════════════════════════════════════════════════════════════════
# Result Types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Totals:
    """Computed order amounts. `total_minor` is always the exact sum of the parts."""

    subtotal_minor: MinorUnits
    shipping_cost_minor: MinorUnits
    payment_fee_minor: MinorUnits
    total_minor: MinorUnits


class PricingErrorKind(Enum):
    NEGATIVE_AMOUNT = auto()
    OVERFLOW = auto()


@dataclass(frozen=True, slots=True)
class PricingError:
    kind: PricingErrorKind
    message: str


class PricedLine(Protocol):
    @property
    def unit_price_minor(self) -> MinorUnits: ...
    @property
    def quantity(self) -> int: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Engine
# ═══════════════════════════════════════════════════════════════════════════════


def subtotal_of(lines: Iterable[PricedLine]) -> Result[MinorUnits, PricingError]:
    """Sum of unit price × quantity, rejected rather than wrapped on overflow."""
    subtotal = 0
    for line in lines:
        if line.unit_price_minor < 0 or line.quantity < 0:
            return Error(PricingError(
                PricingErrorKind.NEGATIVE_AMOUNT,
                "line amounts must be non-negative",
            ))
        subtotal += line.unit_price_minor * line.quantity
        if subtotal > MAX_AMOUNT_MINOR:
            return Error(PricingError(
                PricingErrorKind.OVERFLOW,
                f"subtotal exceeds {MAX_AMOUNT_MINOR}",
            ))
    return Ok(subtotal)


def compute_totals(
    subtotal_minor: MinorUnits,
    shipping_method: str,
    payment_method: str,
    rules: PricingRules = DEFAULT_RULES,
) -> Result[Totals, PricingError]:
    """
    Apply shipping and payment-fee rules to a subtotal.

    Example:
        compute_totals(19999, "standard", "credit_card")
        # Ok(Totals(19999, 999, 0, 20998))
    """
    if isinstance(subtotal_minor, bool) or not isinstance(subtotal_minor, int):
        return Error(PricingError(
            PricingErrorKind.NEGATIVE_AMOUNT,
            f"subtotal must be an integer amount, got {subtotal_minor!r}",
        ))
    if subtotal_minor < 0:
        return Error(PricingError(
            PricingErrorKind.NEGATIVE_AMOUNT,
            f"subtotal must be non-negative, got {subtotal_minor}",
        ))

    shipping = rules.shipping_cost(subtotal_minor, shipping_method)
    fee = rules.payment_fee(payment_method)
    total = subtotal_minor + shipping + fee

    if not is_minor_amount(total):
        return Error(PricingError(
            PricingErrorKind.OVERFLOW,
            f"total exceeds {MAX_AMOUNT_MINOR}",
        ))

    return Ok(Totals(
        subtotal_minor=subtotal_minor,
        shipping_cost_minor=shipping,
        payment_fee_minor=fee,
        total_minor=total,
    ))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Totals",
    "PricingError",
    "PricingErrorKind",
    "PricedLine",
    "subtotal_of",
    "compute_totals",
)
