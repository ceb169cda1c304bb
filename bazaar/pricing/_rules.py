"""
Pricing rules: fee and threshold configuration per market.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum

from bazaar._types import DEFAULT_CURRENCY, MinorUnits, is_minor_amount


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout Choices
# ═══════════════════════════════════════════════════════════════════════════════


class ShippingMethod(StrEnum):
    """Known shipping methods. Anything else is priced as STANDARD."""

    STANDARD = "standard"
    EXPRESS = "express"


class PaymentMethod(StrEnum):
    """Known payment methods. Anything unknown carries no fee."""

    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    CASH_ON_DELIVERY = "cash_on_delivery"


# ═══════════════════════════════════════════════════════════════════════════════
# Defaults
# ═══════════════════════════════════════════════════════════════════════════════

FREE_SHIPPING_THRESHOLD: MinorUnits = 20000
STANDARD_COST: MinorUnits = 999
EXPRESS_COST: MinorUnits = 1999
COD_FEE: MinorUnits = 500


# ═══════════════════════════════════════════════════════════════════════════════
# Pricing Rules: One Market
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PricingRules:
    """
    Shipping and payment-fee rules for one currency/market.

    Fluent builder pattern; chain methods to configure.

    Example:
        rules = (
            PricingRules()
            .with_free_shipping(threshold=25000)
            .with_shipping(standard=1299, express=2499)
            .with_cod_fee(750)
        )

    Note: Immutable. Each method returns a new PricingRules.
    """

    currency: str = DEFAULT_CURRENCY
    free_shipping_threshold: MinorUnits = FREE_SHIPPING_THRESHOLD
    standard_cost: MinorUnits = STANDARD_COST
    express_cost: MinorUnits = EXPRESS_COST
    cod_fee: MinorUnits = COD_FEE

    def __post_init__(self) -> None:
        object.__setattr__(self, "currency", self.currency.upper())
        for name in ("free_shipping_threshold", "standard_cost", "express_cost", "cod_fee"):
            if not is_minor_amount(getattr(self, name)):
                raise ValueError(f"{name} must be a non-negative integer amount, got {getattr(self, name)!r}")

    def with_currency(self, currency: str) -> PricingRules:
        return replace(self, currency=currency)

    def with_free_shipping(self, *, threshold: MinorUnits) -> PricingRules:
        """Subtotals at or above `threshold` ship for free."""
        return replace(self, free_shipping_threshold=threshold)

    def with_shipping(
        self,
        *,
        standard: MinorUnits | None = None,
        express: MinorUnits | None = None,
    ) -> PricingRules:
        return replace(
            self,
            standard_cost=self.standard_cost if standard is None else standard,
            express_cost=self.express_cost if express is None else express,
        )

    def with_cod_fee(self, fee: MinorUnits) -> PricingRules:
        return replace(self, cod_fee=fee)

    def shipping_cost(self, subtotal_minor: MinorUnits, shipping_method: str) -> MinorUnits:
        if subtotal_minor >= self.free_shipping_threshold:
            return 0
        if shipping_method == ShippingMethod.EXPRESS:
            return self.express_cost
        return self.standard_cost

    def payment_fee(self, payment_method: str) -> MinorUnits:
        if payment_method == PaymentMethod.CASH_ON_DELIVERY:
            return self.cod_fee
        return 0


DEFAULT_RULES = PricingRules()


# ═══════════════════════════════════════════════════════════════════════════════
# Rule Book: Rules By Currency
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class RuleBook:
    """
    Pricing rules keyed by currency, with a default market.

    Example:
        book = RuleBook().with_market(PricingRules(currency="EUR", cod_fee=300))
        book.rules_for("EUR").cod_fee  # 300
        book.rules_for("GBP")          # default rules
    """

    default: PricingRules = DEFAULT_RULES
    markets: Mapping[str, PricingRules] = field(default_factory=dict)

    def with_market(self, rules: PricingRules) -> RuleBook:
        return RuleBook(
            default=self.default,
            markets={**self.markets, rules.currency: rules},
        )

    def rules_for(self, currency: str) -> PricingRules:
        key = currency.upper()
        if key == self.default.currency:
            return self.default
        return self.markets.get(key, self.default)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "ShippingMethod",
    "PaymentMethod",
    "FREE_SHIPPING_THRESHOLD",
    "STANDARD_COST",
    "EXPRESS_COST",
    "COD_FEE",
    "PricingRules",
    "DEFAULT_RULES",
    "RuleBook",
)
