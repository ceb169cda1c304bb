"""
Pricing: shipping, payment fees and totals in minor units.

    from bazaar import pricing as P

    rules = P.PricingRules().with_cod_fee(750)
    totals = P.compute_totals(19999, "standard", "cash_on_delivery", rules)
"""

from bazaar.pricing._rules import (
    ShippingMethod,
    PaymentMethod,
    FREE_SHIPPING_THRESHOLD,
    STANDARD_COST,
    EXPRESS_COST,
    COD_FEE,
    PricingRules,
    DEFAULT_RULES,
    RuleBook,
)
from bazaar.pricing._engine import (
    Totals,
    PricingError,
    PricingErrorKind,
    PricedLine,
    subtotal_of,
    compute_totals,
)

__all__ = (
    # Rules
    "ShippingMethod",
    "PaymentMethod",
    "FREE_SHIPPING_THRESHOLD",
    "STANDARD_COST",
    "EXPRESS_COST",
    "COD_FEE",
    "PricingRules",
    "DEFAULT_RULES",
    "RuleBook",
    # Engine
    "Totals",
    "PricingError",
    "PricingErrorKind",
    "PricedLine",
    "subtotal_of",
    "compute_totals",
)
