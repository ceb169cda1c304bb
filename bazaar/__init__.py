"""
bazaar: order creation and checkout for a person-to-person marketplace.

    from bazaar import orders as O     # Service, lifecycle, storage
    from bazaar import pricing as P    # Shipping, fees, totals
    from bazaar import address as A    # Delivery address rules
    from bazaar import guard as G      # Duplicate-order protection
    from bazaar import catalog as K    # Listing lookup
    from bazaar import events as V     # Order events
"""

# orders before guard: guard builds on the order types and repository.
from bazaar import pricing
from bazaar import address
from bazaar import catalog
from bazaar import orders
from bazaar import guard
from bazaar import events
from bazaar._types import (
    Lazy,
    LCR,
    MinorUnits,
    UserId,
    ListingId,
    OrderId,
)

__version__ = "0.1.0"

__all__ = (
    "pricing",
    "address",
    "catalog",
    "orders",
    "guard",
    "events",
    "Lazy",
    "LCR",
    "MinorUnits",
    "UserId",
    "ListingId",
    "OrderId",
)
