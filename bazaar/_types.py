"""
Core types for bazaar.

Re-exports from kungfu/combinators + identifier and money aliases.
"""

from __future__ import annotations

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# Re-export from combinators
from combinators import LCR

# ═══════════════════════════════════════════════════════════════════════════════
# Identifiers
# ═══════════════════════════════════════════════════════════════════════════════

type UserId = str
type ListingId = str
type OrderId = str

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

type MinorUnits = int
"""Amount in the smallest currency denomination (kuruş, cents). Never a float."""

MAX_AMOUNT_MINOR: MinorUnits = 2**63 - 1
"""Largest amount the storage layer can hold (signed 64-bit column)."""

DEFAULT_CURRENCY = "TRY"

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail."""


def is_minor_amount(value: object) -> bool:
    """True for a non-negative int (bools excluded) within the storable range."""
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and 0 <= value <= MAX_AMOUNT_MINOR
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Re-exports from combinators
    "LCR",
    # Identifiers
    "UserId",
    "ListingId",
    "OrderId",
    # Money
    "MinorUnits",
    "MAX_AMOUNT_MINOR",
    "DEFAULT_CURRENCY",
    "is_minor_amount",
    # Aliases
    "Lazy",
)
