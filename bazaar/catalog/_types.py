"""
Catalog types: the authoritative listing view consumed by checkout.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from bazaar._types import DEFAULT_CURRENCY, ListingId, UserId


class ListingStatus(StrEnum):
    ACTIVE = "active"
    PAUSED = "paused"
    SOLD = "sold"
    REMOVED = "removed"


@dataclass(frozen=True, slots=True)
class Listing:
    """
    Current listing state as the catalog reports it.

    Note: price_minor is not trusted. The catalog is an external
    collaborator and may hand back malformed prices; checkout validates
    the price before snapshotting it.
    """

    id: ListingId
    owner_id: UserId
    price_minor: object
    title: str
    image_url: str | None = None
    status: str = ListingStatus.ACTIVE
    currency: str = DEFAULT_CURRENCY

    @property
    def is_active(self) -> bool:
        return self.status == ListingStatus.ACTIVE


@dataclass(frozen=True)
class CatalogError:
    """Listing lookup failed (transport, database, timeout)."""

    message: str
    cause: Exception | None = None


__all__ = (
    "ListingStatus",
    "Listing",
    "CatalogError",
)
