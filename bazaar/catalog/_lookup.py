"""
Listing lookup: collaborator protocol, in-memory catalog, parallel resolution.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from typing import Protocol

import combinators as C
from kungfu import Result, Ok, Error, LazyCoroResult

from bazaar._types import ListingId
from bazaar.catalog._types import CatalogError, Listing


# ═══════════════════════════════════════════════════════════════════════════════
# Lookup Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class ListingLookup(Protocol):
    """
    Authoritative listing source.

    Returns None when the listing does not exist. Raises on transport
    failure; resolve_listings() turns that into a CatalogError.
    """

    async def get_listing(self, listing_id: ListingId) -> Listing | None: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Catalog (tests, local runs)
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCatalog:
    """In-memory listing catalog."""

    def __init__(self, listings: Iterable[Listing] = ()) -> None:
        self._listings: dict[ListingId, Listing] = {l.id: l for l in listings}
        self._lock = asyncio.Lock()

    def put(self, listing: Listing) -> None:
        self._listings[listing.id] = listing

    def remove(self, listing_id: ListingId) -> None:
        self._listings.pop(listing_id, None)

    async def get_listing(self, listing_id: ListingId) -> Listing | None:
        async with self._lock:
            return self._listings.get(listing_id)


# ═══════════════════════════════════════════════════════════════════════════════
# Parallel Resolution
# ═══════════════════════════════════════════════════════════════════════════════

type Resolved = tuple[ListingId, Listing | None]


async def resolve_listings(
    lookup: ListingLookup,
    listing_ids: Sequence[ListingId],
) -> Result[dict[ListingId, Listing | None], CatalogError]:
    """
    Fetch every listing concurrently.

    Missing listings map to None; the first lookup failure fails the whole
    resolution.
    """

    def fetch(listing_id: ListingId) -> LazyCoroResult[Resolved, CatalogError]:
        async def impl() -> Resolved:
            return listing_id, await lookup.get_listing(listing_id)

        return C.catching_async(
            impl,
            on_error=lambda e: CatalogError(f"listing lookup failed for {listing_id}: {e}", e),
        )

    result = await C.traverse_par(list(listing_ids), fetch)()

    match result:
        case Ok(pairs):
            return Ok(dict(pairs))
        case Error(e):
            return Error(e)


__all__ = (
    "ListingLookup",
    "MemoryCatalog",
    "resolve_listings",
)
