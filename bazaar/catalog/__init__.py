"""
Catalog: the listing collaborator seen from checkout.

    from bazaar import catalog as K

    catalog = K.MemoryCatalog([K.Listing("lst_1", "u_seller", 15000, "Lamp")])
    resolved = await K.resolve_listings(catalog, ["lst_1", "lst_2"])
"""

from bazaar.catalog._types import (
    ListingStatus,
    Listing,
    CatalogError,
)
from bazaar.catalog._lookup import (
    ListingLookup,
    MemoryCatalog,
    resolve_listings,
)

__all__ = (
    # Types
    "ListingStatus",
    "Listing",
    "CatalogError",
    # Lookup
    "ListingLookup",
    "MemoryCatalog",
    "resolve_listings",
)
