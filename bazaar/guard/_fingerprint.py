"""
Purchase fingerprint: deterministic idempotency key for one purchase intent.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable

from bazaar._types import ListingId, UserId


def fingerprint(
    user_id: UserId,
    items: Iterable[tuple[ListingId, int]],
    shipping_method: str,
    payment_method: str,
    bucket: int,
) -> str:
    """
    SHA-256 over a canonical JSON encoding of the intent.

    Item order does not matter; quantities do.
    """
    payload = {
        "user_id": user_id,
        "items": sorted([str(lid), int(qty)] for lid, qty in items),
        "shipping_method": str(shipping_method),
        "payment_method": str(payment_method),
        "bucket": bucket,
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


__all__ = ("fingerprint",)
