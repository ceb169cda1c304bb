"""
Duplicate guard: at most one order per purchase intent.

    from bazaar import guard as G

    dedup = G.DuplicateGuard(repo, G.GuardPolicy().with_window(seconds=120))
    key = dedup.key_for("u_1", [("lst_1", 1)], "standard", "credit_card")

    match await dedup.admit(order):
        case Ok(G.Admitted(order)): ...          # new order
        case Ok(G.Existing(order_id, _)): ...    # duplicate, winner's id

Flow:

    intent ──► fingerprint(user, items, methods, bucket)
                     │
                     ▼
               lookup(key) ──► found ──► duplicate
                     │
                  missing
                     ▼
               admit(order) ── INSERT ... ON CONFLICT DO NOTHING
                     │
           ┌─────────┴─────────┐
           ▼                   ▼
        Admitted            Existing
"""

from bazaar.guard._policy import (
    DEFAULT_WINDOW,
    DEFAULT_POLICY,
    GuardPolicy,
    utc_now,
)
from bazaar.guard._fingerprint import fingerprint
from bazaar.guard._types import (
    Admitted,
    Existing,
    Admission,
)
from bazaar.guard._guard import DuplicateGuard

__all__ = (
    # Policy
    "DEFAULT_WINDOW",
    "DEFAULT_POLICY",
    "GuardPolicy",
    "utc_now",
    # Fingerprint
    "fingerprint",
    # Types
    "Admitted",
    "Existing",
    "Admission",
    # Guard
    "DuplicateGuard",
)
