"""
Duplicate guard: fingerprint plus storage-enforced uniqueness.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog
from kungfu import Result, Ok, Error

from bazaar._types import ListingId, UserId
from bazaar.guard._fingerprint import fingerprint
from bazaar.guard._policy import DEFAULT_POLICY, GuardPolicy
from bazaar.guard._types import Admission, Admitted, Existing
from bazaar.orders._store import Conflict, Inserted, OrderRepository, RepositoryError
from bazaar.orders._types import Order

logger = structlog.get_logger(__name__)


class DuplicateGuard:
    """
    At most one order per purchase intent.

    Example:
        guard = DuplicateGuard(repo, GuardPolicy().with_window(seconds=120))
        key = guard.key_for(user_id, [("lst_1", 1)], "standard", "credit_card")

        match await guard.admit(order):
            case Ok(Admitted(order)): ...
            case Ok(Existing(order_id, status)): ...
            case Error(e): ...

    Note: Holds no state of its own. lookup() is a shortcut for the common
    retry case; admit() is what decides, through the repository's unique key.
    """

    def __init__(self, repository: OrderRepository, policy: GuardPolicy = DEFAULT_POLICY) -> None:
        self._repository = repository
        self._policy = policy

    @property
    def policy(self) -> GuardPolicy:
        return self._policy

    def key_for(
        self,
        user_id: UserId,
        items: Iterable[tuple[ListingId, int]],
        shipping_method: str,
        payment_method: str,
    ) -> str:
        bucket = self._policy.bucket(self._policy.now())
        return fingerprint(user_id, items, shipping_method, payment_method, bucket)

    async def lookup(self, key: str) -> Result[Order | None, RepositoryError]:
        return await self._repository.find_by_key(key)

    async def admit(self, order: Order) -> Result[Admission, RepositoryError]:
        match await self._repository.insert_if_absent(order):
            case Ok(Inserted(written)):
                return Ok(Admitted(written))
            case Ok(Conflict(order_id, status)):
                logger.debug("idempotency key taken", key=order.idempotency_key, order_id=order_id)
                return Ok(Existing(order_id, status))
            case Error(e):
                return Error(e)
        raise AssertionError("unreachable")


__all__ = ("DuplicateGuard",)
