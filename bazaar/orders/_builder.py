"""
Order service builder: fluent assembly of collaborators and policy.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace

from bazaar._types import OrderId
from bazaar.catalog import ListingLookup
from bazaar.events import EventSink
from bazaar.guard._policy import DEFAULT_POLICY, GuardPolicy
from bazaar.orders._service import OrderService, new_order_id
from bazaar.orders._store import MemoryOrderRepository, OrderRepository
from bazaar.pricing import PricingRules, RuleBook


@dataclass(frozen=True, slots=True)
class OrderServiceBuilder:
    """
    Fluent order service builder.

    Example:
        service = (
            order_service(catalog)
            .repository(SQLAlchemyOrderRepository.from_engine(engine))
            .events(QueueSink())
            .rules(RuleBook().with_market(PricingRules(currency="EUR")))
            .guard(GuardPolicy().with_window(seconds=120))
            .build()
        )

    Note: Immutable; each method returns a new builder.
    """

    _catalog: ListingLookup
    _repository: OrderRepository | None = None
    _events: EventSink | None = None
    _rules: RuleBook | None = None
    _policy: GuardPolicy = DEFAULT_POLICY
    _allow_self_purchase: bool = False
    _storage_retries: int = 1
    _id_factory: Callable[[], OrderId] = new_order_id

    def repository(self, repo: OrderRepository) -> OrderServiceBuilder:
        return replace(self, _repository=repo)

    def events(self, sink: EventSink) -> OrderServiceBuilder:
        return replace(self, _events=sink)

    def rules(self, rules: RuleBook | PricingRules) -> OrderServiceBuilder:
        """Accepts a whole rule book or a single market's rules as the default."""
        if isinstance(rules, PricingRules):
            rules = RuleBook(default=rules)
        return replace(self, _rules=rules)

    def guard(self, policy: GuardPolicy) -> OrderServiceBuilder:
        return replace(self, _policy=policy)

    def allow_self_purchase(self, allow: bool = True) -> OrderServiceBuilder:
        return replace(self, _allow_self_purchase=allow)

    def storage_retries(self, n: int) -> OrderServiceBuilder:
        return replace(self, _storage_retries=n)

    def ids(self, factory: Callable[[], OrderId]) -> OrderServiceBuilder:
        return replace(self, _id_factory=factory)

    def build(self) -> OrderService:
        # Memory repository is single-process; fine for tests, not for deployment.
        repo = self._repository if self._repository is not None else MemoryOrderRepository()
        return OrderService(
            self._catalog,
            repo,
            events=self._events,
            rules=self._rules,
            policy=self._policy,
            allow_self_purchase=self._allow_self_purchase,
            storage_retries=self._storage_retries,
            id_factory=self._id_factory,
        )


def order_service(catalog: ListingLookup) -> OrderServiceBuilder:
    """Start building an order service over a listing catalog."""
    return OrderServiceBuilder(_catalog=catalog)


__all__ = (
    "OrderServiceBuilder",
    "order_service",
)
