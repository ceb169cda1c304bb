"""
Order service: purchase intent in, durable unique order out.

    intent
      │
      ▼
    identity, items, quantities ──────────────► UNAUTHORIZED / EMPTY_CART / INVALID_QUANTITY
      │
      ▼
    resolve_listings (parallel) ──────────────► SERVER_ERROR
      │
      ▼
    snapshot lines (intent order) ────────────► LISTING_NOT_FOUND / INVALID_PRICE /
      │                                          SELF_BUY_FORBIDDEN / CURRENCY_MISMATCH
      ▼
    validate_address ─────────────────────────► INVALID_ADDRESS
      │
      ▼
    guard.lookup(fingerprint) ── found ───────► Ok(duplicate=True)
      │
      ▼
    subtotal_of + compute_totals ─────────────► AMOUNT_OVERFLOW
      │
      ▼
    guard.admit(order) ── Existing ───────────► Ok(duplicate=True)
      │        └── storage error: retry same order, then SERVER_ERROR
      ▼
    publish OrderCreated, Ok(duplicate=False)

Nothing is written before every check has passed.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING

import structlog
from kungfu import Result, Ok, Error

from bazaar._types import ListingId, OrderId, UserId, is_minor_amount
from bazaar.address import validate_address
from bazaar.catalog import Listing, ListingLookup, resolve_listings
from bazaar.events import EventSink, NullSink, OrderCreated, OrderEvent, OrderStatusChanged
from bazaar.guard._guard import DuplicateGuard
from bazaar.guard._policy import DEFAULT_POLICY, GuardPolicy
from bazaar.guard._types import Admitted, Existing
from bazaar.orders._errors import OrderError, OrderErrors
from bazaar.orders._store import DEFAULT_LIST_LIMIT, OrderRepository, RepositoryError
from bazaar.orders._types import (
    Actor,
    ActorRole,
    IntentItem,
    Order,
    OrderItem,
    OrderPlacement,
    OrderStatus,
    PurchaseIntent,
    StatusChange,
)
from bazaar.pricing import RuleBook, compute_totals, subtotal_of

if TYPE_CHECKING:
    from bazaar.settings import Settings

logger = structlog.get_logger(__name__)


def new_order_id() -> OrderId:
    return f"ord_{uuid.uuid4().hex}"


_SELLER_TARGETS = frozenset({
    OrderStatus.CONFIRMED,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
})
_BUYER_TARGETS = frozenset({OrderStatus.CANCELLED})
_BUYER_CANCELLABLE = frozenset({OrderStatus.PENDING})


def _is_quantity(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def _is_price(value: object) -> bool:
    return is_minor_amount(value) and value > 0  # type: ignore[operator]


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


# ═══════════════════════════════════════════════════════════════════════════════
# Service
# ═══════════════════════════════════════════════════════════════════════════════


class OrderService:
    """
    Checkout orchestration and order lifecycle.

    Example:
        service = (
            order_service(catalog)
            .repository(SQLAlchemyOrderRepository.from_engine(engine))
            .events(QueueSink())
            .build()
        )

        match await service.create_order(user_id, PurchaseIntent.buy_now("lst_1", address)):
            case Ok(placement): placement.order_id, placement.duplicate
            case Error(e): e.code

    Note: The service keeps no per-request state. Everything shared lives
    behind the repository, so any number of instances can serve checkout.
    """

    def __init__(
        self,
        catalog: ListingLookup,
        repository: OrderRepository,
        *,
        events: EventSink | None = None,
        rules: RuleBook | None = None,
        policy: GuardPolicy = DEFAULT_POLICY,
        allow_self_purchase: bool = False,
        storage_retries: int = 1,
        id_factory: Callable[[], OrderId] = new_order_id,
    ) -> None:
        if storage_retries < 0:
            raise ValueError("storage_retries must be >= 0")
        self._catalog = catalog
        self._repository = repository
        self._events: EventSink = events if events is not None else NullSink()
        self._rules = rules if rules is not None else RuleBook()
        self._guard = DuplicateGuard(repository, policy)
        self._allow_self_purchase = allow_self_purchase
        self._storage_retries = storage_retries
        self._new_id = id_factory

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        catalog: ListingLookup,
        repository: OrderRepository,
        events: EventSink | None = None,
    ) -> OrderService:
        return cls(
            catalog,
            repository,
            events=events,
            rules=settings.rule_book(),
            policy=settings.guard_policy(),
            allow_self_purchase=settings.allow_self_purchase,
            storage_retries=settings.storage_retries,
        )

    @property
    def guard(self) -> DuplicateGuard:
        return self._guard

    # ───────────────────────────────────────────────────────────────────────────
    # Create
    # ───────────────────────────────────────────────────────────────────────────

    async def create_order(
        self,
        user_id: UserId | None,
        intent: PurchaseIntent,
    ) -> Result[OrderPlacement, OrderError]:
        """Turn a purchase intent into a pending order, at most once per intent."""
        if not user_id:
            return Error(OrderErrors.unauthorized())
        if not intent.items:
            return Error(OrderErrors.empty_cart())
        for raw in intent.items:
            if not _is_quantity(raw.quantity):
                return Error(OrderErrors.invalid_quantity(raw.listing_id))

        items = intent.merged_items()
        log = logger.bind(user_id=user_id, item_count=len(items))

        match await resolve_listings(self._catalog, [i.listing_id for i in items]):
            case Ok(resolved):
                listings = resolved
            case Error(e):
                log.error("listing lookup failed", error=e.message)
                return Error(OrderErrors.server_error("listing lookup failed"))

        match self._snapshot(user_id, items, listings):
            case Ok(lines):
                order_items = lines
            case Error(e):
                log.debug("order rejected", code=e.code, fields=e.fields)
                return Error(e)

        match validate_address(intent.address):
            case Ok(valid):
                address = valid
            case Error(invalid):
                log.debug("order rejected", code="INVALID_ADDRESS", fields=invalid.missing_fields)
                return Error(OrderErrors.invalid_address(invalid.missing_fields))

        key = self._guard.key_for(
            user_id,
            [(i.listing_id, i.quantity) for i in items],
            intent.shipping_method,
            intent.payment_method,
        )

        match await self._guard.lookup(key):
            case Ok(None):
                pass
            case Ok(existing):
                log.info("order deduplicated", order_id=existing.id, via="lookup")
                return Ok(OrderPlacement(existing.id, existing.status, duplicate=True))
            case Error(e):
                # admit() still decides; the lookup only saves work.
                log.warning("duplicate lookup failed", error=e.message)

        currency = _currency_of(items, listings)
        rules = self._rules.rules_for(currency)

        match subtotal_of(order_items):
            case Ok(subtotal):
                pass
            case Error(e):
                return Error(OrderErrors.amount_overflow(e.message))

        match compute_totals(subtotal, intent.shipping_method, intent.payment_method, rules):
            case Ok(totals):
                pass
            case Error(e):
                return Error(OrderErrors.amount_overflow(e.message))

        now = self._guard.policy.now()
        order = Order(
            id=self._new_id(),
            user_id=user_id,
            items=order_items,
            address=address,
            shipping_method=str(intent.shipping_method),
            payment_method=str(intent.payment_method),
            subtotal_minor=totals.subtotal_minor,
            shipping_cost_minor=totals.shipping_cost_minor,
            payment_fee_minor=totals.payment_fee_minor,
            total_minor=totals.total_minor,
            idempotency_key=key,
            created_at=now,
            currency=currency,
            status=OrderStatus.PENDING,
        )

        return await self._admit(order)

    async def _admit(self, order: Order) -> Result[OrderPlacement, OrderError]:
        log = logger.bind(order_id=order.id, user_id=order.user_id)
        attempts = 1 + self._storage_retries

        for attempt in range(1, attempts + 1):
            match await self._guard.admit(order):
                case Ok(Admitted(written)):
                    log.info("order created", total_minor=written.total_minor, currency=written.currency)
                    self._publish_created(written)
                    return Ok(OrderPlacement(written.id, written.status))

                case Ok(Existing(order_id, status)) if order_id == order.id:
                    # An earlier attempt committed but reported failure.
                    log.info("order created", total_minor=order.total_minor, attempt=attempt)
                    self._publish_created(order)
                    return Ok(OrderPlacement(order_id, status))

                case Ok(Existing(order_id, status)):
                    log.info("order deduplicated", winner=order_id, via="constraint")
                    return Ok(OrderPlacement(order_id, status, duplicate=True))

                case Error(e):
                    if attempt < attempts:
                        log.warning("order insert failed, retrying", attempt=attempt, error=e.message)
                    else:
                        log.error("order insert failed", attempt=attempt, error=e.message)

        return Error(OrderErrors.server_error("could not store order"))

    def _snapshot(
        self,
        user_id: UserId,
        items: Sequence[IntentItem],
        listings: Mapping[ListingId, Listing | None],
    ) -> Result[tuple[OrderItem, ...], OrderError]:
        """Authoritative order lines, checked in intent order."""
        lines: list[OrderItem] = []
        for item in items:
            listing = listings.get(item.listing_id)
            if listing is None or not listing.is_active:
                return Error(OrderErrors.listing_not_found(item.listing_id))
            if not _is_price(listing.price_minor):
                return Error(OrderErrors.invalid_price(item.listing_id))
            if listing.owner_id == user_id and not self._allow_self_purchase:
                return Error(OrderErrors.self_buy_forbidden(item.listing_id))

            lines.append(OrderItem(
                listing_id=listing.id,
                seller_id=listing.owner_id,
                title=listing.title,
                unit_price_minor=listing.price_minor,  # type: ignore[arg-type]
                quantity=item.quantity,
                image_url=listing.image_url,
            ))

        currencies = {listings[i.listing_id].currency for i in items}  # type: ignore[union-attr]
        if len(currencies) > 1:
            return Error(OrderErrors.currency_mismatch(currencies))

        return Ok(tuple(lines))

    # ───────────────────────────────────────────────────────────────────────────
    # Status Transitions
    # ───────────────────────────────────────────────────────────────────────────

    async def transition(
        self,
        order_id: OrderId,
        target_status: OrderStatus | str,
        actor: Actor,
        *,
        tracking_number: str | None = None,
        notes: str | None = None,
    ) -> Result[StatusChange, OrderError]:
        """
        Move an order along the lifecycle.

        Buyers may only cancel, and only while the order is pending. Sellers
        of an item may confirm, ship, deliver or cancel, and may attach a
        tracking number and notes when shipping. The system may take any
        edge the lifecycle allows.
        """
        try:
            target = OrderStatus(target_status)
        except ValueError:
            return Error(OrderErrors.invalid_transition("?", str(target_status)))

        tracking_number = _clean(tracking_number)
        notes = _clean(notes)
        if target is not OrderStatus.SHIPPED and (tracking_number or notes):
            return Error(OrderErrors.invalid_request(
                [name for name, value in (("tracking_number", tracking_number), ("notes", notes)) if value],
                "shipment details are only accepted when shipping",
            ))

        match await self._repository.get(order_id):
            case Ok(None):
                return Error(OrderErrors.order_not_found(order_id))
            case Ok(found):
                order = found
            case Error(e):
                logger.error("order read failed", order_id=order_id, error=e.message)
                return Error(OrderErrors.server_error("could not read order"))

        if actor.role is not ActorRole.SYSTEM and not order.is_visible_to(actor.user_id):
            return Error(OrderErrors.forbidden())

        current = order.status
        if not current.can_transition_to(target):
            return Error(OrderErrors.invalid_transition(current, target))

        if not _may_move(actor, order, target):
            return Error(OrderErrors.forbidden())

        if actor.role is ActorRole.BUYER and current not in _BUYER_CANCELLABLE:
            return Error(OrderErrors.invalid_transition(current, target))

        now = self._guard.policy.now()
        match await self._repository.transition_status(
            order_id,
            current,
            target,
            now,
            tracking_number=tracking_number,
            notes=notes,
        ):
            case Ok(True):
                pass
            case Ok(False):
                # Someone else moved it first.
                return Error(OrderErrors.invalid_transition(current, target))
            case Error(e):
                logger.error("order transition failed", order_id=order_id, error=e.message)
                return Error(OrderErrors.server_error("could not update order"))

        logger.info(
            "order status changed",
            order_id=order_id,
            previous=current,
            current=target,
            actor=actor.role,
            tracking_number=tracking_number,
        )
        self._publish(OrderStatusChanged(
            order_id=order_id,
            user_id=order.user_id,
            previous=current,
            current=target,
            occurred_at=now,
            tracking_number=tracking_number,
            notes=notes,
        ))
        return Ok(StatusChange(order_id, current, target, now, tracking_number))

    # ───────────────────────────────────────────────────────────────────────────
    # Read Side
    # ───────────────────────────────────────────────────────────────────────────

    async def get_order(self, order_id: OrderId, viewer: UserId | None) -> Result[Order, OrderError]:
        if not viewer:
            return Error(OrderErrors.unauthorized())

        match await self._repository.get(order_id):
            case Ok(None):
                return Error(OrderErrors.order_not_found(order_id))
            case Ok(order) if order.is_visible_to(viewer):
                return Ok(order)
            case Ok(_):
                return Error(OrderErrors.forbidden())
            case Error(e):
                logger.error("order read failed", order_id=order_id, error=e.message)
                return Error(OrderErrors.server_error("could not read order"))
        raise AssertionError("unreachable")

    async def list_purchases(
        self,
        user_id: UserId | None,
        include_cancelled: bool = False,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Result[list[Order], OrderError]:
        if not user_id:
            return Error(OrderErrors.unauthorized())
        result = await self._repository.list_for_buyer(user_id, include_cancelled, limit)
        return _listed(result, user_id)

    async def list_sales(
        self,
        seller_id: UserId | None,
        include_cancelled: bool = False,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Result[list[Order], OrderError]:
        if not seller_id:
            return Error(OrderErrors.unauthorized())
        result = await self._repository.list_for_seller(seller_id, include_cancelled, limit)
        return _listed(result, seller_id)

    # ───────────────────────────────────────────────────────────────────────────
    # Events
    # ───────────────────────────────────────────────────────────────────────────

    def _publish_created(self, order: Order) -> None:
        self._publish(OrderCreated(
            order_id=order.id,
            user_id=order.user_id,
            total_minor=order.total_minor,
            currency=order.currency,
            seller_ids=order.seller_ids,
            occurred_at=order.created_at,
        ))

    def _publish(self, event: OrderEvent) -> None:
        try:
            self._events.publish(event)
        except Exception:
            logger.exception("event publish failed", event=event.name, order_id=event.order_id)


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def _currency_of(items: Sequence[IntentItem], listings: Mapping[ListingId, Listing | None]) -> str:
    listing = listings[items[0].listing_id]
    assert listing is not None
    return listing.currency


def _may_move(actor: Actor, order: Order, target: OrderStatus) -> bool:
    match actor.role:
        case ActorRole.SYSTEM:
            return True
        case ActorRole.SELLER:
            return actor.user_id in order.seller_ids and target in _SELLER_TARGETS
        case ActorRole.BUYER:
            return actor.user_id == order.user_id and target in _BUYER_TARGETS
    return False


def _listed(
    result: Result[list[Order], RepositoryError],
    user_id: UserId,
) -> Result[list[Order], OrderError]:
    match result:
        case Ok(orders):
            return Ok(orders)
        case Error(e):
            logger.error("order listing failed", user_id=user_id, error=e.message)
            return Error(OrderErrors.server_error("could not list orders"))
    raise AssertionError("unreachable")


__all__ = (
    "OrderService",
    "new_order_id",
)
