import asyncio
from datetime import UTC, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from bazaar.orders import (
    Conflict,
    Inserted,
    OrderItemTable,
    OrderStatus,
    OrderTable,
    PurchaseIntent,
    SQLAlchemyOrderRepository,
    create_database,
    order_service,
)

from _support import BUYER, SELLER, T0, address, make_order, ok


@pytest_asyncio.fixture
async def database(tmp_path):
    session_factory, engine = await create_database(f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}")
    yield session_factory, engine
    await engine.dispose()


@pytest.fixture()
def sql_repo(database):
    _, engine = database
    return SQLAlchemyOrderRepository.from_engine(engine)


async def count(session_factory, table) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(table))).scalar_one()


class TestInsertIfAbsent:
    @pytest.mark.asyncio
    async def test_insert_and_read_back(self, sql_repo):
        order = make_order("ord_1", "key_1")

        outcome = ok(await sql_repo.insert_if_absent(order))
        assert isinstance(outcome, Inserted)

        stored = ok(await sql_repo.find_by_key("key_1"))
        assert stored == order
        assert stored.created_at.tzinfo is not None
        assert ok(await sql_repo.get("ord_1")) == order

    @pytest.mark.asyncio
    async def test_same_key_reports_winner(self, sql_repo, database):
        session_factory, _ = database
        ok(await sql_repo.insert_if_absent(make_order("ord_1", "key_1")))

        outcome = ok(await sql_repo.insert_if_absent(make_order("ord_2", "key_1")))

        assert outcome == Conflict("ord_1", OrderStatus.PENDING)
        assert await count(session_factory, OrderTable) == 1
        assert await count(session_factory, OrderItemTable) == 1

    @pytest.mark.asyncio
    async def test_missing(self, sql_repo):
        assert ok(await sql_repo.get("nope")) is None
        assert ok(await sql_repo.find_by_key("nope")) is None

    def test_unknown_dialect(self, database):
        session_factory, _ = database
        with pytest.raises(ValueError):
            SQLAlchemyOrderRepository(session_factory, dialect="oracle")


class TestTransitionStatus:
    @pytest.mark.asyncio
    async def test_compare_and_swap(self, sql_repo):
        ok(await sql_repo.insert_if_absent(make_order("ord_1", "key_1")))
        at = T0 + timedelta(minutes=1)

        assert ok(await sql_repo.transition_status("ord_1", OrderStatus.PENDING, OrderStatus.CONFIRMED, at))
        assert not ok(await sql_repo.transition_status("ord_1", OrderStatus.PENDING, OrderStatus.CANCELLED, at))

        stored = ok(await sql_repo.get("ord_1"))
        assert stored.status is OrderStatus.CONFIRMED
        assert stored.updated_at == at.astimezone(UTC)

    @pytest.mark.asyncio
    async def test_shipment_details_kept_across_transitions(self, sql_repo):
        ok(await sql_repo.insert_if_absent(make_order("ord_1", "key_1", status=OrderStatus.CONFIRMED)))
        shipped_at = T0 + timedelta(hours=2)

        assert ok(await sql_repo.transition_status(
            "ord_1",
            OrderStatus.CONFIRMED,
            OrderStatus.SHIPPED,
            shipped_at,
            tracking_number="YK123456789TR",
            notes="left with the doorman",
        ))
        assert ok(await sql_repo.transition_status(
            "ord_1", OrderStatus.SHIPPED, OrderStatus.DELIVERED, shipped_at + timedelta(days=2)
        ))

        stored = ok(await sql_repo.get("ord_1"))
        assert stored.status is OrderStatus.DELIVERED
        assert stored.tracking_number == "YK123456789TR"
        assert stored.notes == "left with the doorman"


class TestTimestamps:
    @pytest.mark.asyncio
    async def test_non_utc_clock_keeps_the_instant(self, sql_repo):
        istanbul = timezone(timedelta(hours=3))
        created_at = T0.astimezone(istanbul)
        ok(await sql_repo.insert_if_absent(make_order("ord_1", "key_1", created_at=created_at)))

        changed_at = (T0 + timedelta(minutes=5)).astimezone(istanbul)
        ok(await sql_repo.transition_status("ord_1", OrderStatus.PENDING, OrderStatus.CONFIRMED, changed_at))

        stored = ok(await sql_repo.get("ord_1"))
        assert stored.created_at == T0
        assert stored.created_at.utcoffset() == timedelta(0)
        assert stored.updated_at == T0 + timedelta(minutes=5)


class TestListing:
    @pytest.mark.asyncio
    async def test_newest_first_and_cancelled_hidden(self, sql_repo):
        for n in range(3):
            order = make_order(f"ord_{n}", f"key_{n}", created_at=T0 + timedelta(minutes=n))
            ok(await sql_repo.insert_if_absent(order))
        ok(await sql_repo.transition_status("ord_0", OrderStatus.PENDING, OrderStatus.CANCELLED, T0))

        assert [o.id for o in ok(await sql_repo.list_for_buyer(BUYER))] == ["ord_2", "ord_1"]
        assert [o.id for o in ok(await sql_repo.list_for_seller(SELLER, include_cancelled=True))] == [
            "ord_2",
            "ord_1",
            "ord_0",
        ]
        assert [o.id for o in ok(await sql_repo.list_for_buyer(BUYER, limit=1))] == ["ord_2"]
        assert ok(await sql_repo.list_for_seller("u_nobody")) == []


class TestConcurrentCheckout:
    @pytest.mark.asyncio
    async def test_ten_identical_requests_one_row(self, catalog, sql_repo, database, policy):
        session_factory, _ = database
        service = order_service(catalog).repository(sql_repo).guard(policy).build()
        intent = PurchaseIntent.buy_now("lst_lamp", address())

        results = await asyncio.gather(*(service.create_order(BUYER, intent) for _ in range(10)))
        placements = [ok(r) for r in results]

        assert len({p.order_id for p in placements}) == 1
        assert sum(not p.duplicate for p in placements) == 1
        assert await count(session_factory, OrderTable) == 1
        assert await count(session_factory, OrderItemTable) == 1
