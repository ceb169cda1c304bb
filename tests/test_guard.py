from datetime import UTC, datetime, timedelta

import pytest

from bazaar.guard import Admitted, DuplicateGuard, Existing, GuardPolicy, fingerprint
from bazaar.orders import MemoryOrderRepository, OrderStatus

from _support import FakeClock, make_order, ok


class TestFingerprint:
    def test_item_order_does_not_matter(self):
        a = fingerprint("u1", [("lst_a", 1), ("lst_b", 2)], "standard", "credit_card", 7)
        b = fingerprint("u1", [("lst_b", 2), ("lst_a", 1)], "standard", "credit_card", 7)
        assert a == b

    @pytest.mark.parametrize(
        "args",
        [
            ("u2", [("lst_a", 1)], "standard", "credit_card", 7),
            ("u1", [("lst_a", 2)], "standard", "credit_card", 7),
            ("u1", [("lst_a", 1)], "express", "credit_card", 7),
            ("u1", [("lst_a", 1)], "standard", "cash_on_delivery", 7),
            ("u1", [("lst_a", 1)], "standard", "credit_card", 8),
        ],
    )
    def test_every_component_matters(self, args):
        base = fingerprint("u1", [("lst_a", 1)], "standard", "credit_card", 7)
        assert fingerprint(*args) != base

    def test_is_sha256_hex(self):
        key = fingerprint("u1", [("lst_a", 1)], "standard", "credit_card", 0)
        assert len(key) == 64
        int(key, 16)


class TestPolicy:
    def test_bucket_is_floor_of_window(self):
        policy = GuardPolicy()
        at = datetime(2026, 1, 1, 0, 0, 0, tzinfo=UTC)
        assert policy.bucket(at) == policy.bucket(at + timedelta(seconds=119))
        assert policy.bucket(at + timedelta(seconds=120)) == policy.bucket(at) + 1

    def test_with_window(self):
        assert GuardPolicy().with_window(minutes=5).window == timedelta(minutes=5)

    def test_window_must_be_positive(self):
        with pytest.raises(ValueError):
            GuardPolicy().with_window(seconds=0)


class TestDuplicateGuard:
    @pytest.mark.asyncio
    async def test_admit_then_existing(self):
        repo = MemoryOrderRepository()
        guard = DuplicateGuard(repo)

        first = ok(await guard.admit(make_order("ord_1", "k")))
        second = ok(await guard.admit(make_order("ord_2", "k")))

        assert isinstance(first, Admitted) and not first.duplicate
        assert isinstance(second, Existing) and second.duplicate
        assert second.order_id == "ord_1"
        assert second.status is OrderStatus.PENDING
        assert len(repo) == 1

    @pytest.mark.asyncio
    async def test_lookup(self):
        repo = MemoryOrderRepository()
        guard = DuplicateGuard(repo)
        assert ok(await guard.lookup("k")) is None
        ok(await guard.admit(make_order("ord_1", "k")))
        assert ok(await guard.lookup("k")).id == "ord_1"

    def test_key_follows_clock_bucket(self):
        clock = FakeClock()
        guard = DuplicateGuard(MemoryOrderRepository(), GuardPolicy().with_clock(clock))
        args = ("u1", [("lst_a", 1)], "standard", "credit_card")

        first = guard.key_for(*args)
        clock.advance(seconds=30)
        assert guard.key_for(*args) == first
        clock.advance(seconds=120)
        assert guard.key_for(*args) != first
