import pytest

from bazaar._types import MAX_AMOUNT_MINOR
from bazaar.catalog import Listing, ListingStatus, MemoryCatalog
from bazaar.events import MemorySink
from bazaar.guard import GuardPolicy
from bazaar.orders import MemoryOrderRepository, order_service

from _support import BUYER, OTHER_SELLER, SELLER, FakeClock, address


def seed_listings() -> list[Listing]:
    return [
        Listing("lst_lamp", SELLER, 15000, "Brass lamp", "https://img.example/lamp.jpg"),
        Listing("lst_chair", OTHER_SELLER, 6000, "Oak chair"),
        Listing("lst_book", SELLER, 4999, "Used novel"),
        Listing("lst_own", BUYER, 5000, "Buyer's own bike"),
        Listing("lst_paused", SELLER, 3000, "Paused vase", status=ListingStatus.PAUSED),
        Listing("lst_free", SELLER, 0, "Zero-priced"),
        Listing("lst_float", SELLER, 99.5, "Float-priced"),
        Listing("lst_eur", OTHER_SELLER, 2500, "Euro mug", currency="EUR"),
        Listing("lst_huge", SELLER, MAX_AMOUNT_MINOR, "Priceless painting"),
    ]


@pytest.fixture()
def catalog() -> MemoryCatalog:
    return MemoryCatalog(seed_listings())


@pytest.fixture()
def repo() -> MemoryOrderRepository:
    return MemoryOrderRepository()


@pytest.fixture()
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def policy(clock):
    return GuardPolicy().with_clock(clock)


@pytest.fixture()
def service(catalog, repo, sink, policy):
    return order_service(catalog).repository(repo).events(sink).guard(policy).build()


@pytest.fixture()
def valid_address():
    return address()
