"""HTTP adapter over the order service."""

import pytest
from fastapi import FastAPI, Header
from fastapi.testclient import TestClient

from bazaar.orders import OrderErrorKind
from bazaar.wire import HTTP_STATUS, create_router, register_exception_handlers

from _support import BUYER, SELLER, STRANGER


def identify(x_user_id: str | None = Header(default=None)) -> str | None:
    return x_user_id


ADDRESS = {
    "recipient_name": "Ayşe Yılmaz",
    "full_address": "Moda Cad. 12/3",
    "city": "İstanbul",
    "phone": "+90 555 000 00 00",
}


@pytest.fixture()
def client(service):
    app = FastAPI()
    app.include_router(create_router(service, identify))
    register_exception_handlers(app)
    with TestClient(app) as client:
        yield client


def as_user(user_id: str) -> dict[str, str]:
    return {"X-User-Id": user_id}


def place(client, listing_id: str = "lst_lamp", user_id: str = BUYER):
    return client.post(
        "/orders",
        json={"items": [{"listing_id": listing_id, "quantity": 1}], "address": ADDRESS},
        headers=as_user(user_id),
    )


class TestCreateOrderEndpoint:
    def test_create(self, client):
        response = place(client)
        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["status"] == "pending"
        assert data["duplicate"] is False

    def test_replay_is_duplicate(self, client):
        first = place(client).json()
        second = place(client).json()
        assert second["order_id"] == first["order_id"]
        assert second["duplicate"] is True

    def test_client_prices_are_ignored(self, client):
        response = client.post(
            "/orders",
            json={
                "items": [{"listing_id": "lst_lamp", "quantity": 1, "unit_price_minor": 1}],
                "address": ADDRESS,
            },
            headers=as_user(BUYER),
        )
        order_id = response.json()["order_id"]
        order = client.get(f"/orders/{order_id}", headers=as_user(BUYER)).json()["order"]
        assert order["items"][0]["unit_price_minor"] == 15000
        assert order["total_minor"] == 15999

    def test_unauthorized(self, client):
        response = client.post("/orders", json={"items": [{"listing_id": "lst_lamp"}], "address": ADDRESS})
        assert response.status_code == 401
        assert response.json() == {"ok": False, "error": "UNAUTHORIZED", "fields": []}

    def test_invalid_address(self, client):
        response = client.post(
            "/orders",
            json={"items": [{"listing_id": "lst_lamp"}], "address": {"recipient_name": "Can"}},
            headers=as_user(BUYER),
        )
        assert response.status_code == 400
        assert response.json() == {
            "ok": False,
            "error": "INVALID_ADDRESS",
            "fields": ["full_address", "city", "phone"],
        }

    def test_self_buy(self, client):
        response = place(client, "lst_own")
        assert response.status_code == 400
        assert response.json()["error"] == "SELF_BUY_FORBIDDEN"

    def test_listing_not_found(self, client):
        response = place(client, "lst_missing")
        assert response.status_code == 404
        assert response.json()["fields"] == ["lst_missing"]

    def test_empty_cart(self, client):
        response = client.post("/orders", json={"items": [], "address": ADDRESS}, headers=as_user(BUYER))
        assert response.status_code == 400
        assert response.json()["error"] == "EMPTY_CART"


class TestOrderEndpoints:
    def test_get_order_visibility(self, client):
        order_id = place(client).json()["order_id"]

        assert client.get(f"/orders/{order_id}", headers=as_user(BUYER)).status_code == 200
        assert client.get(f"/orders/{order_id}", headers=as_user(SELLER)).status_code == 200
        assert client.get(f"/orders/{order_id}", headers=as_user(STRANGER)).status_code == 403
        assert client.get("/orders/ord_missing", headers=as_user(BUYER)).status_code == 404

    def test_lists(self, client):
        order_id = place(client).json()["order_id"]

        mine = client.get("/orders/mine", headers=as_user(BUYER)).json()
        sales = client.get("/orders/sales", headers=as_user(SELLER)).json()

        assert [o["id"] for o in mine["orders"]] == [order_id]
        assert [o["id"] for o in sales["orders"]] == [order_id]
        assert client.get("/orders/mine").status_code == 401

    def test_status_changes(self, client):
        order_id = place(client).json()["order_id"]
        url = f"/orders/{order_id}/status"

        skipped = client.post(url, json={"status": "delivered"}, headers=as_user(SELLER))
        assert skipped.status_code == 409
        assert skipped.json()["error"] == "INVALID_TRANSITION"

        buyer_confirm = client.post(url, json={"status": "confirmed", "role": "buyer"}, headers=as_user(BUYER))
        assert buyer_confirm.status_code == 403

        confirmed = client.post(url, json={"status": "confirmed"}, headers=as_user(SELLER))
        assert confirmed.status_code == 200
        assert confirmed.json()["previous"] == "pending"
        assert confirmed.json()["status"] == "confirmed"

        late_cancel = client.post(url, json={"status": "cancelled", "role": "buyer"}, headers=as_user(BUYER))
        assert late_cancel.status_code == 409
        assert late_cancel.json()["error"] == "INVALID_TRANSITION"

        cancelled = client.post(url, json={"status": "cancelled"}, headers=as_user(SELLER))
        assert cancelled.status_code == 200

    def test_buyer_cancels_pending_order(self, client):
        order_id = place(client).json()["order_id"]
        response = client.post(
            f"/orders/{order_id}/status",
            json={"status": "cancelled", "role": "buyer"},
            headers=as_user(BUYER),
        )
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    def test_shipping_with_tracking(self, client):
        order_id = place(client).json()["order_id"]
        url = f"/orders/{order_id}/status"
        client.post(url, json={"status": "confirmed"}, headers=as_user(SELLER))

        shipped = client.post(
            url,
            json={"status": "shipped", "tracking_number": "YK123456789TR", "notes": "Yurtiçi Kargo"},
            headers=as_user(SELLER),
        )
        assert shipped.status_code == 200
        assert shipped.json()["tracking_number"] == "YK123456789TR"

        for user_id in (BUYER, SELLER):
            order = client.get(f"/orders/{order_id}", headers=as_user(user_id)).json()["order"]
            assert order["tracking_number"] == "YK123456789TR"
            assert order["notes"] == "Yurtiçi Kargo"

        mine = client.get("/orders/mine", headers=as_user(BUYER)).json()["orders"]
        assert mine[0]["tracking_number"] == "YK123456789TR"

    def test_tracking_rejected_unless_shipping(self, client):
        order_id = place(client).json()["order_id"]
        response = client.post(
            f"/orders/{order_id}/status",
            json={"status": "confirmed", "tracking_number": "YK1"},
            headers=as_user(SELLER),
        )
        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "INVALID_REQUEST", "fields": ["tracking_number"]}

    def test_status_change_requires_user(self, client):
        order_id = place(client).json()["order_id"]
        response = client.post(f"/orders/{order_id}/status", json={"status": "confirmed"})
        assert response.status_code == 401


class TestMalformedBodies:
    def test_wrong_field_type_uses_error_envelope(self, client):
        response = client.post(
            "/orders",
            json={"items": [{"listing_id": "lst_lamp"}], "address": {**ADDRESS, "phone": 5551234}},
            headers=as_user(BUYER),
        )
        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "INVALID_REQUEST", "fields": ["phone"]}

    def test_unknown_role(self, client):
        order_id = place(client).json()["order_id"]
        response = client.post(
            f"/orders/{order_id}/status",
            json={"status": "confirmed", "role": "admin"},
            headers=as_user(SELLER),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_REQUEST"
        assert response.json()["fields"] == ["role"]


def test_every_error_kind_has_a_status():
    assert set(HTTP_STATUS) == set(OrderErrorKind)
    assert HTTP_STATUS[OrderErrorKind.SERVER_ERROR] == 500
