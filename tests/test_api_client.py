from __future__ import annotations

import json
from decimal import Decimal

import pytest
import requests

from storefront.client.api_client import StorefrontClient, parse_thread_list
from storefront.domain.schemas import CartLine


ORDER = {
    "_id": "a1b2",
    "userId": "u-ava",
    "items": [{"menuItemId": "m-smash", "name": "Smash Burger", "price": "12.90", "quantity": 1}],
    "subtotal": "12.90",
    "total": "12.90",
    "status": "pending",
    "paymentStatus": "unpaid",
    "createdAt": "2026-03-01T09:00:00Z",
    "updatedAt": "2026-03-01T09:00:00Z",
}


def _response(status: int, body=None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = json.dumps(body).encode() if body is not None else b""
    return resp


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        return self.responses.pop(0)


def _client(*responses, token="tok") -> tuple[StorefrontClient, FakeSession]:
    session = FakeSession(*responses)
    return StorefrontClient("http://api.test/", token_provider=lambda: token, session=session), session


def test_missing_token_raises_before_sending() -> None:
    client, session = _client(token=None)
    with pytest.raises(PermissionError):
        client.get_cart()
    assert session.requests == []


def test_upsert_sends_wire_line_with_bearer() -> None:
    client, session = _client(_response(200, {"items": [], "subtotal": "0.00"}))
    client.upsert_cart_line(CartLine(item_id="m-smash", name="Smash Burger", unit_price=Decimal("12.90"), quantity=3))

    method, url, kwargs = session.requests[0]
    assert (method, url) == ("POST", "http://api.test/cart")
    assert kwargs["json"] == {"menuItemId": "m-smash", "name": "Smash Burger", "price": "12.90", "quantity": 3}
    assert kwargs["headers"]["Authorization"] == "Bearer tok"


def test_delete_line_quotes_variant_ids() -> None:
    client, session = _client(_response(200, {"items": []}))
    client.delete_cart_line("m-latte::Large")
    assert session.requests[0][1] == "http://api.test/cart/m-latte%3A%3ALarge"


def test_create_order_returns_order_id_and_sends_key() -> None:
    client, session = _client(_response(201, {"orderId": "a1b2", "order": ORDER}))
    line = CartLine(item_id="m-smash", name="Smash Burger", unit_price=Decimal("12.90"), quantity=1)

    assert client.create_order([line], notes="extra napkins", idempotency_key="k-1") == "a1b2"
    kwargs = session.requests[0][2]
    assert kwargs["headers"]["Idempotency-Key"] == "k-1"
    assert kwargs["json"]["notes"] == "extra napkins"


def test_create_order_without_reported_id() -> None:
    client, _ = _client(_response(201, {}))
    assert client.create_order([]) is None


@pytest.mark.parametrize("body", [{"order": ORDER}, {"item": ORDER}, {"data": ORDER}, ORDER])
def test_get_order_accepts_envelopes(body) -> None:
    client, _ = _client(_response(200, body))
    assert client.get_order("a1b2").id == "a1b2"


def test_get_order_without_order_is_an_error() -> None:
    client, _ = _client(_response(200, {"order": None}))
    with pytest.raises(ValueError):
        client.get_order("a1b2")


def test_client_errors_are_not_retried() -> None:
    client, session = _client(_response(404, {"message": "Order not found"}), _response(200, {"order": ORDER}))
    with pytest.raises(requests.HTTPError):
        client.get_order("nope")
    assert len(session.requests) == 1


def test_server_errors_are_retried() -> None:
    client, session = _client(_response(503), _response(200, {"items": [ORDER], "total": 1}))
    orders = client.list_orders(status="pending")
    assert [o.id for o in orders] == ["a1b2"]
    assert len(session.requests) == 2
    assert session.requests[1][2]["params"] == {"page": 1, "limit": 100, "status": "pending"}


def test_update_order_payload_uses_wire_names() -> None:
    client, session = _client(_response(200, {"order": {**ORDER, "paymentStatus": "paid"}}))
    order = client.update_order("a1b2", payment_status="paid")
    assert session.requests[0][2]["json"] == {"paymentStatus": "paid"}
    assert order.payment_status.value == "paid"


def test_parse_thread_list_envelopes_and_garbage() -> None:
    thread = {"_id": "t1", "createdAt": "2026-03-01T09:00:00Z", "unreadByUser": 2}
    assert [t.id for t in parse_thread_list({"threads": [thread, {"bad": True}]})] == ["t1"]
    assert [t.id for t in parse_thread_list(json.dumps({"messages": [thread]}))] == ["t1"]
    assert parse_thread_list("not json") == []
    assert parse_thread_list([thread]) == []
    assert parse_thread_list({"items": "nope"}) == []
