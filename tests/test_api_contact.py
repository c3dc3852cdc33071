from __future__ import annotations

import pytest

from storefront.client.api_client import parse_thread_list
from storefront.client.counters import admin_unread_count, user_unread_count


@pytest.fixture
def thread_id(http, auth, customer) -> str:
    resp = http.post("/contact", json={"message": "Is the kitchen open late?"}, headers=auth(customer))
    assert resp.status_code == 201
    return resp.json()["_id"]


def test_guest_can_open_thread(http) -> None:
    resp = http.post("/contact", json={"name": "Walk-in", "message": "Do you cater?"})
    body = resp.json()
    assert resp.status_code == 201
    assert body["userId"] is None
    assert body["unreadByAdmin"] == 1


def test_unread_counts_follow_replies(http, auth, customer, admin, thread_id) -> None:
    admin_view = parse_thread_list(http.get("/contact", headers=auth(admin)).json())
    assert admin_unread_count(admin_view) == 1

    http.post(f"/contact/{thread_id}/reply", json={"message": "Until midnight."}, headers=auth(admin))
    mine = parse_thread_list(http.get("/contact/my", headers=auth(customer)).json())
    assert user_unread_count(mine) == 1
    assert mine[0].handled

    http.post(f"/contact/{thread_id}/read", json={"actor": "user"}, headers=auth(customer))
    mine = parse_thread_list(http.get("/contact/my", headers=auth(customer)).json())
    assert user_unread_count(mine) == 0

    http.post(f"/contact/{thread_id}/read", json={"actor": "admin"}, headers=auth(admin))
    admin_view = parse_thread_list(http.get("/contact", headers=auth(admin)).json())
    assert admin_unread_count(admin_view) == 0


def test_thread_access(http, auth, customer, other_customer, thread_id) -> None:
    assert http.get("/contact", headers=auth(customer)).status_code == 403
    assert http.get("/contact/my", headers=auth(other_customer)).json()["items"] == []
    assert http.post(f"/contact/{thread_id}/reply", json={"message": "hi"}, headers=auth(other_customer)).status_code == 403
    assert http.post(f"/contact/{thread_id}/read", json={"actor": "admin"}, headers=auth(customer)).status_code == 403
    assert http.post("/contact/nope/read", json={"actor": "user"}, headers=auth(customer)).status_code == 404
