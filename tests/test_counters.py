from __future__ import annotations

import threading
from datetime import datetime, timezone

from storefront.client.counters import (
    PendingOrdersCounter,
    UnreadMessagesCounter,
    admin_unread_count,
    user_unread_count,
)
from storefront.client.identity import ManualIdentityProvider
from storefront.client.polling import Poller
from storefront.domain.schemas import OrderStatus, ReplyOut, ThreadOut

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def _reply(role, **flags) -> ReplyOut:
    return ReplyOut(sender_role=role, message="hi", created_at=T0, **flags)


def _thread(tid="t1", handled=False, replies=(), **counts) -> ThreadOut:
    return ThreadOut(id=tid, created_at=T0, handled=handled, replies=list(replies), **counts)


def test_user_unread_prefers_stored_counter() -> None:
    threads = [
        _thread("t1", unread_by_user=2, replies=[_reply("admin")]),
        _thread("t2", replies=[_reply("admin"), _reply("admin", read_by_user=True), _reply("user")]),
        _thread("t3", unread_by_user=-4),
    ]
    assert user_unread_count(threads) == 3


def test_admin_unread_counts_unhandled_root_message() -> None:
    threads = [
        _thread("t1", unread_by_admin=1),
        _thread("t2", handled=False, replies=[_reply("user"), _reply("user", read_by_admin=True)]),
        _thread("t3", handled=True, replies=[_reply("user")]),
    ]
    assert admin_unread_count(threads) == 1 + 2 + 1


def test_pending_counter_counts_pending_only_for_admins(fake_api, admin, customer) -> None:
    fake_api.add_order("a", status=OrderStatus.PENDING)
    fake_api.add_order("b", status=OrderStatus.PENDING)
    fake_api.add_order("c", status=OrderStatus.READY)
    provider = ManualIdentityProvider(admin, "tok")
    counter = PendingOrdersCounter(fake_api, provider)

    assert counter.refresh() == 2

    provider.sign_in(customer, "tok")
    assert counter.refresh() == 0


def test_pending_counter_keeps_last_value_on_error(fake_api, admin) -> None:
    fake_api.add_order("a")
    counter = PendingOrdersCounter(fake_api, ManualIdentityProvider(admin, "tok"))
    counter.refresh()
    fake_api.fail.add("list_orders")
    assert counter.refresh() == 1


def test_unread_counter_drops_to_zero_on_error(fake_api, customer) -> None:
    fake_api.threads = [_thread(unread_by_user=3)]
    counter = UnreadMessagesCounter(fake_api, ManualIdentityProvider(customer, "tok"), "user")
    assert counter.refresh() == 3

    fake_api.fail.add("user_threads")
    assert counter.refresh() == 0


def test_unread_counter_respects_role_and_enabled(fake_api, admin, customer) -> None:
    fake_api.threads = [_thread(unread_by_admin=2, unread_by_user=5)]

    assert UnreadMessagesCounter(fake_api, ManualIdentityProvider(admin, "tok"), "admin").refresh() == 2
    assert UnreadMessagesCounter(fake_api, ManualIdentityProvider(customer, "tok"), "admin").refresh() == 0
    assert UnreadMessagesCounter(fake_api, ManualIdentityProvider(admin, "tok"), "user").refresh() == 0
    assert UnreadMessagesCounter(fake_api, ManualIdentityProvider(), "user").refresh() == 0

    fake_api.calls.clear()
    disabled = UnreadMessagesCounter(fake_api, ManualIdentityProvider(customer, "tok"), "user", enabled=False)
    assert disabled.refresh() == 0
    assert fake_api.calls == []


def test_poller_ticks_until_stopped() -> None:
    ticks = threading.Semaphore(0)

    def tick():
        ticks.release()
        raise RuntimeError("flaky")

    poller = Poller(tick, interval=0.01, name="test")
    poller.start()
    assert ticks.acquire(timeout=2)
    assert ticks.acquire(timeout=2)
    assert poller.running

    poller.stop(timeout=2)
    assert not poller.running
