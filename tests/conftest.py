from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import storefront.data.models  # noqa: F401
from storefront.api import create_app
from storefront.api.auth import issue_token
from storefront.api.routers.cart import get_menu_client
from storefront.client.identity import ManualIdentityProvider
from storefront.client.guest_storage import MemoryGuestStorage
from storefront.data.database import Base, get_db
from storefront.domain.identity import ROLE_ADMIN, Identity
from storefront.domain.schemas import CartLine, CartOut, OrderOut, OrderStatus, PaymentStatus


MENU = {
    "m-smash": {"_id": "m-smash", "name": "Smash Burger", "price": "12.90", "isAvailable": True},
    "m-fries": {"_id": "m-fries", "name": "Midnight Fries", "price": "5.90", "isAvailable": True},
    "m-latte": {
        "_id": "m-latte",
        "name": "Latte",
        "price": "4.80",
        "isAvailable": True,
        "subItems": [{"name": "Regular", "price": "4.80"}, {"name": "Large", "price": "5.60"}],
    },
    "m-toastie": {"_id": "m-toastie", "name": "Gourmet Toastie", "price": "11.00", "isAvailable": False},
}


def http_error(status: int) -> requests.HTTPError:
    resp = requests.Response()
    resp.status_code = status
    return requests.HTTPError(f"{status} error", response=resp)


# =====================================================
# BACKEND
# =====================================================
@dataclass
class FakeMenuClient:
    items: dict = field(default_factory=lambda: dict(MENU))
    down: bool = False

    def fetch_item(self, item_id: str) -> dict:
        if self.down:
            raise requests.ConnectionError("menu service down")
        if item_id not in self.items:
            raise http_error(404)
        return self.items[item_id]

    def fetch_menu(self) -> list[dict]:
        if self.down:
            raise requests.ConnectionError("menu service down")
        return list(self.items.values())


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def menu_client():
    return FakeMenuClient()


@pytest.fixture
def http(db_session, menu_client):
    app = create_app()

    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_menu_client] = lambda: menu_client
    return TestClient(app)


@pytest.fixture
def customer() -> Identity:
    return Identity(uid="u-ava", name="Ava", email="ava@example.com")


@pytest.fixture
def other_customer() -> Identity:
    return Identity(uid="u-ben", name="Ben", email="ben@example.com")


@pytest.fixture
def admin() -> Identity:
    return Identity(uid="staff-1", role=ROLE_ADMIN, name="Staff")


def bearer(identity: Identity) -> dict:
    return {"Authorization": f"Bearer {issue_token(identity)}"}


@pytest.fixture
def auth():
    return bearer


# =====================================================
# CLIENT CORE
# =====================================================
class FakeStorefrontApi:
    """In-memory stand-in for StorefrontClient: one account cart plus an order list."""

    def __init__(self):
        self.cart: dict[str, CartLine] = {}
        self.orders: dict[str, OrderOut] = {}
        self.threads = []
        self.fail: set[str] = set()
        self.calls: list[str] = []
        self.idempotency_keys: list[str | None] = []

    def _call(self, name: str):
        self.calls.append(name)
        if name in self.fail:
            raise requests.ConnectionError(f"{name} failed")

    def _snapshot(self) -> CartOut:
        items = list(self.cart.values())
        return CartOut(items=items, subtotal=sum((l.line_total for l in items), Decimal("0.00")))

    def get_cart(self):
        self._call("get_cart")
        return self._snapshot()

    def upsert_cart_line(self, line: CartLine):
        self._call("upsert_cart_line")
        self.cart[line.item_id] = line
        return self._snapshot()

    def delete_cart_line(self, item_id: str):
        self._call("delete_cart_line")
        self.cart.pop(item_id, None)
        return self._snapshot()

    def clear_cart(self):
        self._call("clear_cart")
        self.cart.clear()
        return self._snapshot()

    def add_order(self, order_id: str | None = None, status=OrderStatus.PENDING, payment=PaymentStatus.UNPAID,
                  total="10.00", created_at: datetime | None = None, user_name: str = "Ava", email: str = "ava@example.com") -> OrderOut:
        now = created_at or datetime.now(timezone.utc)
        order = OrderOut(
            id=order_id or uuid.uuid4().hex,
            owner_id="u-ava",
            user_name=user_name,
            email=email,
            items=[CartLine(item_id="m-smash", name="Smash Burger", unit_price=Decimal(total), quantity=1)],
            subtotal=Decimal(total),
            total=Decimal(total),
            status=status,
            payment_status=payment,
            created_at=now,
            updated_at=now,
        )
        self.orders[order.id] = order
        return order

    def create_order(self, lines, notes=None, idempotency_key=None):
        # failed attempts still sent their key
        self.idempotency_keys.append(idempotency_key)
        self._call("create_order")
        order = self.add_order(total=str(sum((l.line_total for l in lines), Decimal("0.00"))))
        return order.id

    def my_orders(self):
        self._call("my_orders")
        return sorted(self.orders.values(), key=lambda o: o.created_at, reverse=True)

    def get_order(self, order_id: str):
        self._call("get_order")
        if order_id not in self.orders:
            raise http_error(404)
        return self.orders[order_id]

    def list_orders(self, page=1, limit=100, status=None):
        self._call("list_orders")
        return [o for o in self.orders.values() if status is None or o.status.value == status]

    def update_order(self, order_id, status=None, payment_status=None):
        self._call("update_order")
        changes = {}
        if status is not None:
            changes["status"] = OrderStatus(status)
        if payment_status is not None:
            changes["payment_status"] = PaymentStatus(payment_status)
        self.orders[order_id] = self.orders[order_id].model_copy(update=changes)
        return self.orders[order_id]

    def user_threads(self):
        self._call("user_threads")
        return self.threads

    def admin_threads(self):
        self._call("admin_threads")
        return self.threads


@pytest.fixture
def fake_api():
    return FakeStorefrontApi()


@pytest.fixture
def guest_storage():
    return MemoryGuestStorage()


@pytest.fixture
def identity_provider():
    return ManualIdentityProvider()


@pytest.fixture
def smash():
    return dict(MENU["m-smash"])


@pytest.fixture
def fries():
    return dict(MENU["m-fries"])


@pytest.fixture
def latte():
    return dict(MENU["m-latte"])
