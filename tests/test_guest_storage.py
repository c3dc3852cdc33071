from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal

import pytest
import redis

from storefront.client.guest_storage import (
    JsonFileGuestStorage,
    MemoryGuestStorage,
    RedisGuestStorage,
    build_guest_storage,
    decode_lines,
    encode_lines,
)
from storefront.domain.schemas import CartLine


LINES = [
    CartLine(item_id="m-smash", name="Smash Burger", unit_price=Decimal("12.90"), quantity=2),
    CartLine(item_id="m-latte::Large", name="Latte (Large)", unit_price=Decimal("5.60"), quantity=1),
]


@dataclass
class FakeRedisClient:
    store: dict = field(default_factory=dict)
    broken: bool = False

    def get(self, key):
        if self.broken:
            raise redis.ConnectionError("redis down")
        return self.store.get(key)

    def set(self, key, value):
        self.store[key] = value
        return True

    def delete(self, key):
        return 1 if self.store.pop(key, None) is not None else 0


def test_snapshot_uses_wire_field_names() -> None:
    payload = json.loads(encode_lines(LINES[:1]))
    assert payload == [{"menuItemId": "m-smash", "name": "Smash Burger", "price": "12.90", "quantity": 2}]


@pytest.mark.parametrize("raw", [None, "", "{", "{}", "null", "[1, 2]"])
def test_unusable_snapshots_decode_to_empty(raw) -> None:
    assert decode_lines(raw) == []


def test_bad_lines_dropped_and_duplicates_collapsed() -> None:
    raw = json.dumps(
        [
            {"menuItemId": "m-smash", "name": "Smash Burger", "price": "12.90", "quantity": 1},
            {"menuItemId": "m-fries", "name": "Midnight Fries", "price": "5.90", "quantity": 0},
            {"name": "no id", "price": "1.00", "quantity": 1},
            {"menuItemId": "m-smash", "name": "Smash Burger", "price": "12.90", "quantity": 4},
        ]
    )
    lines = decode_lines(raw)
    assert [(l.item_id, l.quantity) for l in lines] == [("m-smash", 1)]


def test_memory_storage_round_trip() -> None:
    storage = MemoryGuestStorage()
    storage.write(LINES)
    assert storage.read() == LINES
    storage.erase()
    assert storage.read() == []


def test_file_storage_keeps_other_keys(tmp_path) -> None:
    path = tmp_path / "device" / "storage.json"
    path.parent.mkdir()
    path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")

    storage = JsonFileGuestStorage(str(path))
    storage.write(LINES)

    doc = json.loads(path.read_text(encoding="utf-8"))
    assert doc["theme"] == "dark"
    assert isinstance(doc["cart:guest"], str)
    assert JsonFileGuestStorage(str(path)).read() == LINES

    storage.erase()
    assert json.loads(path.read_text(encoding="utf-8")) == {"theme": "dark"}


def test_file_storage_missing_or_corrupt_file(tmp_path) -> None:
    path = tmp_path / "storage.json"
    storage = JsonFileGuestStorage(str(path))
    assert storage.read() == []
    storage.erase()
    assert not path.exists()

    path.write_text("{not json", encoding="utf-8")
    assert storage.read() == []

    storage.write(LINES[:1])
    assert storage.read() == LINES[:1]


def test_file_storage_leaves_no_temp_files(tmp_path) -> None:
    storage = JsonFileGuestStorage(str(tmp_path / "storage.json"))
    storage.write(LINES)
    storage.write(LINES[:1])
    assert sorted(p.name for p in tmp_path.iterdir()) == ["storage.json"]


def test_redis_storage_round_trip() -> None:
    client = FakeRedisClient()
    storage = RedisGuestStorage(key="cart:guest", client=client)

    storage.write(LINES)
    assert "cart:guest" in client.store
    assert storage.read() == LINES

    storage.erase()
    assert storage.read() == []


def test_redis_read_failure_degrades_to_empty() -> None:
    storage = RedisGuestStorage(client=FakeRedisClient(broken=True))
    assert storage.read() == []


def test_build_guest_storage() -> None:
    assert isinstance(build_guest_storage("memory"), MemoryGuestStorage)
    assert isinstance(build_guest_storage("file"), JsonFileGuestStorage)
    with pytest.raises(ValueError):
        build_guest_storage("cookie")
