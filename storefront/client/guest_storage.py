"""Durable device-local storage for the guest cart snapshot."""
from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from typing import Any, List

import redis
from pydantic import ValidationError

from storefront.domain.schemas import CartLine
from storefront.utils.retry import redis_retry
from storefront.utils.settings import GUEST_CART_BACKEND, GUEST_CART_KEY, GUEST_CART_PATH, REDIS_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def encode_lines(lines: List[CartLine]) -> str:
    return json.dumps([line.model_dump(mode="json", by_alias=True) for line in lines])


def decode_lines(raw: Any) -> List[CartLine]:
    """Parse a stored snapshot; anything that is not a JSON array degrades to an empty cart."""
    if raw is None:
        return []
    try:
        parsed = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    except ValueError:
        logger.warning("Guest cart snapshot is not valid JSON, starting empty")
        return []

    if not isinstance(parsed, list):
        logger.warning("Guest cart snapshot is not an array, starting empty")
        return []

    lines: List[CartLine] = []
    seen = set()
    for entry in parsed:
        try:
            line = CartLine.model_validate(entry)
        except ValidationError:
            logger.warning(f"Dropping malformed guest cart line: {entry!r}")
            continue
        if line.item_id in seen:
            continue
        seen.add(line.item_id)
        lines.append(line)
    return lines


class GuestCartStorage(ABC):
    key: str = GUEST_CART_KEY

    @abstractmethod
    def read(self) -> List[CartLine]: ...

    @abstractmethod
    def write(self, lines: List[CartLine]) -> None: ...

    @abstractmethod
    def erase(self) -> None: ...


class MemoryGuestStorage(GuestCartStorage):
    def __init__(self, key: str = GUEST_CART_KEY):
        self.key = key
        self.data: dict[str, str] = {}

    def read(self) -> List[CartLine]:
        return decode_lines(self.data.get(self.key))

    def write(self, lines: List[CartLine]) -> None:
        self.data[self.key] = encode_lines(lines)

    def erase(self) -> None:
        self.data.pop(self.key, None)


class JsonFileGuestStorage(GuestCartStorage):
    """
    Key/value JSON document on disk, shaped like browser local storage:
    {"cart:guest": "[...serialized lines...]"}.
    """

    def __init__(self, path: str = GUEST_CART_PATH, key: str = GUEST_CART_KEY):
        self.path = path
        self.key = key

    def _load_document(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                doc = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable guest storage {self.path}: {e}")
            return {}
        return doc if isinstance(doc, dict) else {}

    def _store_document(self, doc: dict) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        # write to a temp file and swap so a crash never leaves half a document
        fd, tmp = tempfile.mkstemp(dir=directory, prefix=".guest-cart-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(doc, fh)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def read(self) -> List[CartLine]:
        return decode_lines(self._load_document().get(self.key))

    def write(self, lines: List[CartLine]) -> None:
        doc = self._load_document()
        doc[self.key] = encode_lines(lines)
        self._store_document(doc)

    def erase(self) -> None:
        doc = self._load_document()
        if doc.pop(self.key, None) is not None:
            self._store_document(doc)


class RedisGuestStorage(GuestCartStorage):
    """Guest cart kept in a Redis instance local to the device (kiosk deployments)."""

    def __init__(self, url: str | None = None, key: str = GUEST_CART_KEY, client=None):
        self.key = key
        self.redis = client or redis.Redis.from_url(url or REDIS_URL, decode_responses=True)

    @redis_retry()
    def _get(self):
        return self.redis.get(self.key)

    def read(self) -> List[CartLine]:
        try:
            raw = self._get()
        except redis.RedisError as e:
            logger.error(f"Failed to read guest cart from redis: {e}")
            return []
        return decode_lines(raw)

    @redis_retry()
    def write(self, lines: List[CartLine]) -> None:
        self.redis.set(self.key, encode_lines(lines))

    @redis_retry()
    def erase(self) -> None:
        self.redis.delete(self.key)


def build_guest_storage(backend: str = GUEST_CART_BACKEND) -> GuestCartStorage:
    if backend == "redis":
        return RedisGuestStorage()
    if backend == "memory":
        return MemoryGuestStorage()
    if backend == "file":
        return JsonFileGuestStorage()
    raise ValueError(f"Unknown guest cart backend: {backend}")
