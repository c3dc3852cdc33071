# storefront/client/api_client.py
import json
from urllib.parse import quote
from typing import Any, Callable, Iterable, List

import requests
from pydantic import ValidationError

from storefront.domain.schemas import CartLine, CartOut, OrderOut, ThreadOut
from storefront.utils.retry import http_retry
from storefront.utils.settings import API_BASE_URL, HTTP_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# everything a backend round trip can fail with; callers catch these at their boundary
REMOTE_ERRORS = (requests.RequestException, PermissionError, ValueError)


class StorefrontClient:
    """
    Thin HTTP client for the storefront backend.

    Every authenticated call asks `token_provider` for a fresh bearer token;
    a missing token raises PermissionError before anything is sent.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token_provider: Callable[[], str | None] | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self.token_provider = token_provider or (lambda: None)
        self.timeout = timeout
        self.session = session or requests.Session()

    @http_retry()
    def _request(self, method: str, path: str, payload: Any = None, headers: dict | None = None, params: dict | None = None):
        token = self.token_provider()
        if not token:
            raise PermissionError("Not signed in")

        url = f"{self.base_url}{path}"
        logger.info(f"StorefrontClient {method} {url}")

        resp = self.session.request(
            method,
            url,
            json=payload,
            params=params,
            headers={"Authorization": f"Bearer {token}", **(headers or {})},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json() if resp.content else {}

    # =====================================================
    # CART
    # =====================================================
    def get_cart(self) -> CartOut:
        return CartOut.model_validate(self._request("GET", "/cart"))

    def upsert_cart_line(self, line: CartLine) -> CartOut:
        payload = line.model_dump(mode="json", by_alias=True)
        return CartOut.model_validate(self._request("POST", "/cart", payload))

    def delete_cart_line(self, item_id: str) -> CartOut:
        return CartOut.model_validate(self._request("DELETE", f"/cart/{quote(item_id, safe='')}"))

    def clear_cart(self) -> CartOut:
        return CartOut.model_validate(self._request("DELETE", "/cart"))

    # =====================================================
    # ORDERS
    # =====================================================
    def create_order(self, lines: Iterable[CartLine], notes: str | None = None, idempotency_key: str | None = None) -> str | None:
        """Returns the new order id, None if the backend accepted the order without reporting one."""
        payload = {"items": [line.model_dump(mode="json", by_alias=True) for line in lines]}
        if notes:
            payload["notes"] = notes
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None

        data = self._request("POST", "/orders", payload, headers=headers) or {}
        order = data.get("order") or {}
        return order.get("_id") or data.get("orderId")

    def my_orders(self) -> List[OrderOut]:
        data = self._request("GET", "/orders/my") or {}
        return [OrderOut.model_validate(o) for o in data.get("orders") or []]

    def get_order(self, order_id: str) -> OrderOut:
        data = self._request("GET", f"/orders/{quote(order_id, safe='')}") or {}
        body = data.get("order") or data.get("item") or data.get("data") or data
        if not isinstance(body, dict) or not body.get("_id"):
            raise ValueError("Order missing from response")
        return OrderOut.model_validate(body)

    def list_orders(self, page: int = 1, limit: int = 100, status: str | None = None) -> List[OrderOut]:
        params = {"page": page, "limit": limit}
        if status:
            params["status"] = status
        data = self._request("GET", "/orders", params=params) or {}
        return [OrderOut.model_validate(o) for o in data.get("items") or []]

    def update_order(self, order_id: str, status: str | None = None, payment_status: str | None = None) -> OrderOut:
        payload = {}
        if status is not None:
            payload["status"] = status
        if payment_status is not None:
            payload["paymentStatus"] = payment_status
        data = self._request("PUT", f"/orders/{quote(order_id, safe='')}", payload) or {}
        return OrderOut.model_validate(data.get("order") or data)

    # =====================================================
    # CONTACT THREADS
    # =====================================================
    def user_threads(self) -> List[ThreadOut]:
        return parse_thread_list(self._request("GET", "/contact/my", params={"page": 1, "limit": 50}))

    def admin_threads(self) -> List[ThreadOut]:
        return parse_thread_list(self._request("GET", "/contact", params={"page": 1, "limit": 100}))


def parse_thread_list(payload: Any) -> List[ThreadOut]:
    """Accepts any of the list envelopes the contact endpoints have used; malformed threads are skipped."""
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError:
            return []
    if not isinstance(payload, dict):
        return []

    raw = next(
        (payload[k] for k in ("items", "threads", "messages", "data") if isinstance(payload.get(k), list)),
        [],
    )
    threads = []
    for item in raw:
        try:
            threads.append(ThreadOut.model_validate(item))
        except ValidationError:
            logger.warning(f"Skipping malformed contact thread: {item!r}")
    return threads
