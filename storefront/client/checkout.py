# storefront/client/checkout.py
import threading
import uuid
from dataclasses import dataclass
from typing import Callable, List, Tuple
from urllib.parse import quote

from storefront.client.api_client import REMOTE_ERRORS, StorefrontClient
from storefront.client.cart_store import CartStore
from storefront.domain.schemas import CartLine
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_PLACED_PATH = "/order/placed"

MSG_SIGN_IN = "Please sign in to place an order."
MSG_EMPTY = "Your cart is empty."
MSG_PENDING = "Your order is already being placed."
MSG_FAILED = "Failed to place your order. Please try again."


@dataclass(frozen=True)
class CheckoutResult:
    ok: bool
    order_id: str | None = None
    redirect_to: str | None = None
    error: str | None = None
    retryable: bool = False


OrderPlacedCallback = Callable[[str | None], None]


def order_placed_target(order_id: str | None) -> str:
    if order_id:
        return f"{ORDER_PLACED_PATH}?orderId={quote(order_id, safe='')}"
    return ORDER_PLACED_PATH


class CheckoutOrchestrator:
    """
    Turns the current cart into an order.

    The cart is cleared if and only if the backend accepted the order. Clearing
    the account cart afterwards is best effort: the order already exists, so a
    failure there is logged and the local cart is emptied anyway.

    A second submission while one is in flight is refused, and every attempt on
    the same cart contents reuses one idempotency key, so a retry after a lost
    response cannot create a second order.
    """

    def __init__(self, store: CartStore, api: StorefrontClient):
        self.store = store
        self.api = api
        self._pending = False
        self._guard = threading.Lock()
        self._attempt: Tuple[Tuple[CartLine, ...], str] | None = None
        self._on_placed: List[OrderPlacedCallback] = []

    @property
    def pending(self) -> bool:
        return self._pending

    def on_order_placed(self, callback: OrderPlacedCallback):
        self._on_placed.append(callback)

    def place_order(self, notes: str | None = None) -> CheckoutResult:
        with self._guard:
            if self._pending:
                return CheckoutResult(ok=False, error=MSG_PENDING)
            self._pending = True
        try:
            return self._place(notes)
        finally:
            self._pending = False

    def _place(self, notes: str | None) -> CheckoutResult:
        if not self.store.authenticated:
            return CheckoutResult(ok=False, error=MSG_SIGN_IN)

        lines = self.store.lines
        if not lines:
            return CheckoutResult(ok=False, error=MSG_EMPTY)

        key = self._idempotency_key(lines)
        try:
            order_id = self.api.create_order(lines, notes=notes, idempotency_key=key)
        except REMOTE_ERRORS as e:
            logger.error(f"Error placing order: {e}")
            return CheckoutResult(ok=False, error=MSG_FAILED, retryable=True)

        logger.info(f"Order {order_id} placed with {len(lines)} line(s)")
        self._attempt = None

        try:
            self.api.clear_cart()
        except REMOTE_ERRORS as e:
            logger.error(f"Failed to clear cart after order {order_id}: {e}")

        self.store.reset()

        for callback in list(self._on_placed):
            try:
                callback(order_id)
            except Exception:
                logger.exception("Order placed callback failed")

        return CheckoutResult(ok=True, order_id=order_id, redirect_to=order_placed_target(order_id))

    def _idempotency_key(self, lines: Tuple[CartLine, ...]) -> str:
        if self._attempt and self._attempt[0] == lines:
            return self._attempt[1]
        key = uuid.uuid4().hex
        self._attempt = (lines, key)
        return key
