# storefront/client/cart_store.py
import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Iterable, List, Mapping, Tuple

from storefront.client.api_client import REMOTE_ERRORS, StorefrontClient
from storefront.client.identity import AuthState
from storefront.domain.identity import Identity
from storefront.domain.lines import InvalidMenuItem, cart_total, line_from_menu_item
from storefront.domain.schemas import CartLine, CartOut, MenuItem, MenuSubItem
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# event kinds
HYDRATED = "hydrated"
ADDED = "added"
DECREMENTED = "decremented"
LINE_REMOVED = "line_removed"
CLEARED = "cleared"
CHECKED_OUT = "checked_out"


@dataclass(frozen=True)
class CartEvent:
    kind: str
    lines: Tuple[CartLine, ...]
    auth_state: AuthState


CartListener = Callable[[CartEvent], None]


class CartStore:
    """
    Current cart contents for whoever is using the storefront.

    Guest carts are changed locally. Authenticated carts are changed on the
    backend and the line list is replaced by its answer; nothing is applied
    optimistically, so a failed call leaves the store untouched.

    Remote mutations run one at a time: the store lock is held for the whole
    round trip, so answers are applied in the order the calls were made.
    """

    def __init__(self, api: StorefrontClient):
        self.api = api
        self._lines: Tuple[CartLine, ...] = ()
        self._auth_state = AuthState.UNKNOWN
        self._identity: Identity | None = None
        self._lock = threading.RLock()
        self._listeners: List[CartListener] = []

    # =====================================================
    # STATE
    # =====================================================
    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return self._lines

    @property
    def total(self) -> Decimal:
        return cart_total(self._lines)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def auth_state(self) -> AuthState:
        return self._auth_state

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def authenticated(self) -> bool:
        return self._auth_state is AuthState.AUTHENTICATED

    def find(self, line_id: str) -> CartLine | None:
        return next((line for line in self._lines if line.item_id == line_id), None)

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # =====================================================
    # OWNERSHIP (driven by the synchronizer)
    # =====================================================
    @property
    def lock(self):
        return self._lock

    def bind(self, auth_state: AuthState, identity: Identity | None = None):
        """Hand the cart to a new owner. Lines of the previous owner are dropped until the next hydration."""
        identity = identity if auth_state is AuthState.AUTHENTICATED else None
        with self._lock:
            if auth_state is not self._auth_state or identity != self._identity:
                self._lines = ()
            self._auth_state = auth_state
            self._identity = identity

    def replace(self, lines: Iterable[CartLine], kind: str = HYDRATED):
        with self._lock:
            self._lines = tuple(lines)
            event = self._event(kind)
        self._emit(event)

    def reset(self):
        """Empty the local cart without touching the backend (used once an order went through)."""
        self.replace((), kind=CHECKED_OUT)

    # =====================================================
    # MUTATIONS
    # =====================================================
    def add_item(self, item: MenuItem | Mapping[str, Any], variant: str | MenuSubItem | None = None):
        try:
            line = line_from_menu_item(item, variant)
        except InvalidMenuItem as e:
            logger.error(f"Cannot add to cart: {e}")
            return

        with self._lock:
            if not self._ready("add_item"):
                return
            existing = self.find(line.item_id)

            if self.authenticated:
                new_qty = (existing.quantity if existing else 0) + 1
                cart = self._remote("add_item", self.api.upsert_cart_line, line.model_copy(update={"quantity": new_qty}))
                if cart is None:
                    return
                self._lines = tuple(cart.items)
            elif existing:
                self._lines = tuple(
                    l.model_copy(update={"quantity": l.quantity + 1}) if l.item_id == line.item_id else l
                    for l in self._lines
                )
            else:
                self._lines = self._lines + (line,)

            event = self._event(ADDED)
        self._emit(event)

    def remove_item(self, line_id: str):
        """Decrease the line by one; at zero the line is deleted, never kept at 0."""
        with self._lock:
            if not self._ready("remove_item"):
                return
            existing = self.find(line_id)
            if existing is None:
                return

            new_qty = existing.quantity - 1
            if self.authenticated:
                if new_qty <= 0:
                    cart = self._remote("remove_item", self.api.delete_cart_line, line_id)
                else:
                    cart = self._remote("remove_item", self.api.upsert_cart_line, existing.model_copy(update={"quantity": new_qty}))
                if cart is None:
                    return
                self._lines = tuple(cart.items)
            else:
                self._lines = tuple(
                    l.model_copy(update={"quantity": new_qty}) if l.item_id == line_id else l
                    for l in self._lines
                    if l.item_id != line_id or new_qty > 0
                )

            event = self._event(DECREMENTED)
        self._emit(event)

    def remove_line(self, line_id: str):
        with self._lock:
            if not self._ready("remove_line"):
                return
            if self.find(line_id) is None:
                return

            if self.authenticated:
                cart = self._remote("remove_line", self.api.delete_cart_line, line_id)
                if cart is None:
                    return
                self._lines = tuple(cart.items)
            else:
                self._lines = tuple(l for l in self._lines if l.item_id != line_id)

            event = self._event(LINE_REMOVED)
        self._emit(event)

    def clear(self):
        with self._lock:
            if not self._ready("clear"):
                return
            if self.authenticated:
                cart = self._remote("clear", self.api.clear_cart)
                if cart is None:
                    return
                self._lines = tuple(cart.items)
            else:
                self._lines = ()

            event = self._event(CLEARED)
        self._emit(event)

    # =====================================================
    # HELPERS
    # =====================================================
    def _ready(self, op: str) -> bool:
        if self._auth_state is AuthState.UNKNOWN:
            logger.warning(f"{op} ignored: identity not resolved yet")
            return False
        return True

    def _remote(self, op: str, call: Callable[..., CartOut], *args) -> CartOut | None:
        try:
            return call(*args)
        except REMOTE_ERRORS as e:
            logger.error(f"{op} cart error: {e}")
            return None

    def _event(self, kind: str) -> CartEvent:
        return CartEvent(kind=kind, lines=self._lines, auth_state=self._auth_state)

    def _emit(self, event: CartEvent):
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Cart listener failed on {event.kind}")
