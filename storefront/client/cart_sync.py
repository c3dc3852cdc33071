# storefront/client/cart_sync.py
from storefront.client.api_client import REMOTE_ERRORS, StorefrontClient
from storefront.client.cart_store import CHECKED_OUT, CLEARED, HYDRATED, CartEvent, CartStore
from storefront.client.guest_storage import GuestCartStorage
from storefront.client.identity import AuthState
from storefront.domain.identity import Identity
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartSynchronizer:
    """
    Keeps the cart store in step with where the cart actually lives.

    - identity resolved as a user: the backend cart replaces local state wholesale
    - identity resolved as a guest: the last guest snapshot is loaded from device storage
    - identity unknown: nothing is loaded either way until it resolves

    After hydration every guest mutation is written through to device storage.
    Signed-in carts keep no local shadow.

    The guest cart is NOT merged into the account cart on sign in; the account
    cart simply replaces it.
    """

    def __init__(self, store: CartStore, api: StorefrontClient, storage: GuestCartStorage):
        self.store = store
        self.api = api
        self.storage = storage
        self.hydrated = False
        self._unsubscribe = store.subscribe(self._on_cart_event)

    def mark_unknown(self):
        """Identity is being (re)resolved, e.g. a sign in is in flight."""
        self.hydrated = False
        self.store.bind(AuthState.UNKNOWN)

    def on_identity_resolved(self, identity: Identity | None):
        # mutations wait until the new owner's cart is loaded
        with self.store.lock:
            if identity is None:
                self.store.bind(AuthState.ANONYMOUS)
            else:
                self.store.bind(AuthState.AUTHENTICATED, identity)
            self.hydrate()

    def hydrate(self) -> bool:
        with self.store.lock:
            state = self.store.auth_state
            if state is AuthState.UNKNOWN:
                logger.info("Hydration deferred until identity is known")
                return False

            self.hydrated = False
            if state is AuthState.AUTHENTICATED:
                try:
                    cart = self.api.get_cart()
                    lines = cart.items
                    logger.info(f"Hydrated account cart with {len(lines)} line(s)")
                except REMOTE_ERRORS as e:
                    logger.error(f"Failed to load cart: {e}")
                    lines = []
            else:
                lines = self.storage.read()
                logger.info(f"Hydrated guest cart with {len(lines)} line(s)")

            self.store.replace(lines, kind=HYDRATED)
            self.hydrated = True
        return True

    def close(self):
        self._unsubscribe()

    def _on_cart_event(self, event: CartEvent):
        if event.kind == CHECKED_OUT:
            # an order went through: no guest snapshot should resurrect those lines later
            self._erase()
            return

        if not self.hydrated or event.kind == HYDRATED:
            return
        if event.auth_state is not AuthState.ANONYMOUS:
            return

        if event.kind == CLEARED:
            self._erase()
            return

        try:
            self.storage.write(list(event.lines))
        except Exception as e:
            logger.error(f"Failed to save guest cart: {e}")

    def _erase(self):
        try:
            self.storage.erase()
        except Exception as e:
            logger.error(f"Failed to erase guest cart: {e}")
