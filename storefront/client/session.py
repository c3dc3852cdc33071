# storefront/client/session.py
from typing import Callable, Literal, Set

from storefront.client.admin_orders import AdminOrderBoard, ConfirmPrompt
from storefront.client.api_client import StorefrontClient
from storefront.client.cart_store import CartStore
from storefront.client.cart_sync import CartSynchronizer
from storefront.client.checkout import CheckoutOrchestrator
from storefront.client.counters import PendingOrdersCounter, UnreadMessagesCounter
from storefront.client.guest_storage import GuestCartStorage, build_guest_storage
from storefront.client.identity import IdentityProvider
from storefront.client.order_tracking import OrderTracker
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class StorefrontSession:
    """
    Everything one storefront session owns, created once and handed to whoever
    needs it instead of living in module globals.
    """

    def __init__(
        self,
        identity_provider: IdentityProvider,
        api: StorefrontClient | None = None,
        storage: GuestCartStorage | None = None,
    ):
        self.identity_provider = identity_provider
        self.api = api or StorefrontClient(token_provider=identity_provider.get_token)
        self.storage = storage or build_guest_storage()

        self.cart = CartStore(self.api)
        self.synchronizer = CartSynchronizer(self.cart, self.api, self.storage)
        self.checkout = CheckoutOrchestrator(self.cart, self.api)
        self.orders = OrderTracker(self.api)
        self._pollers = []

    def identity_changing(self):
        """A sign in or sign out has started and its outcome is not known yet."""
        self.synchronizer.mark_unknown()

    def identity_resolved(self):
        identity = self.identity_provider.current_identity()
        logger.info(f"Identity resolved: {identity.uid if identity else 'guest'}")
        self.synchronizer.on_identity_resolved(identity)

    def admin_board(
        self,
        confirm: ConfirmPrompt,
        on_new_orders: Callable[[Set[str]], None] | None = None,
    ) -> AdminOrderBoard:
        board = AdminOrderBoard(self.api, self.identity_provider, confirm, on_new_orders)
        # a status change refreshes the pending badge right away instead of on its next tick
        board.on_order_updated(lambda _order: self._refresh_pending())
        self._pollers.append(board)
        return board

    def pending_orders_counter(self) -> PendingOrdersCounter:
        counter = PendingOrdersCounter(self.api, self.identity_provider)
        self._pollers.append(counter)
        return counter

    def _refresh_pending(self):
        for poller in self._pollers:
            if isinstance(poller, PendingOrdersCounter):
                poller.refresh()

    def unread_counter(self, for_role: Literal["user", "admin"], enabled: bool = True) -> UnreadMessagesCounter:
        counter = UnreadMessagesCounter(self.api, self.identity_provider, for_role, enabled=enabled)
        self._pollers.append(counter)
        return counter

    def close(self):
        for poller in self._pollers:
            poller.stop()
        self._pollers.clear()
        self.synchronizer.close()
