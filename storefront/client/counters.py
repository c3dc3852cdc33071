# storefront/client/counters.py
"""Small integer badges derived by polling backend collections."""
from typing import Iterable, Literal

from storefront.client.api_client import REMOTE_ERRORS, StorefrontClient
from storefront.client.identity import IdentityProvider
from storefront.client.polling import Poller
from storefront.domain.identity import Identity
from storefront.domain.schemas import OrderStatus, ThreadOut
from storefront.utils.settings import ORDER_POLL_SECONDS, UNREAD_POLL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def user_unread_count(threads: Iterable[ThreadOut]) -> int:
    total = 0
    for thread in threads:
        if thread.unread_by_user is not None:
            total += max(thread.unread_by_user, 0)
            continue
        total += sum(1 for r in thread.replies if r.sender_role == "admin" and r.read_by_user is not True)
    return total


def admin_unread_count(threads: Iterable[ThreadOut]) -> int:
    total = 0
    for thread in threads:
        if thread.unread_by_admin is not None:
            total += max(thread.unread_by_admin, 0)
            continue
        from_replies = sum(1 for r in thread.replies if r.sender_role == "user" and r.read_by_admin is not True)
        total += from_replies + (0 if thread.handled else 1)
    return total


class BadgeCounter:
    interval: float = 60.0
    name = "badge"

    def __init__(self, api: StorefrontClient, identity_provider: IdentityProvider, interval: float | None = None):
        self.api = api
        self.identity_provider = identity_provider
        self.count = 0
        self._poller = Poller(self.refresh, interval or self.interval, name=self.name)

    def refresh(self) -> int:
        identity = self.identity_provider.current_identity()
        if not self._allowed(identity):
            self.count = 0
            return self.count
        try:
            self.count = self._load()
        except REMOTE_ERRORS as e:
            logger.error(f"Failed to load {self.name}: {e}")
            self._on_error()
        return self.count

    def start(self):
        self._poller.start()

    def stop(self):
        self._poller.stop()

    def _allowed(self, identity: Identity | None) -> bool:
        return identity is not None

    def _load(self) -> int:
        raise NotImplementedError

    def _on_error(self):
        pass


class PendingOrdersCounter(BadgeCounter):
    """Admin navbar badge: orders still waiting to be picked up by the kitchen. Keeps the last count on errors."""

    interval = ORDER_POLL_SECONDS
    name = "pending-orders"

    def _allowed(self, identity):
        return identity is not None and identity.is_admin

    def _load(self) -> int:
        return sum(1 for o in self.api.list_orders() if o.status == OrderStatus.PENDING)


class UnreadMessagesCounter(BadgeCounter):
    """Unread live-chat messages, for the customer or for staff. Drops to 0 on errors."""

    interval = UNREAD_POLL_SECONDS
    name = "unread-messages"

    def __init__(
        self,
        api: StorefrontClient,
        identity_provider: IdentityProvider,
        for_role: Literal["user", "admin"],
        enabled: bool = True,
        interval: float | None = None,
    ):
        super().__init__(api, identity_provider, interval)
        self.for_role = for_role
        self.enabled = enabled

    def _allowed(self, identity):
        if not self.enabled or identity is None:
            return False
        return identity.is_admin if self.for_role == "admin" else identity.is_client

    def _load(self) -> int:
        if self.for_role == "admin":
            return admin_unread_count(self.api.admin_threads())
        return user_unread_count(self.api.user_threads())

    def _on_error(self):
        self.count = 0
