# storefront/client/order_tracking.py
from dataclasses import dataclass, field
from typing import List

from storefront.client.api_client import REMOTE_ERRORS, StorefrontClient
from storefront.domain.order_status import FORWARD_PATH, progress_index
from storefront.domain.schemas import OrderOut, OrderStatus
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

MSG_NO_ORDERS = "We could not find any orders associated with your account yet."
MSG_LOAD_FAILED = "Failed to load this order. Please try again."


@dataclass(frozen=True)
class TrackingStep:
    status: OrderStatus
    reached: bool
    current: bool


@dataclass(frozen=True)
class TrackedOrder:
    order: OrderOut | None = None
    error: str | None = None
    steps: List[TrackingStep] = field(default_factory=list)

    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self.order.items) if self.order else 0


def progress(order: OrderOut) -> List[TrackingStep]:
    """Steps of pending → preparing → ready → completed; a cancelled order has none reached."""
    idx = progress_index(order.status)
    return [TrackingStep(status=s, reached=0 <= i <= idx, current=i == idx) for i, s in enumerate(FORWARD_PATH)]


class OrderTracker:
    """Read-only order views for the signed-in customer."""

    def __init__(self, api: StorefrontClient):
        self.api = api

    def my_orders(self) -> List[OrderOut]:
        try:
            return self.api.my_orders()
        except REMOTE_ERRORS as e:
            logger.error(f"Failed to load my orders: {e}")
            return []

    def load(self, order_id: str | None = None) -> TrackedOrder:
        """Load one order; without an id (e.g. straight after checkout) the latest order is shown."""
        try:
            target = order_id
            if not target:
                orders = self.api.my_orders()
                target = orders[0].id if orders else None
            if not target:
                return TrackedOrder(error=MSG_NO_ORDERS)

            order = self.api.get_order(target)
        except REMOTE_ERRORS as e:
            logger.error(f"Failed to load order {order_id}: {e}")
            return TrackedOrder(error=MSG_LOAD_FAILED)

        return TrackedOrder(order=order, steps=progress(order))
