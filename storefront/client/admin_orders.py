# storefront/client/admin_orders.py
import math
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Literal, Set, Tuple

from storefront.client.api_client import REMOTE_ERRORS, StorefrontClient
from storefront.client.identity import IdentityProvider
from storefront.client.polling import Poller
from storefront.domain.order_status import requires_confirmation, selectable_statuses
from storefront.domain.schemas import OrderOut, OrderStatus, PaymentStatus
from storefront.utils.settings import ADMIN_PAGE_SIZE, ORDER_POLL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

DateFilter = Literal["all", "today", "7days"]
SortBy = Literal["newest", "oldest", "amountDesc", "amountAsc"]

# (title, text) -> True when the operator confirmed
ConfirmPrompt = Callable[[str, str], bool]

MSG_NOT_ADMIN = "You must be logged in as admin to view orders."
MSG_LOAD_FAILED = "Failed to load orders."
MSG_STATUS_FAILED = "Failed to update the order status. Try again."
MSG_PAYMENT_FAILED = "Failed to update payment status. Try again."


@dataclass(frozen=True)
class UpdateResult:
    ok: bool
    order: OrderOut | None = None
    error: str | None = None
    cancelled: bool = False


@dataclass(frozen=True)
class AgeBadge:
    label: str
    level: Literal["normal", "warning", "late"]


@dataclass(frozen=True)
class Summary:
    total_today: int
    revenue_today: Decimal
    pending: int
    preparing: int
    ready: int


@dataclass(frozen=True)
class Page:
    items: List[OrderOut]
    page: int
    total_pages: int


def detect_new_orders(previous_ids: Set[str], current_ids: Iterable[str]) -> Set[str]:
    return set(current_ids) - previous_ids


def _aware(dt: datetime) -> datetime:
    # sqlite hands back naive timestamps; they are stored as UTC
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _local_now(now: datetime | None) -> datetime:
    return _aware(now) if now else datetime.now(timezone.utc).astimezone()


def _start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def age_badge(created_at: datetime, now: datetime | None = None) -> AgeBadge:
    mins = math.floor((_local_now(now) - _aware(created_at)).total_seconds() / 60)
    if mins <= 0:
        label = "Just now"
    elif mins == 1:
        label = "1 min ago"
    else:
        label = f"{mins} mins ago"

    if mins >= 20:
        return AgeBadge(label, "late")
    if mins >= 10:
        return AgeBadge(label, "warning")
    return AgeBadge(label, "normal")


def paginate(orders: List[OrderOut], page: int, page_size: int = ADMIN_PAGE_SIZE) -> Page:
    total_pages = max(1, math.ceil(len(orders) / page_size))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * page_size
    return Page(items=orders[start:start + page_size], page=page, total_pages=total_pages)


class AdminOrderBoard:
    """
    Staff view of all orders.

    Polls the order collection on a fixed interval (and on refresh()). Orders
    whose id was not in the previous poll trigger `on_new_orders` once; the
    very first load never alerts.

    Status changes are offered permissively for open orders, but completing or
    cancelling, and marking as paid, need `confirm` to say yes before anything
    is sent. The backend has the final word on every change.
    """

    def __init__(
        self,
        api: StorefrontClient,
        identity_provider: IdentityProvider,
        confirm: ConfirmPrompt,
        on_new_orders: Callable[[Set[str]], None] | None = None,
        poll_interval: float = ORDER_POLL_SECONDS,
        fetch_limit: int = 100,
    ):
        self.api = api
        self.identity_provider = identity_provider
        self.confirm = confirm
        self.on_new_orders = on_new_orders
        self.fetch_limit = fetch_limit

        self.orders: List[OrderOut] = []
        self.error: str | None = None
        self.loading = False
        self._has_loaded = False
        self._prev_ids: Set[str] = set()
        self._lock = threading.Lock()
        self._on_updated: List[Callable[[OrderOut], None]] = []
        self._poller = Poller(lambda: self.refresh(silent=True), poll_interval, name="admin-orders")

    # =====================================================
    # POLLING
    # =====================================================
    def start(self):
        self._poller.start()

    def stop(self):
        self._poller.stop()

    def refresh(self, silent: bool = False) -> bool:
        identity = self.identity_provider.current_identity()
        with self._lock:
            if not silent:
                self.loading = True
            try:
                self.error = None
                if identity is None or not identity.is_admin:
                    self.orders = []
                    self.error = MSG_NOT_ADMIN
                    self._has_loaded = False
                    self._prev_ids = set()
                    return False

                try:
                    next_items = self.api.list_orders(page=1, limit=self.fetch_limit)
                except REMOTE_ERRORS as e:
                    logger.error(f"Failed to load orders: {e}")
                    self.error = MSG_LOAD_FAILED
                    return False

                next_ids = {o.id for o in next_items}
                new_ids = detect_new_orders(self._prev_ids, next_ids) if self._has_loaded else set()
                self._prev_ids = next_ids
                self._has_loaded = True
                self.orders = next_items
            finally:
                if not silent:
                    self.loading = False

        if new_ids:
            logger.info(f"New orders: {sorted(new_ids)}")
            if self.on_new_orders:
                try:
                    self.on_new_orders(new_ids)
                except Exception:
                    logger.exception("New order alert failed")
        return True

    # =====================================================
    # TRANSITIONS
    # =====================================================
    def on_order_updated(self, callback: Callable[[OrderOut], None]):
        self._on_updated.append(callback)

    def find(self, order_id: str) -> OrderOut | None:
        return next((o for o in self.orders if o.id == order_id), None)

    def status_options(self, order_id: str) -> Tuple[OrderStatus, ...]:
        order = self.find(order_id)
        return selectable_statuses(order.status) if order else ()

    def change_status(self, order_id: str, status: OrderStatus | str) -> UpdateResult:
        target = OrderStatus(status)
        order = self.find(order_id)
        if order is None:
            return UpdateResult(ok=False, error=f"Order {order_id} is not on the board.")
        if target == order.status:
            return UpdateResult(ok=True, order=order)
        if target not in selectable_statuses(order.status):
            return UpdateResult(ok=False, error=f"Order is already {order.status.value}.")

        if requires_confirmation(target):
            text = "This will finalize the order." if target == OrderStatus.COMPLETED else "This will cancel the order."
            if not self.confirm(f'Mark order as "{target.value}"?', text):
                return UpdateResult(ok=False, cancelled=True)

        try:
            updated = self.api.update_order(order_id, status=target.value)
        except REMOTE_ERRORS as e:
            logger.error(f"Failed to update status of {order_id}: {e}")
            return UpdateResult(ok=False, error=MSG_STATUS_FAILED)

        self._apply(updated)
        return UpdateResult(ok=True, order=updated)

    def mark_paid(self, order_id: str) -> UpdateResult:
        order = self.find(order_id)
        if order is None:
            return UpdateResult(ok=False, error=f"Order {order_id} is not on the board.")
        if order.payment_status == PaymentStatus.PAID:
            return UpdateResult(ok=True, order=order)

        if not self.confirm("Mark as paid?", "This will record that the customer paid at the counter."):
            return UpdateResult(ok=False, cancelled=True)

        try:
            updated = self.api.update_order(order_id, payment_status=PaymentStatus.PAID.value)
        except REMOTE_ERRORS as e:
            logger.error(f"Failed to update payment of {order_id}: {e}")
            return UpdateResult(ok=False, error=MSG_PAYMENT_FAILED)

        self._apply(updated)
        return UpdateResult(ok=True, order=updated)

    def _apply(self, updated: OrderOut):
        with self._lock:
            self.orders = [updated if o.id == updated.id else o for o in self.orders]
        for callback in list(self._on_updated):
            try:
                callback(updated)
            except Exception:
                logger.exception("Order updated callback failed")

    # =====================================================
    # VIEWS
    # =====================================================
    def counts(self) -> Dict[str, int]:
        base = {"all": len(self.orders), **{s.value: 0 for s in OrderStatus}}
        for o in self.orders:
            base[o.status.value] += 1
        return base

    def summary(self, now: datetime | None = None) -> Summary:
        today = _start_of_day(_local_now(now))
        total_today = 0
        revenue_today = Decimal("0.00")
        for o in self.orders:
            if _aware(o.created_at) >= today:
                total_today += 1
                if o.status != OrderStatus.CANCELLED and o.payment_status == PaymentStatus.PAID:
                    revenue_today += o.total
        counts = self.counts()
        return Summary(
            total_today=total_today,
            revenue_today=revenue_today,
            pending=counts[OrderStatus.PENDING.value],
            preparing=counts[OrderStatus.PREPARING.value],
            ready=counts[OrderStatus.READY.value],
        )

    def filtered(
        self,
        status: str = "all",
        date_filter: DateFilter = "all",
        search: str = "",
        sort_by: SortBy = "newest",
        now: datetime | None = None,
    ) -> List[OrderOut]:
        data = list(self.orders)

        if status != "all":
            data = [o for o in data if o.status.value == status]

        if date_filter == "today":
            start = _start_of_day(_local_now(now))
            data = [o for o in data if _aware(o.created_at) >= start]
        elif date_filter == "7days":
            cutoff = _local_now(now) - timedelta(days=7)
            data = [o for o in data if _aware(o.created_at) >= cutoff]

        term = search.strip().lower()
        if term:
            data = [
                o for o in data
                if term in o.id.lower()
                or term in (o.user_name or "").lower()
                or term in (o.email or "").lower()
            ]

        if sort_by == "newest":
            data.sort(key=lambda o: _aware(o.created_at), reverse=True)
        elif sort_by == "oldest":
            data.sort(key=lambda o: _aware(o.created_at))
        elif sort_by == "amountDesc":
            data.sort(key=lambda o: o.total, reverse=True)
        elif sort_by == "amountAsc":
            data.sort(key=lambda o: o.total)
        return data

    def page(self, page: int = 1, **filters) -> Page:
        return paginate(self.filtered(**filters), page)
