"""Order status rules shared by the backend (enforcement) and the admin/customer views."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from storefront.domain.schemas import OrderStatus, PaymentStatus


FORWARD_PATH: Tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.COMPLETED,
)

TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

CONFIRM_REQUIRED_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

INITIAL_STATUS = OrderStatus.PENDING


@dataclass(frozen=True, slots=True)
class TransitionValidationResult:
    allowed: bool
    reason: str | None = None


def _status(value: OrderStatus | str) -> OrderStatus:
    return value if isinstance(value, OrderStatus) else OrderStatus(str(value).strip().lower())


def is_terminal(status: OrderStatus | str) -> bool:
    return _status(status) in TERMINAL_STATUSES


def requires_confirmation(target: OrderStatus | str) -> bool:
    return _status(target) in CONFIRM_REQUIRED_STATUSES


def selectable_statuses(current: OrderStatus | str) -> Tuple[OrderStatus, ...]:
    """Statuses the admin console offers for an order; nothing once the order is terminal.

    Non-terminal orders get every status so staff can correct a mistaken step back or sideways.
    """
    if is_terminal(current):
        return ()
    return tuple(OrderStatus)


def progress_index(status: OrderStatus | str) -> int:
    """Position along pending → preparing → ready → completed, -1 for cancelled."""
    s = _status(status)
    return FORWARD_PATH.index(s) if s in FORWARD_PATH else -1


def validate_status_transition(
    current: OrderStatus | str,
    target: OrderStatus | str,
) -> TransitionValidationResult:
    try:
        cur = _status(current)
        tgt = _status(target)
    except ValueError as e:
        return TransitionValidationResult(False, f"Unsupported status: {e}")

    if cur == tgt:
        return TransitionValidationResult(True)

    if cur in TERMINAL_STATUSES:
        return TransitionValidationResult(False, f"Order is already {cur.value}; status can no longer change.")

    return TransitionValidationResult(True)


def validate_payment_transition(
    current: PaymentStatus | str,
    target: PaymentStatus | str,
) -> TransitionValidationResult:
    try:
        cur = PaymentStatus(current)
        tgt = PaymentStatus(target)
    except ValueError as e:
        return TransitionValidationResult(False, f"Unsupported payment status: {e}")

    if cur == tgt:
        return TransitionValidationResult(True)

    if cur == PaymentStatus.PAID:
        return TransitionValidationResult(False, "A paid order cannot be marked unpaid.")

    return TransitionValidationResult(True)
