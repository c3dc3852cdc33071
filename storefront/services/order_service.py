# storefront/services/order_service.py
from decimal import Decimal
from typing import Dict, Any
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.identity import Identity
from storefront.domain.order_status import (
    INITIAL_STATUS,
    validate_payment_transition,
    validate_status_transition,
)
from storefront.domain.schemas import OrderCreate, OrderUpdate, PaymentStatus
from storefront.repos.order_repo import OrderRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.menu_client import MenuClient
from storefront.services.pricing import reprice_line
from storefront.utils.settings import SERVICE_FEE, CURRENCY
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class TransitionError(ValueError):
    """Requested status/payment change is not a legal transition."""


def serialize_order(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "owner_id": order.user_id,
        "user_name": order.user_name,
        "email": order.email,
        "items": [
            {
                "item_id": i.menu_item_id,
                "name": i.name,
                "unit_price": i.price,
                "quantity": i.quantity,
            }
            for i in order.items
        ],
        "subtotal": order.subtotal,
        "service_fee": order.service_fee,
        "total": order.total,
        "currency": order.currency,
        "status": order.status,
        "payment_status": order.payment_status,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
        "notes": order.notes,
    }


class OrderService:
    """
    Order domain: creation from a cart snapshot, owner/admin reads, and the
    admin-driven status and payment lifecycle. This is the authority on which
    transitions are legal; clients only offer them.
    """

    def __init__(self, db: Session, menu_client: MenuClient | None = None):
        self.db = db
        self.menu_client = menu_client
        self.repo = OrderRepo(db)
        self.users = UserRepo(db)

    def create_order(self, identity: Identity, payload: OrderCreate, idempotency_key: str | None = None):
        """
        Use Case: create an order from the submitted cart lines.

        1. A repeated idempotency key returns the order created the first time
        2. Items are re-priced against the menu, subtotal/fee/total computed here
        3. Order starts as pending / unpaid
        """
        if idempotency_key:
            existing = self.repo.get_by_idempotency_key(idempotency_key)
            if existing:
                if existing.user_id != identity.uid:
                    raise PermissionError("Idempotency key belongs to another account")
                logger.info(f"Order {existing.id} replayed for key {idempotency_key}")
                return serialize_order(existing)

        if not payload.items:
            raise ValueError("Cannot create an order from an empty cart")

        lines = [reprice_line(self.menu_client, line) for line in payload.items]
        subtotal = sum((line.line_total for line in lines), Decimal("0.00"))
        fee = SERVICE_FEE

        user = self.users.get_user(identity.uid)
        order = OrderModel(
            user_id=identity.uid,
            user_name=(user.name if user else None) or identity.name,
            email=(user.email if user else None) or identity.email,
            subtotal=subtotal,
            service_fee=fee,
            total=subtotal + fee,
            currency=CURRENCY,
            status=INITIAL_STATUS.value,
            payment_status=PaymentStatus.UNPAID.value,
            notes=payload.notes,
            idempotency_key=idempotency_key,
            items=[
                OrderItemModel(
                    menu_item_id=line.item_id,
                    name=line.name,
                    price=line.unit_price,
                    quantity=line.quantity,
                )
                for line in lines
            ],
        )

        try:
            created = self.repo.create_order(order)
        except IntegrityError:
            # concurrent submission with the same key won the insert
            self.repo.rollback()
            existing = self.repo.get_by_idempotency_key(idempotency_key) if idempotency_key else None
            if existing is None:
                raise
            return serialize_order(existing)

        logger.info(f"Order {created.id} created for {identity.uid}, total {created.total} {created.currency}")
        return serialize_order(created)

    def my_orders(self, identity: Identity):
        return [serialize_order(o) for o in self.repo.list_for_user(identity.uid)]

    def get_order(self, order_id: str, identity: Identity):
        order = self.repo.get_order(order_id)

        if not order:
            raise LookupError("Order does not exist")

        if order.user_id != identity.uid and not identity.is_admin:
            raise PermissionError("No access to this order")

        return serialize_order(order)

    def list_orders(self, page: int = 1, limit: int = 100, status: str | None = None):
        offset = (max(page, 1) - 1) * limit
        orders, total = self.repo.list_orders(offset=offset, limit=limit, status=status)
        return {"items": [serialize_order(o) for o in orders], "total": total}

    def update_order(self, order_id: str, payload: OrderUpdate):
        """
        Use Case: admin changes status and/or payment status.
        Terminal orders reject any status change, payment only goes unpaid -> paid.
        """
        order = self.repo.get_order(order_id)
        if not order:
            raise LookupError("Order does not exist")

        changes: Dict[str, Any] = {}

        if payload.status is not None:
            result = validate_status_transition(order.status, payload.status)
            if not result.allowed:
                raise TransitionError(result.reason)
            changes["status"] = payload.status.value

        if payload.payment_status is not None:
            result = validate_payment_transition(order.payment_status, payload.payment_status)
            if not result.allowed:
                raise TransitionError(result.reason)
            changes["payment_status"] = payload.payment_status.value

        updated = self.repo.update_order(order, **changes)
        logger.info(f"Order {order_id} updated: {changes}")
        return serialize_order(updated)
