# storefront/api/routers/orders.py
from fastapi import APIRouter, Depends, Header, HTTPException, Query
from requests import RequestException
from sqlalchemy.orm import Session

from storefront.api.auth import get_identity, require_admin
from storefront.api.routers.cart import get_menu_client
from storefront.data.database import get_db
from storefront.domain.identity import Identity
from storefront.domain.schemas import (
    MyOrdersOut,
    OrderCreate,
    OrderCreatedOut,
    OrderEnvelope,
    OrderListOut,
    OrderStatus,
    OrderUpdate,
)
from storefront.services.menu_client import MenuClient
from storefront.services.order_service import OrderService, TransitionError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session = Depends(get_db), menu_client: MenuClient | None = Depends(get_menu_client)):
    return OrderService(db=db, menu_client=menu_client)


@router.post("", response_model=OrderCreatedOut, status_code=201)
def create_order(
    payload: OrderCreate,
    identity: Identity = Depends(get_identity),
    idempotency_key: str | None = Header(None, alias="Idempotency-Key", max_length=64),
    svc: OrderService = Depends(get_service),
):
    """
    Creates an order from the submitted cart lines.
    Prices come from the menu, not from the request.
    A repeated Idempotency-Key returns the original order instead of a new one.
    """
    try:
        order = svc.create_order(identity, payload, idempotency_key)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RequestException as e:
        logger.error(f"Menu service unreachable: {e}")
        raise HTTPException(status_code=503, detail="Menu service unavailable")
    return {"order_id": order["id"], "order": order}


@router.get("/my", response_model=MyOrdersOut)
def my_orders(
    identity: Identity = Depends(get_identity),
    svc: OrderService = Depends(get_service),
):
    return {"orders": svc.my_orders(identity)}


@router.get("/{order_id}", response_model=OrderEnvelope)
def get_order(
    order_id: str,
    identity: Identity = Depends(get_identity),
    svc: OrderService = Depends(get_service),
):
    try:
        return {"order": svc.get_order(order_id, identity)}
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("", response_model=OrderListOut)
def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=1000),
    status: OrderStatus | None = Query(None),
    _admin: Identity = Depends(require_admin),
    svc: OrderService = Depends(get_service),
):
    return svc.list_orders(page=page, limit=limit, status=status.value if status else None)


@router.put("/{order_id}", response_model=OrderEnvelope)
def update_order(
    order_id: str,
    payload: OrderUpdate,
    _admin: Identity = Depends(require_admin),
    svc: OrderService = Depends(get_service),
):
    try:
        return {"order": svc.update_order(order_id, payload)}
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
