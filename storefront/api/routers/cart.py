#storefront/api/routers/cart.py
from fastapi import APIRouter, Depends, HTTPException
from requests import RequestException
from sqlalchemy.orm import Session

from storefront.api.auth import get_identity
from storefront.data.database import get_db
from storefront.domain.identity import Identity
from storefront.domain.schemas import CartLine, CartOut
from storefront.services.cart_service import CartService
from storefront.services.menu_client import MenuClient
from storefront.utils.settings import MENU_SERVICE_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/cart", tags=["cart"])


def get_menu_client() -> MenuClient | None:
    return MenuClient() if MENU_SERVICE_URL else None


def get_service(db: Session = Depends(get_db), menu_client: MenuClient | None = Depends(get_menu_client)):
    return CartService(db=db, menu_client=menu_client)


@router.get("", response_model=CartOut)
def get_cart(
    identity: Identity = Depends(get_identity),
    svc: CartService = Depends(get_service),
):
    return svc.get_cart(identity.uid)


@router.post("", response_model=CartOut)
def upsert_item(
    payload: CartLine,
    identity: Identity = Depends(get_identity),
    svc: CartService = Depends(get_service),
):
    """Sets the line to the sent quantity (absolute, not a delta)."""
    try:
        return svc.upsert_item(identity.uid, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RequestException as e:
        logger.error(f"Menu service unreachable: {e}")
        raise HTTPException(status_code=503, detail="Menu service unavailable")


@router.delete("/{item_id}", response_model=CartOut)
def remove_item(
    item_id: str,
    identity: Identity = Depends(get_identity),
    svc: CartService = Depends(get_service),
):
    return svc.remove_item(identity.uid, item_id)


@router.delete("", response_model=CartOut)
def clear_cart(
    identity: Identity = Depends(get_identity),
    svc: CartService = Depends(get_service),
):
    return svc.clear(identity.uid)
