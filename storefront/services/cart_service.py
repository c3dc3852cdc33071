from decimal import Decimal
from typing import Dict, Any
from sqlalchemy.orm import Session
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.schemas import CartLine
from storefront.repos.cart_repo import CartRepo
from storefront.services.menu_client import MenuClient
from storefront.services.pricing import reprice_line
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

class CartService:
    """
    Account carts kept by the backend, one per user.
    commands (upsert, remove, clear) change state and answer with the full cart,
    query (get) is read only
    """

    def __init__(self, db: Session, menu_client: MenuClient | None = None):
        self.repo = CartRepo(db)
        self.menu_client = menu_client

    #query
    def get_cart(self, user_id: str) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            return {"items": [], "subtotal": Decimal("0.00")}

        items = self.repo.get_cart_items(cart.id)
        subtotal = sum((i.price * i.quantity for i in items), Decimal("0.00"))

        return {
            "items": [
                {
                    "item_id": i.menu_item_id,
                    "name": i.name,
                    "unit_price": i.price,
                    "quantity": i.quantity,
                }
                for i in items
            ],
            "subtotal": subtotal,
        }

    #commands
    def upsert_item(self, user_id: str, line: CartLine) -> Dict[str, Any]:
        """Set the line's quantity to the given total (not a delta)."""
        line = reprice_line(self.menu_client, line)

        cart = self.repo.get_or_create_cart(user_id)
        existing = self.repo.get_cart_item(cart.id, line.item_id)

        if existing:
            logger.info(
                f"Cart of {user_id}: {line.item_id} quantity {existing.quantity} -> {line.quantity}"
            )
            existing.quantity = line.quantity
            existing.price = line.unit_price
            existing.name = line.name
        else:
            logger.info(f"Cart of {user_id}: new line {line.item_id} x{line.quantity}")
            self.repo.add_cart_item(
                CartItemModel(
                    cart_id=cart.id,
                    menu_item_id=line.item_id,
                    name=line.name,
                    quantity=line.quantity,
                    price=line.unit_price,
                )
            )

        self.repo.commit()
        return self.get_cart(user_id)

    def remove_item(self, user_id: str, item_id: str) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            removed = self.repo.delete_cart_item(cart.id, item_id)
            self.repo.commit()
            logger.info(f"Cart of {user_id}: removed {item_id} ({removed} row)")
        return self.get_cart(user_id)

    def clear(self, user_id: str) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            self.repo.delete_all_items(cart.id)
            self.repo.commit()
            logger.info(f"Cart of {user_id} cleared")
        return self.get_cart(user_id)
