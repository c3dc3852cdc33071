#import all models so SQLAlchemy registers them on Base.metadata

from storefront.data.models.user import UserModel
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.contact import ContactThreadModel, ContactReplyModel

__all__ = [
    "UserModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "ContactThreadModel",
    "ContactReplyModel",
]
