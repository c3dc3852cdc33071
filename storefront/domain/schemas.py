# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import List, Literal
from decimal import Decimal
from datetime import datetime
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class WireModel(BaseModel):
    """Base for everything that travels as JSON; field names follow the storefront's camelCase wire format."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# =====================================================
# MENU
# =====================================================
class MenuSubItem(WireModel):
    name: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)


class MenuItem(WireModel):
    id: str | None = Field(None, alias="_id")
    name: str
    description: str = ""
    category: str = "other"
    section: str | None = None
    price: Decimal = Field(..., ge=0)
    is_available: bool = Field(True, alias="isAvailable")
    is_featured: bool = Field(False, alias="isFeatured")
    sub_items: List[MenuSubItem] = Field(default_factory=list, alias="subItems")


# =====================================================
# CART
# =====================================================
class CartLine(WireModel):
    """One cart entry, keyed by menu item (or item::variant)."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True, frozen=True)

    item_id: str = Field(..., min_length=1, alias="menuItemId")
    name: str
    unit_price: Decimal = Field(..., ge=0, alias="price")
    quantity: int = Field(..., ge=1)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class CartOut(WireModel):
    items: List[CartLine] = Field(default_factory=list)
    subtotal: Decimal = Decimal("0.00")


# =====================================================
# ORDERS
# =====================================================
class OrderCreate(WireModel):
    items: List[CartLine] = Field(..., min_length=1)
    notes: str | None = Field(None, max_length=500)


class OrderUpdate(WireModel):
    status: OrderStatus | None = None
    payment_status: PaymentStatus | None = Field(None, alias="paymentStatus")

    @model_validator(mode="after")
    def _require_change(self):
        if self.status is None and self.payment_status is None:
            raise ValueError("Nothing to update: provide status or paymentStatus")
        return self


class OrderOut(WireModel):
    id: str = Field(..., alias="_id")
    owner_id: str | None = Field(None, alias="userId")
    user_name: str | None = Field(None, alias="userName")
    email: str | None = None
    items: List[CartLine]
    subtotal: Decimal
    service_fee: Decimal = Field(Decimal("0.00"), alias="serviceFee")
    total: Decimal
    currency: str = "AUD"
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = Field(PaymentStatus.UNPAID, alias="paymentStatus")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")
    notes: str | None = None


class OrderCreatedOut(WireModel):
    order_id: str = Field(..., alias="orderId")
    order: OrderOut


class OrderEnvelope(WireModel):
    order: OrderOut


class MyOrdersOut(WireModel):
    orders: List[OrderOut]


class OrderListOut(WireModel):
    items: List[OrderOut]
    total: int


# =====================================================
# USERS
# =====================================================
class UserCreate(BaseModel):
    """Schema for registering the signed-in identity with the store."""

    name: str = Field(..., min_length=1, max_length=100)
    email: str | None = Field(None, max_length=200)


class UserRead(BaseModel):
    id: str
    name: str
    email: str | None = None
    role: str

    model_config = ConfigDict(from_attributes=True)


# =====================================================
# CONTACT THREADS
# =====================================================
class ContactCreate(WireModel):
    name: str = Field("Guest", max_length=100)
    email: str = Field("", max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)


class ReplyIn(WireModel):
    message: str = Field(..., min_length=1, max_length=2000)


class ReadIn(WireModel):
    actor: Literal["user", "admin"]


class ReplyOut(WireModel):
    sender_role: Literal["user", "admin"] = Field(..., alias="senderRole")
    message: str
    created_at: datetime = Field(..., alias="createdAt")
    read_by_user: bool | None = Field(None, alias="readByUser")
    read_by_admin: bool | None = Field(None, alias="readByAdmin")


class ThreadOut(WireModel):
    id: str = Field(..., alias="_id")
    user_id: str | None = Field(None, alias="userId")
    name: str = "Guest"
    email: str = ""
    message: str = ""
    handled: bool = False
    created_at: datetime = Field(..., alias="createdAt")
    unread_by_user: int | None = Field(None, alias="unreadByUser")
    unread_by_admin: int | None = Field(None, alias="unreadByAdmin")
    replies: List[ReplyOut] = Field(default_factory=list)


class ThreadListOut(WireModel):
    items: List[ThreadOut]
    total: int
