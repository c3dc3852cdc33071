# storefront/domain/lines.py
"""Validated construction of cart lines from catalog records."""
from decimal import Decimal
from typing import Any, Mapping

from pydantic import ValidationError

from storefront.domain.schemas import CartLine, MenuItem, MenuSubItem

VARIANT_SEPARATOR = "::"


class InvalidMenuItem(ValueError):
    pass


def _coerce_item(item: MenuItem | Mapping[str, Any]) -> MenuItem:
    if isinstance(item, MenuItem):
        return item
    if not isinstance(item, Mapping):
        raise InvalidMenuItem(f"Unsupported menu item type: {type(item).__name__}")
    data = dict(item)
    # catalog records come with either _id or id
    if "_id" not in data and "id" in data:
        data["_id"] = data.pop("id")
    try:
        return MenuItem.model_validate(data)
    except ValidationError as e:
        raise InvalidMenuItem(f"Malformed menu item: {e}") from e


def line_id_for(item_id: str, variant_name: str | None = None) -> str:
    if variant_name:
        return f"{item_id}{VARIANT_SEPARATOR}{variant_name}"
    return item_id


def line_from_menu_item(
    item: MenuItem | Mapping[str, Any],
    variant: str | MenuSubItem | None = None,
    quantity: int = 1,
) -> CartLine:
    """
    Build a CartLine for `item`, optionally for one of its priced sub-options.

    Raises InvalidMenuItem when the item has no stable id or the variant is unknown.
    """
    menu_item = _coerce_item(item)

    item_id = (menu_item.id or "").strip()
    if not item_id:
        raise InvalidMenuItem(f"Menu item '{menu_item.name}' has no id")

    if variant is None:
        return CartLine(item_id=item_id, name=menu_item.name, unit_price=menu_item.price, quantity=quantity)

    variant_name = variant.name if isinstance(variant, MenuSubItem) else str(variant)
    match = next((s for s in menu_item.sub_items if s.name == variant_name), None)
    if match is None:
        raise InvalidMenuItem(f"Menu item '{menu_item.name}' has no option '{variant_name}'")

    return CartLine(
        item_id=line_id_for(item_id, match.name),
        name=f"{menu_item.name} ({match.name})",
        unit_price=Decimal(match.price),
        quantity=quantity,
    )


def cart_total(lines) -> Decimal:
    return sum((line.line_total for line in lines), Decimal("0.00"))
