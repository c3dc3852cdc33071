from __future__ import annotations

from decimal import Decimal

import pytest

from storefront.domain.lines import InvalidMenuItem, cart_total, line_from_menu_item
from storefront.domain.schemas import CartLine, MenuItem


def test_line_from_plain_record(smash) -> None:
    line = line_from_menu_item(smash)
    assert line.item_id == "m-smash"
    assert line.unit_price == Decimal("12.90")
    assert line.quantity == 1


def test_record_with_id_instead_of_underscore_id() -> None:
    line = line_from_menu_item({"id": "x1", "name": "Tea", "price": 3})
    assert line.item_id == "x1"


@pytest.mark.parametrize(
    "item",
    [
        {"name": "No id", "price": 4},
        {"_id": "", "name": "Blank id", "price": 4},
        {"_id": "   ", "name": "Whitespace id", "price": 4},
        MenuItem(name="Model without id", price=Decimal("2")),
        "not a record",
    ],
)
def test_items_without_stable_id_are_rejected(item) -> None:
    with pytest.raises(InvalidMenuItem):
        line_from_menu_item(item)


def test_variant_gets_composite_id_and_its_own_price(latte) -> None:
    line = line_from_menu_item(latte, "Large")
    assert line.item_id == "m-latte::Large"
    assert line.name == "Latte (Large)"
    assert line.unit_price == Decimal("5.60")


def test_unknown_variant_is_rejected(latte) -> None:
    with pytest.raises(InvalidMenuItem):
        line_from_menu_item(latte, "Huge")


def test_wire_aliases() -> None:
    line = CartLine.model_validate({"menuItemId": "a", "name": "A", "price": 2.5, "quantity": 2})
    assert line.model_dump(mode="json", by_alias=True) == {"menuItemId": "a", "name": "A", "price": "2.5", "quantity": 2}
    assert cart_total([line]) == Decimal("5.0")


def test_zero_quantity_line_cannot_exist() -> None:
    with pytest.raises(ValueError):
        CartLine(item_id="a", name="A", unit_price=Decimal("1"), quantity=0)
