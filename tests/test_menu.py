from __future__ import annotations

from decimal import Decimal

from fastapi.testclient import TestClient

from storefront.client.cart_store import CartStore
from storefront.client.identity import AuthState
from storefront.client.menu import MenuLookup
from storefront.menu_service.main import app as menu_app


def test_lookup_filters_unavailable(menu_client) -> None:
    lookup = MenuLookup(menu_client)
    assert "m-toastie" in {i.id for i in lookup.list_items()}
    assert "m-toastie" not in {i.id for i in lookup.list_items(available_only=True)}


def test_lookup_groups_by_section(menu_client) -> None:
    menu_client.items["m-smash"] = {**menu_client.items["m-smash"], "section": "Burgers"}
    sections = MenuLookup(menu_client).by_section()
    assert [i.id for i in sections["Burgers"]] == ["m-smash"]
    assert "Gourmet Toastie" not in {i.name for items in sections.values() for i in items}


def test_lookup_item_feeds_cart(menu_client, fake_api) -> None:
    latte = MenuLookup(menu_client).get_item("m-latte")
    store = CartStore(fake_api)
    store.bind(AuthState.ANONYMOUS)
    store.add_item(latte, latte.sub_items[1])
    assert store.find("m-latte::Large").unit_price == Decimal("5.60")


def test_dev_menu_service() -> None:
    client = TestClient(menu_app)
    items = client.get("/menu").json()["items"]
    assert {"m-smash", "m-latte"} <= {i["_id"] for i in items}
    assert client.get("/menu/m-latte").json()["subItems"][1]["name"] == "Large"
    assert client.get("/menu/m-nothing").status_code == 404
