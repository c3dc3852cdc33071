# storefront/client/menu.py
from typing import List

from storefront.domain.schemas import MenuItem
from storefront.services.menu_client import MenuClient


class MenuLookup:
    """Read-only view of the catalog; every call goes to the menu service, nothing is cached."""

    def __init__(self, client: MenuClient | None = None):
        self.client = client or MenuClient()

    def list_items(self, available_only: bool = False) -> List[MenuItem]:
        items = [MenuItem.model_validate(i) for i in self.client.fetch_menu()]
        if available_only:
            items = [i for i in items if i.is_available]
        return items

    def get_item(self, item_id: str) -> MenuItem:
        return MenuItem.model_validate(self.client.fetch_item(item_id))

    def by_section(self, available_only: bool = True) -> dict[str, List[MenuItem]]:
        sections: dict[str, List[MenuItem]] = {}
        for item in self.list_items(available_only=available_only):
            sections.setdefault(item.section or item.category, []).append(item)
        return sections
