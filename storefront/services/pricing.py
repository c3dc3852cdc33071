# storefront/services/pricing.py
import requests

from storefront.domain.lines import InvalidMenuItem, VARIANT_SEPARATOR, line_from_menu_item
from storefront.domain.schemas import CartLine, MenuItem
from storefront.services.menu_client import MenuClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def reprice_line(menu_client: MenuClient | None, line: CartLine) -> CartLine:
    """
    Rebuild `line` from the catalog: name and unit price come from the menu, quantity from the caller.
    Unknown, unavailable or bad-variant items raise ValueError; a menu outage propagates as RequestException.
    Without a menu client the line is trusted as sent (dev and tests).
    """
    if menu_client is None:
        return line

    base_id, _, variant = line.item_id.partition(VARIANT_SEPARATOR)
    try:
        pdata = menu_client.fetch_item(base_id)
    except requests.HTTPError as e:
        if e.response is not None and e.response.status_code == 404:
            raise ValueError(f"Menu item {base_id} does not exist")
        raise

    menu_item = MenuItem.model_validate(pdata)
    if not menu_item.is_available:
        raise ValueError(f"{menu_item.name} is currently unavailable")

    try:
        canonical = line_from_menu_item(menu_item, variant or None, quantity=line.quantity)
    except InvalidMenuItem as e:
        raise ValueError(str(e))

    if canonical.unit_price != line.unit_price:
        logger.info(f"Price of {line.item_id} corrected {line.unit_price} -> {canonical.unit_price}")
    return canonical
