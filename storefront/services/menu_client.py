# storefront/services/menu_client.py
import requests

from storefront.utils.settings import MENU_SERVICE_URL, HTTP_TIMEOUT_SECONDS
from storefront.utils.retry import http_retry
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class MenuClient:
    def __init__(self, base_url: str | None = None, timeout: float = HTTP_TIMEOUT_SECONDS, session: requests.Session | None = None):
        self.base_url = (base_url or MENU_SERVICE_URL).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @http_retry()
    def fetch_item(self, item_id: str) -> dict:
        url = f"{self.base_url}/menu/{item_id}"
        logger.info(f"MenuClient GET {url}")

        resp = self.session.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    @http_retry()
    def fetch_menu(self) -> list[dict]:
        url = f"{self.base_url}/menu"
        logger.info(f"MenuClient GET {url}")

        resp = self.session.get(url, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        return data.get("items", []) if isinstance(data, dict) else data
