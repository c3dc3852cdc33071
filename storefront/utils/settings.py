# storefront/utils/settings.py
import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
MENU_SERVICE_URL = os.getenv("MENU_SERVICE_URL", "http://localhost:8001")
AUTH_SECRET = os.getenv("AUTH_SECRET", "dev-secret-change-me")
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", 5))

# guest cart: "file" | "redis" | "memory"
GUEST_CART_BACKEND = os.getenv("GUEST_CART_BACKEND", "file")
GUEST_CART_PATH = os.getenv("GUEST_CART_PATH", os.path.expanduser("~/.storefront/guest_cart.json"))
GUEST_CART_KEY = os.getenv("GUEST_CART_KEY", "cart:guest")

ORDER_POLL_SECONDS = float(os.getenv("ORDER_POLL_SECONDS", 60))
UNREAD_POLL_SECONDS = float(os.getenv("UNREAD_POLL_SECONDS", 60))
ADMIN_PAGE_SIZE = int(os.getenv("ADMIN_PAGE_SIZE", 20))

SERVICE_FEE = Decimal(os.getenv("SERVICE_FEE", "0.00"))
CURRENCY = os.getenv("CURRENCY", "AUD")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
