# storefront/domain/identity.py
from dataclasses import dataclass

ROLE_CLIENT = "client"
ROLE_ADMIN = "admin"


@dataclass(frozen=True)
class Identity:
    """Signed-in account as reported by the identity provider."""

    uid: str
    role: str = ROLE_CLIENT
    name: str | None = None
    email: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_client(self) -> bool:
        return self.role == ROLE_CLIENT
