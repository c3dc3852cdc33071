# storefront/client/identity.py
from enum import Enum
from typing import Protocol

from storefront.domain.identity import Identity


class AuthState(Enum):
    # identity provider has not answered yet
    UNKNOWN = "unknown"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class IdentityProvider(Protocol):
    def current_identity(self) -> Identity | None: ...

    def get_token(self) -> str | None: ...


class ManualIdentityProvider:
    """Identity provider driven by explicit sign_in / sign_out calls (kiosk mode, scripts, tests)."""

    def __init__(self, identity: Identity | None = None, token: str | None = None):
        self._identity = identity
        self._token = token

    def sign_in(self, identity: Identity, token: str):
        self._identity = identity
        self._token = token

    def sign_out(self):
        self._identity = None
        self._token = None

    def current_identity(self) -> Identity | None:
        return self._identity

    def get_token(self) -> str | None:
        return self._token if self._identity else None
