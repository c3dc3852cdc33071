# storefront/api/auth.py
"""
Bearer credential check for the backend.

Tokens are `<base64url(json claims)>.<hex hmac-sha256>` signed with AUTH_SECRET,
the same shared-secret scheme the identity provider uses when it mints them.
"""
import base64
import hashlib
import hmac
import json
import time

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from storefront.domain.identity import Identity, ROLE_CLIENT
from storefront.utils.settings import AUTH_SECRET
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


def _sign(payload: str, secret: str) -> str:
    return hmac.new(secret.encode(), payload.encode(), hashlib.sha256).hexdigest()


def issue_token(identity: Identity, ttl: int = 3600, secret: str | None = None) -> str:
    claims = {
        "uid": identity.uid,
        "role": identity.role,
        "name": identity.name,
        "email": identity.email,
        "exp": int(time.time()) + ttl,
    }
    payload = base64.urlsafe_b64encode(json.dumps(claims).encode()).decode().rstrip("=")
    return f"{payload}.{_sign(payload, secret or AUTH_SECRET)}"


def verify_token(token: str, secret: str | None = None) -> Identity:
    try:
        payload, signature = token.rsplit(".", 1)
    except ValueError:
        raise PermissionError("Malformed token")

    if not hmac.compare_digest(_sign(payload, secret or AUTH_SECRET), signature):
        raise PermissionError("Invalid token signature")

    padded = payload + "=" * (-len(payload) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(padded))
    except (ValueError, TypeError):
        raise PermissionError("Malformed token claims")

    if not isinstance(claims, dict) or not claims.get("uid"):
        raise PermissionError("Malformed token claims")

    try:
        expires = int(claims.get("exp", 0))
    except (ValueError, TypeError):
        raise PermissionError("Malformed token expiry")
    if expires < time.time():
        raise PermissionError("Token expired")

    return Identity(
        uid=str(claims["uid"]),
        role=claims.get("role") or ROLE_CLIENT,
        name=claims.get("name"),
        email=claims.get("email"),
    )


def get_identity(credentials: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> Identity:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    try:
        return verify_token(credentials.credentials)
    except PermissionError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise HTTPException(status_code=401, detail=str(e))


def require_admin(identity: Identity = Depends(get_identity)) -> Identity:
    if not identity.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return identity


def get_optional_identity(credentials: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> Identity | None:
    if credentials is None:
        return None
    return get_identity(credentials)
