# app/domain/services/admin_auth.py
"""
Admin authentication: JWT session for the restaurant dashboard.

The admin is a single operator identified by ADMIN_API_KEY. On login the key
is checked and a signed JWT is issued for an httpOnly cookie, valid for
ADMIN_JWT_ACCESS_EXPIRE_MINUTES (24h by default).
"""

from __future__ import annotations

import hmac
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.core.config import settings


def verify_admin_key(key: str) -> bool:
    """Timing-safe comparison of the provided key against ADMIN_API_KEY."""
    if not settings.ADMIN_API_KEY or not key:
        return False
    return hmac.compare_digest(key, settings.ADMIN_API_KEY)


def create_admin_token() -> str:
    """Create a signed JWT for an authenticated admin session."""
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.ADMIN_JWT_ACCESS_EXPIRE_MINUTES,
    )
    payload = {
        "sub": "admin",
        "type": "admin_access",
        "exp": expire,
    }
    return jwt.encode(payload, settings.ADMIN_JWT_SECRET, algorithm="HS256")


def decode_admin_token(token: str) -> dict:
    """
    Decode and validate an admin JWT.

    Raises ``JWTError`` on invalid / expired tokens.
    """
    payload = jwt.decode(token, settings.ADMIN_JWT_SECRET, algorithms=["HS256"])
    if payload.get("type") != "admin_access" or payload.get("sub") != "admin":
        raise JWTError("Invalid admin token")
    return payload
