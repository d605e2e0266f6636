# app/api/deps.py
"""
Shared FastAPI dependencies.

Admin auth accepts either the ``X-Admin-Token`` header (API clients) or the
``admin_session`` JWT cookie (dashboard sessions).
"""

import hmac
import logging

from fastapi import Header, HTTPException, Request, status
from jose import JWTError

from app.core.config import settings
from app.domain.services.admin_auth import decode_admin_token

logger = logging.getLogger("api.deps")


def _has_valid_admin_cookie(request: Request) -> bool:
    """Return True if the request carries a valid ``admin_session`` JWT cookie."""
    token = request.cookies.get("admin_session")
    if not token:
        return False
    try:
        decode_admin_token(token)
        return True
    except JWTError:
        return False


async def require_admin_token(
    request: Request,
    x_admin_token: str = Header(None, alias="X-Admin-Token"),
) -> None:
    """Verify the caller is an authenticated admin, else 401."""
    if not settings.ADMIN_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="ADMIN_API_KEY is not configured on the server.",
        )

    if x_admin_token is not None:
        if hmac.compare_digest(x_admin_token, settings.ADMIN_API_KEY):
            return
        logger.warning("Invalid admin token attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin token.",
        )

    if _has_valid_admin_cookie(request):
        return

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Missing X-Admin-Token header.",
    )
