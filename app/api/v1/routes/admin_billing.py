# app/api/v1/routes/admin_billing.py
"""
Admin endpoints for billing settings (GST rates, service charge, restaurant
details) and the admin session cookie.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse

from app.api.deps import require_admin_token
from app.api.v1.envelope import ok
from app.api.v1.schemas.auth import AdminLoginRequest
from app.api.v1.schemas.billing import BillingSettingsUpdate
from app.core.config import settings
from app.domain.models.billing import InvalidInput, LineItem
from app.domain.services.admin_auth import create_admin_token, verify_admin_key
from app.domain.services.billing_engine import calculate_bill
from app.domain.services.billing_settings_service import get_billing_settings_service
from app.infrastructure.audit import log_admin_action

logger = logging.getLogger("api.v1.admin_billing")

router = APIRouter(prefix="/admin", tags=["Admin Billing"])


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


@router.post("/auth/login", response_model=dict)
async def admin_login(body: AdminLoginRequest, request: Request):
    """Validate the admin key and set an httpOnly session cookie."""
    if not verify_admin_key(body.admin_key):
        log_admin_action("login_failed", admin_ip=request.client.host if request.client else "")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid admin key.")

    response = JSONResponse(ok(message="Logged in"))
    response.set_cookie(
        key="admin_session",
        value=create_admin_token(),
        httponly=True,
        samesite="lax",
        max_age=settings.ADMIN_JWT_ACCESS_EXPIRE_MINUTES * 60,
    )
    return response


@router.post("/auth/logout", response_model=dict)
async def admin_logout():
    response = JSONResponse(ok(message="Logged out"))
    response.delete_cookie(key="admin_session")
    return response


# ---------------------------------------------------------------------------
# Billing settings
# ---------------------------------------------------------------------------


def _sample_preview(resolved) -> tuple[dict | None, str | None]:
    """Bill for a ₹200 tax-exclusive item, as shown on the settings page.

    Returns ``(None, reason)`` when the stored settings cannot produce a bill,
    so the page still loads and the admin can correct them.
    """
    sample = LineItem(name="Sample", unit_price=Decimal("200"))
    try:
        return calculate_bill([sample], resolved.settings).to_dict(), None
    except InvalidInput as e:
        logger.warning("Billing settings preview failed: %s", e)
        return None, str(e)


@router.get("/billing-settings", response_model=dict)
async def get_billing_settings(
    _: None = Depends(require_admin_token),
):
    """Current billing settings and where they were resolved from."""
    resolved = await get_billing_settings_service().get_settings()
    preview, preview_error = _sample_preview(resolved)
    return ok(data={
        "settings": resolved.settings.to_dict(),
        "source": resolved.source,
        "defaultedKeys": list(resolved.defaulted_keys),
        "preview": preview,
        "previewError": preview_error,
    })


@router.put("/billing-settings", response_model=dict)
async def update_billing_settings(
    body: BillingSettingsUpdate,
    request: Request,
    _: None = Depends(require_admin_token),
):
    """Save billing settings. Rates are validated before anything is written."""
    values = body.model_dump(exclude_none=True)
    try:
        resolved = await get_billing_settings_service().save_settings(values)
    except InvalidInput as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    log_admin_action(
        "update_billing_settings",
        admin_ip=request.client.host if request.client else "",
        details={k: str(v) for k, v in values.items()},
    )
    preview = _sample_preview(resolved)[0]
    return ok(
        data={"settings": resolved.settings.to_dict(), "preview": preview},
        message="Billing settings saved",
    )
