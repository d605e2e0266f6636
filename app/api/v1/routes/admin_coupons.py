# app/api/v1/routes/admin_coupons.py
"""
Admin coupon dashboard: list with filters, create campaign coupons.
"""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin_token
from app.api.v1.envelope import ok
from app.api.v1.schemas.coupons import CouponCreate, CouponOut
from app.core.db import get_db
from app.domain.services.coupon_service import CouponError, create_campaign_coupon
from app.infrastructure.audit import log_admin_action
from app.infrastructure.db.models import Coupon
from app.infrastructure.db.repositories.coupon_repository import CouponRepository

logger = logging.getLogger("api.v1.admin_coupons")

router = APIRouter(prefix="/admin/coupons", tags=["Admin Coupons"])


def _coupon_out(c: Coupon) -> dict:
    return CouponOut(
        id=str(c.id),
        code=c.code,
        customer_phone=c.customer_phone,
        discount_type=c.discount_type,
        discount_value=c.discount_value,
        minimum_order_amount=c.minimum_order_amount,
        maximum_discount_amount=c.maximum_discount_amount,
        expires_at=c.expires_at,
        is_used=bool(c.is_used),
        used_at=c.used_at,
        whatsapp_sent=bool(c.whatsapp_sent),
        created_at=c.created_at,
    ).model_dump(mode="json")


@router.get("", response_model=dict)
async def list_coupons(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str | None = Query(None),
    status_filter: Literal["used", "unused", "expired"] | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    """Coupons newest first, with used-coupon totals."""
    repo = CouponRepository(db)
    coupons, total = await repo.list_coupons(
        status=status_filter, search=search, limit=limit, offset=(page - 1) * limit,
    )
    used_count, savings = await repo.usage_summary()
    return ok(data={
        "coupons": [_coupon_out(c) for c in coupons],
        "totalPages": (total + limit - 1) // limit,
        "currentPage": page,
        "totalUsedCoupons": used_count,
        "totalSavingsProvided": str(savings),
    })


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    body: CouponCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    """Create a campaign coupon for one customer, optionally notifying on WhatsApp."""
    try:
        coupon = await create_campaign_coupon(
            customer_phone=body.customer_phone,
            discount_type=body.discount_type,
            discount_value=body.discount_value,
            expires_at=body.expires_at,
            db=db,
            minimum_order_amount=body.minimum_order_amount,
            maximum_discount_amount=body.maximum_discount_amount,
            send_whatsapp=body.send_whatsapp,
        )
    except CouponError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.reason)

    log_admin_action(
        "create_coupon",
        admin_ip=request.client.host if request.client else "",
        details={"code": coupon.code, "phone": body.customer_phone},
    )
    return ok(data=_coupon_out(coupon), message="Coupon created successfully")
