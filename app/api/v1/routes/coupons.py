# app/api/v1/routes/coupons.py
"""Customer-facing coupon validation."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.envelope import error, ok
from app.api.v1.schemas.coupons import CouponValidateRequest
from app.core.db import get_db
from app.domain.services.coupon_service import validate_coupon

router = APIRouter(prefix="/coupons", tags=["Coupons"])


@router.post("/validate", response_model=dict)
async def validate(
    body: CouponValidateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Check a code for a phone and order total; returns the discount."""
    result = await validate_coupon(body.coupon_code, body.customer_phone, body.order_total, db)
    if not result.is_valid:
        return error(result.reason or "Invalid coupon", errors=[result.to_dict()])
    return ok(data=result.to_dict(order_total=body.order_total))
