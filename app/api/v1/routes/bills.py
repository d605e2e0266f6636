# app/api/v1/routes/bills.py
"""
Bill preview endpoint: compute a cart's GST / service-charge breakdown
without placing an order. Prices come from the menu catalog.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.envelope import ok
from app.api.v1.schemas.billing import BillRequest
from app.core.db import get_db
from app.domain.models.billing import InvalidInput
from app.domain.services.billing_engine import apply_discount, calculate_bill
from app.domain.services.billing_settings_service import get_billing_settings_service
from app.domain.services.coupon_service import validate_coupon
from app.domain.services.menu_service import resolve_cart

logger = logging.getLogger("api.v1.bills")

router = APIRouter(prefix="/bills", tags=["Bills"])


@router.post("/calculate", response_model=dict)
async def calculate(
    body: BillRequest,
    db: AsyncSession = Depends(get_db),
):
    """Compute the bill for a cart; optionally preview a coupon discount."""
    resolved = await get_billing_settings_service().get_settings()
    try:
        lines = await resolve_cart(
            [i.to_payload() for i in body.items], db, resolved.settings.default_gst_rate,
        )
        bill = calculate_bill([line.item for line in lines], resolved.settings)
    except InvalidInput as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    data = bill.to_dict()
    message = None
    if body.coupon_code and body.customer_phone:
        validation = await validate_coupon(body.coupon_code, body.customer_phone, bill.final_total, db)
        if validation.is_valid:
            data = apply_discount(bill, validation.discount_amount, validation.coupon_code).to_dict()
        else:
            message = validation.reason

    data["settingsSource"] = resolved.source
    data["usedDefaults"] = resolved.used_defaults
    return ok(data=data, message=message)
