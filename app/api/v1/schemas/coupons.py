# app/api/v1/schemas/coupons.py
"""Pydantic schemas for coupon endpoints."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class CouponValidateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    coupon_code: str = Field(alias="couponCode", min_length=1)
    customer_phone: str = Field(alias="customerPhone", min_length=1)
    order_total: Decimal = Field(alias="orderTotal", gt=0)


class CouponCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_phone: str = Field(alias="customerPhone")
    discount_type: Literal["percentage", "fixed"] = Field(alias="discountType")
    discount_value: Decimal = Field(alias="discountValue", gt=0)
    minimum_order_amount: Decimal = Field(default=Decimal("0"), alias="minimumOrderAmount", ge=0)
    maximum_discount_amount: Decimal | None = Field(default=None, alias="maximumDiscountAmount", gt=0)
    expires_at: datetime = Field(alias="expiresAt")
    send_whatsapp: bool = Field(default=False, alias="sendWhatsApp")


class CouponOut(BaseModel):
    id: str
    code: str
    customer_phone: str | None = None
    discount_type: str
    discount_value: Decimal
    minimum_order_amount: Decimal | None = None
    maximum_discount_amount: Decimal | None = None
    expires_at: datetime | None = None
    is_used: bool = False
    used_at: datetime | None = None
    whatsapp_sent: bool = False
    created_at: datetime | None = None
