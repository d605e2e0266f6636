# app/domain/services/coupon_service.py
"""
Coupon validation, redemption and campaign generation.

A coupon belongs to one customer phone and is single-use. Discounts are
either a percentage of the order total (optionally capped) or a fixed
amount, and never exceed the order total.
"""

from __future__ import annotations

import logging
import secrets
import string
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.services.billing_engine import HUNDRED, format_currency, round_money
from app.infrastructure.db.repositories.coupon_repository import CouponRepository

logger = logging.getLogger("coupon_service")

CODE_LENGTH = 8
MAX_CODE_ATTEMPTS = 10
DISCOUNT_TYPES = ("percentage", "fixed")
_CODE_ALPHABET = string.ascii_uppercase + string.digits


class CouponError(Exception):
    """Coupon operation failed with a user-visible reason."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


@dataclass(frozen=True)
class CouponValidation:
    is_valid: bool
    discount_amount: Decimal = Decimal("0.00")
    coupon_id: uuid.UUID | None = None
    coupon_code: str | None = None
    reason: str | None = None

    def to_dict(self, order_total: Decimal | None = None) -> dict:
        data = {
            "isValid": self.is_valid,
            "discountAmount": str(self.discount_amount),
            "couponId": str(self.coupon_id) if self.coupon_id else None,
            "couponCode": self.coupon_code,
            "error": self.reason,
        }
        if order_total is not None and self.is_valid:
            data["finalTotal"] = str(order_total - self.discount_amount)
        return data


def compute_discount(
    discount_type: str,
    discount_value: Decimal,
    order_total: Decimal,
    maximum_discount: Decimal | None = None,
) -> Decimal:
    if discount_type == "percentage":
        amount = order_total * discount_value / HUNDRED
        if maximum_discount is not None:
            amount = min(amount, maximum_discount)
    elif discount_type == "fixed":
        amount = discount_value
    else:
        raise CouponError(f"Unknown discount type {discount_type!r}")
    return round_money(max(Decimal("0"), min(amount, order_total)))


def _invalid(reason: str) -> CouponValidation:
    return CouponValidation(is_valid=False, reason=reason)


async def validate_coupon(
    code: str,
    customer_phone: str,
    order_total: Decimal,
    db: AsyncSession,
    now: datetime | None = None,
) -> CouponValidation:
    """Check a code for this phone and order total. Never raises for a bad code."""
    now = now or datetime.now(timezone.utc)
    code = code.strip().upper()
    coupon = await CouponRepository(db).get_by_code(code)

    if coupon is None:
        return _invalid("Invalid coupon code")
    if coupon.is_used:
        return _invalid("Coupon has already been used")
    if coupon.expires_at and coupon.expires_at < now:
        return _invalid("Coupon has expired")
    if coupon.customer_phone and coupon.customer_phone != customer_phone:
        return _invalid("Coupon is not valid for this phone number")

    minimum = Decimal(str(coupon.minimum_order_amount or 0))
    if order_total < minimum:
        return _invalid(f"Minimum order amount is {format_currency(minimum)}")

    maximum = coupon.maximum_discount_amount
    discount = compute_discount(
        coupon.discount_type,
        Decimal(str(coupon.discount_value)),
        order_total,
        Decimal(str(maximum)) if maximum is not None else None,
    )
    return CouponValidation(
        is_valid=True,
        discount_amount=discount,
        coupon_id=coupon.id,
        coupon_code=coupon.code,
    )


async def apply_coupon(
    coupon_id: uuid.UUID,
    order_id: uuid.UUID,
    customer_phone: str | None,
    original_total: Decimal,
    final_total: Decimal,
    db: AsyncSession,
) -> None:
    """Redeem a coupon against an order and record the usage."""
    repo = CouponRepository(db)
    if not await repo.mark_used(coupon_id, order_id):
        raise CouponError("Coupon has already been used")
    await repo.record_usage(coupon_id, order_id, customer_phone, original_total, final_total)
    logger.info("Coupon %s applied to order %s", coupon_id, order_id)


def _generate_code() -> str:
    return "".join(secrets.choice(_CODE_ALPHABET) for _ in range(CODE_LENGTH))


def build_coupon_message(
    code: str,
    discount_type: str,
    discount_value: Decimal,
    expires_at: datetime,
    minimum_order_amount: Decimal = Decimal("0"),
) -> str:
    discount_text = (
        f"{discount_value}% off" if discount_type == "percentage"
        else f"{format_currency(discount_value)} off"
    )
    minimum_text = (
        f" Minimum order {format_currency(minimum_order_amount)}."
        if minimum_order_amount > 0 else ""
    )
    return (
        f"Special offer just for you! Get {discount_text} your next order with "
        f"coupon: *{code}*. Valid till {expires_at.strftime('%d %b %Y')}.{minimum_text}"
    )


async def create_campaign_coupon(
    customer_phone: str,
    discount_type: str,
    discount_value: Decimal,
    expires_at: datetime,
    db: AsyncSession,
    minimum_order_amount: Decimal = Decimal("0"),
    maximum_discount_amount: Decimal | None = None,
    send_whatsapp: bool = False,
):
    """Create an admin campaign coupon with a fresh unique code."""
    if discount_type not in DISCOUNT_TYPES:
        raise CouponError(f"discount_type must be one of {', '.join(DISCOUNT_TYPES)}")
    if discount_value <= 0:
        raise CouponError("discount_value must be positive")
    if discount_type == "percentage" and discount_value > HUNDRED:
        raise CouponError("percentage discount cannot exceed 100")

    repo = CouponRepository(db)
    code = None
    for _ in range(MAX_CODE_ATTEMPTS):
        candidate = _generate_code()
        if not await repo.code_exists(candidate):
            code = candidate
            break
    if code is None:
        raise CouponError("Failed to generate unique coupon code")

    coupon = await repo.create(
        code=code,
        coupon_type="CAMPAIGN",
        customer_phone=customer_phone,
        discount_type=discount_type,
        discount_value=discount_value,
        minimum_order_amount=minimum_order_amount,
        maximum_discount_amount=maximum_discount_amount,
        expires_at=expires_at,
        generated_by="admin",
    )

    if send_whatsapp:
        from app.infrastructure.external.whatsapp_client import send_whatsapp_text

        message = build_coupon_message(
            code, discount_type, discount_value, expires_at, minimum_order_amount,
        )
        if await send_whatsapp_text(customer_phone, message):
            await repo.mark_whatsapp_sent(coupon.id)
        else:
            # Coupon stays valid even if the notification is lost
            logger.warning("WhatsApp notification failed for coupon %s", code)

    return coupon
