# app/domain/services/billing_engine.py
"""
Table bill computation: CGST/SGST + service charge.

Rules:
  - Line gross  = (unit price + add-ons) x quantity
  - Tax-inclusive lines are reduced to their base by dividing out the
    item's own GST rate; add-ons share the item's tax treatment
  - CGST / SGST use the restaurant-wide rates on the whole subtotal
  - Service charge is on the pre-tax subtotal
  - Rounding is ROUND_HALF_UP to paise, once, on the outputs only

Coupon discounts never reduce the taxable subtotal. ``apply_discount``
subtracts them from the final total as a separate line.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from app.domain.models.billing import (
    BillCalculation,
    BillingSettings,
    DiscountedBill,
    InvalidInput,
    LineItem,
)

PAISE = Decimal("0.01")
HUNDRED = Decimal("100")
_ZERO = Decimal("0")


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(PAISE, rounding=ROUND_HALF_UP)


def _check_finite(name: str, value: Decimal) -> None:
    if isinstance(value, Decimal) and not value.is_finite():
        raise InvalidInput(f"{name} must be a finite number, got {value!r}")


def _check_rate(name: str, rate: Decimal, upper: Decimal | None = HUNDRED) -> None:
    _check_finite(name, rate)
    if rate < 0:
        raise InvalidInput(f"{name} must not be negative, got {rate}")
    if upper is not None and rate > upper:
        raise InvalidInput(f"{name} must not exceed {upper}, got {rate}")


def validate_settings(settings: BillingSettings) -> None:
    _check_rate("cgst_rate", settings.cgst_rate)
    _check_rate("sgst_rate", settings.sgst_rate)
    _check_rate("default_gst_rate", settings.default_gst_rate)
    # No cap on service charge, only non-negative
    _check_rate("service_charge_percentage", settings.service_charge_percentage, upper=None)


def validate_line_item(item: LineItem, index: int = 0) -> None:
    _check_finite(f"items[{index}].unitPrice", item.unit_price)
    if item.unit_price < 0:
        raise InvalidInput(f"items[{index}].unitPrice must not be negative")
    if isinstance(item.quantity, bool) or not isinstance(item.quantity, int) or item.quantity < 1:
        raise InvalidInput(f"items[{index}].quantity must be an integer >= 1")
    for add_on in item.add_ons:
        _check_finite(f"items[{index}] add-on {add_on.name!r} price", add_on.price)
        if add_on.price < 0:
            raise InvalidInput(f"items[{index}] add-on {add_on.name!r} has a negative price")
    _check_rate(f"items[{index}].gstRate", item.gst_rate)


def line_base(item: LineItem) -> Decimal:
    """Tax-exclusive amount a line contributes to the subtotal (unrounded)."""
    gross = item.gross_total
    if item.is_tax_included:
        return gross / (1 + item.gst_rate / HUNDRED)
    return gross


def calculate_bill(items: Iterable[LineItem], settings: BillingSettings) -> BillCalculation:
    """Compute the itemized bill for a cart.

    Pure and deterministic. Raises ``InvalidInput`` before any arithmetic if
    an item or a rate is out of range, so there is never a partial result.
    """
    items = list(items)
    validate_settings(settings)
    for idx, item in enumerate(items):
        validate_line_item(item, idx)

    subtotal = sum((line_base(item) for item in items), _ZERO)

    cgst = subtotal * settings.cgst_rate / HUNDRED
    sgst = subtotal * settings.sgst_rate / HUNDRED
    total_gst = cgst + sgst

    if settings.service_charge_enabled:
        service_charge = subtotal * settings.service_charge_percentage / HUNDRED
    else:
        service_charge = _ZERO

    final_total = subtotal + total_gst + service_charge

    return BillCalculation(
        subtotal=round_money(subtotal),
        cgst_amount=round_money(cgst),
        sgst_amount=round_money(sgst),
        total_gst=round_money(total_gst),
        service_charge_amount=round_money(service_charge),
        service_charge_percentage=settings.service_charge_percentage,
        final_total=round_money(final_total),
        is_service_charge_enabled=settings.service_charge_enabled,
    )


def apply_discount(
    bill: BillCalculation,
    discount: Decimal,
    coupon_code: str | None = None,
) -> DiscountedBill:
    """Attach a coupon discount to a computed bill.

    The discount is clamped to ``[0, final_total]`` and is not fed back into
    GST or service charge.
    """
    if discount < 0:
        raise InvalidInput("discount must not be negative")
    amount = min(round_money(discount), bill.final_total)
    return DiscountedBill(bill=bill, discount_amount=amount, coupon_code=coupon_code)


def format_currency(amount: Decimal | float | int) -> str:
    return f"₹{round_money(Decimal(str(amount))):,.2f}"


def generate_bill_receipt(
    items: Iterable[LineItem],
    bill: BillCalculation | DiscountedBill,
    settings: BillingSettings,
    timestamp: datetime | None = None,
) -> dict[str, Any]:
    """Receipt payload: restaurant header, item rows, bill breakdown."""
    ts = timestamp or datetime.now(timezone.utc)
    return {
        "restaurantInfo": settings.restaurant.to_dict(),
        "billDetails": bill.to_dict(),
        "items": [
            {
                "name": item.name,
                "quantity": item.quantity,
                "rate": str(item.unit_price),
                "addOns": [a.to_dict() for a in item.add_ons],
                "gstRate": str(item.gst_rate),
                "isTaxIncluded": item.is_tax_included,
                "total": str(round_money(item.gross_total)),
            }
            for item in items
        ],
        "timestamp": ts.isoformat(),
    }
