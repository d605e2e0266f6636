# app/domain/services/order_service.py
"""
Order placement and bill payment.

Flow:
  1. Resolve billing settings (cache -> DB -> defaults)
  2. Price the cart from the menu catalog (missing GST rate -> restaurant default)
  3. Compute the bill on undiscounted items
  4. Validate the coupon against the bill's final total
  5. Persist the order with a snapshot of the settings, then redeem the coupon

Payment, table bills and receipts recompute from the stored lines and the
order's settings snapshot, so a rate change between ordering and paying does
not move the quoted total. Orders saved without a snapshot use the current
settings.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models.billing import AddOn, BillingSettings, DiscountedBill, InvalidInput, LineItem
from app.domain.services.billing_engine import (
    apply_discount,
    calculate_bill,
    generate_bill_receipt,
    round_money,
)
from app.domain.services.billing_settings_service import (
    BillingSettingsService,
    get_billing_settings_service,
)
from app.domain.services.coupon_service import CouponError, apply_coupon, validate_coupon
from app.domain.services.menu_service import resolve_cart
from app.infrastructure.db.models import Order
from app.infrastructure.db.repositories.order_repository import OrderRepository

logger = logging.getLogger("order_service")


class OrderError(Exception):
    """Base class for order failures."""


class OrderNotFound(OrderError):
    pass


class OrderAlreadyPaid(OrderError):
    pass


@dataclass(frozen=True)
class PlacedOrder:
    order_id: uuid.UUID
    bill: DiscountedBill
    settings_source: str


def line_items_from_order(order: Order) -> list[LineItem]:
    """Rebuild engine line items from stored order rows."""
    return [
        LineItem(
            name=row.item_name or "",
            unit_price=Decimal(str(row.item_price)),
            quantity=row.quantity,
            add_ons=tuple(AddOn.from_dict(a) for a in row.selected_add_ons or []),
            gst_rate=Decimal(str(row.gst_rate)),
            is_tax_included=bool(row.is_tax_included),
        )
        for row in order.items
    ]


async def place_order(
    cart: list[dict[str, Any]],
    table_number: int,
    db: AsyncSession,
    customer_phone: str | None = None,
    customer_name: str | None = None,
    coupon_code: str | None = None,
    settings_service: BillingSettingsService | None = None,
) -> PlacedOrder:
    if not cart:
        raise InvalidInput("cart is empty")

    service = settings_service or get_billing_settings_service()
    resolved = await service.get_settings()
    billing_settings = resolved.settings

    if table_number < 1 or table_number > billing_settings.restaurant.number_of_tables:
        raise InvalidInput(f"table_number must be between 1 and {billing_settings.restaurant.number_of_tables}")

    lines = await resolve_cart(cart, db, billing_settings.default_gst_rate)
    items = [line.item for line in lines]
    bill = calculate_bill(items, billing_settings)

    discount = Decimal("0")
    coupon_id = None
    if coupon_code:
        if not customer_phone:
            raise CouponError("A verified phone number is required to use a coupon")
        validation = await validate_coupon(coupon_code, customer_phone, bill.final_total, db)
        if not validation.is_valid:
            raise CouponError(validation.reason or "Invalid coupon")
        discount = validation.discount_amount
        coupon_id = validation.coupon_id
        coupon_code = validation.coupon_code

    discounted = apply_discount(bill, discount, coupon_code if coupon_id else None)
    order = await OrderRepository(db).create_order(
        items,
        discounted,
        table_number=table_number,
        customer_phone=customer_phone,
        customer_name=customer_name,
        coupon_id=coupon_id,
        notes=[line.notes for line in lines],
        menu_item_ids=[line.menu_item_id for line in lines],
        settings_snapshot=billing_settings.to_dict(),
    )

    if coupon_id is not None:
        try:
            await apply_coupon(
                coupon_id, order.id, customer_phone,
                discounted.bill.final_total, discounted.payable_total, db,
            )
        except CouponError:
            # The order stands; the redemption can be reconciled later
            logger.exception("Coupon %s could not be redeemed for order %s", coupon_code, order.id)

    logger.info(
        "Order %s placed for table %s: total=%s discount=%s (settings from %s)",
        order.id, table_number, discounted.payable_total, discounted.discount_amount, resolved.source,
    )
    return PlacedOrder(order_id=order.id, bill=discounted, settings_source=resolved.source)


async def _settings_for_order(order: Order, service: BillingSettingsService) -> tuple[BillingSettings, str]:
    """The settings the order was placed under, else the current ones."""
    if order.billing_settings:
        return BillingSettings.from_dict(order.billing_settings), "order"
    resolved = await service.get_settings()
    return resolved.settings, resolved.source


async def _bill_for_order(order: Order, service: BillingSettingsService) -> tuple[DiscountedBill, str]:
    billing_settings, source = await _settings_for_order(order, service)
    bill = calculate_bill(line_items_from_order(order), billing_settings)
    discount = Decimal(str(order.discount_amount or 0))
    return apply_discount(bill, discount, order.coupon_code), source


async def pay_bill(
    order_id: uuid.UUID,
    db: AsyncSession,
    settings_service: BillingSettingsService | None = None,
) -> DiscountedBill:
    """Recompute the order's bill from its items and settings snapshot, then mark it paid."""
    repo = OrderRepository(db)
    order = await repo.get_with_items(order_id)
    if order is None:
        raise OrderNotFound(f"Order {order_id} not found")
    if order.status == "paid":
        raise OrderAlreadyPaid(f"Order {order_id} is already paid")

    bill, source = await _bill_for_order(order, settings_service or get_billing_settings_service())
    await repo.mark_paid(order, bill)
    logger.info("Order %s paid: %s (settings from %s)", order_id, bill.payable_total, source)
    return bill


async def table_bill(
    table_number: int,
    db: AsyncSession,
    settings_service: BillingSettingsService | None = None,
) -> dict[str, Any]:
    """All unpaid orders at a table with their bills and the combined total."""
    service = settings_service or get_billing_settings_service()
    orders = await OrderRepository(db).list_unpaid_for_table(table_number)

    bills = []
    combined = Decimal("0")
    source = "database"
    for order in orders:
        bill, source = await _bill_for_order(order, service)
        combined += bill.payable_total
        bills.append({"orderId": str(order.id), **bill.to_dict()})

    return {
        "tableNumber": table_number,
        "orders": bills,
        "combinedTotal": str(round_money(combined)),
        "settingsSource": source,
    }


async def order_receipt(
    order_id: uuid.UUID,
    db: AsyncSession,
    settings_service: BillingSettingsService | None = None,
) -> dict[str, Any]:
    order = await OrderRepository(db).get_with_items(order_id)
    if order is None:
        raise OrderNotFound(f"Order {order_id} not found")

    billing_settings, _ = await _settings_for_order(order, settings_service or get_billing_settings_service())
    items = line_items_from_order(order)
    bill = apply_discount(
        calculate_bill(items, billing_settings),
        Decimal(str(order.discount_amount or 0)),
        order.coupon_code,
    )
    receipt = generate_bill_receipt(items, bill, billing_settings)
    receipt["orderId"] = str(order.id)
    receipt["tableNumber"] = order.table_number
    receipt["status"] = order.status
    return receipt
