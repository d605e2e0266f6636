# app/infrastructure/db/repositories/order_repository.py
"""Repository for orders and their line items."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import and_, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.domain.models.billing import DiscountedBill, LineItem
from app.infrastructure.db.models import Order, OrderItem


class OrderRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_order(
        self,
        items: list[LineItem],
        bill: DiscountedBill,
        table_number: int,
        customer_phone: str | None = None,
        customer_name: str | None = None,
        coupon_id: uuid.UUID | None = None,
        notes: list[str | None] | None = None,
        menu_item_ids: list[uuid.UUID | None] | None = None,
        settings_snapshot: dict | None = None,
    ) -> Order:
        order = Order(
            id=uuid.uuid4(),
            table_number=table_number,
            customer_name=customer_name,
            customer_phone=customer_phone,
            status="pending",
            original_total=bill.bill.final_total,
            discount_amount=bill.discount_amount,
            total=bill.payable_total,
            coupon_id=coupon_id,
            coupon_code=bill.coupon_code,
            billing_settings=settings_snapshot,
        )
        notes = notes or [None] * len(items)
        menu_item_ids = menu_item_ids or [None] * len(items)
        order.items = [
            OrderItem(
                id=uuid.uuid4(),
                menu_item_id=menu_item_id,
                item_name=item.name,
                quantity=item.quantity,
                item_price=item.unit_price,
                gst_rate=item.gst_rate,
                is_tax_included=item.is_tax_included,
                selected_add_ons=[a.to_dict() for a in item.add_ons],
                notes=note,
            )
            for item, note, menu_item_id in zip(items, notes, menu_item_ids)
        ]
        self.db.add(order)
        await self.db.commit()
        await self.db.refresh(order)
        return order

    async def get_with_items(self, order_id: uuid.UUID) -> Order | None:
        stmt = (
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.id == order_id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_unpaid_for_table(self, table_number: int) -> list[Order]:
        stmt = (
            select(Order)
            .options(selectinload(Order.items))
            .where(and_(Order.table_number == table_number, Order.status == "pending"))
            .order_by(Order.created_at.asc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def mark_paid(self, order: Order, bill: DiscountedBill) -> Order:
        now = datetime.now(timezone.utc)
        order.status = "paid"
        order.ready_to_pay = False
        order.subtotal = bill.bill.subtotal
        order.cgst_amount = bill.bill.cgst_amount
        order.sgst_amount = bill.bill.sgst_amount
        order.service_charge_amount = bill.bill.service_charge_amount
        order.original_total = bill.bill.final_total
        order.total = bill.payable_total
        order.paid_at = now
        order.updated_at = now
        await self.db.commit()
        await self.db.refresh(order)
        return order

    async def order_summary(self, since: datetime | None = None) -> dict:
        """Order counts and revenue, optionally since a timestamp."""
        paid = Order.status == "paid"
        stmt = select(
            func.count(Order.id),
            func.coalesce(func.sum(case((paid, 1), else_=0)), 0),
            func.coalesce(func.sum(case((paid, Order.total), else_=0)), 0),
            func.coalesce(func.sum(Order.discount_amount), 0),
        )
        if since is not None:
            stmt = stmt.where(Order.created_at >= since)
        total_orders, paid_orders, revenue, discounts = (await self.db.execute(stmt)).one()

        revenue = Decimal(str(revenue))
        avg = (revenue / paid_orders).quantize(Decimal("0.01")) if paid_orders else Decimal("0.00")
        return {
            "total_orders": int(total_orders),
            "paid_orders": int(paid_orders),
            "revenue": revenue,
            "total_discount": Decimal(str(discounts)),
            "average_order_value": avg,
        }
