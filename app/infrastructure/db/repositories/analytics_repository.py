# app/infrastructure/db/repositories/analytics_repository.py
"""
Read-only sales analytics over paid orders and their line items.

Customers are identified by the phone number on their orders. Tiers:
  - VIP Customer:     VIP_MIN_ORDERS+ orders or VIP_MIN_SPENT+ spent
  - Regular Customer: REGULAR_MIN_ORDERS+ orders
  - New Customer:     everyone else
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import Date, and_, case, cast, distinct, extract, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models import Order, OrderItem

VIP_MIN_ORDERS = 10
VIP_MIN_SPENT = Decimal("10000")
REGULAR_MIN_ORDERS = 3

TIERS = ("VIP Customer", "Regular Customer", "New Customer")

CUSTOMER_SORT_FIELDS = ("last_order_date", "first_order_date", "total_orders", "total_spent")

_CENT = Decimal("0.01")


def _money(value: Any) -> Decimal:
    return Decimal(str(value or 0)).quantize(_CENT)


def _average(total: Decimal, count: int) -> Decimal:
    return (total / count).quantize(_CENT) if count else Decimal("0.00")


class AnalyticsRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @staticmethod
    def _paid_since(since: datetime | None):
        paid = Order.status == "paid"
        return and_(paid, Order.paid_at >= since) if since is not None else paid

    async def daily_sales(self, since: datetime | None = None) -> list[dict[str, Any]]:
        """Per paid-day totals, newest day first."""
        day = cast(Order.paid_at, Date)
        stmt = (
            select(
                day.label("sale_date"),
                func.count(Order.id),
                func.coalesce(func.sum(Order.total), 0),
                func.count(distinct(Order.table_number)),
                func.count(distinct(Order.customer_phone)),
            )
            .where(self._paid_since(since))
            .group_by(day)
            .order_by(day.desc())
        )
        rows = (await self.db.execute(stmt)).all()

        out = []
        for sale_date, orders, revenue, tables, customers in rows:
            revenue = _money(revenue)
            out.append({
                "sale_date": sale_date,
                "total_orders": int(orders),
                "total_revenue": revenue,
                "average_order_value": _average(revenue, int(orders)),
                "tables_served": int(tables),
                "unique_customers": int(customers),
            })
        return out

    async def popular_items(self, since: datetime | None = None, limit: int = 10) -> list[dict[str, Any]]:
        """Best sellers by quantity. Revenue is the item's unit price times quantity."""
        quantity = func.sum(OrderItem.quantity)
        stmt = (
            select(
                OrderItem.item_name,
                quantity.label("total_quantity"),
                func.count(distinct(OrderItem.order_id)),
                func.coalesce(func.sum(OrderItem.item_price * OrderItem.quantity), 0),
            )
            .join(Order, Order.id == OrderItem.order_id)
            .where(self._paid_since(since))
            .group_by(OrderItem.item_name)
            .order_by(quantity.desc())
            .limit(limit)
        )
        rows = (await self.db.execute(stmt)).all()

        out = []
        for name, qty, order_count, revenue in rows:
            revenue = _money(revenue)
            out.append({
                "item_name": name,
                "total_quantity": int(qty),
                "order_count": int(order_count),
                "total_revenue": revenue,
                "average_price": _average(revenue, int(qty)),
            })
        return out

    async def table_performance(self, since: datetime | None = None) -> list[dict[str, Any]]:
        """Per-table revenue, highest first."""
        revenue = func.coalesce(func.sum(Order.total), 0)
        stmt = (
            select(
                Order.table_number,
                func.count(Order.id),
                revenue.label("total_revenue"),
                func.count(distinct(cast(Order.paid_at, Date))),
            )
            .where(self._paid_since(since))
            .group_by(Order.table_number)
            .order_by(revenue.desc())
        )
        rows = (await self.db.execute(stmt)).all()

        out = []
        for table_number, orders, total, active_days in rows:
            total = _money(total)
            out.append({
                "table_number": table_number,
                "total_orders": int(orders),
                "total_revenue": total,
                "average_order_value": _average(total, int(orders)),
                "active_days": int(active_days),
            })
        return out

    async def peak_hours(self, since: datetime | None = None, limit: int = 5) -> list[dict[str, Any]]:
        """Busiest payment hours with their share of all paid orders."""
        hour = extract("hour", Order.paid_at)
        count = func.count(Order.id)
        stmt = (
            select(hour.label("hour"), count.label("orders"))
            .where(self._paid_since(since))
            .group_by(hour)
            .order_by(count.desc(), hour.asc())
        )
        rows = (await self.db.execute(stmt)).all()

        total = sum(int(r[1]) for r in rows)
        return [
            {
                "hour": f"{int(h)}:00",
                "count": int(n),
                "percentage": (Decimal(int(n) * 100) / total).quantize(Decimal("0.1")),
            }
            for h, n in rows[:limit]
        ]

    # ---- Customers ----

    @staticmethod
    def _customer_rollup():
        """One row per phone number over paid orders, with its tier."""
        orders = func.count(Order.id)
        spent = func.coalesce(func.sum(Order.total), 0)
        tier = case(
            (or_(orders >= VIP_MIN_ORDERS, spent >= VIP_MIN_SPENT), TIERS[0]),
            (orders >= REGULAR_MIN_ORDERS, TIERS[1]),
            else_=TIERS[2],
        )
        return (
            select(
                Order.customer_phone.label("phone"),
                func.max(Order.customer_name).label("name"),
                orders.label("total_orders"),
                spent.label("total_spent"),
                func.min(Order.created_at).label("first_order_date"),
                func.max(Order.created_at).label("last_order_date"),
                tier.label("customer_tier"),
            )
            .where(and_(Order.status == "paid", Order.customer_phone.is_not(None)))
            .group_by(Order.customer_phone)
            .subquery("customers")
        )

    async def customers(
        self,
        search: str | None = None,
        sort_by: str = "last_order_date",
        sort_order: str = "desc",
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[dict[str, Any]], int]:
        """A page of customers and the count of customers matching ``search``."""
        if sort_by not in CUSTOMER_SORT_FIELDS:
            raise ValueError(f"cannot sort customers by {sort_by!r}")

        rollup = self._customer_rollup()
        where = True
        if search:
            pattern = f"%{search}%"
            where = or_(rollup.c.phone.ilike(pattern), rollup.c.name.ilike(pattern))

        total = (await self.db.execute(
            select(func.count()).select_from(rollup).where(where)
        )).scalar_one()

        column = rollup.c[sort_by]
        stmt = (
            select(rollup)
            .where(where)
            .order_by(column.asc() if sort_order == "asc" else column.desc(), rollup.c.phone.asc())
            .limit(limit)
            .offset(offset)
        )
        rows = (await self.db.execute(stmt)).mappings().all()
        return [self._customer_dict(r) for r in rows], int(total)

    @staticmethod
    def _customer_dict(row) -> dict[str, Any]:
        last = row["last_order_date"]
        days_since = (datetime.now(timezone.utc) - last).days if last is not None else None
        return {
            "phone": row["phone"],
            "name": row["name"],
            "total_orders": int(row["total_orders"]),
            "total_spent": _money(row["total_spent"]),
            "first_order_date": row["first_order_date"],
            "last_order_date": last,
            "customer_tier": row["customer_tier"],
            "days_since_last_order": days_since,
        }

    async def customer_tier_stats(self) -> dict[str, int]:
        """Customer count per tier; every tier is present."""
        rollup = self._customer_rollup()
        stmt = select(rollup.c.customer_tier, func.count()).group_by(rollup.c.customer_tier)
        rows = (await self.db.execute(stmt)).all()
        stats = {tier: 0 for tier in TIERS}
        stats.update({tier: int(n) for tier, n in rows})
        return stats
