# app/infrastructure/db/repositories/coupon_repository.py
"""Repository for coupons and their usage history."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models import Coupon, CouponUsageHistory


class CouponRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_code(self, code: str) -> Coupon | None:
        result = await self.db.execute(select(Coupon).where(Coupon.code == code))
        return result.scalar_one_or_none()

    async def code_exists(self, code: str) -> bool:
        result = await self.db.execute(select(Coupon.id).where(Coupon.code == code))
        return result.scalar_one_or_none() is not None

    async def create(self, **fields) -> Coupon:
        coupon = Coupon(id=uuid.uuid4(), **fields)
        self.db.add(coupon)
        await self.db.commit()
        await self.db.refresh(coupon)
        return coupon

    async def mark_used(self, coupon_id: uuid.UUID, order_id: uuid.UUID) -> bool:
        """Mark a coupon used. Only succeeds if it was still unused."""
        stmt = (
            update(Coupon)
            .where(and_(Coupon.id == coupon_id, Coupon.is_used.is_(False)))
            .values(
                is_used=True,
                used_at=datetime.now(timezone.utc),
                used_in_order_id=order_id,
            )
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return bool(result.rowcount)

    async def mark_whatsapp_sent(self, coupon_id: uuid.UUID) -> None:
        await self.db.execute(
            update(Coupon)
            .where(Coupon.id == coupon_id)
            .values(whatsapp_sent=True, whatsapp_sent_at=datetime.now(timezone.utc))
        )
        await self.db.commit()

    async def record_usage(
        self,
        coupon_id: uuid.UUID,
        order_id: uuid.UUID,
        customer_phone: str | None,
        original_total: Decimal,
        final_total: Decimal,
    ) -> CouponUsageHistory:
        row = CouponUsageHistory(
            id=uuid.uuid4(),
            coupon_id=coupon_id,
            order_id=order_id,
            customer_phone=customer_phone,
            discount_applied=original_total - final_total,
            original_total=original_total,
            final_total=final_total,
        )
        self.db.add(row)
        await self.db.commit()
        return row

    async def list_coupons(
        self,
        status: str | None = None,
        search: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Coupon], int]:
        """Newest first. ``status`` is one of used / unused / expired."""
        now = datetime.now(timezone.utc)
        conditions = []
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(Coupon.code.ilike(pattern), Coupon.customer_phone.ilike(pattern)))
        if status == "used":
            conditions.append(Coupon.is_used.is_(True))
        elif status == "unused":
            conditions.append(and_(Coupon.is_used.is_(False), Coupon.expires_at > now))
        elif status == "expired":
            conditions.append(and_(Coupon.is_used.is_(False), Coupon.expires_at < now))

        where = and_(*conditions) if conditions else True
        total = (await self.db.execute(
            select(func.count()).select_from(Coupon).where(where)
        )).scalar_one()

        stmt = (
            select(Coupon)
            .where(where)
            .order_by(Coupon.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total

    async def usage_summary(self) -> tuple[int, Decimal]:
        """(used coupon count, total discount actually applied)."""
        used = (await self.db.execute(
            select(func.count()).select_from(Coupon).where(Coupon.is_used.is_(True))
        )).scalar_one()
        savings = (await self.db.execute(
            select(func.coalesce(func.sum(CouponUsageHistory.discount_applied), 0))
        )).scalar_one()
        return used, Decimal(str(savings))
