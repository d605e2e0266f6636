# app/api/v1/routes/admin_customers.py
"""
Admin customer dashboard: customers rolled up from paid orders by phone,
with search, sorting, pagination and per-tier counts.
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin_token
from app.api.v1.envelope import money_json, ok
from app.core.db import get_db
from app.infrastructure.db.repositories.analytics_repository import AnalyticsRepository

router = APIRouter(prefix="/admin/customers", tags=["Admin Customers"])


@router.get("", response_model=dict)
async def list_customers(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str | None = Query(None, description="Phone or name fragment"),
    sort_by: Literal["last_order_date", "first_order_date", "total_orders", "total_spent"] = Query(
        "last_order_date", alias="sortBy",
    ),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    repo = AnalyticsRepository(db)
    customers, matching = await repo.customers(
        search=search, sort_by=sort_by, sort_order=sort_order,
        limit=limit, offset=(page - 1) * limit,
    )
    stats = await repo.customer_tier_stats()
    return ok(data={
        "customers": money_json(customers),
        "totalCustomers": sum(stats.values()),
        "totalPages": (matching + limit - 1) // limit,
        "currentPage": page,
        "stats": stats,
    })
