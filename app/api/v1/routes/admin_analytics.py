# app/api/v1/routes/admin_analytics.py
"""Admin sales analytics: order summary, daily sales, best sellers, tables, peak hours."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin_token
from app.api.v1.envelope import money_json, ok
from app.core.db import get_db
from app.infrastructure.db.repositories.analytics_repository import AnalyticsRepository
from app.infrastructure.db.repositories.order_repository import OrderRepository

router = APIRouter(prefix="/admin/analytics", tags=["Admin Analytics"])

DaysQuery = Query(None, ge=1, le=365, description="Only orders from the last N days")


def _since(days: int | None) -> datetime | None:
    return datetime.now(timezone.utc) - timedelta(days=days) if days else None


@router.get("/orders", response_model=dict)
async def order_analytics(
    days: int | None = DaysQuery,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    summary = await OrderRepository(db).order_summary(_since(days))
    return ok(data=money_json(summary))


@router.get("/daily-sales", response_model=dict)
async def daily_sales(
    days: int | None = Query(30, ge=1, le=365),
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    """Per-day orders, revenue, tables served and unique customers."""
    rows = await AnalyticsRepository(db).daily_sales(_since(days))
    return ok(data=money_json(rows))


@router.get("/popular-items", response_model=dict)
async def popular_items(
    days: int | None = DaysQuery,
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    rows = await AnalyticsRepository(db).popular_items(_since(days), limit=limit)
    return ok(data=money_json(rows))


@router.get("/tables", response_model=dict)
async def table_performance(
    days: int | None = DaysQuery,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    rows = await AnalyticsRepository(db).table_performance(_since(days))
    return ok(data=money_json(rows))


@router.get("/peak-hours", response_model=dict)
async def peak_hours(
    days: int | None = DaysQuery,
    limit: int = Query(5, ge=1, le=24),
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    """Busiest payment hours, with each hour's share of paid orders."""
    rows = await AnalyticsRepository(db).peak_hours(_since(days), limit=limit)
    return ok(data=money_json(rows))
