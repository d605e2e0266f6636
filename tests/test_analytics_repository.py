"""Tests for the sales and customer analytics queries."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from app.infrastructure.db.repositories.analytics_repository import TIERS, AnalyticsRepository


def _db(*results):
    db = MagicMock()
    db.execute = AsyncMock(side_effect=list(results))
    return db


def _rows(rows):
    result = MagicMock()
    result.all.return_value = rows
    return result


def _sql(db, call=0) -> str:
    stmt = db.execute.await_args_list[call].args[0]
    return str(stmt.compile(dialect=postgresql.dialect()))


def test_daily_sales(event_loop):
    db = _db(_rows([(date(2026, 10, 16), 2, Decimal("460.10"), 2, 1)]))
    since = datetime(2026, 10, 1, tzinfo=timezone.utc)
    days = event_loop.run_until_complete(AnalyticsRepository(db).daily_sales(since))

    assert days == [{
        "sale_date": date(2026, 10, 16),
        "total_orders": 2,
        "total_revenue": Decimal("460.10"),
        "average_order_value": Decimal("230.05"),
        "tables_served": 2,
        "unique_customers": 1,
    }]
    sql = _sql(db)
    assert "count(DISTINCT orders.customer_phone)" in sql
    assert "orders.paid_at >=" in sql


def test_popular_items(event_loop):
    db = _db(_rows([("Masala Dosa", 6, 4, Decimal("540"))]))
    items = event_loop.run_until_complete(AnalyticsRepository(db).popular_items(limit=3))

    assert items[0]["item_name"] == "Masala Dosa"
    assert items[0]["total_quantity"] == 6
    assert items[0]["order_count"] == 4
    assert items[0]["total_revenue"] == Decimal("540.00")
    assert items[0]["average_price"] == Decimal("90.00")
    assert "orders.status =" in _sql(db)


def test_table_performance(event_loop):
    db = _db(_rows([(4, 3, Decimal("690"), 2)]))
    tables = event_loop.run_until_complete(AnalyticsRepository(db).table_performance())

    assert tables == [{
        "table_number": 4,
        "total_orders": 3,
        "total_revenue": Decimal("690.00"),
        "average_order_value": Decimal("230.00"),
        "active_days": 2,
    }]


def test_peak_hours_share_of_all_paid_orders(event_loop):
    db = _db(_rows([(Decimal("20"), 3), (Decimal("13"), 1), (Decimal("9"), 1)]))
    hours = event_loop.run_until_complete(AnalyticsRepository(db).peak_hours(limit=2))

    assert hours == [
        {"hour": "20:00", "count": 3, "percentage": Decimal("60.0")},
        {"hour": "13:00", "count": 1, "percentage": Decimal("20.0")},
    ]


def test_peak_hours_without_orders(event_loop):
    db = _db(_rows([]))
    assert event_loop.run_until_complete(AnalyticsRepository(db).peak_hours()) == []


class TestCustomers:
    def _customer_db(self, total, rows):
        count = MagicMock()
        count.scalar_one.return_value = total
        page = MagicMock()
        page.mappings.return_value.all.return_value = rows
        return _db(count, page)

    def test_page_and_total(self, event_loop):
        last = datetime.now(timezone.utc) - timedelta(days=3)
        row = {
            "phone": "9876543210",
            "name": "Asha",
            "total_orders": 4,
            "total_spent": Decimal("1200"),
            "first_order_date": last - timedelta(days=30),
            "last_order_date": last,
            "customer_tier": "Regular Customer",
        }
        db = self._customer_db(11, [row])
        customers, total = event_loop.run_until_complete(AnalyticsRepository(db).customers(
            search="asha", sort_by="total_spent", sort_order="asc", limit=5, offset=5,
        ))

        assert total == 11
        assert customers[0]["total_spent"] == Decimal("1200.00")
        assert customers[0]["customer_tier"] == "Regular Customer"
        assert customers[0]["days_since_last_order"] == 3

        sql = _sql(db, call=1)
        assert "ILIKE" in sql
        assert "ORDER BY customers.total_spent ASC" in sql
        assert "CASE WHEN" in sql

    def test_default_sort_is_most_recent_first(self, event_loop):
        db = self._customer_db(0, [])
        event_loop.run_until_complete(AnalyticsRepository(db).customers())
        assert "ORDER BY customers.last_order_date DESC" in _sql(db, call=1)

    def test_unknown_sort_field(self, event_loop):
        with pytest.raises(ValueError):
            event_loop.run_until_complete(AnalyticsRepository(MagicMock()).customers(sort_by="phone"))


def test_customer_tier_stats_lists_every_tier(event_loop):
    db = _db(_rows([("VIP Customer", 2), ("New Customer", 7)]))
    stats = event_loop.run_until_complete(AnalyticsRepository(db).customer_tier_stats())

    assert set(stats) == set(TIERS)
    assert stats == {"VIP Customer": 2, "Regular Customer": 0, "New Customer": 7}
