"""Shared test fixtures for the table-ordering test suite."""

import asyncio
from decimal import Decimal

import pytest

from app.domain.models.billing import AddOn, BillingSettings, LineItem


@pytest.fixture(scope="session")
def event_loop():
    """Use a single event loop for the entire test session."""
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def default_settings() -> BillingSettings:
    """cgst 2.5 / sgst 2.5 / service charge 10% enabled."""
    return BillingSettings()


@pytest.fixture
def no_service_charge() -> BillingSettings:
    return BillingSettings(service_charge_enabled=False)


@pytest.fixture
def sample_cart() -> list[LineItem]:
    """Two lines: a tax-exclusive main with an add-on, a tax-inclusive drink."""
    return [
        LineItem(
            name="Paneer Tikka",
            unit_price=Decimal("50"),
            quantity=3,
            add_ons=(AddOn("Extra Cheese", Decimal("20")),),
            gst_rate=Decimal("5"),
            is_tax_included=False,
        ),
        LineItem(
            name="Cold Coffee",
            unit_price=Decimal("105"),
            quantity=1,
            gst_rate=Decimal("5"),
            is_tax_included=True,
        ),
    ]

