"""Tests for the bill calculation engine."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.domain.models.billing import AddOn, BillingSettings, InvalidInput, LineItem
from app.domain.services.billing_engine import (
    apply_discount,
    calculate_bill,
    format_currency,
    generate_bill_receipt,
    line_base,
)


def _item(price, qty=1, included=False, rate="5", add_ons=()):
    return LineItem(
        unit_price=Decimal(str(price)),
        quantity=qty,
        add_ons=tuple(AddOn(n, Decimal(str(p))) for n, p in add_ons),
        gst_rate=Decimal(rate),
        is_tax_included=included,
    )


class TestBasicBills:
    def test_empty_cart_is_all_zero(self, default_settings):
        bill = calculate_bill([], default_settings)
        assert bill.subtotal == 0
        assert bill.cgst_amount == 0
        assert bill.sgst_amount == 0
        assert bill.total_gst == 0
        assert bill.service_charge_amount == 0
        assert bill.final_total == 0

    def test_tax_exclusive_item(self, default_settings):
        bill = calculate_bill([_item(100, qty=2, rate="18")], default_settings)
        assert bill.subtotal == Decimal("200.00")
        assert bill.cgst_amount == Decimal("5.00")
        assert bill.sgst_amount == Decimal("5.00")
        assert bill.total_gst == Decimal("10.00")
        assert bill.service_charge_amount == Decimal("20.00")
        assert bill.final_total == Decimal("230.00")
        assert bill.is_service_charge_enabled is True
        assert bill.service_charge_percentage == Decimal("10")

    def test_tax_inclusive_item_extracts_base(self, no_service_charge):
        bill = calculate_bill([_item(105, included=True)], no_service_charge)
        assert bill.subtotal == Decimal("100.00")
        assert bill.cgst_amount == Decimal("2.50")
        assert bill.sgst_amount == Decimal("2.50")
        assert bill.service_charge_amount == 0
        assert bill.final_total == Decimal("105.00")
        assert bill.is_service_charge_enabled is False

    def test_add_ons_included_in_gross(self, default_settings):
        item = _item(50, qty=3, add_ons=[("Extra Cheese", 20)])
        assert item.gross_total == Decimal("210")
        bill = calculate_bill([item], default_settings)
        assert bill.subtotal == Decimal("210.00")
        assert bill.final_total == Decimal("241.50")

    def test_add_ons_follow_item_tax_inclusion(self, default_settings):
        item = _item(100, included=True, rate="18", add_ons=[("Dip", 18)])
        assert line_base(item) == Decimal("100")
        bill = calculate_bill([item], default_settings)
        assert bill.subtotal == Decimal("100.00")
        assert bill.final_total == Decimal("115.00")

    def test_zero_gst_rate_inclusive_keeps_gross(self, default_settings):
        bill = calculate_bill([_item(80, qty=1, included=True, rate="0")], default_settings)
        assert bill.subtotal == Decimal("80.00")

    def test_global_rates_not_item_rate_drive_tax(self, no_service_charge):
        # 28% item, but tax on top is the restaurant's 2.5 + 2.5
        bill = calculate_bill([_item(100, rate="28")], no_service_charge)
        assert bill.total_gst == Decimal("5.00")

    def test_mixed_cart(self, default_settings, sample_cart):
        bill = calculate_bill(sample_cart, default_settings)
        assert bill.subtotal == Decimal("310.00")
        assert bill.cgst_amount == Decimal("7.75")
        assert bill.service_charge_amount == Decimal("31.00")
        assert bill.final_total == Decimal("356.50")

    def test_service_charge_above_hundred_is_allowed(self):
        settings = BillingSettings(service_charge_percentage=Decimal("150"))
        bill = calculate_bill([_item(10)], settings)
        assert bill.service_charge_amount == Decimal("15.00")

    def test_same_inputs_same_output(self, default_settings, sample_cart):
        first = calculate_bill(sample_cart, default_settings)
        second = calculate_bill(sample_cart, default_settings)
        assert first == second
        assert first.to_dict() == second.to_dict()


class TestRounding:
    def test_tax_rounds_to_paise(self, default_settings):
        bill = calculate_bill([_item("33.33")], default_settings)
        assert bill.cgst_amount == Decimal("0.83")
        assert bill.sgst_amount == Decimal("0.83")
        # totals round from unrounded sums, not from rounded parts
        assert bill.total_gst == Decimal("1.67")
        assert bill.service_charge_amount == Decimal("3.33")
        assert bill.final_total == Decimal("38.33")

    def test_half_paise_rounds_up(self):
        settings = BillingSettings(
            cgst_rate=Decimal("5"), sgst_rate=Decimal("0"), service_charge_enabled=False,
        )
        bill = calculate_bill([_item("0.10")], settings)
        assert bill.cgst_amount == Decimal("0.01")
        assert bill.final_total == Decimal("0.11")

    def test_lines_are_not_rounded_individually(self, no_service_charge):
        # 10 / 1.05 = 9.5238..., three of them sum to 28.571... -> 28.57
        items = [_item(10, included=True) for _ in range(3)]
        bill = calculate_bill(items, no_service_charge)
        assert bill.subtotal == Decimal("28.57")


class TestInvalidInput:
    @pytest.mark.parametrize("item", [
        _item(-1),
        _item(10, qty=0),
        _item(10, qty=-2),
        _item(10, add_ons=[("Bad", -5)]),
        _item(10, rate="-1"),
        _item(10, rate="100.01"),
    ])
    def test_bad_item_rejected(self, default_settings, item):
        with pytest.raises(InvalidInput):
            calculate_bill([item], default_settings)

    @pytest.mark.parametrize("settings", [
        BillingSettings(cgst_rate=Decimal("-2.5")),
        BillingSettings(sgst_rate=Decimal("101")),
        BillingSettings(default_gst_rate=Decimal("-5")),
        BillingSettings(service_charge_percentage=Decimal("-10")),
    ])
    def test_bad_settings_rejected(self, settings):
        with pytest.raises(InvalidInput):
            calculate_bill([_item(10)], settings)

    @pytest.mark.parametrize("item", [
        LineItem(unit_price=Decimal("NaN")),
        LineItem(unit_price=Decimal("Infinity")),
        LineItem(unit_price=Decimal("10"), add_ons=(AddOn("Dip", Decimal("sNaN")),)),
        LineItem(unit_price=Decimal("10"), gst_rate=Decimal("-Infinity")),
    ])
    def test_non_finite_item_rejected(self, default_settings, item):
        with pytest.raises(InvalidInput):
            calculate_bill([item], default_settings)

    @pytest.mark.parametrize("settings", [
        BillingSettings(service_charge_percentage=Decimal("Infinity")),
        BillingSettings(cgst_rate=Decimal("NaN")),
    ])
    def test_non_finite_settings_rejected(self, settings):
        with pytest.raises(InvalidInput):
            calculate_bill([], settings)

    def test_one_bad_line_fails_whole_bill(self, default_settings):
        with pytest.raises(InvalidInput):
            calculate_bill([_item(10), _item(-10)], default_settings)

    def test_invalid_input_is_value_error(self, default_settings):
        with pytest.raises(ValueError):
            calculate_bill([_item(10, qty=0)], default_settings)


class TestDiscount:
    def test_discount_is_separate_line(self, default_settings):
        bill = calculate_bill([_item(100, qty=2)], default_settings)
        discounted = apply_discount(bill, Decimal("50"), "SAVE50")
        assert discounted.bill.final_total == Decimal("230.00")
        assert discounted.bill.total_gst == Decimal("10.00")
        assert discounted.discount_amount == Decimal("50.00")
        assert discounted.payable_total == Decimal("180.00")
        data = discounted.to_dict()
        assert data["couponCode"] == "SAVE50"
        assert data["payableTotal"] == "180.00"
        assert data["finalTotal"] == "230.00"

    def test_discount_clamped_to_total(self, default_settings):
        bill = calculate_bill([_item(100)], default_settings)
        discounted = apply_discount(bill, Decimal("1000"))
        assert discounted.payable_total == Decimal("0.00")

    def test_negative_discount_rejected(self, default_settings):
        bill = calculate_bill([_item(100)], default_settings)
        with pytest.raises(InvalidInput):
            apply_discount(bill, Decimal("-1"))


class TestReceipt:
    def test_format_currency(self):
        assert format_currency(Decimal("1234.5")) == "₹1,234.50"
        assert format_currency(0) == "₹0.00"

    def test_bill_serializes_with_stable_keys(self, default_settings):
        data = calculate_bill([_item(100, qty=2)], default_settings).to_dict()
        assert set(data) == {
            "subtotal", "cgstAmount", "sgstAmount", "totalGst",
            "serviceChargeAmount", "serviceChargePercentage",
            "finalTotal", "isServiceChargeEnabled",
        }
        assert data["finalTotal"] == "230.00"

    def test_generate_bill_receipt(self, default_settings, sample_cart):
        bill = calculate_bill(sample_cart, default_settings)
        ts = datetime(2025, 1, 15, 12, 30, tzinfo=timezone.utc)
        receipt = generate_bill_receipt(sample_cart, bill, default_settings, timestamp=ts)

        assert receipt["restaurantInfo"]["name"] == "DYU Art Cafe"
        assert receipt["billDetails"]["finalTotal"] == "356.50"
        assert receipt["items"][0]["total"] == "210.00"
        assert receipt["items"][0]["addOns"] == [{"name": "Extra Cheese", "price": "20"}]
        assert receipt["items"][1]["isTaxIncluded"] is True
        assert receipt["timestamp"] == "2025-01-15T12:30:00+00:00"
