"""Tests for order placement and payment."""

import uuid
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.domain.models.billing import BillingSettings, InvalidInput
from app.domain.services.billing_settings_service import ResolvedSettings
from app.domain.services.coupon_service import CouponError, CouponValidation
from app.domain.services.order_service import (
    OrderAlreadyPaid,
    OrderNotFound,
    line_items_from_order,
    order_receipt,
    pay_bill,
    place_order,
    table_bill,
)
from app.infrastructure.db.repositories.menu_repository import MenuRepository
from app.infrastructure.db.repositories.order_repository import OrderRepository

THALI = SimpleNamespace(
    id=uuid.uuid4(),
    name="Thali",
    price=Decimal("100"),
    available=True,
    gst_rate=None,
    is_tax_included=False,
    add_ons=[],
)
CART = [{"menuItemId": str(THALI.id), "quantity": 2}]
PHONE = "9876543210"


@pytest.fixture(autouse=True)
def catalog():
    with patch.object(MenuRepository, "get_items_for_cart", new=AsyncMock(return_value={THALI.id: THALI})) as get_items:
        yield get_items


def make_settings_service(billing_settings=None, source="database"):
    service = MagicMock()
    service.get_settings = AsyncMock(
        return_value=ResolvedSettings(settings=billing_settings or BillingSettings(), source=source),
    )
    return service


def _stored_order(status="pending", discount="0", coupon_code=None, billing_settings=None):
    row = SimpleNamespace(
        item_name="Filter Coffee",
        item_price=Decimal("105"),
        quantity=1,
        gst_rate=Decimal("5"),
        is_tax_included=True,
        selected_add_ons=[],
    )
    return SimpleNamespace(
        id=uuid.uuid4(),
        table_number=4,
        status=status,
        discount_amount=Decimal(discount),
        coupon_code=coupon_code,
        billing_settings=billing_settings,
        items=[row],
    )


class TestPlaceOrder:
    def test_places_order_without_coupon(self, event_loop):
        order_id = uuid.uuid4()
        create = AsyncMock(return_value=SimpleNamespace(id=order_id))
        with patch.object(OrderRepository, "create_order", new=create):
            placed = event_loop.run_until_complete(place_order(
                CART, 3, MagicMock(), settings_service=make_settings_service(),
            ))

        assert placed.order_id == order_id
        assert placed.bill.bill.final_total == Decimal("230.00")
        assert placed.bill.payable_total == Decimal("230.00")
        assert placed.settings_source == "database"
        items = create.await_args.args[0]
        assert items[0].gst_rate == Decimal("5")
        assert create.await_args.kwargs["table_number"] == 3
        assert create.await_args.kwargs["menu_item_ids"] == [THALI.id]
        assert create.await_args.kwargs["settings_snapshot"] == BillingSettings().to_dict()

    def test_client_supplied_price_is_ignored(self, event_loop):
        tampered = [{**CART[0], "unitPrice": "1", "gstRate": "0", "isTaxIncluded": True}]
        create = AsyncMock(return_value=SimpleNamespace(id=uuid.uuid4()))
        with patch.object(OrderRepository, "create_order", new=create):
            placed = event_loop.run_until_complete(place_order(
                tampered, 3, MagicMock(), settings_service=make_settings_service(),
            ))

        assert placed.bill.payable_total == Decimal("230.00")
        assert create.await_args.args[0][0].unit_price == Decimal("100")

    def test_unavailable_item_blocks_order(self, event_loop, catalog):
        sold_out = SimpleNamespace(**{**vars(THALI), "available": False})
        catalog.return_value = {THALI.id: sold_out}
        create = AsyncMock()
        with patch.object(OrderRepository, "create_order", new=create):
            with pytest.raises(InvalidInput):
                event_loop.run_until_complete(place_order(CART, 3, MagicMock(), settings_service=make_settings_service()))
        create.assert_not_awaited()

    def test_missing_gst_rate_takes_restaurant_default(self, event_loop):
        service = make_settings_service(BillingSettings(default_gst_rate=Decimal("18")))
        create = AsyncMock(return_value=SimpleNamespace(id=uuid.uuid4()))
        with patch.object(OrderRepository, "create_order", new=create):
            event_loop.run_until_complete(place_order(CART, 1, MagicMock(), settings_service=service))
        assert create.await_args.args[0][0].gst_rate == Decimal("18")

    def test_empty_cart(self, event_loop):
        with pytest.raises(InvalidInput):
            event_loop.run_until_complete(place_order([], 1, MagicMock(), settings_service=make_settings_service()))

    @pytest.mark.parametrize("table", [0, 16])
    def test_table_out_of_range(self, event_loop, table):
        with pytest.raises(InvalidInput):
            event_loop.run_until_complete(place_order(CART, table, MagicMock(), settings_service=make_settings_service()))

    def test_coupon_discount_is_separate_line(self, event_loop):
        coupon_id = uuid.uuid4()
        validation = CouponValidation(True, Decimal("23.00"), coupon_id, "WELCOME10")
        create = AsyncMock(return_value=SimpleNamespace(id=uuid.uuid4()))
        with patch.object(OrderRepository, "create_order", new=create), \
             patch("app.domain.services.order_service.validate_coupon", new=AsyncMock(return_value=validation)) as validate, \
             patch("app.domain.services.order_service.apply_coupon", new=AsyncMock()) as redeem:
            placed = event_loop.run_until_complete(place_order(
                CART, 3, MagicMock(), customer_phone=PHONE, coupon_code="welcome10",
                settings_service=make_settings_service(),
            ))

        assert placed.bill.bill.total_gst == Decimal("10.00")
        assert placed.bill.discount_amount == Decimal("23.00")
        assert placed.bill.payable_total == Decimal("207.00")
        assert placed.bill.coupon_code == "WELCOME10"
        assert validate.await_args.args[2] == Decimal("230.00")
        redeem.assert_awaited_once()
        assert create.await_args.kwargs["coupon_id"] == coupon_id

    def test_invalid_coupon_blocks_order(self, event_loop):
        create = AsyncMock()
        with patch.object(OrderRepository, "create_order", new=create), \
             patch("app.domain.services.order_service.validate_coupon",
                   new=AsyncMock(return_value=CouponValidation(False, reason="Coupon has expired"))):
            with pytest.raises(CouponError) as exc_info:
                event_loop.run_until_complete(place_order(
                    CART, 3, MagicMock(), customer_phone=PHONE, coupon_code="OLD",
                    settings_service=make_settings_service(),
                ))
        assert exc_info.value.reason == "Coupon has expired"
        create.assert_not_awaited()

    def test_coupon_requires_phone(self, event_loop):
        with pytest.raises(CouponError):
            event_loop.run_until_complete(place_order(
                CART, 3, MagicMock(), coupon_code="WELCOME10", settings_service=make_settings_service(),
            ))

    def test_lost_redemption_race_keeps_order(self, event_loop):
        validation = CouponValidation(True, Decimal("23.00"), uuid.uuid4(), "WELCOME10")
        order_id = uuid.uuid4()
        with patch.object(OrderRepository, "create_order", new=AsyncMock(return_value=SimpleNamespace(id=order_id))), \
             patch("app.domain.services.order_service.validate_coupon", new=AsyncMock(return_value=validation)), \
             patch("app.domain.services.order_service.apply_coupon",
                   new=AsyncMock(side_effect=CouponError("Coupon has already been used"))):
            placed = event_loop.run_until_complete(place_order(
                CART, 3, MagicMock(), customer_phone=PHONE, coupon_code="WELCOME10",
                settings_service=make_settings_service(),
            ))
        assert placed.order_id == order_id


class TestPayBill:
    def test_not_found(self, event_loop):
        with patch.object(OrderRepository, "get_with_items", new=AsyncMock(return_value=None)):
            with pytest.raises(OrderNotFound):
                event_loop.run_until_complete(pay_bill(uuid.uuid4(), MagicMock(), make_settings_service()))

    def test_already_paid(self, event_loop):
        with patch.object(OrderRepository, "get_with_items", new=AsyncMock(return_value=_stored_order("paid"))):
            with pytest.raises(OrderAlreadyPaid):
                event_loop.run_until_complete(pay_bill(uuid.uuid4(), MagicMock(), make_settings_service()))

    def test_recomputes_and_marks_paid(self, event_loop):
        order = _stored_order(discount="5", coupon_code="FIVE")
        service = make_settings_service(BillingSettings(service_charge_enabled=False))
        with patch.object(OrderRepository, "get_with_items", new=AsyncMock(return_value=order)), \
             patch.object(OrderRepository, "mark_paid", new=AsyncMock()) as mark_paid:
            bill = event_loop.run_until_complete(pay_bill(order.id, MagicMock(), service))

        assert bill.bill.subtotal == Decimal("100.00")
        assert bill.bill.final_total == Decimal("105.00")
        assert bill.payable_total == Decimal("100.00")
        mark_paid.assert_awaited_once_with(order, bill)

    def test_uses_settings_stored_with_order(self, event_loop):
        placed_under = BillingSettings(service_charge_enabled=False).to_dict()
        order = _stored_order(billing_settings=placed_under)
        # Rates changed since the order was placed
        service = make_settings_service(BillingSettings(
            cgst_rate=Decimal("9"), sgst_rate=Decimal("9"), service_charge_enabled=True,
        ))
        with patch.object(OrderRepository, "get_with_items", new=AsyncMock(return_value=order)), \
             patch.object(OrderRepository, "mark_paid", new=AsyncMock()):
            bill = event_loop.run_until_complete(pay_bill(order.id, MagicMock(), service))

        assert bill.bill.cgst_amount == Decimal("2.50")
        assert bill.bill.service_charge_amount == Decimal("0.00")
        assert bill.payable_total == Decimal("105.00")
        service.get_settings.assert_not_awaited()


def test_table_bill_combines_unpaid_orders(event_loop):
    orders = [_stored_order(), _stored_order(discount="5")]
    service = make_settings_service(BillingSettings(service_charge_enabled=False))
    with patch.object(OrderRepository, "list_unpaid_for_table", new=AsyncMock(return_value=orders)):
        result = event_loop.run_until_complete(table_bill(4, MagicMock(), service))

    assert result["tableNumber"] == 4
    assert len(result["orders"]) == 2
    assert result["combinedTotal"] == "205.00"


def test_line_items_from_order():
    order = _stored_order()
    order.items[0].selected_add_ons = [{"name": "Extra Shot", "price": "20"}]
    items = line_items_from_order(order)
    assert items[0].unit_price == Decimal("105")
    assert items[0].add_ons[0].price == Decimal("20")
    assert items[0].is_tax_included is True


def test_receipt_uses_settings_stored_with_order(event_loop):
    placed_under = {**BillingSettings().to_dict(), "restaurant_name": "Old Name Cafe"}
    order = _stored_order(billing_settings=placed_under)
    service = make_settings_service()
    with patch.object(OrderRepository, "get_with_items", new=AsyncMock(return_value=order)):
        receipt = event_loop.run_until_complete(order_receipt(order.id, MagicMock(), service))

    assert receipt["restaurantInfo"]["name"] == "Old Name Cafe"
    assert receipt["orderId"] == str(order.id)
    service.get_settings.assert_not_awaited()


def test_receipt_without_snapshot_uses_current_settings(event_loop):
    order = _stored_order()
    service = make_settings_service()
    with patch.object(OrderRepository, "get_with_items", new=AsyncMock(return_value=order)):
        event_loop.run_until_complete(order_receipt(order.id, MagicMock(), service))
    service.get_settings.assert_awaited_once()
