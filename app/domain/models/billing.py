# app/domain/models/billing.py
"""
Domain dataclasses for the table bill.

LineItem: one cart entry (menu item at a quantity with its selected add-ons).
BillingSettings: immutable snapshot of the tax / service-charge configuration.
BillCalculation: itemized bill produced by the billing engine.
DiscountedBill: a bill with a coupon discount shown as a separate line.

All money is ``Decimal``. Wire payloads use camelCase keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

# Documented fallbacks for a missing settings key
DEFAULT_CGST_RATE = Decimal("2.5")
DEFAULT_SGST_RATE = Decimal("2.5")
DEFAULT_SERVICE_CHARGE_ENABLED = True
DEFAULT_SERVICE_CHARGE_PERCENTAGE = Decimal("10")
DEFAULT_GST_RATE = Decimal("5")


class BillingError(ValueError):
    """Base class for billing failures."""


class InvalidInput(BillingError):
    """Malformed line item or settings value (negative price, quantity < 1, bad rate)."""


class SettingsUnavailable(RuntimeError):
    """The settings store (cache and database) could not be reached."""


def to_decimal(value: Any, name: str = "value") -> Decimal:
    """Coerce a JSON number/string to Decimal without going through float repr."""
    if isinstance(value, bool):
        raise InvalidInput(f"{name} must be a number, got {value!r}")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidInput(f"{name} must be a number, got {value!r}") from None
    if not result.is_finite():
        raise InvalidInput(f"{name} must be a finite number, got {value!r}")
    return result


@dataclass(frozen=True)
class AddOn:
    name: str
    price: Decimal = Decimal("0")

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "price": str(self.price)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AddOn:
        return cls(
            name=str(data.get("name", "")),
            price=to_decimal(data.get("price", 0), "addOn.price"),
        )


@dataclass(frozen=True)
class LineItem:
    """One cart entry. ``unit_price`` is the catalog price of one unit."""

    unit_price: Decimal
    quantity: int = 1
    add_ons: tuple[AddOn, ...] = ()
    gst_rate: Decimal = DEFAULT_GST_RATE
    is_tax_included: bool = False
    name: str = ""

    @property
    def add_ons_total(self) -> Decimal:
        return sum((a.price for a in self.add_ons), Decimal("0"))

    @property
    def gross_total(self) -> Decimal:
        """(unit price + add-ons) x quantity, unrounded."""
        return (self.unit_price + self.add_ons_total) * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "unitPrice": str(self.unit_price),
            "quantity": self.quantity,
            "addOns": [a.to_dict() for a in self.add_ons],
            "gstRate": str(self.gst_rate),
            "isTaxIncluded": self.is_tax_included,
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        default_gst_rate: Decimal = DEFAULT_GST_RATE,
    ) -> LineItem:
        """Build from an order-submission payload.

        A missing or null ``gstRate`` takes ``default_gst_rate`` (the caller
        passes the restaurant's configured default).
        """
        raw_qty = data.get("quantity", 1)
        if isinstance(raw_qty, bool) or not isinstance(raw_qty, (int, str)):
            raise InvalidInput(f"quantity must be an integer, got {raw_qty!r}")
        try:
            quantity = int(raw_qty)
        except ValueError:
            raise InvalidInput(f"quantity must be an integer, got {raw_qty!r}") from None

        gst_raw = data.get("gstRate")
        return cls(
            name=str(data.get("name", "")),
            unit_price=to_decimal(data.get("unitPrice", 0), "unitPrice"),
            quantity=quantity,
            add_ons=tuple(AddOn.from_dict(a) for a in data.get("addOns") or []),
            gst_rate=default_gst_rate if gst_raw is None else to_decimal(gst_raw, "gstRate"),
            is_tax_included=bool(data.get("isTaxIncluded", False)),
        )


@dataclass(frozen=True)
class RestaurantInfo:
    name: str = "DYU Art Cafe"
    address: str = "123 Main Street, City, State - 123456"
    phone: str = "+91 9876543210"
    gstin: str = "22AAAAA0000A1Z5"
    number_of_tables: int = 15

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "gstin": self.gstin,
        }


@dataclass(frozen=True)
class BillingSettings:
    """Settings snapshot; immutable for the duration of one calculation."""

    cgst_rate: Decimal = DEFAULT_CGST_RATE
    sgst_rate: Decimal = DEFAULT_SGST_RATE
    service_charge_enabled: bool = DEFAULT_SERVICE_CHARGE_ENABLED
    service_charge_percentage: Decimal = DEFAULT_SERVICE_CHARGE_PERCENTAGE
    default_gst_rate: Decimal = DEFAULT_GST_RATE
    restaurant: RestaurantInfo = field(default_factory=RestaurantInfo)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the settings-store keys."""
        return {
            "cgst_rate": str(self.cgst_rate),
            "sgst_rate": str(self.sgst_rate),
            "service_charge_enabled": self.service_charge_enabled,
            "service_charge_percentage": str(self.service_charge_percentage),
            "default_gst_rate": str(self.default_gst_rate),
            "restaurant_name": self.restaurant.name,
            "restaurant_address": self.restaurant.address,
            "restaurant_phone": self.restaurant.phone,
            "restaurant_gstin": self.restaurant.gstin,
            "number_of_tables": self.restaurant.number_of_tables,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BillingSettings:
        """Build from store keys; a missing or null key takes its default.

        Present-but-invalid values are not corrected here; the engine rejects
        them.
        """

        def _d(key: str, default: Decimal) -> Decimal:
            val = data.get(key)
            return to_decimal(val, key) if val is not None else default

        def _s(key: str, default: str) -> str:
            val = data.get(key)
            return str(val) if val not in (None, "") else default

        enabled = data.get("service_charge_enabled")
        if isinstance(enabled, str):
            enabled = enabled.strip().lower() == "true"

        tables = data.get("number_of_tables")
        defaults = RestaurantInfo()
        return cls(
            cgst_rate=_d("cgst_rate", DEFAULT_CGST_RATE),
            sgst_rate=_d("sgst_rate", DEFAULT_SGST_RATE),
            service_charge_enabled=DEFAULT_SERVICE_CHARGE_ENABLED if enabled is None else bool(enabled),
            service_charge_percentage=_d("service_charge_percentage", DEFAULT_SERVICE_CHARGE_PERCENTAGE),
            default_gst_rate=_d("default_gst_rate", DEFAULT_GST_RATE),
            restaurant=RestaurantInfo(
                name=_s("restaurant_name", defaults.name),
                address=_s("restaurant_address", defaults.address),
                phone=_s("restaurant_phone", defaults.phone),
                gstin=_s("restaurant_gstin", defaults.gstin),
                number_of_tables=int(to_decimal(tables, "number_of_tables")) if tables is not None else defaults.number_of_tables,
            ),
        )


@dataclass(frozen=True)
class BillCalculation:
    subtotal: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    total_gst: Decimal
    service_charge_amount: Decimal
    service_charge_percentage: Decimal
    final_total: Decimal
    is_service_charge_enabled: bool

    def to_dict(self) -> dict[str, Any]:
        """Receipt / display payload. Field names are a stable contract."""
        return {
            "subtotal": str(self.subtotal),
            "cgstAmount": str(self.cgst_amount),
            "sgstAmount": str(self.sgst_amount),
            "totalGst": str(self.total_gst),
            "serviceChargeAmount": str(self.service_charge_amount),
            "serviceChargePercentage": str(self.service_charge_percentage),
            "finalTotal": str(self.final_total),
            "isServiceChargeEnabled": self.is_service_charge_enabled,
        }


@dataclass(frozen=True)
class DiscountedBill:
    """A bill with a coupon discount subtracted from the final total."""

    bill: BillCalculation
    discount_amount: Decimal = Decimal("0.00")
    coupon_code: str | None = None

    @property
    def payable_total(self) -> Decimal:
        return self.bill.final_total - self.discount_amount

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.bill.to_dict(),
            "discountAmount": str(self.discount_amount),
            "couponCode": self.coupon_code,
            "payableTotal": str(self.payable_total),
        }
