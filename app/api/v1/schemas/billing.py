# app/api/v1/schemas/billing.py
"""Pydantic schemas for bill calculation and order endpoints.

Cart payloads use the camelCase keys the ordering frontend sends.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CartItemIn(BaseModel):
    """One cart line: a menu item, how many, and the picked add-ons.

    Prices and tax fields are looked up from the menu; extra keys such as
    ``unitPrice`` are dropped. Quantity range checks happen in the billing
    engine.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    menu_item_id: uuid.UUID = Field(alias="menuItemId")
    quantity: int = 1
    add_on_ids: list[uuid.UUID] = Field(default_factory=list, alias="addOnIds")
    notes: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class BillRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: list[CartItemIn] = Field(default_factory=list)
    coupon_code: str | None = Field(default=None, alias="couponCode")
    customer_phone: str | None = Field(default=None, alias="customerPhone")


class OrderCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    table_number: int = Field(alias="tableNumber")
    items: list[CartItemIn]
    customer_phone: str | None = Field(default=None, alias="customerPhone")
    customer_name: str | None = Field(default=None, alias="customerName")
    coupon_code: str | None = Field(default=None, alias="couponCode")


class BillingSettingsUpdate(BaseModel):
    """Admin edit of the global billing settings. Omitted fields are unchanged."""

    service_charge_percentage: Decimal | None = None
    service_charge_enabled: bool | None = None
    cgst_rate: Decimal | None = None
    sgst_rate: Decimal | None = None
    default_gst_rate: Decimal | None = None
    restaurant_name: str | None = None
    restaurant_address: str | None = None
    restaurant_phone: str | None = None
    restaurant_gstin: str | None = None
    number_of_tables: int | None = Field(default=None, ge=1)
