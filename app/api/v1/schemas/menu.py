# app/api/v1/schemas/menu.py
"""Pydantic schemas for the admin menu catalog endpoints."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

FoodType = Literal["veg", "non-veg", "egg"]

_NULLABLE_ITEM_FIELDS = {"description", "image_url", "category_id", "gst_rate"}


class CategoryIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    icon: str = "utensils"
    color: str = "gray"
    display_order: int | None = Field(default=None, alias="displayOrder", ge=0)
    is_active: bool = Field(default=True, alias="isActive")


class CategoryUpdate(BaseModel):
    """Partial edit; omitted fields are unchanged."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    icon: str | None = None
    color: str | None = None
    display_order: int | None = Field(default=None, alias="displayOrder", ge=0)
    is_active: bool | None = Field(default=None, alias="isActive")


class MenuAddOnIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    price: Decimal = Field(default=Decimal("0"), ge=0, allow_inf_nan=False)


class MenuItemIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    price: Decimal = Field(ge=0, allow_inf_nan=False)
    image_url: str | None = Field(default=None, alias="imageUrl")
    category_id: uuid.UUID | None = Field(default=None, alias="categoryId")
    food_type: FoodType = Field(default="veg", alias="foodType")
    available: bool = True
    gst_rate: Decimal | None = Field(default=None, alias="gstRate", ge=0, le=100, allow_inf_nan=False)
    is_tax_included: bool = Field(default=False, alias="isTaxIncluded")
    add_ons: list[MenuAddOnIn] = Field(default_factory=list, alias="addOns")

    def to_fields(self) -> dict[str, Any]:
        fields = self.model_dump(exclude={"add_ons"})
        fields["add_ons"] = [a.model_dump() for a in self.add_ons]
        return fields


class MenuItemUpdate(BaseModel):
    """Partial edit. A given ``addOns`` list replaces the item's add-ons."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0, allow_inf_nan=False)
    image_url: str | None = Field(default=None, alias="imageUrl")
    category_id: uuid.UUID | None = Field(default=None, alias="categoryId")
    food_type: FoodType | None = Field(default=None, alias="foodType")
    available: bool | None = None
    gst_rate: Decimal | None = Field(default=None, alias="gstRate", ge=0, le=100, allow_inf_nan=False)
    is_tax_included: bool | None = Field(default=None, alias="isTaxIncluded")
    add_ons: list[MenuAddOnIn] | None = Field(default=None, alias="addOns")

    def to_fields(self) -> dict[str, Any]:
        """Only the fields the caller sent; an explicit null gstRate resets to the restaurant default."""
        fields = {
            k: v
            for k, v in self.model_dump(exclude_unset=True, exclude={"add_ons"}).items()
            if v is not None or k in _NULLABLE_ITEM_FIELDS
        }
        if self.add_ons is not None:
            fields["add_ons"] = [a.model_dump() for a in self.add_ons]
        return fields
