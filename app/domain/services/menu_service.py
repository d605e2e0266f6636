# app/domain/services/menu_service.py
"""
Cart resolution against the menu catalog.

A cart entry names a menu item, a quantity and the ids of the add-ons the
customer picked. Price, GST rate, tax-inclusion and add-on prices always come
from the catalog; anything else the client sends is ignored.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models.billing import InvalidInput, LineItem
from app.infrastructure.db.models import MenuItem
from app.infrastructure.db.repositories.menu_repository import MenuRepository


@dataclass(frozen=True)
class CartLine:
    menu_item_id: uuid.UUID
    item: LineItem
    notes: str | None = None


def _parse_id(raw: Any, field: str) -> uuid.UUID:
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        raise InvalidInput(f"{field} must be a menu id, got {raw!r}") from None


def _line_payload(menu_item: MenuItem, entry: dict[str, Any], index: int) -> dict[str, Any]:
    offered = {a.id: a for a in menu_item.add_ons or []}
    add_ons = []
    for raw in entry.get("addOnIds") or []:
        add_on = offered.get(_parse_id(raw, f"items[{index}].addOnIds"))
        if add_on is None:
            raise InvalidInput(f"items[{index}]: add-on {raw} is not offered with {menu_item.name}")
        add_ons.append({"name": add_on.name, "price": add_on.price})

    return {
        "name": menu_item.name,
        "unitPrice": menu_item.price,
        "quantity": entry.get("quantity", 1),
        "addOns": add_ons,
        "gstRate": menu_item.gst_rate,
        "isTaxIncluded": bool(menu_item.is_tax_included),
    }


async def resolve_cart(
    cart: list[dict[str, Any]],
    db: AsyncSession,
    default_gst_rate: Decimal,
) -> list[CartLine]:
    """Price a cart from the catalog.

    Raises ``InvalidInput`` for an unknown or unavailable item, or an add-on
    that does not belong to its item. A catalog item without its own GST rate
    takes ``default_gst_rate``.
    """
    ids = [_parse_id(entry.get("menuItemId"), f"items[{i}].menuItemId") for i, entry in enumerate(cart)]
    catalog = await MenuRepository(db).get_items_for_cart(ids)

    lines = []
    for index, (entry, item_id) in enumerate(zip(cart, ids)):
        menu_item = catalog.get(item_id)
        if menu_item is None:
            raise InvalidInput(f"items[{index}]: menu item {item_id} not found")
        if not menu_item.available:
            raise InvalidInput(f"items[{index}]: {menu_item.name} is currently unavailable")

        payload = _line_payload(menu_item, entry, index)
        lines.append(CartLine(
            menu_item_id=item_id,
            item=LineItem.from_dict(payload, default_gst_rate=default_gst_rate),
            notes=entry.get("notes"),
        ))
    return lines


def menu_item_to_dict(item: MenuItem) -> dict[str, Any]:
    category = item.category
    return {
        "id": str(item.id),
        "name": item.name,
        "description": item.description,
        "price": str(item.price),
        "imageUrl": item.image_url,
        "categoryId": str(item.category_id) if item.category_id else None,
        "categoryName": category.name if category is not None else None,
        "foodType": item.food_type,
        "available": bool(item.available),
        "gstRate": str(item.gst_rate) if item.gst_rate is not None else None,
        "isTaxIncluded": bool(item.is_tax_included),
        "addOns": [
            {"id": str(a.id), "name": a.name, "price": str(a.price)}
            for a in item.add_ons or []
        ],
    }


def category_to_dict(category) -> dict[str, Any]:
    return {
        "id": str(category.id),
        "name": category.name,
        "description": category.description,
        "icon": category.icon,
        "color": category.color,
        "displayOrder": category.display_order,
        "isActive": bool(category.is_active),
    }


async def public_menu(db: AsyncSession) -> list[dict[str, Any]]:
    """Active categories with their available items, for the ordering page."""
    repo = MenuRepository(db)
    categories = await repo.list_categories(active_only=True)
    items = await repo.list_menu_items(available_only=True)

    by_category: dict[uuid.UUID | None, list[dict[str, Any]]] = {}
    for item in items:
        by_category.setdefault(item.category_id, []).append(menu_item_to_dict(item))

    return [
        {**category_to_dict(c), "items": by_category.get(c.id, [])}
        for c in categories
    ]
