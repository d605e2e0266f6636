# app/api/v1/routes/admin_menu.py
"""
Admin menu catalog: categories and menu items with their add-ons.

Prices, GST rates and tax flags set here are the only ones the bill engine
ever sees for customer carts.
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin_token
from app.api.v1.envelope import ok
from app.api.v1.schemas.menu import CategoryIn, CategoryUpdate, MenuItemIn, MenuItemUpdate
from app.core.db import get_db
from app.domain.services.menu_service import category_to_dict, menu_item_to_dict
from app.infrastructure.audit import log_admin_action
from app.infrastructure.db.repositories.menu_repository import MenuRepository

logger = logging.getLogger("api.v1.admin_menu")

router = APIRouter(prefix="/admin/menu", tags=["Admin Menu"])


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else ""


def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")


# ---- Categories ----

@router.get("/categories", response_model=dict)
async def list_categories(
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    categories = await MenuRepository(db).list_categories()
    return ok(data=[category_to_dict(c) for c in categories])


@router.post("/categories", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CategoryIn,
    request: Request,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    category = await MenuRepository(db).create_category(**body.model_dump())
    log_admin_action("create_category", admin_ip=_client_ip(request), details={"name": category.name})
    return ok(data=category_to_dict(category), message="Category created")


@router.put("/categories/{category_id}", response_model=dict)
async def update_category(
    category_id: UUID,
    body: CategoryUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    repo = MenuRepository(db)
    category = await repo.get_category(category_id)
    if category is None:
        raise _not_found("Category")

    fields = body.model_dump(exclude_none=True)
    category = await repo.update_category(category, **fields)
    log_admin_action("update_category", admin_ip=_client_ip(request), details={"id": str(category_id), **fields})
    return ok(data=category_to_dict(category), message="Category updated")


@router.post("/categories/{category_id}/toggle", response_model=dict)
async def toggle_category(
    category_id: UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    """Flip whether the category shows on the customer menu."""
    repo = MenuRepository(db)
    category = await repo.get_category(category_id)
    if category is None:
        raise _not_found("Category")

    category = await repo.update_category(category, is_active=not category.is_active)
    log_admin_action(
        "toggle_category", admin_ip=_client_ip(request),
        details={"id": str(category_id), "is_active": category.is_active},
    )
    return ok(data=category_to_dict(category))


@router.delete("/categories/{category_id}", response_model=dict)
async def delete_category(
    category_id: UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    """Delete a category. Its items stay on the menu without a category."""
    if not await MenuRepository(db).delete_category(category_id):
        raise _not_found("Category")
    log_admin_action("delete_category", admin_ip=_client_ip(request), details={"id": str(category_id)})
    return ok(message="Category deleted")


# ---- Menu items ----

@router.get("/items", response_model=dict)
async def list_menu_items(
    category_id: UUID | None = Query(None, alias="categoryId"),
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    items = await MenuRepository(db).list_menu_items(category_id=category_id)
    return ok(data=[menu_item_to_dict(i) for i in items])


@router.post("/items", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_menu_item(
    body: MenuItemIn,
    request: Request,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    repo = MenuRepository(db)
    if body.category_id is not None and await repo.get_category(body.category_id) is None:
        raise _not_found("Category")

    item = await repo.create_menu_item(**body.to_fields())
    log_admin_action(
        "create_menu_item", admin_ip=_client_ip(request),
        details={"name": item.name, "price": str(item.price)},
    )
    return ok(data=menu_item_to_dict(item), message="Menu item created")


@router.put("/items/{item_id}", response_model=dict)
async def update_menu_item(
    item_id: UUID,
    body: MenuItemUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    repo = MenuRepository(db)
    item = await repo.get_menu_item(item_id)
    if item is None:
        raise _not_found("Menu item")

    fields = body.to_fields()
    if fields.get("category_id") is not None and await repo.get_category(fields["category_id"]) is None:
        raise _not_found("Category")

    item = await repo.update_menu_item(item, **fields)
    log_admin_action(
        "update_menu_item", admin_ip=_client_ip(request),
        details={"id": str(item_id), "fields": sorted(fields)},
    )
    return ok(data=menu_item_to_dict(item), message="Menu item updated")


@router.post("/items/{item_id}/toggle-availability", response_model=dict)
async def toggle_availability(
    item_id: UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    """Mark an item sold out, or back in stock."""
    repo = MenuRepository(db)
    item = await repo.get_menu_item(item_id)
    if item is None:
        raise _not_found("Menu item")

    item = await repo.update_menu_item(item, available=not item.available)
    log_admin_action(
        "toggle_menu_item", admin_ip=_client_ip(request),
        details={"id": str(item_id), "available": item.available},
    )
    return ok(data=menu_item_to_dict(item))


@router.delete("/items/{item_id}", response_model=dict)
async def delete_menu_item(
    item_id: UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_admin_token),
):
    if not await MenuRepository(db).delete_menu_item(item_id):
        raise _not_found("Menu item")
    log_admin_action("delete_menu_item", admin_ip=_client_ip(request), details={"id": str(item_id)})
    return ok(message="Menu item deleted")
