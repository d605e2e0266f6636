# app/infrastructure/db/repositories/menu_repository.py
"""Repository for the menu catalog: categories, menu items and their add-ons."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.infrastructure.db.models import Category, MenuAddOn, MenuItem


class MenuRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ---- Categories ----

    async def list_categories(self, active_only: bool = False) -> list[Category]:
        stmt = select(Category).order_by(Category.display_order.asc(), Category.name.asc())
        if active_only:
            stmt = stmt.where(Category.is_active.is_(True))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_category(self, category_id: uuid.UUID) -> Category | None:
        return await self.db.get(Category, category_id)

    async def create_category(self, **fields: Any) -> Category:
        """New categories go to the end of the display order unless one is given."""
        if fields.get("display_order") is None:
            count = (await self.db.execute(select(func.count()).select_from(Category))).scalar_one()
            fields["display_order"] = count
        category = Category(id=uuid.uuid4(), **fields)
        self.db.add(category)
        await self.db.commit()
        await self.db.refresh(category)
        return category

    async def update_category(self, category: Category, **fields: Any) -> Category:
        for key, value in fields.items():
            setattr(category, key, value)
        await self.db.commit()
        await self.db.refresh(category)
        return category

    async def delete_category(self, category_id: uuid.UUID) -> bool:
        """Menu items in the category keep existing with no category."""
        result = await self.db.execute(delete(Category).where(Category.id == category_id))
        await self.db.commit()
        return bool(result.rowcount)

    # ---- Menu items ----

    async def list_menu_items(
        self,
        available_only: bool = False,
        category_id: uuid.UUID | None = None,
    ) -> list[MenuItem]:
        stmt = (
            select(MenuItem)
            .options(selectinload(MenuItem.add_ons), selectinload(MenuItem.category))
            .order_by(MenuItem.name.asc())
        )
        if available_only:
            stmt = stmt.where(MenuItem.available.is_(True))
        if category_id is not None:
            stmt = stmt.where(MenuItem.category_id == category_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_menu_item(self, item_id: uuid.UUID) -> MenuItem | None:
        stmt = (
            select(MenuItem)
            .options(selectinload(MenuItem.add_ons), selectinload(MenuItem.category))
            .where(MenuItem.id == item_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_items_for_cart(self, item_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, MenuItem]:
        """Catalog rows (with add-ons) for the given ids, keyed by id."""
        ids = set(item_ids)
        if not ids:
            return {}
        stmt = (
            select(MenuItem)
            .options(selectinload(MenuItem.add_ons))
            .where(MenuItem.id.in_(ids))
        )
        result = await self.db.execute(stmt)
        return {item.id: item for item in result.scalars().all()}

    async def create_menu_item(
        self,
        add_ons: list[dict[str, Any]] | None = None,
        **fields: Any,
    ) -> MenuItem:
        item = MenuItem(id=uuid.uuid4(), **fields)
        item.add_ons = [MenuAddOn(id=uuid.uuid4(), **a) for a in add_ons or []]
        self.db.add(item)
        await self.db.commit()
        return await self.get_menu_item(item.id)

    async def update_menu_item(
        self,
        item: MenuItem,
        add_ons: list[dict[str, Any]] | None = None,
        **fields: Any,
    ) -> MenuItem:
        """Update fields; a non-None ``add_ons`` replaces the item's add-ons."""
        for key, value in fields.items():
            setattr(item, key, value)
        if add_ons is not None:
            item.add_ons = [MenuAddOn(id=uuid.uuid4(), **a) for a in add_ons]
        item.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        return await self.get_menu_item(item.id)

    async def delete_menu_item(self, item_id: uuid.UUID) -> bool:
        """Past order lines keep their stored name and price; their link is nulled."""
        result = await self.db.execute(delete(MenuItem).where(MenuItem.id == item_id))
        await self.db.commit()
        return bool(result.rowcount)
