# app/infrastructure/db/repositories/settings_repository.py
"""Repository for the key/value ``global_settings`` table."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models import GlobalSetting

logger = logging.getLogger("settings_repository")


def coerce_setting(value: str, setting_type: str) -> Any:
    """Convert a stored text value according to its declared type."""
    if setting_type == "number":
        try:
            number = Decimal(value)
        except (InvalidOperation, TypeError):
            logger.warning("Unparseable number setting value %r, ignoring", value)
            return None
        if not number.is_finite():
            logger.warning("Non-finite number setting value %r, ignoring", value)
            return None
        return number
    if setting_type == "boolean":
        return str(value).lower() == "true"
    return value


def serialize_setting(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class SettingsRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_all(self) -> dict[str, Any]:
        """Return every stored setting, typed."""
        result = await self.db.execute(select(GlobalSetting))
        settings: dict[str, Any] = {}
        for row in result.scalars().all():
            settings[row.setting_key] = coerce_setting(row.setting_value, row.setting_type)
        return settings

    async def upsert_setting(self, key: str, value: Any, setting_type: str = "string") -> None:
        """INSERT .. ON CONFLICT (setting_key) DO UPDATE."""
        now = datetime.now(timezone.utc)
        stmt = insert(GlobalSetting).values(
            setting_key=key,
            setting_value=serialize_setting(value),
            setting_type=setting_type,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[GlobalSetting.setting_key],
            set_={
                "setting_value": stmt.excluded.setting_value,
                "setting_type": stmt.excluded.setting_type,
                "updated_at": now,
            },
        )
        await self.db.execute(stmt)
        await self.db.commit()

    async def update_or_insert(self, key: str, value: Any, setting_type: str = "string") -> None:
        """Fallback write path: UPDATE by key, INSERT when no row matched."""
        now = datetime.now(timezone.utc)
        result = await self.db.execute(
            update(GlobalSetting)
            .where(GlobalSetting.setting_key == key)
            .values(
                setting_value=serialize_setting(value),
                setting_type=setting_type,
                updated_at=now,
            )
        )
        if not result.rowcount:
            logger.info("No existing setting %s, inserting", key)
            self.db.add(GlobalSetting(
                setting_key=key,
                setting_value=serialize_setting(value),
                setting_type=setting_type,
                updated_at=now,
            ))
        await self.db.commit()

    async def save_setting(self, key: str, value: Any, setting_type: str = "string") -> None:
        """Upsert, falling back to update-then-insert when the upsert fails."""
        try:
            await self.upsert_setting(key, value, setting_type)
        except SQLAlchemyError:
            logger.warning("Upsert failed for setting %s, trying update/insert", key)
            await self.db.rollback()
            await self.update_or_insert(key, value, setting_type)
