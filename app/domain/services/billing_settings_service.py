# app/domain/services/billing_settings_service.py
"""
Billing settings resolution: layered, never fails.

Resolution order:
1. Redis (hot cache, short TTL)
2. PostgreSQL ``global_settings`` (source of truth, retried with a timeout)
3. Hardcoded defaults (final fallback, flagged as ``used_defaults``)

Keys the database does not have are filled from defaults one by one.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.domain.models.billing import BillingSettings, SettingsUnavailable
from app.domain.services.billing_defaults import (
    SETTING_TYPES,
    default_billing_settings,
    merge_with_defaults,
)
from app.domain.services.billing_engine import validate_settings

logger = logging.getLogger("billing_settings_service")

_REDIS_KEY = "billing:settings"


@dataclass(frozen=True)
class ResolvedSettings:
    """A settings snapshot plus where it came from."""

    settings: BillingSettings
    source: str  # "redis" | "database" | "defaults"
    defaulted_keys: tuple[str, ...] = field(default_factory=tuple)

    @property
    def used_defaults(self) -> bool:
        return self.source == "defaults"


class BillingSettingsService:
    """Redis -> PostgreSQL -> hardcoded."""

    def __init__(
        self,
        session_factory: Callable[[], Any] | None = None,
        redis_client: Any | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._redis = redis_client

    def _sessions(self):
        if self._session_factory is None:
            from app.core.db import AsyncSessionLocal

            self._session_factory = AsyncSessionLocal
        return self._session_factory()

    def _get_redis(self):
        if self._redis is None:
            from app.infrastructure.cache.redis_client import get_redis_client

            self._redis = get_redis_client()
        return self._redis

    # ---- Layer 1: Redis ----

    async def _get_from_redis(self) -> dict | None:
        raw = await self._get_redis().get(_REDIS_KEY)
        if raw:
            return json.loads(raw)
        return None

    async def _set_in_redis(self, data: dict) -> None:
        await self._get_redis().set(
            _REDIS_KEY,
            json.dumps(data, default=str),
            ex=settings.SETTINGS_CACHE_TTL_SECONDS,
        )

    async def invalidate_cache(self) -> None:
        try:
            await self._get_redis().delete(_REDIS_KEY)
        except (RedisError, OSError):
            logger.warning("Failed to invalidate billing settings cache")

    # ---- Layer 2: PostgreSQL ----

    async def _load_from_db(self) -> dict[str, Any]:
        from app.infrastructure.db.repositories.settings_repository import (
            SettingsRepository,
        )

        async with self._sessions() as db:
            return await SettingsRepository(db).get_all()

    async def fetch_stored(self) -> dict[str, Any]:
        """Read the settings table with bounded retries.

        Raises ``SettingsUnavailable`` when every attempt fails or times out.
        """
        attempts = settings.SETTINGS_FETCH_RETRIES + 1
        last_exc: BaseException | None = None
        for attempt in range(1, attempts + 1):
            try:
                return await asyncio.wait_for(
                    self._load_from_db(),
                    timeout=settings.SETTINGS_FETCH_TIMEOUT_SECONDS,
                )
            except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
                last_exc = exc
                logger.warning(
                    "Settings fetch attempt %d/%d failed: %s", attempt, attempts, exc,
                )
                if attempt < attempts:
                    await asyncio.sleep(0.1 * attempt)
        raise SettingsUnavailable("global_settings could not be read") from last_exc

    @staticmethod
    def _build(stored: dict[str, Any], source: str) -> ResolvedSettings:
        merged, missing = merge_with_defaults(stored)
        if missing:
            logger.debug("Billing settings keys defaulted: %s", ", ".join(missing))
        return ResolvedSettings(
            settings=BillingSettings.from_dict(merged),
            source=source,
            defaulted_keys=tuple(missing),
        )

    # ---- Public API ----

    async def get_settings(self) -> ResolvedSettings:
        """Resolve the current billing settings. Never raises."""
        try:
            cached = await self._get_from_redis()
            if cached is not None:
                logger.debug("Billing settings cache HIT (Redis)")
                return self._build(cached, "redis")
        except (RedisError, OSError, ValueError):
            logger.warning("Redis failed for billing settings, trying DB")

        try:
            stored = await self.fetch_stored()
        except SettingsUnavailable:
            logger.error("Billing settings unavailable, using hardcoded defaults")
            return ResolvedSettings(settings=default_billing_settings(), source="defaults")

        try:
            await self._set_in_redis(stored)
        except (RedisError, OSError):
            logger.warning("Failed to re-warm billing settings cache")
        return self._build(stored, "database")

    async def save_settings(self, values: dict[str, Any]) -> ResolvedSettings:
        """Validate and persist admin-edited settings.

        Unknown keys are ignored. Raises ``InvalidInput`` for bad rates before
        anything is written.
        """
        from app.infrastructure.db.repositories.settings_repository import (
            SettingsRepository,
        )

        current = await self.get_settings()
        proposed = {**current.settings.to_dict(), **{
            k: v for k, v in values.items() if k in SETTING_TYPES and v is not None
        }}
        snapshot = BillingSettings.from_dict(proposed)
        validate_settings(snapshot)

        to_write = snapshot.to_dict()
        async with self._sessions() as db:
            repo = SettingsRepository(db)
            for key, setting_type in SETTING_TYPES.items():
                await repo.save_setting(key, to_write[key], setting_type)

        await self.invalidate_cache()
        logger.info("Billing settings saved (%d keys)", len(SETTING_TYPES))
        return ResolvedSettings(settings=snapshot, source="database")


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_service: BillingSettingsService | None = None


def get_billing_settings_service() -> BillingSettingsService:
    """Get the singleton BillingSettingsService instance."""
    global _service
    if _service is None:
        _service = BillingSettingsService()
    return _service
