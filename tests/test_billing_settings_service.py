"""Tests for layered billing-settings resolution."""

import json
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.domain.models.billing import BillingSettings, InvalidInput, SettingsUnavailable
from app.domain.services.billing_defaults import SETTING_TYPES
from app.domain.services.billing_settings_service import BillingSettingsService
from app.infrastructure.db.repositories.settings_repository import SettingsRepository


def _redis(cached=None):
    client = MagicMock()
    client.get = AsyncMock(return_value=cached)
    client.set = AsyncMock()
    client.delete = AsyncMock()
    return client


@pytest.fixture
def fast_retries(monkeypatch):
    monkeypatch.setattr(settings, "SETTINGS_FETCH_RETRIES", 1)
    with patch("app.domain.services.billing_settings_service.asyncio.sleep", new=AsyncMock()):
        yield


class TestGetSettings:
    def test_redis_hit(self, event_loop):
        redis = _redis(json.dumps({"cgst_rate": "6", "sgst_rate": "6", "service_charge_enabled": False}))
        service = BillingSettingsService(session_factory=MagicMock(), redis_client=redis)
        with patch.object(service, "_load_from_db", new=AsyncMock()) as load:
            resolved = event_loop.run_until_complete(service.get_settings())

        assert resolved.source == "redis"
        assert resolved.used_defaults is False
        assert resolved.settings.cgst_rate == Decimal("6")
        assert resolved.settings.service_charge_enabled is False
        assert "default_gst_rate" in resolved.defaulted_keys
        load.assert_not_awaited()

    def test_cache_miss_reads_db_and_rewarms(self, event_loop):
        redis = _redis(None)
        service = BillingSettingsService(session_factory=MagicMock(), redis_client=redis)
        stored = {"cgst_rate": Decimal("9"), "sgst_rate": Decimal("9"), "service_charge_enabled": True}
        with patch.object(service, "_load_from_db", new=AsyncMock(return_value=stored)):
            resolved = event_loop.run_until_complete(service.get_settings())

        assert resolved.source == "database"
        assert resolved.settings.cgst_rate == Decimal("9")
        redis.set.assert_awaited_once()

    def test_redis_error_falls_through_to_db(self, event_loop):
        redis = _redis()
        redis.get.side_effect = RedisError("down")
        service = BillingSettingsService(session_factory=MagicMock(), redis_client=redis)
        with patch.object(service, "_load_from_db", new=AsyncMock(return_value={})):
            resolved = event_loop.run_until_complete(service.get_settings())

        assert resolved.source == "database"
        assert resolved.settings == BillingSettings()
        assert set(resolved.defaulted_keys) == set(SETTING_TYPES)

    def test_db_failure_uses_flagged_defaults(self, event_loop, fast_retries):
        service = BillingSettingsService(session_factory=MagicMock(), redis_client=_redis(None))
        load = AsyncMock(side_effect=SQLAlchemyError("connection refused"))
        with patch.object(service, "_load_from_db", new=load):
            resolved = event_loop.run_until_complete(service.get_settings())

        assert resolved.used_defaults is True
        assert resolved.settings == BillingSettings()
        assert load.await_count == 2

    def test_fetch_stored_raises_when_exhausted(self, event_loop, fast_retries):
        service = BillingSettingsService(session_factory=MagicMock(), redis_client=_redis())
        with patch.object(service, "_load_from_db", new=AsyncMock(side_effect=OSError("refused"))):
            with pytest.raises(SettingsUnavailable):
                event_loop.run_until_complete(service.fetch_stored())

    def test_fetch_stored_recovers_on_retry(self, event_loop, fast_retries):
        service = BillingSettingsService(session_factory=MagicMock(), redis_client=_redis())
        load = AsyncMock(side_effect=[SQLAlchemyError("blip"), {"cgst_rate": Decimal("3")}])
        with patch.object(service, "_load_from_db", new=load):
            stored = event_loop.run_until_complete(service.fetch_stored())
        assert stored == {"cgst_rate": Decimal("3")}


class TestSaveSettings:
    def test_rejects_bad_rate_before_writing(self, event_loop):
        session_factory = MagicMock()
        service = BillingSettingsService(session_factory=session_factory, redis_client=_redis())
        with patch.object(service, "_load_from_db", new=AsyncMock(return_value={})):
            with pytest.raises(InvalidInput):
                event_loop.run_until_complete(service.save_settings({"cgst_rate": Decimal("-1")}))
        session_factory.assert_not_called()

    def test_writes_every_key_and_invalidates_cache(self, event_loop):
        redis = _redis()
        service = BillingSettingsService(session_factory=MagicMock(), redis_client=redis)
        with patch.object(service, "_load_from_db", new=AsyncMock(return_value={})), \
             patch.object(SettingsRepository, "save_setting", new=AsyncMock()) as save:
            resolved = event_loop.run_until_complete(service.save_settings({
                "service_charge_percentage": Decimal("12.5"),
                "unknown_key": "ignored",
            }))

        assert resolved.settings.service_charge_percentage == Decimal("12.5")
        assert save.await_count == len(SETTING_TYPES)
        written = {c.args[0]: c.args[1] for c in save.await_args_list}
        assert written["service_charge_percentage"] == "12.5"
        assert "unknown_key" not in written
        redis.delete.assert_awaited_once()
