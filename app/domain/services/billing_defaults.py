# app/domain/services/billing_defaults.py
"""
Hardcoded billing-settings fallback (last resort).

Used when Redis and PostgreSQL are both unavailable, and to fill any key the
store does not have. This is the only place defaults are resolved.
"""

from __future__ import annotations

from typing import Any

from app.domain.models.billing import BillingSettings

# key -> setting_type as stored in global_settings
SETTING_TYPES: dict[str, str] = {
    "service_charge_percentage": "number",
    "service_charge_enabled": "boolean",
    "cgst_rate": "number",
    "sgst_rate": "number",
    "default_gst_rate": "number",
    "restaurant_name": "string",
    "restaurant_address": "string",
    "restaurant_phone": "string",
    "restaurant_gstin": "string",
    "number_of_tables": "number",
}


def default_billing_settings() -> BillingSettings:
    """Return the hardcoded billing settings snapshot."""
    return BillingSettings()


def default_settings_dict() -> dict[str, Any]:
    """Hardcoded settings keyed the way the store keys them."""
    return default_billing_settings().to_dict()


def merge_with_defaults(stored: dict[str, Any]) -> tuple[dict[str, Any], list[str]]:
    """Fill keys missing from ``stored`` with defaults.

    Returns the merged dict and the list of keys that were defaulted.
    """
    merged = default_settings_dict()
    missing: list[str] = []
    for key in merged:
        if stored.get(key) is None:
            missing.append(key)
        else:
            merged[key] = stored[key]
    return merged, missing
