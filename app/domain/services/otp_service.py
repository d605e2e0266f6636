# app/domain/services/otp_service.py
"""
OTP service for customer phone verification (coupons, order history).

Delivery:
- When OTP_WHATSAPP_ENABLED=True → sent as a WhatsApp text
- When OTP_WHATSAPP_ENABLED=False → dev stub (logs OTP, returns True)
"""

from __future__ import annotations

import hashlib
import logging
import re
import secrets
import string
import time

from app.core.config import settings

logger = logging.getLogger("otp_service")

# OTP configuration
OTP_LENGTH = 6
OTP_EXPIRY_SECONDS = 300  # 5 minutes
MAX_ATTEMPTS = 3
LOCKOUT_SECONDS = 3600  # 1 hour

PHONE_RE = re.compile(r"^[6-9]\d{9}$")

# In-memory store (single process; move to Redis for multiple workers)
_otp_store: dict[str, dict] = {}
_lockout_store: dict[str, float] = {}


def is_valid_phone(phone: str) -> bool:
    """10-digit Indian mobile number starting with 6-9."""
    return bool(PHONE_RE.match(phone or ""))


def generate_otp(phone: str) -> str:
    """Generate a 6-digit OTP and store its hash.

    Returns the plaintext OTP for delivery.
    """
    otp = "".join(secrets.choice(string.digits) for _ in range(OTP_LENGTH))
    _otp_store[phone] = {
        "hash": _hash_otp(otp),
        "created_at": time.time(),
        "attempts": 0,
    }
    logger.info("OTP generated for %s", phone)
    return otp


def verify_otp(phone: str, code: str) -> tuple[bool, str | None]:
    """Verify an OTP code against the stored hash.

    Returns ``(True, None)`` on success, else ``(False, reason)``.
    """
    if is_locked(phone):
        return False, "Too many attempts. Try again later"

    entry = _otp_store.get(phone)
    if not entry:
        return False, "OTP expired or not found"

    if (time.time() - entry["created_at"]) > OTP_EXPIRY_SECONDS:
        _otp_store.pop(phone, None)
        return False, "OTP expired"

    entry["attempts"] += 1
    if entry["attempts"] > MAX_ATTEMPTS:
        _otp_store.pop(phone, None)
        _lockout_store[phone] = time.time()
        logger.warning("OTP max attempts exceeded for %s, locked out", phone)
        return False, "Too many attempts. Try again later"

    if _hash_otp((code or "").strip()) == entry["hash"]:
        _otp_store.pop(phone, None)  # Consume OTP
        return True, None

    return False, "Invalid OTP"


async def send_otp(phone: str) -> tuple[bool, str | None]:
    """Generate and deliver an OTP. Returns ``(success, error)``."""
    if not is_valid_phone(phone):
        return False, "Please enter a valid 10-digit mobile number"
    if is_locked(phone):
        return False, "Too many attempts. Try again later"

    otp = generate_otp(phone)

    if not settings.OTP_WHATSAPP_ENABLED:
        logger.info("STUB: Would send OTP %s to %s", otp, phone)
        return True, None

    from app.infrastructure.external.whatsapp_client import send_whatsapp_text

    text = (
        f"Your verification code is {otp}. "
        f"It is valid for {OTP_EXPIRY_SECONDS // 60} minutes. Do not share it."
    )
    if await send_whatsapp_text(phone, text):
        return True, None
    _otp_store.pop(phone, None)
    return False, "Failed to send OTP"


def is_locked(phone: str) -> bool:
    """Check if a phone is locked out due to too many failed OTP attempts."""
    lockout_time = _lockout_store.get(phone)
    if not lockout_time:
        return False

    if (time.time() - lockout_time) > LOCKOUT_SECONDS:
        _lockout_store.pop(phone, None)
        return False

    return True


def _hash_otp(otp: str) -> str:
    """Hash an OTP for storage."""
    return hashlib.sha256(otp.encode()).hexdigest()
