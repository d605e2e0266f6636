import logging

import httpx

from app.core.config import settings

logger = logging.getLogger("whatsapp_client")

WA_BASE = "https://graph.facebook.com/v18.0"


def to_wa_number(phone: str) -> str:
    """10-digit Indian mobile -> E.164 digits without '+'."""
    digits = "".join(ch for ch in phone if ch.isdigit())
    if len(digits) == 10:
        return f"{settings.WHATSAPP_COUNTRY_CODE}{digits}"
    return digits


async def send_whatsapp_text(to: str, text: str) -> bool:
    """Send a plain text message via the WhatsApp Cloud API.

    Without credentials this runs in dev mode: the message is logged and
    treated as sent.
    """
    if not settings.WHATSAPP_ACCESS_TOKEN or not settings.WHATSAPP_PHONE_NUMBER_ID:
        logger.info("STUB: WhatsApp to %s: %s", to, text)
        return True

    url = f"{WA_BASE}/{settings.WHATSAPP_PHONE_NUMBER_ID}/messages"
    payload = {
        "messaging_product": "whatsapp",
        "to": to_wa_number(to),
        "type": "text",
        "text": {"body": text},
    }
    headers = {
        "Authorization": f"Bearer {settings.WHATSAPP_ACCESS_TOKEN}",
        "Content-Type": "application/json",
    }

    try:
        async with httpx.AsyncClient(timeout=10) as client:
            resp = await client.post(url, json=payload, headers=headers)
    except httpx.HTTPError:
        logger.exception("WhatsApp send to %s failed", to)
        return False

    if resp.is_success:
        return True
    logger.error("WhatsApp API returned %s: %s", resp.status_code, resp.text)
    return False
