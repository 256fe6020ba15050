"""
WhatsApp Cloud API Service
Sends plain text messages through Meta's Graph API
"""

import logging
import re
from typing import Optional

import httpx

from ..config import WHATSAPP_API_VERSION, WHATSAPP_PHONE_NUMBER_ID, WHATSAPP_TOKEN

logger = logging.getLogger(__name__)


def normalize_whatsapp_number(raw: Optional[str]) -> str:
    """The Cloud API expects the international number as digits only (+598 99 123 456 -> 59899123456)"""
    return re.sub(r"\D", "", raw or "")


def is_whatsapp_configured() -> bool:
    return bool(WHATSAPP_TOKEN and WHATSAPP_PHONE_NUMBER_ID)


async def send_whatsapp_message(to_phone: str, message_body: str) -> tuple[bool, Optional[str]]:
    """
    Send a WhatsApp text message

    Args:
        to_phone: Recipient number in international format
        message_body: Message content

    Returns:
        Tuple of (success: bool, error_message: Optional[str])
    """
    if not is_whatsapp_configured():
        logger.debug("WhatsApp not configured (WHATSAPP_TOKEN/WHATSAPP_PHONE_NUMBER_ID)")
        return False, "WhatsApp not configured"

    to = normalize_whatsapp_number(to_phone)
    if not to:
        logger.warning(f"⚠️ Invalid WhatsApp number: {to_phone}")
        return False, "Invalid WhatsApp number"

    if not (message_body or "").strip():
        return False, "Empty message"

    url = f"https://graph.facebook.com/{WHATSAPP_API_VERSION}/{WHATSAPP_PHONE_NUMBER_ID}/messages"
    payload = {
        "messaging_product": "whatsapp",
        "to": to,
        "type": "text",
        "text": {"preview_url": False, "body": message_body},
    }

    logger.info(f"🚀 Sending WhatsApp message to {to}")
    async with httpx.AsyncClient() as client:
        response = await client.post(
            url,
            headers={"Authorization": f"Bearer {WHATSAPP_TOKEN}"},
            json=payload,
            timeout=10.0,
        )

    if response.status_code in [200, 201]:
        logger.info(f"💬 WhatsApp sent to {to}")
        return True, None

    logger.error(f"❌ WhatsApp API error ({response.status_code}): {response.text}")
    return False, f"WhatsApp API error {response.status_code}"
