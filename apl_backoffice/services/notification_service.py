"""
Unified Notification Service
Delivers email and WhatsApp messages, either inline or through the ARQ queue
"""

import logging
from typing import Optional

from arq import create_pool

from ..config import NOTIFICATION_QUEUE_ENABLED, REMINDER_NOTIFY_EMAIL, REMINDER_NOTIFY_WHATSAPP
from ..email_service import send_basic_email, send_reminder_email
from ..models_reminder import Reminder
from ..redis_client import is_redis_configured
from .whatsapp_service import send_whatsapp_message

logger = logging.getLogger(__name__)

CHANNEL_EMAIL = "email"
CHANNEL_WHATSAPP = "whatsapp"
CHANNELS = (CHANNEL_EMAIL, CHANNEL_WHATSAPP)


class NotificationError(Exception):
    """Raised when a notification could not be delivered"""


def is_notification_queue_enabled() -> bool:
    return NOTIFICATION_QUEUE_ENABLED and is_redis_configured()


async def deliver_notification(
    channel: str, to: str, message: str, subject: Optional[str] = None
) -> dict:
    """Send one notification right now. Raises NotificationError on failure."""
    if channel not in CHANNELS:
        raise NotificationError(f"Unknown notification channel: {channel}")

    if channel == CHANNEL_EMAIL:
        try:
            response = await send_basic_email(to=to, subject=subject or "Mensaje desde APL", message=message)
        except Exception as e:
            raise NotificationError(str(e)) from e
        return {"channel": channel, "to": to, "sent": True, "response": response}

    success, error = await send_whatsapp_message(to_phone=to, message_body=message)
    if not success:
        raise NotificationError(error or "WhatsApp message not sent")
    return {"channel": channel, "to": to, "sent": True}


async def enqueue_notification(
    channel: str, to: str, message: str, subject: Optional[str] = None
) -> Optional[str]:
    """Queue a notification on ARQ. Returns the job id, or None when the queue is disabled."""
    if not is_notification_queue_enabled():
        return None

    from ..worker import get_redis_settings

    pool = await create_pool(get_redis_settings())
    try:
        job = await pool.enqueue_job("send_notification_task", channel, to, message, subject)
    finally:
        await pool.close()

    logger.info(f"📋 Notification job queued: {job.job_id} ({channel} to {to})")
    return job.job_id


async def dispatch_notification(
    channel: str, to: str, message: str, subject: Optional[str] = None
) -> dict:
    """Queue the notification when the queue is available, otherwise send it inline"""
    if is_notification_queue_enabled():
        job_id = await enqueue_notification(channel, to, message, subject)
        return {"channel": channel, "to": to, "queued": True, "job_id": job_id}

    result = await deliver_notification(channel, to, message, subject)
    result["queued"] = False
    return result


def build_reminder_message(reminder: Reminder) -> str:
    """Plain text body used for WhatsApp reminder notifications"""
    lines = [f"🔔 Recordatorio: {reminder.titulo}"]
    if reminder.descripcion:
        lines.append(reminder.descripcion)
    lines.append(f"Fecha: {reminder.fecha_recordatorio:%d/%m/%Y %H:%M}")
    lines.append(f"Prioridad: {reminder.prioridad}")
    return "\n".join(lines)


async def send_reminder_notification(reminder: Reminder) -> dict:
    """
    Notify laboratory staff that a reminder is coming due.
    Each channel is attempted independently; failures are reported in the result.

    Returns:
        Dict with email_sent / whatsapp_sent status and errors
    """
    result = {"email_sent": False, "whatsapp_sent": False, "email_error": None, "whatsapp_error": None}

    if not REMINDER_NOTIFY_EMAIL and not REMINDER_NOTIFY_WHATSAPP:
        logger.debug(f"ℹ️ No notification destination configured for reminder {reminder.id}")
        return result

    if REMINDER_NOTIFY_EMAIL:
        try:
            if is_notification_queue_enabled():
                message = build_reminder_message(reminder)
                await enqueue_notification(
                    CHANNEL_EMAIL, REMINDER_NOTIFY_EMAIL, message, f"Recordatorio: {reminder.titulo}"
                )
            else:
                await send_reminder_email(
                    to=REMINDER_NOTIFY_EMAIL,
                    titulo=reminder.titulo,
                    fecha_recordatorio=f"{reminder.fecha_recordatorio:%d/%m/%Y %H:%M}",
                    prioridad=reminder.prioridad,
                    descripcion=reminder.descripcion,
                    observaciones=reminder.observaciones,
                )
            result["email_sent"] = True
            logger.info(f"✅ Reminder {reminder.id} email dispatched to {REMINDER_NOTIFY_EMAIL}")
        except Exception as e:
            result["email_error"] = str(e)
            logger.error(f"❌ Failed to send reminder {reminder.id} email: {e}")

    if REMINDER_NOTIFY_WHATSAPP:
        try:
            await dispatch_notification(CHANNEL_WHATSAPP, REMINDER_NOTIFY_WHATSAPP, build_reminder_message(reminder))
            result["whatsapp_sent"] = True
            logger.info(f"✅ Reminder {reminder.id} WhatsApp dispatched to {REMINDER_NOTIFY_WHATSAPP}")
        except Exception as e:
            result["whatsapp_error"] = str(e)
            logger.error(f"❌ Failed to send reminder {reminder.id} WhatsApp: {e}")

    return result
