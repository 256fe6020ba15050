"""Pending reminder check - notification dispatch with an at-most-once notified flag"""

import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional

from sqlalchemy.orm import Session

from ...models_reminder import Reminder
from ...services.notification_service import send_reminder_notification
from .repository import ReminderRepository

logger = logging.getLogger(__name__)

NOTIFY_AHEAD = timedelta(hours=24)


class ReminderNotifier:
    def __init__(
        self,
        db: Session,
        send: Optional[Callable[[Reminder], Awaitable[dict]]] = None,
    ):
        self.db = db
        self.send = send or send_reminder_notification
        self.repo = ReminderRepository()

    async def check_pending_reminders(self, now: Optional[datetime] = None) -> dict:
        """
        Notify every PENDIENTE reminder due within the next 24 hours that has not
        been notified yet, then flag it as notified.

        The flag is set even when the send fails, so a reminder is never
        notified twice but a failed send is not retried.
        """
        now = now or datetime.now()
        reminders = self.repo.get_due_for_notification(self.db, now + NOTIFY_AHEAD)
        summary = {"checked": len(reminders), "notified": 0}
        logger.info(f"🔔 Pending check: {len(reminders)} reminders to notify")

        for reminder in reminders:
            try:
                await self.send(reminder)
            except Exception as e:
                logger.error(f"❌ Notification failed for reminder {reminder.id}: {e}")

            try:
                self.repo.mark_notified(self.db, reminder, now)
                summary["notified"] += 1
            except Exception as e:
                self.db.rollback()
                logger.error(f"❌ Failed to mark reminder {reminder.id} as notified: {e}")

        logger.info(f"📊 Pending check summary: {summary}")
        return summary
