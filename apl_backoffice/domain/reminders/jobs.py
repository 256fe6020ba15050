"""
Scheduled reminder jobs
- hourly: notify reminders coming due in the next 24 hours
- daily: create reminders for orders about to be due
- every 6 hours: mark expired reminders as overdue
"""

import logging
from typing import Callable

from sqlalchemy.orm import Session

from ...config import REMINDER_CHECK_CRON, REMINDER_GENERATION_CRON, REMINDER_OVERDUE_CRON
from ...database import SessionLocal
from ...scheduler import SchedulerService
from .service import ReminderService

logger = logging.getLogger(__name__)

CHECK_PENDING_JOB = "check-pending-reminders"
GENERATE_DUE_ORDERS_JOB = "generate-due-order-reminders"
MARK_OVERDUE_JOB = "mark-overdue-reminders"


def build_reminder_jobs(session_factory: Callable[[], Session] = SessionLocal) -> dict:
    """Job coroutines keyed by job name; each run uses its own session"""

    async def check_pending_reminders_job():
        db = session_factory()
        try:
            return await ReminderService(db).check_pending_reminders()
        finally:
            db.close()

    async def generate_due_order_reminders_job():
        db = session_factory()
        try:
            return ReminderService(db).generate_due_order_reminders()
        finally:
            db.close()

    async def mark_overdue_reminders_job():
        db = session_factory()
        try:
            return {"marked_overdue": ReminderService(db).mark_overdue_reminders()}
        finally:
            db.close()

    return {
        CHECK_PENDING_JOB: check_pending_reminders_job,
        GENERATE_DUE_ORDERS_JOB: generate_due_order_reminders_job,
        MARK_OVERDUE_JOB: mark_overdue_reminders_job,
    }


def register_reminder_jobs(
    scheduler: SchedulerService, session_factory: Callable[[], Session] = SessionLocal
) -> None:
    jobs = build_reminder_jobs(session_factory)
    scheduler.schedule_job(CHECK_PENDING_JOB, REMINDER_CHECK_CRON, jobs[CHECK_PENDING_JOB])
    scheduler.schedule_job(GENERATE_DUE_ORDERS_JOB, REMINDER_GENERATION_CRON, jobs[GENERATE_DUE_ORDERS_JOB])
    scheduler.schedule_job(MARK_OVERDUE_JOB, REMINDER_OVERDUE_CRON, jobs[MARK_OVERDUE_JOB])
    logger.info("📅 Reminder jobs registered")
