"""Tests for the pending reminder notification check."""

from datetime import datetime, timedelta

from apl_backoffice.domain.reminders.notifier import ReminderNotifier

NOW = datetime(2026, 3, 10, 9, 0)


class TestCheckPendingReminders:
    async def test_notifies_reminders_due_within_a_day(self, db, make_reminder, sent_notifications):
        soon = make_reminder(fecha_recordatorio=NOW + timedelta(hours=5))
        late = make_reminder(fecha_recordatorio=NOW + timedelta(hours=30))

        summary = await ReminderNotifier(db).check_pending_reminders(NOW)

        assert summary == {"checked": 1, "notified": 1}
        assert sent_notifications == [soon.id]
        db.refresh(soon)
        db.refresh(late)
        assert soon.notificado is True
        assert soon.fecha_notificacion == NOW
        assert late.notificado is False

    async def test_past_due_pending_reminders_are_included(self, db, make_reminder, sent_notifications):
        missed = make_reminder(fecha_recordatorio=NOW - timedelta(days=2))

        await ReminderNotifier(db).check_pending_reminders(NOW)

        assert sent_notifications == [missed.id]

    async def test_notifies_only_once(self, db, make_reminder, sent_notifications):
        make_reminder(fecha_recordatorio=NOW + timedelta(hours=1))
        notifier = ReminderNotifier(db)

        await notifier.check_pending_reminders(NOW)
        second = await notifier.check_pending_reminders(NOW)

        assert second == {"checked": 0, "notified": 0}
        assert len(sent_notifications) == 1

    async def test_skips_closed_and_overdue_reminders(self, db, make_reminder, sent_notifications):
        for estado in ("COMPLETADO", "CANCELADO", "VENCIDO"):
            make_reminder(fecha_recordatorio=NOW + timedelta(hours=1), estado=estado)

        summary = await ReminderNotifier(db).check_pending_reminders(NOW)

        assert summary["checked"] == 0
        assert sent_notifications == []

    async def test_failed_send_still_marks_notified(self, db, make_reminder):
        reminder = make_reminder(fecha_recordatorio=NOW + timedelta(hours=2))
        attempts = []

        async def failing_send(r):
            attempts.append(r.id)
            raise RuntimeError("SMTP down")

        notifier = ReminderNotifier(db, send=failing_send)
        await notifier.check_pending_reminders(NOW)
        await notifier.check_pending_reminders(NOW)

        assert attempts == [reminder.id]
        db.refresh(reminder)
        assert reminder.notificado is True
        assert reminder.fecha_notificacion is not None
