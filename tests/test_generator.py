"""Tests for automatic reminder generation from orders."""

from datetime import datetime, timedelta

import pytest

from apl_backoffice.domain.reminders.generator import (
    ReminderGenerator,
    priority_for_days_remaining,
    priority_for_order_age,
)
from apl_backoffice.domain.reminders.schemas import ReminderCreate
from apl_backoffice.domain.reminders.service import ReminderService
from apl_backoffice.models import ORDER_STATUS_CANCELLED, ORDER_STATUS_DELIVERED, ORDER_STATUS_PAID
from apl_backoffice.models_reminder import Reminder

NOW = datetime(2026, 3, 10, 9, 0)


def _reminders(db, tipo):
    return db.query(Reminder).filter(Reminder.tipo == tipo).all()


class TestPriorityRules:
    @pytest.mark.parametrize(
        "days, expected",
        [(0, "URGENTE"), (1, "URGENTE"), (2, "ALTA"), (3, "ALTA"), (4, "NORMAL"), (5, "NORMAL"), (7, "NORMAL")],
    )
    def test_days_remaining(self, days, expected):
        assert priority_for_days_remaining(days) == expected

    @pytest.mark.parametrize(
        "days, expected",
        [(31, "NORMAL"), (45, "NORMAL"), (46, "ALTA"), (60, "ALTA"), (61, "URGENTE"), (90, "URGENTE")],
    )
    def test_order_age(self, days, expected):
        assert priority_for_order_age(days) == expected


class TestDueOrderReminders:
    def test_creates_reminder_for_order_due_soon(self, db, make_order):
        order = make_order(numero_pedido="77", fecha_vencimiento=NOW + timedelta(days=2))

        summary = ReminderGenerator(db).generate_due_order_reminders(NOW)

        assert summary == {"scanned": 1, "created": 1, "skipped": 0, "failed": 0}
        reminder = _reminders(db, "VENCIMIENTO_PEDIDO")[0]
        assert reminder.prioridad == "ALTA"
        assert reminder.tipo_entidad == "pedido"
        assert reminder.entidad_id == str(order.id)
        assert reminder.fecha_recordatorio == order.fecha_vencimiento
        assert reminder.estado == "PENDIENTE"
        assert reminder.notificado is False
        assert reminder.administrador_id is None
        assert "77" in reminder.titulo
        assert "vence en 2 día(s)" in reminder.descripcion

    def test_due_today_is_urgent(self, db, make_order):
        make_order(fecha_vencimiento=NOW.replace(hour=7))

        ReminderGenerator(db).generate_due_order_reminders(NOW)

        reminder = _reminders(db, "VENCIMIENTO_PEDIDO")[0]
        assert reminder.prioridad == "URGENTE"
        assert "vence hoy" in reminder.descripcion

    def test_is_idempotent(self, db, make_order):
        make_order(fecha_vencimiento=NOW + timedelta(days=2))
        generator = ReminderGenerator(db)

        generator.generate_due_order_reminders(NOW)
        second = generator.generate_due_order_reminders(NOW)

        assert second["created"] == 0
        assert second["skipped"] == 1
        assert len(_reminders(db, "VENCIMIENTO_PEDIDO")) == 1

    def test_overdue_reminder_still_blocks_duplicates(self, db, make_order):
        make_order(fecha_vencimiento=NOW + timedelta(days=1))
        generator = ReminderGenerator(db)
        generator.generate_due_order_reminders(NOW)
        reminder = _reminders(db, "VENCIMIENTO_PEDIDO")[0]
        reminder.estado = "VENCIDO"
        db.commit()

        summary = generator.generate_due_order_reminders(NOW)

        assert summary["created"] == 0
        assert len(_reminders(db, "VENCIMIENTO_PEDIDO")) == 1

    def test_manual_reminder_for_order_blocks_generation(self, db, make_order):
        order = make_order(fecha_vencimiento=NOW + timedelta(days=2))
        ReminderService(db).create_reminder(
            ReminderCreate(
                titulo="Avisar al cliente",
                tipo="VENCIMIENTO_PEDIDO",
                tipoEntidad="Pedido",
                entidadId=f"0{order.id}",
                fechaRecordatorio=NOW + timedelta(days=1),
            )
        )

        summary = ReminderGenerator(db).generate_due_order_reminders(NOW)

        assert summary["created"] == 0
        assert summary["skipped"] == 1
        assert len(_reminders(db, "VENCIMIENTO_PEDIDO")) == 1

    def test_completed_reminder_allows_a_new_one(self, db, make_order):
        make_order(fecha_vencimiento=NOW + timedelta(days=3))
        generator = ReminderGenerator(db)
        generator.generate_due_order_reminders(NOW)
        reminder = _reminders(db, "VENCIMIENTO_PEDIDO")[0]
        reminder.estado = "COMPLETADO"
        db.commit()

        summary = generator.generate_due_order_reminders(NOW)

        assert summary["created"] == 1
        assert len(_reminders(db, "VENCIMIENTO_PEDIDO")) == 2

    @pytest.mark.parametrize("estado", [ORDER_STATUS_DELIVERED, ORDER_STATUS_PAID, ORDER_STATUS_CANCELLED])
    def test_terminal_orders_are_ignored(self, db, make_order, estado):
        make_order(fecha_vencimiento=NOW + timedelta(days=2), estado=estado)

        summary = ReminderGenerator(db).generate_due_order_reminders(NOW)

        assert summary["scanned"] == 0
        assert _reminders(db, "VENCIMIENTO_PEDIDO") == []

    def test_soft_deleted_orders_are_ignored(self, db, make_order):
        make_order(fecha_vencimiento=NOW + timedelta(days=2), fecha_delete=NOW)

        assert ReminderGenerator(db).generate_due_order_reminders(NOW)["scanned"] == 0

    def test_window_covers_seven_calendar_days(self, db, make_order):
        make_order(fecha_vencimiento=datetime(2026, 3, 17, 23, 0))  # today + 7, late
        make_order(fecha_vencimiento=datetime(2026, 3, 18, 0, 0))  # today + 8
        make_order(fecha_vencimiento=datetime(2026, 3, 9, 18, 0))  # yesterday
        make_order(fecha_vencimiento=None)

        summary = ReminderGenerator(db).generate_due_order_reminders(NOW)

        assert summary["created"] == 1
        assert _reminders(db, "VENCIMIENTO_PEDIDO")[0].prioridad == "NORMAL"


class TestPaymentReminders:
    def test_old_order_with_balance_is_urgent(self, db, make_order):
        order = make_order(
            numero_pedido="88",
            fecha_pedido=NOW - timedelta(days=70),
            monto_total=1000.0,
            payments=[500.0],
        )

        summary = ReminderGenerator(db).generate_payment_reminders(NOW)

        assert summary == {"scanned": 1, "created": 1, "skipped": 0, "failed": 0}
        reminder = _reminders(db, "PAGO_PENDIENTE")[0]
        assert reminder.prioridad == "URGENTE"
        assert reminder.entidad_id == str(order.id)
        assert reminder.fecha_recordatorio == NOW
        assert "$500.00" in reminder.descripcion
        assert "88" in reminder.titulo

    def test_priority_follows_order_age(self, db, make_order):
        make_order(fecha_pedido=NOW - timedelta(days=50), monto_total=300.0)
        make_order(fecha_pedido=NOW - timedelta(days=35), monto_total=300.0)

        ReminderGenerator(db).generate_payment_reminders(NOW)

        priorities = sorted(r.prioridad for r in _reminders(db, "PAGO_PENDIENTE"))
        assert priorities == ["ALTA", "NORMAL"]

    def test_recent_orders_are_ignored(self, db, make_order):
        make_order(fecha_pedido=NOW - timedelta(days=20), monto_total=300.0)

        assert ReminderGenerator(db).generate_payment_reminders(NOW)["scanned"] == 0

    def test_fully_paid_orders_are_ignored(self, db, make_order):
        make_order(fecha_pedido=NOW - timedelta(days=70), monto_total=300.0, payments=[200.0, 100.0])

        assert ReminderGenerator(db).generate_payment_reminders(NOW)["scanned"] == 0

    def test_cancelled_orders_are_ignored(self, db, make_order):
        make_order(fecha_pedido=NOW - timedelta(days=70), monto_total=300.0, estado=ORDER_STATUS_CANCELLED)

        assert ReminderGenerator(db).generate_payment_reminders(NOW)["scanned"] == 0

    def test_is_idempotent(self, db, make_order):
        make_order(fecha_pedido=NOW - timedelta(days=70), monto_total=300.0)
        generator = ReminderGenerator(db)

        generator.generate_payment_reminders(NOW)
        second = generator.generate_payment_reminders(NOW)

        assert second["skipped"] == 1
        assert len(_reminders(db, "PAGO_PENDIENTE")) == 1

    def test_order_due_and_payment_reminders_coexist(self, db, make_order):
        make_order(
            fecha_pedido=NOW - timedelta(days=40),
            fecha_vencimiento=NOW + timedelta(days=1),
            monto_total=300.0,
        )
        generator = ReminderGenerator(db)

        generator.generate_due_order_reminders(NOW)
        generator.generate_payment_reminders(NOW)

        assert len(db.query(Reminder).all()) == 2

    def test_failure_on_one_order_does_not_stop_the_scan(self, db, make_order, monkeypatch):
        make_order(fecha_pedido=NOW - timedelta(days=70), monto_total=300.0)
        make_order(fecha_pedido=NOW - timedelta(days=65), monto_total=300.0)
        generator = ReminderGenerator(db)
        real_create = generator.repo.create_reminder
        calls = {"n": 0}

        def flaky_create(session, **data):
            calls["n"] += 1
            if calls["n"] == 1:
                raise RuntimeError("database hiccup")
            return real_create(session, **data)

        monkeypatch.setattr(generator.repo, "create_reminder", flaky_create)

        summary = generator.generate_payment_reminders(NOW)

        assert summary["failed"] == 1
        assert summary["created"] == 1
