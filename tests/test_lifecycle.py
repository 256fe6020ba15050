"""Tests for reminder status transitions and recurrence."""

from datetime import datetime

import pytest

from apl_backoffice.domain.reminders.entities import (
    ClientRef,
    OrderRef,
    OtherRef,
    entity_ref_from_columns,
)
from apl_backoffice.domain.reminders.lifecycle import (
    advance_date,
    next_occurrence,
    validate_status_transition,
)
from apl_backoffice.models_reminder import Reminder


def _reminder(**overrides):
    values = {
        "id": "r-1",
        "titulo": "Control de calidad",
        "descripcion": "Revisar coronas",
        "tipo": "OTRO",
        "tipo_entidad": "pedido",
        "entidad_id": "12",
        "fecha_recordatorio": datetime(2026, 3, 10, 9, 30),
        "prioridad": "ALTA",
        "administrador_id": "admin-1",
        "estado": "PENDIENTE",
        "repetir": True,
        "frecuencia": "semanal",
        "notificado": True,
        "observaciones": "Lote 4",
    }
    values.update(overrides)
    return Reminder(**values)


class TestStatusTransitions:
    @pytest.mark.parametrize("new_status", ["COMPLETADO", "CANCELADO", "VENCIDO"])
    def test_pending_can_move_anywhere(self, new_status):
        assert validate_status_transition("PENDIENTE", new_status) is True

    @pytest.mark.parametrize("new_status", ["COMPLETADO", "CANCELADO"])
    def test_overdue_can_still_be_closed(self, new_status):
        assert validate_status_transition("VENCIDO", new_status) is True

    def test_overdue_cannot_go_back_to_pending(self):
        assert validate_status_transition("VENCIDO", "PENDIENTE") is False

    @pytest.mark.parametrize("terminal", ["COMPLETADO", "CANCELADO"])
    def test_terminal_states_are_final(self, terminal):
        for new_status in ("PENDIENTE", "COMPLETADO", "CANCELADO", "VENCIDO"):
            assert validate_status_transition(terminal, new_status) is False

    def test_unknown_status(self):
        assert validate_status_transition("ARCHIVADO", "COMPLETADO") is False


class TestNextOccurrence:
    def test_weekly_adds_seven_days_and_copies_fields(self):
        reminder = _reminder()
        draft = next_occurrence(reminder)

        assert draft is not None
        assert draft.fecha_recordatorio == datetime(2026, 3, 17, 9, 30)
        assert draft.titulo == reminder.titulo
        assert draft.descripcion == reminder.descripcion
        assert draft.tipo_entidad == "pedido"
        assert draft.entidad_id == "12"
        assert draft.prioridad == "ALTA"
        assert draft.administrador_id == "admin-1"
        assert draft.observaciones == "Lote 4"
        assert draft.repetir is True
        assert draft.frecuencia == "semanal"

    def test_successor_starts_fresh(self):
        draft = next_occurrence(_reminder(estado="COMPLETADO"))
        assert draft.estado == "PENDIENTE"
        assert draft.notificado is False
        assert "id" not in draft.to_dict()

    def test_daily(self):
        draft = next_occurrence(_reminder(frecuencia="diario"))
        assert draft.fecha_recordatorio == datetime(2026, 3, 11, 9, 30)

    def test_monthly_clamps_to_end_of_month(self):
        draft = next_occurrence(_reminder(frecuencia="mensual", fecha_recordatorio=datetime(2026, 1, 31, 8, 0)))
        assert draft.fecha_recordatorio == datetime(2026, 2, 28, 8, 0)

    def test_monthly_regular_day(self):
        assert advance_date(datetime(2026, 4, 15), "mensual") == datetime(2026, 5, 15)

    def test_non_repeating_has_no_successor(self):
        assert next_occurrence(_reminder(repetir=False)) is None

    def test_repeating_without_frequency_has_no_successor(self):
        assert next_occurrence(_reminder(frecuencia=None)) is None

    def test_does_not_mutate_input(self):
        reminder = _reminder()
        next_occurrence(reminder)
        assert reminder.fecha_recordatorio == datetime(2026, 3, 10, 9, 30)
        assert reminder.estado == "PENDIENTE"

    def test_unknown_frequency(self):
        with pytest.raises(ValueError):
            advance_date(datetime(2026, 3, 10), "anual")


class TestEntityRef:
    def test_order_ref_columns(self):
        assert OrderRef(77).to_columns() == ("pedido", "77")

    def test_from_columns(self):
        assert entity_ref_from_columns("pedido", "77") == OrderRef(77)
        assert entity_ref_from_columns("cliente", "5") == ClientRef(5)

    def test_from_columns_normalizes_case_and_padding(self):
        assert entity_ref_from_columns(" Cliente ", "05") == ClientRef(5)
        assert entity_ref_from_columns("PEDIDO", " 77") == OrderRef(77)

    def test_unknown_kind_falls_back(self):
        assert entity_ref_from_columns("proveedor", "abc") == OtherRef("proveedor", "abc")
        assert entity_ref_from_columns("pedido", "x-1") == OtherRef("pedido", "x-1")
