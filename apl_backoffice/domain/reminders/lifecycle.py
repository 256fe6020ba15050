"""
Reminder lifecycle rules

Reminder statuses: PENDIENTE -> COMPLETADO / CANCELADO / VENCIDO
- VENCIDO is set only by the overdue sweep and can still be completed or cancelled
- COMPLETADO and CANCELADO are terminal
- Completing a repeating reminder spawns the next occurrence as a new record;
  cancelling stops the chain
"""

from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from ...models_reminder import Reminder, ReminderFrequency, ReminderStatus

VALID_TRANSITIONS = {
    ReminderStatus.PENDING.value: [
        ReminderStatus.COMPLETED.value,
        ReminderStatus.CANCELLED.value,
        ReminderStatus.OVERDUE.value,
    ],
    ReminderStatus.OVERDUE.value: [ReminderStatus.COMPLETED.value, ReminderStatus.CANCELLED.value],
    ReminderStatus.COMPLETED.value: [],  # Terminal state
    ReminderStatus.CANCELLED.value: [],  # Terminal state
}


def validate_status_transition(current_status: str, new_status: str) -> bool:
    """Check whether a reminder may move from current_status to new_status"""
    return new_status in VALID_TRANSITIONS.get(current_status, [])


@dataclass
class ReminderDraft:
    """Field values for a reminder that has not been persisted yet"""

    titulo: str
    tipo: str
    tipo_entidad: str
    entidad_id: str
    fecha_recordatorio: datetime
    descripcion: Optional[str] = None
    prioridad: str = "NORMAL"
    administrador_id: Optional[str] = None
    repetir: bool = False
    frecuencia: Optional[str] = None
    observaciones: Optional[str] = None
    estado: str = ReminderStatus.PENDING.value
    notificado: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


def advance_date(fecha: datetime, frecuencia: str) -> datetime:
    """Add one recurrence step. Monthly steps clamp to the last day of shorter months."""
    if frecuencia == ReminderFrequency.DAILY.value:
        return fecha + timedelta(days=1)
    if frecuencia == ReminderFrequency.WEEKLY.value:
        return fecha + timedelta(weeks=1)
    if frecuencia == ReminderFrequency.MONTHLY.value:
        return fecha + relativedelta(months=1)
    raise ValueError(f"Unknown frequency: {frecuencia}")


def next_occurrence(reminder: Reminder) -> Optional[ReminderDraft]:
    """
    Build the successor of a repeating reminder, starting from its current
    fecha_recordatorio. Returns None when the reminder does not repeat.
    """
    if not reminder.repetir or not reminder.frecuencia:
        return None

    return ReminderDraft(
        titulo=reminder.titulo,
        descripcion=reminder.descripcion,
        tipo=reminder.tipo,
        tipo_entidad=reminder.tipo_entidad,
        entidad_id=reminder.entidad_id,
        fecha_recordatorio=advance_date(reminder.fecha_recordatorio, reminder.frecuencia),
        prioridad=reminder.prioridad,
        administrador_id=reminder.administrador_id,
        repetir=True,
        frecuencia=reminder.frecuencia,
        observaciones=reminder.observaciones,
    )
