"""Reminder service - Business logic for reminder operations"""

import logging
import math
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...cache import cache, invalidate_reminder_cache
from ...config import REMINDER_STATS_CACHE_TTL
from ...models_reminder import Reminder, ReminderPriority, ReminderStatus
from ..orders import OrderDataProvider
from .entities import entity_ref_from_columns
from .generator import ReminderGenerator
from .lifecycle import next_occurrence, validate_status_transition
from .notifier import ReminderNotifier
from .repository import ReminderRepository
from .schemas import ReminderCreate, ReminderFilters, ReminderUpdate

logger = logging.getLogger(__name__)

# API field name -> column name
FIELD_MAP = {
    "titulo": "titulo",
    "descripcion": "descripcion",
    "tipo": "tipo",
    "tipoEntidad": "tipo_entidad",
    "entidadId": "entidad_id",
    "fechaRecordatorio": "fecha_recordatorio",
    "prioridad": "prioridad",
    "administradorId": "administrador_id",
    "repetir": "repetir",
    "frecuencia": "frecuencia",
    "observaciones": "observaciones",
}

STATS_CACHE_KEY = "reminders:stats"
UPCOMING_ORDERS_DAYS = 3


def _column_values(data: dict) -> dict:
    values = {}
    for field, value in data.items():
        if field not in FIELD_MAP:
            continue
        # Enums are stored by value
        values[FIELD_MAP[field]] = getattr(value, "value", value)
    return values


def _entity_columns(tipo_entidad: str, entidad_id: str) -> tuple[str, str]:
    """Canonical (tipo_entidad, entidad_id) so manual and generated reminders share dedup keys"""
    return entity_ref_from_columns(tipo_entidad, entidad_id).to_columns()


class ReminderService:
    """Service layer for reminder business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReminderRepository()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_reminders(self, filters: ReminderFilters) -> dict:
        """Filtered, paginated list"""
        items, total = self.repo.search_reminders(
            self.db,
            estado=filters.estado.value if filters.estado else None,
            tipo=filters.tipo.value if filters.tipo else None,
            administrador_id=filters.administradorId,
            fecha_desde=filters.fechaDesde,
            fecha_hasta=filters.fechaHasta,
            page=filters.page,
            limit=filters.limit,
        )
        return {
            "data": items,
            "total": total,
            "page": filters.page,
            "limit": filters.limit,
            "totalPages": math.ceil(total / filters.limit) if total else 0,
        }

    def get_pending_reminders(self, administrador_id: Optional[str] = None) -> list[Reminder]:
        return self.repo.get_pending_reminders(self.db, administrador_id)

    def get_today_reminders(
        self, administrador_id: Optional[str] = None, now: Optional[datetime] = None
    ) -> list[Reminder]:
        now = now or datetime.now()
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return self.repo.get_pending_between(self.db, start, start + timedelta(days=1), administrador_id)

    def get_reminder(self, reminder_id: str) -> Reminder:
        reminder = self.repo.get_reminder_by_id(self.db, reminder_id)
        if not reminder:
            raise HTTPException(status_code=404, detail="Recordatorio no encontrado")
        return reminder

    def get_statistics(self, now: Optional[datetime] = None) -> dict:
        """Reminder counts plus the order figures shown next to them (cached)"""
        return cache.get_or_set(STATS_CACHE_KEY, REMINDER_STATS_CACHE_TTL, lambda: self._compute_statistics(now))

    def _compute_statistics(self, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        counts = self.repo.count_by_status(self.db)
        provider = OrderDataProvider()

        return {
            "recordatorios": {
                "total": sum(counts.values()),
                "pendientes": counts[ReminderStatus.PENDING.value],
                "completados": counts[ReminderStatus.COMPLETED.value],
                "cancelados": counts[ReminderStatus.CANCELLED.value],
                "vencidos": counts[ReminderStatus.OVERDUE.value],
                "hoy": len(self.repo.get_pending_between(self.db, today, today + timedelta(days=1))),
            },
            "pedidos": {
                "proximosAVencer": provider.count_orders_due_between(
                    self.db, today, today + timedelta(days=UPCOMING_ORDERS_DAYS + 1)
                ),
                "vencidos": provider.count_overdue_orders(self.db, today),
                **provider.get_debt_summary(self.db),
            },
        }

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_reminder(self, data: ReminderCreate) -> Reminder:
        values = _column_values(data.model_dump(exclude_none=True))
        values.setdefault("prioridad", ReminderPriority.NORMAL.value)
        if not values.get("repetir"):
            values["frecuencia"] = None
        values["tipo_entidad"], values["entidad_id"] = _entity_columns(values["tipo_entidad"], values["entidad_id"])

        reminder = self.repo.create_reminder(self.db, **values)
        invalidate_reminder_cache()
        logger.info(f"✅ Reminder created: {reminder.id} ({reminder.tipo})")
        return reminder

    def update_reminder(self, reminder_id: str, data: ReminderUpdate) -> Reminder:
        reminder = self.get_reminder(reminder_id)
        if not reminder.is_active:
            raise HTTPException(
                status_code=409,
                detail=f"No se puede modificar un recordatorio en estado {reminder.estado}",
            )
        updates = _column_values(data.model_dump(exclude_unset=True))

        repetir = updates.get("repetir", reminder.repetir)
        frecuencia = updates.get("frecuencia", reminder.frecuencia)
        if repetir and not frecuencia:
            raise HTTPException(status_code=400, detail="frecuencia es requerida cuando repetir es true")
        if "repetir" in updates and not repetir:
            updates["frecuencia"] = None

        if "tipo_entidad" in updates or "entidad_id" in updates:
            updates["tipo_entidad"], updates["entidad_id"] = _entity_columns(
                updates.get("tipo_entidad", reminder.tipo_entidad),
                updates.get("entidad_id", reminder.entidad_id),
            )

        # A rescheduled reminder is notified again for its new date
        if "fecha_recordatorio" in updates and updates["fecha_recordatorio"] != reminder.fecha_recordatorio:
            updates["notificado"] = False
            updates["fecha_notificacion"] = None

        reminder = self.repo.update_reminder(self.db, reminder, **updates)
        invalidate_reminder_cache()
        return reminder

    def _transition(self, reminder: Reminder, new_status: str) -> None:
        if not validate_status_transition(reminder.estado, new_status):
            raise HTTPException(
                status_code=409,
                detail=f"No se puede pasar un recordatorio de {reminder.estado} a {new_status}",
            )

    def complete_reminder(self, reminder_id: str) -> tuple[Reminder, Optional[Reminder]]:
        """
        Mark a reminder as completed. A repeating reminder gets its next
        occurrence created as a new PENDIENTE record.

        Returns:
            (completed reminder, next occurrence or None)
        """
        reminder = self.get_reminder(reminder_id)
        self._transition(reminder, ReminderStatus.COMPLETED.value)

        draft = next_occurrence(reminder)
        successor = None
        try:
            reminder.estado = ReminderStatus.COMPLETED.value
            if draft:
                successor = Reminder(**draft.to_dict())
                self.db.add(successor)
            self.db.commit()
        except Exception as e:
            logger.error(f"❌ Error completing reminder {reminder_id}: {str(e)}")
            self.db.rollback()
            raise

        self.db.refresh(reminder)
        if successor:
            self.db.refresh(successor)
            logger.info(
                f"🔁 Reminder {reminder.id} completed; next occurrence {successor.id} "
                f"on {successor.fecha_recordatorio:%Y-%m-%d}"
            )
        else:
            logger.info(f"✅ Reminder {reminder.id} completed")

        invalidate_reminder_cache()
        return reminder, successor

    def cancel_reminder(self, reminder_id: str) -> Reminder:
        """Cancel a reminder. Cancelling never creates a next occurrence."""
        reminder = self.get_reminder(reminder_id)
        self._transition(reminder, ReminderStatus.CANCELLED.value)

        reminder = self.repo.update_reminder(self.db, reminder, estado=ReminderStatus.CANCELLED.value)
        invalidate_reminder_cache()
        logger.info(f"🚫 Reminder {reminder.id} cancelled")
        return reminder

    def delete_reminder(self, reminder_id: str) -> dict:
        reminder = self.get_reminder(reminder_id)
        self.repo.delete_reminder(self.db, reminder)
        invalidate_reminder_cache()
        logger.info(f"🗑️ Reminder {reminder_id} deleted")
        return {"message": "Recordatorio eliminado exitosamente"}

    # ------------------------------------------------------------------
    # Automation
    # ------------------------------------------------------------------

    def generate_due_order_reminders(self, now: Optional[datetime] = None) -> dict:
        summary = ReminderGenerator(self.db).generate_due_order_reminders(now)
        if summary["created"]:
            invalidate_reminder_cache()
        return summary

    def generate_payment_reminders(self, now: Optional[datetime] = None) -> dict:
        summary = ReminderGenerator(self.db).generate_payment_reminders(now)
        if summary["created"]:
            invalidate_reminder_cache()
        return summary

    def mark_overdue_reminders(self, now: Optional[datetime] = None) -> int:
        """PENDIENTE reminders whose date has passed become VENCIDO"""
        updated = self.repo.mark_overdue(self.db, now or datetime.now())
        if updated:
            invalidate_reminder_cache()
            logger.info(f"⏰ {updated} reminders marked as overdue")
        else:
            logger.debug("ℹ️ No reminders to mark as overdue")
        return updated

    async def check_pending_reminders(self, now: Optional[datetime] = None) -> dict:
        summary = await ReminderNotifier(self.db).check_pending_reminders(now)
        if summary["notified"]:
            invalidate_reminder_cache()
        return summary
