"""Reminder repository - Database operations for reminders"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session

from ...models_reminder import ACTIVE_REMINDER_STATUSES, Reminder, ReminderStatus
from .entities import EntityRef

logger = logging.getLogger(__name__)


class ReminderRepository:
    """Repository for reminder database operations"""

    @staticmethod
    def _owned_or_broadcast(query: Query, administrador_id: Optional[str]) -> Query:
        """Restrict to reminders owned by the administrator or addressed to everyone"""
        if administrador_id is None:
            return query
        return query.filter(
            or_(Reminder.administrador_id == administrador_id, Reminder.administrador_id.is_(None))
        )

    @staticmethod
    def create_reminder(db: Session, **reminder_data) -> Reminder:
        """Create a new reminder"""
        reminder = Reminder(**reminder_data)
        db.add(reminder)
        db.commit()
        db.refresh(reminder)
        return reminder

    @staticmethod
    def get_reminder_by_id(db: Session, reminder_id: str) -> Optional[Reminder]:
        return db.query(Reminder).filter(Reminder.id == reminder_id).first()

    @staticmethod
    def update_reminder(db: Session, reminder: Reminder, **updates) -> Reminder:
        """Update a reminder with provided fields"""
        try:
            for key, value in updates.items():
                if hasattr(reminder, key):
                    setattr(reminder, key, value)

            db.commit()
        except Exception as e:
            logger.error(f"❌ Error updating reminder {reminder.id}: {str(e)}")
            db.rollback()
            raise

        db.refresh(reminder)
        return reminder

    @staticmethod
    def delete_reminder(db: Session, reminder: Reminder) -> None:
        db.delete(reminder)
        db.commit()

    @staticmethod
    def search_reminders(
        db: Session,
        estado: Optional[str] = None,
        tipo: Optional[str] = None,
        administrador_id: Optional[str] = None,
        fecha_desde: Optional[datetime] = None,
        fecha_hasta: Optional[datetime] = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[Reminder], int]:
        """Filtered, paginated reminder list. Returns (items, total)."""
        query = db.query(Reminder)

        if estado:
            query = query.filter(Reminder.estado == estado)
        if tipo:
            query = query.filter(Reminder.tipo == tipo)
        if administrador_id:
            query = query.filter(Reminder.administrador_id == administrador_id)
        if fecha_desde:
            query = query.filter(Reminder.fecha_recordatorio >= fecha_desde)
        if fecha_hasta:
            query = query.filter(Reminder.fecha_recordatorio <= fecha_hasta)

        total = query.count()
        items = (
            query.order_by(Reminder.fecha_recordatorio.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    @classmethod
    def get_pending_reminders(cls, db: Session, administrador_id: Optional[str] = None) -> list[Reminder]:
        query = db.query(Reminder).filter(Reminder.estado == ReminderStatus.PENDING.value)
        query = cls._owned_or_broadcast(query, administrador_id)
        return query.order_by(Reminder.fecha_recordatorio.asc()).all()

    @classmethod
    def get_pending_between(
        cls, db: Session, start: datetime, end: datetime, administrador_id: Optional[str] = None
    ) -> list[Reminder]:
        """PENDING reminders with fecha_recordatorio in [start, end)"""
        query = db.query(Reminder).filter(
            Reminder.estado == ReminderStatus.PENDING.value,
            Reminder.fecha_recordatorio >= start,
            Reminder.fecha_recordatorio < end,
        )
        query = cls._owned_or_broadcast(query, administrador_id)
        return query.order_by(Reminder.fecha_recordatorio.asc()).all()

    @staticmethod
    def find_active_for_entity(db: Session, entity: EntityRef, tipo: str) -> Optional[Reminder]:
        """Active (PENDIENTE or VENCIDO) reminder for the (entity, tipo) key, if any"""
        tipo_entidad, entidad_id = entity.to_columns()
        return (
            db.query(Reminder)
            .filter(
                Reminder.tipo_entidad == tipo_entidad,
                Reminder.entidad_id == entidad_id,
                Reminder.tipo == tipo,
                Reminder.estado.in_(ACTIVE_REMINDER_STATUSES),
            )
            .first()
        )

    @staticmethod
    def get_due_for_notification(db: Session, until: datetime) -> list[Reminder]:
        """PENDING, not yet notified reminders due on or before `until`"""
        return (
            db.query(Reminder)
            .filter(
                Reminder.estado == ReminderStatus.PENDING.value,
                Reminder.notificado.is_(False),
                Reminder.fecha_recordatorio <= until,
            )
            .order_by(Reminder.fecha_recordatorio.asc())
            .all()
        )

    @staticmethod
    def mark_notified(db: Session, reminder: Reminder, when: datetime) -> Reminder:
        """Set the notified flag and its timestamp together"""
        reminder.notificado = True
        reminder.fecha_notificacion = when
        db.commit()
        return reminder

    @staticmethod
    def mark_overdue(db: Session, now: datetime) -> int:
        """Bulk PENDIENTE -> VENCIDO for reminders whose date has passed"""
        updated = (
            db.query(Reminder)
            .filter(
                Reminder.estado == ReminderStatus.PENDING.value,
                Reminder.fecha_recordatorio < now,
            )
            .update({Reminder.estado: ReminderStatus.OVERDUE.value}, synchronize_session=False)
        )
        db.commit()
        return updated

    @staticmethod
    def count_by_status(db: Session) -> dict[str, int]:
        rows = db.query(Reminder.estado, func.count(Reminder.id)).group_by(Reminder.estado).all()
        counts = {status.value: 0 for status in ReminderStatus}
        for estado, count in rows:
            if estado in counts:
                counts[estado] = count
        return counts
