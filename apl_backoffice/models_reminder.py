import enum
import uuid

from sqlalchemy import Boolean, Column, DateTime, Index, String, Text
from sqlalchemy.sql import func

from .database import Base


def generate_reminder_id():
    return str(uuid.uuid4())


class ReminderType(str, enum.Enum):
    ORDER_DUE = "VENCIMIENTO_PEDIDO"
    CLIENT_FOLLOWUP = "SEGUIMIENTO_CLIENTE"
    PAYMENT_DUE = "PAGO_PENDIENTE"
    MEETING = "REUNION"
    CALL = "LLAMADA"
    OTHER = "OTRO"


class ReminderPriority(str, enum.Enum):
    LOW = "BAJA"
    NORMAL = "NORMAL"
    HIGH = "ALTA"
    URGENT = "URGENTE"


class ReminderStatus(str, enum.Enum):
    PENDING = "PENDIENTE"
    COMPLETED = "COMPLETADO"
    CANCELLED = "CANCELADO"
    OVERDUE = "VENCIDO"


class ReminderFrequency(str, enum.Enum):
    DAILY = "diario"
    WEEKLY = "semanal"
    MONTHLY = "mensual"


ACTIVE_REMINDER_STATUSES = (ReminderStatus.PENDING.value, ReminderStatus.OVERDUE.value)


class Reminder(Base):
    __tablename__ = "recordatorios"

    id = Column(String(36), primary_key=True, default=generate_reminder_id)
    titulo = Column(String(255), nullable=False)
    descripcion = Column(Text, nullable=True)
    tipo = Column(String(30), nullable=False)  # ReminderType value
    # Loose pointer to an external entity (pedido, cliente, ...); not a foreign key
    tipo_entidad = Column(String(50), nullable=False)
    entidad_id = Column(String(64), nullable=False)
    fecha_recordatorio = Column(DateTime, nullable=False, index=True)
    prioridad = Column(String(20), nullable=False, default=ReminderPriority.NORMAL.value)
    administrador_id = Column(String(64), nullable=True, index=True)  # NULL = every administrator
    estado = Column(String(20), nullable=False, default=ReminderStatus.PENDING.value, index=True)
    repetir = Column(Boolean, nullable=False, default=False)
    frecuencia = Column(String(20), nullable=True)  # ReminderFrequency value, only used when repetir
    notificado = Column(Boolean, nullable=False, default=False)
    fecha_notificacion = Column(DateTime, nullable=True)  # Set together with notificado
    observaciones = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        # Generator dedup lookups: (entity, type) among active reminders
        Index("ix_recordatorios_entidad_tipo", "tipo_entidad", "entidad_id", "tipo"),
    )

    @property
    def is_active(self) -> bool:
        return self.estado in ACTIVE_REMINDER_STATUSES
