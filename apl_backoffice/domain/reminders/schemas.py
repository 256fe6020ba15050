"""Reminder domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...models_reminder import ReminderFrequency, ReminderPriority, ReminderStatus, ReminderType


def _to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Dates are stored as naive local time; convert aware inputs (e.g. trailing Z)"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class ReminderCreate(BaseModel):
    """Schema for creating a new reminder"""

    titulo: str = Field(min_length=1, max_length=255)
    descripcion: Optional[str] = None
    tipo: ReminderType
    tipoEntidad: str = Field(min_length=1, max_length=50)
    entidadId: str = Field(min_length=1, max_length=64)
    fechaRecordatorio: datetime
    prioridad: Optional[ReminderPriority] = None
    administradorId: Optional[str] = None
    repetir: Optional[bool] = None
    frecuencia: Optional[ReminderFrequency] = None
    observaciones: Optional[str] = None

    @field_validator("fechaRecordatorio")
    @classmethod
    def normalize_fecha(cls, v):
        return _to_local_naive(v)

    @model_validator(mode="after")
    def require_frequency_when_repeating(self):
        if self.repetir and self.frecuencia is None:
            raise ValueError("frecuencia is required when repetir is true")
        return self


class ReminderUpdate(BaseModel):
    """Schema for updating an existing reminder"""

    titulo: Optional[str] = Field(default=None, min_length=1, max_length=255)
    descripcion: Optional[str] = None
    tipo: Optional[ReminderType] = None
    tipoEntidad: Optional[str] = Field(default=None, min_length=1, max_length=50)
    entidadId: Optional[str] = Field(default=None, min_length=1, max_length=64)
    fechaRecordatorio: Optional[datetime] = None
    prioridad: Optional[ReminderPriority] = None
    administradorId: Optional[str] = None
    repetir: Optional[bool] = None
    frecuencia: Optional[ReminderFrequency] = None
    observaciones: Optional[str] = None

    @field_validator("titulo", "tipo", "tipoEntidad", "entidadId", "fechaRecordatorio", "prioridad", "repetir")
    @classmethod
    def reject_null(cls, v, info):
        # Omit the field to leave it unchanged; these columns cannot be cleared
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("fechaRecordatorio")
    @classmethod
    def normalize_fecha(cls, v):
        return _to_local_naive(v)


class ReminderFilters(BaseModel):
    estado: Optional[ReminderStatus] = None
    tipo: Optional[ReminderType] = None
    administradorId: Optional[str] = None
    fechaDesde: Optional[datetime] = None
    fechaHasta: Optional[datetime] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)

    @field_validator("fechaDesde", "fechaHasta")
    @classmethod
    def normalize_fechas(cls, v):
        return _to_local_naive(v)


class ReminderResponse(BaseModel):
    """Schema for reminder response"""

    id: str
    titulo: str
    descripcion: Optional[str] = None
    tipo: str
    tipoEntidad: str
    entidadId: str
    fechaRecordatorio: datetime
    prioridad: str
    administradorId: Optional[str] = None
    estado: str
    repetir: bool
    frecuencia: Optional[str] = None
    notificado: bool
    fechaNotificacion: Optional[datetime] = None
    observaciones: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class ReminderEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: ReminderResponse


class ReminderListEnvelope(BaseModel):
    success: bool = True
    data: list[ReminderResponse]
    total: int


class ReminderPageEnvelope(BaseModel):
    success: bool = True
    data: list[ReminderResponse]
    pagination: Pagination


class ScanSummary(BaseModel):
    scanned: int
    created: int
    skipped: int
    failed: int


class CheckSummary(BaseModel):
    checked: int
    notified: int


class MessageEnvelope(BaseModel):
    success: bool = True
    message: str
    data: Optional[dict] = None
