"""Reminder router - FastAPI endpoints for reminder operations"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...models_reminder import Reminder
from .schemas import (
    CheckSummary,
    MessageEnvelope,
    Pagination,
    ReminderCreate,
    ReminderEnvelope,
    ReminderFilters,
    ReminderListEnvelope,
    ReminderPageEnvelope,
    ReminderResponse,
    ReminderUpdate,
    ScanSummary,
)
from .service import ReminderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reminders", tags=["Reminders"])


def get_reminder_service(db: Session = Depends(get_db)) -> ReminderService:
    """Dependency injection for ReminderService"""
    return ReminderService(db)


def to_response(r: Reminder) -> ReminderResponse:
    return ReminderResponse(
        id=r.id,
        titulo=r.titulo,
        descripcion=r.descripcion,
        tipo=r.tipo,
        tipoEntidad=r.tipo_entidad,
        entidadId=r.entidad_id,
        fechaRecordatorio=r.fecha_recordatorio,
        prioridad=r.prioridad,
        administradorId=r.administrador_id,
        estado=r.estado,
        repetir=r.repetir,
        frecuencia=r.frecuencia,
        notificado=r.notificado,
        fechaNotificacion=r.fecha_notificacion,
        observaciones=r.observaciones,
        createdAt=r.created_at,
        updatedAt=r.updated_at,
    )


# ============================================================================
# QUERIES
# ============================================================================


@router.get("", response_model=ReminderPageEnvelope)
async def get_reminders(
    filters: Annotated[ReminderFilters, Query()],
    service: ReminderService = Depends(get_reminder_service),
):
    """List reminders with filters and pagination"""
    result = service.get_reminders(filters)
    return ReminderPageEnvelope(
        data=[to_response(r) for r in result["data"]],
        pagination=Pagination(
            page=result["page"],
            limit=result["limit"],
            total=result["total"],
            totalPages=result["totalPages"],
        ),
    )


@router.get("/pending", response_model=ReminderListEnvelope)
async def get_pending_reminders(
    administradorId: Optional[str] = Query(None),
    service: ReminderService = Depends(get_reminder_service),
):
    """Pending reminders owned by the administrator or addressed to everyone"""
    reminders = service.get_pending_reminders(administradorId)
    return ReminderListEnvelope(data=[to_response(r) for r in reminders], total=len(reminders))


@router.get("/today", response_model=ReminderListEnvelope)
async def get_today_reminders(
    administradorId: Optional[str] = Query(None),
    service: ReminderService = Depends(get_reminder_service),
):
    """Pending reminders due today"""
    reminders = service.get_today_reminders(administradorId)
    return ReminderListEnvelope(data=[to_response(r) for r in reminders], total=len(reminders))


@router.get("/stats")
async def get_statistics(service: ReminderService = Depends(get_reminder_service)):
    return {"success": True, "data": service.get_statistics()}


# ============================================================================
# AUTOMATION TRIGGERS
# ============================================================================


@router.post("/auto/due-pedidos", response_model=MessageEnvelope)
async def create_automatic_reminders_for_due_orders(
    service: ReminderService = Depends(get_reminder_service),
):
    """Run the due-order scan now"""
    try:
        summary = service.generate_due_order_reminders()
    except Exception as e:
        logger.error(f"❌ Due-order scan failed: {e}")
        raise HTTPException(status_code=500, detail="Error interno del servidor") from e
    return MessageEnvelope(
        message="Recordatorios automáticos creados para pedidos próximos a vencer",
        data=ScanSummary(**summary).model_dump(),
    )


@router.post("/auto/pending-payments", response_model=MessageEnvelope)
async def create_automatic_reminders_for_pending_payments(
    service: ReminderService = Depends(get_reminder_service),
):
    """Run the outstanding-payment scan now"""
    try:
        summary = service.generate_payment_reminders()
    except Exception as e:
        logger.error(f"❌ Payment scan failed: {e}")
        raise HTTPException(status_code=500, detail="Error interno del servidor") from e
    return MessageEnvelope(
        message="Recordatorios automáticos creados para pagos pendientes",
        data=ScanSummary(**summary).model_dump(),
    )


@router.post("/check", response_model=MessageEnvelope)
async def check_pending_reminders(service: ReminderService = Depends(get_reminder_service)):
    """Run the pending-reminder notification check now"""
    try:
        summary = await service.check_pending_reminders()
    except Exception as e:
        logger.error(f"❌ Pending reminder check failed: {e}")
        raise HTTPException(status_code=500, detail="Error interno del servidor") from e
    return MessageEnvelope(
        message="Verificación de recordatorios completada",
        data=CheckSummary(**summary).model_dump(),
    )


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.post("", response_model=ReminderEnvelope, status_code=201)
async def create_reminder(
    data: ReminderCreate,
    service: ReminderService = Depends(get_reminder_service),
):
    reminder = service.create_reminder(data)
    return ReminderEnvelope(message="Recordatorio creado exitosamente", data=to_response(reminder))


@router.get("/{reminder_id}", response_model=ReminderEnvelope)
async def get_reminder(
    reminder_id: str,
    service: ReminderService = Depends(get_reminder_service),
):
    return ReminderEnvelope(data=to_response(service.get_reminder(reminder_id)))


@router.put("/{reminder_id}", response_model=ReminderEnvelope)
async def update_reminder(
    reminder_id: str,
    data: ReminderUpdate,
    service: ReminderService = Depends(get_reminder_service),
):
    reminder = service.update_reminder(reminder_id, data)
    return ReminderEnvelope(message="Recordatorio actualizado exitosamente", data=to_response(reminder))


@router.patch("/{reminder_id}/complete")
async def complete_reminder(
    reminder_id: str,
    service: ReminderService = Depends(get_reminder_service),
):
    """Mark as completed; repeating reminders return their next occurrence too"""
    reminder, successor = service.complete_reminder(reminder_id)
    return {
        "success": True,
        "message": "Recordatorio marcado como completado",
        "data": to_response(reminder),
        "siguiente": to_response(successor) if successor else None,
    }


@router.patch("/{reminder_id}/cancel", response_model=ReminderEnvelope)
async def cancel_reminder(
    reminder_id: str,
    service: ReminderService = Depends(get_reminder_service),
):
    reminder = service.cancel_reminder(reminder_id)
    return ReminderEnvelope(message="Recordatorio cancelado", data=to_response(reminder))


@router.delete("/{reminder_id}", response_model=MessageEnvelope)
async def delete_reminder(
    reminder_id: str,
    service: ReminderService = Depends(get_reminder_service),
):
    result = service.delete_reminder(reminder_id)
    return MessageEnvelope(message=result["message"])
