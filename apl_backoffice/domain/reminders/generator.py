"""
Automatic reminder generation from order data

Two scans, both idempotent through the (tipo_entidad, entidad_id, tipo) key:
- due orders: non-terminal orders due within the next 7 days
- pending payments: orders older than 30 days that still owe money
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...models_reminder import ReminderPriority, ReminderType
from ..orders import OrderDataProvider, OrderSnapshot
from .entities import OrderRef
from .repository import ReminderRepository

logger = logging.getLogger(__name__)

DUE_ORDER_WINDOW_DAYS = 7
PAYMENT_MIN_AGE_DAYS = 30


def priority_for_days_remaining(days: int) -> str:
    # LOW is never assigned on this path: 6-7 days falls back to NORMAL
    if days <= 1:
        return ReminderPriority.URGENT.value
    if days <= 3:
        return ReminderPriority.HIGH.value
    if days <= 5:
        return ReminderPriority.NORMAL.value
    return ReminderPriority.NORMAL.value


def priority_for_order_age(days: int) -> str:
    if days > 60:
        return ReminderPriority.URGENT.value
    if days > 45:
        return ReminderPriority.HIGH.value
    return ReminderPriority.NORMAL.value


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


class ReminderGenerator:
    """Creates reminders from the order data provider"""

    def __init__(self, db: Session, provider: Optional[OrderDataProvider] = None):
        self.db = db
        self.provider = provider or OrderDataProvider()
        self.repo = ReminderRepository()

    def _has_active_reminder(self, order: OrderSnapshot, tipo: ReminderType) -> bool:
        return self.repo.find_active_for_entity(self.db, OrderRef(order.id), tipo.value) is not None

    def generate_due_order_reminders(self, now: Optional[datetime] = None) -> dict:
        """Create ORDER_DUE reminders for orders due between today and today + 7 days"""
        now = now or datetime.now()
        today = _start_of_day(now)
        window_end = today + timedelta(days=DUE_ORDER_WINDOW_DAYS + 1)

        orders = self.provider.get_orders_due_between(self.db, today, window_end)
        summary = {"scanned": len(orders), "created": 0, "skipped": 0, "failed": 0}
        logger.info(f"🔍 Due-order scan: {len(orders)} orders due before {window_end:%Y-%m-%d}")

        for order in orders:
            try:
                if self._has_active_reminder(order, ReminderType.ORDER_DUE):
                    summary["skipped"] += 1
                    continue

                days_remaining = (order.fecha_vencimiento.date() - today.date()).days
                if days_remaining == 0:
                    remaining_text = "vence hoy"
                else:
                    remaining_text = f"vence en {days_remaining} día(s)"

                tipo_entidad, entidad_id = OrderRef(order.id).to_columns()
                self.repo.create_reminder(
                    self.db,
                    titulo=f"Pedido {order.numero_pedido} próximo a vencer",
                    descripcion=f"El pedido {order.numero_pedido} del cliente {order.cliente_nombre} {remaining_text}.",
                    tipo=ReminderType.ORDER_DUE.value,
                    tipo_entidad=tipo_entidad,
                    entidad_id=entidad_id,
                    fecha_recordatorio=order.fecha_vencimiento,
                    prioridad=priority_for_days_remaining(days_remaining),
                )
                summary["created"] += 1
                logger.info(f"✅ Due reminder created for order {order.numero_pedido} ({days_remaining} days left)")
            except Exception as e:
                self.db.rollback()
                summary["failed"] += 1
                logger.error(f"❌ Failed to create due reminder for order {order.id}: {e}")

        logger.info(f"📊 Due-order scan summary: {summary}")
        return summary

    def generate_payment_reminders(self, now: Optional[datetime] = None) -> dict:
        """Create PAYMENT_DUE reminders for orders older than 30 days with a pending balance"""
        now = now or datetime.now()
        placed_before = now - timedelta(days=PAYMENT_MIN_AGE_DAYS)

        orders = self.provider.get_orders_with_pending_balance(self.db, placed_before)
        summary = {"scanned": len(orders), "created": 0, "skipped": 0, "failed": 0}
        logger.info(f"🔍 Payment scan: {len(orders)} orders with pending balance")

        for order in orders:
            try:
                if self._has_active_reminder(order, ReminderType.PAYMENT_DUE):
                    summary["skipped"] += 1
                    continue

                age_days = (now - order.fecha_pedido).days
                tipo_entidad, entidad_id = OrderRef(order.id).to_columns()
                self.repo.create_reminder(
                    self.db,
                    titulo=f"Pago pendiente - Pedido {order.numero_pedido}",
                    descripcion=(
                        f"El cliente {order.cliente_nombre} tiene un saldo pendiente de "
                        f"${order.monto_pendiente:.2f} en el pedido {order.numero_pedido} "
                        f"(realizado hace {age_days} días)."
                    ),
                    tipo=ReminderType.PAYMENT_DUE.value,
                    tipo_entidad=tipo_entidad,
                    entidad_id=entidad_id,
                    fecha_recordatorio=now,
                    prioridad=priority_for_order_age(age_days),
                )
                summary["created"] += 1
                logger.info(f"✅ Payment reminder created for order {order.numero_pedido} ({age_days} days old)")
            except Exception as e:
                self.db.rollback()
                summary["failed"] += 1
                logger.error(f"❌ Failed to create payment reminder for order {order.id}: {e}")

        logger.info(f"📊 Payment scan summary: {summary}")
        return summary
