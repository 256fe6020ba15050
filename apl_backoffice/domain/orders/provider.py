"""Order data provider - Read-only order views consumed by the reminder core"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import ORDER_STATUS_CANCELLED, TERMINAL_ORDER_STATUSES, Client, Order, Payment

# Balances below this are rounding noise, not debt
BALANCE_EPSILON = 0.01


@dataclass(frozen=True)
class OrderSnapshot:
    id: int
    numero_pedido: str
    cliente_id: int
    cliente_nombre: str
    fecha_pedido: datetime
    fecha_vencimiento: Optional[datetime]
    estado: str
    monto_total: float
    monto_pagado: float

    @property
    def monto_pendiente(self) -> float:
        return round(self.monto_total - self.monto_pagado, 2)


class OrderDataProvider:
    """Balance-aware order queries. Soft-deleted orders are never reported."""

    @staticmethod
    def _paid_subquery(db: Session):
        return (
            db.query(
                Payment.pedido_id.label("pedido_id"),
                func.coalesce(func.sum(Payment.monto), 0).label("pagado"),
            )
            .group_by(Payment.pedido_id)
            .subquery()
        )

    @classmethod
    def _snapshot_query(cls, db: Session):
        paid = cls._paid_subquery(db)
        paid_amount = func.coalesce(paid.c.pagado, 0)
        query = (
            db.query(Order, Client.nombre, paid_amount.label("pagado"))
            .join(Client, Client.id == Order.cliente_id)
            .outerjoin(paid, paid.c.pedido_id == Order.id)
            .filter(Order.fecha_delete.is_(None))
        )
        return query, paid_amount

    @staticmethod
    def _to_snapshot(row) -> OrderSnapshot:
        order, client_name, paid = row
        return OrderSnapshot(
            id=order.id,
            numero_pedido=order.numero_pedido,
            cliente_id=order.cliente_id,
            cliente_nombre=client_name,
            fecha_pedido=order.fecha_pedido,
            fecha_vencimiento=order.fecha_vencimiento,
            estado=order.estado,
            monto_total=float(order.monto_total or 0),
            monto_pagado=float(paid or 0),
        )

    @classmethod
    def get_orders_due_between(cls, db: Session, start: datetime, end: datetime) -> list[OrderSnapshot]:
        """Non-terminal orders with fecha_vencimiento in [start, end)"""
        query, _ = cls._snapshot_query(db)
        rows = (
            query.filter(
                Order.estado.notin_(TERMINAL_ORDER_STATUSES),
                Order.fecha_vencimiento.isnot(None),
                Order.fecha_vencimiento >= start,
                Order.fecha_vencimiento < end,
            )
            .order_by(Order.fecha_vencimiento.asc())
            .all()
        )
        return [cls._to_snapshot(row) for row in rows]

    @classmethod
    def get_orders_with_pending_balance(cls, db: Session, placed_before: datetime) -> list[OrderSnapshot]:
        """Non-cancelled orders placed before the given moment that still owe money"""
        query, paid_amount = cls._snapshot_query(db)
        rows = (
            query.filter(
                Order.estado != ORDER_STATUS_CANCELLED,
                Order.fecha_pedido < placed_before,
                (Order.monto_total - paid_amount) > BALANCE_EPSILON,
            )
            .order_by(Order.fecha_pedido.asc())
            .all()
        )
        return [cls._to_snapshot(row) for row in rows]

    @staticmethod
    def count_orders_due_between(db: Session, start: datetime, end: datetime) -> int:
        return (
            db.query(func.count(Order.id))
            .filter(
                Order.fecha_delete.is_(None),
                Order.estado.notin_(TERMINAL_ORDER_STATUSES),
                Order.fecha_vencimiento >= start,
                Order.fecha_vencimiento < end,
            )
            .scalar()
        )

    @staticmethod
    def count_overdue_orders(db: Session, before: datetime) -> int:
        return (
            db.query(func.count(Order.id))
            .filter(
                Order.fecha_delete.is_(None),
                Order.estado.notin_(TERMINAL_ORDER_STATUSES),
                Order.fecha_vencimiento < before,
            )
            .scalar()
        )

    @classmethod
    def get_debt_summary(cls, db: Session) -> dict:
        """Number of clients with debt and total pending debt"""
        paid = cls._paid_subquery(db)
        pending = Order.monto_total - func.coalesce(paid.c.pagado, 0)
        per_client = (
            db.query(Order.cliente_id, func.sum(pending).label("deuda"))
            .outerjoin(paid, paid.c.pedido_id == Order.id)
            .filter(
                Order.fecha_delete.is_(None),
                Order.estado != ORDER_STATUS_CANCELLED,
                pending > BALANCE_EPSILON,
            )
            .group_by(Order.cliente_id)
            .all()
        )
        total = sum(float(deuda or 0) for _, deuda in per_client)
        return {"clientesConDeuda": len(per_client), "totalDeudaPendiente": round(total, 2)}
