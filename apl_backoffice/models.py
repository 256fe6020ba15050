from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

# Order lifecycle states (pedidos.estado)
ORDER_STATUS_PENDING = "PENDIENTE"
ORDER_STATUS_IN_PROGRESS = "EN_PROCESO"
ORDER_STATUS_DELIVERED = "ENTREGADO"
ORDER_STATUS_PAID = "PAGADO"
ORDER_STATUS_CANCELLED = "CANCELADO"

TERMINAL_ORDER_STATUSES = (ORDER_STATUS_DELIVERED, ORDER_STATUS_PAID, ORDER_STATUS_CANCELLED)


class Client(Base):
    """Dental clinic or dentist the laboratory works for"""

    __tablename__ = "clientes"

    id = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    telefono = Column(String(50), nullable=True)
    whatsapp = Column(String(50), nullable=True)  # International format, e.g. +598991234567
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    orders = relationship("Order", back_populates="client")


class Order(Base):
    """Work order (pedido) for a patient"""

    __tablename__ = "pedidos"

    id = Column(Integer, primary_key=True, index=True)
    numero_pedido = Column(String(50), unique=True, nullable=False)
    cliente_id = Column(Integer, ForeignKey("clientes.id"), nullable=False, index=True)
    nombre_paciente = Column(String(255), nullable=True)
    descripcion = Column(Text, nullable=True)
    fecha_pedido = Column(DateTime, nullable=False, server_default=func.now())
    fecha_vencimiento = Column(DateTime, nullable=True, index=True)  # Delivery due date
    monto_total = Column(Float, nullable=False, default=0)
    estado = Column(String(20), nullable=False, default=ORDER_STATUS_PENDING, index=True)
    fecha_delete = Column(DateTime, nullable=True)  # Soft delete marker
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("Client", back_populates="orders")
    payments = relationship("Payment", back_populates="order", cascade="all, delete-orphan")


class Payment(Base):
    __tablename__ = "pagos"

    id = Column(Integer, primary_key=True, index=True)
    pedido_id = Column(Integer, ForeignKey("pedidos.id"), nullable=False, index=True)
    monto = Column(Float, nullable=False)
    metodo_pago = Column(String(30), nullable=True)  # EFECTIVO, TRANSFERENCIA, ...
    fecha_pago = Column(DateTime, nullable=False, server_default=func.now())
    created_at = Column(DateTime, server_default=func.now())

    order = relationship("Order", back_populates="payments")
