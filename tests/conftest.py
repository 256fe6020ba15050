import os

# Keep the app import free of background jobs and external services
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("REDIS_URL", None)
os.environ.pop("REDIS_HOST", None)
os.environ.pop("REMINDER_NOTIFY_EMAIL", None)
os.environ.pop("REMINDER_NOTIFY_WHATSAPP", None)

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from apl_backoffice.cache import cache  # noqa: E402
from apl_backoffice.database import Base, get_db  # noqa: E402
from apl_backoffice.main import app  # noqa: E402
from apl_backoffice.models import ORDER_STATUS_IN_PROGRESS, Client, Order, Payment  # noqa: E402
from apl_backoffice.models_reminder import Reminder  # noqa: E402


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def clear_cache():
    cache.memory.clear()
    yield
    cache.memory.clear()


@pytest.fixture
def sent_notifications(monkeypatch):
    """Capture reminder notifications instead of sending them"""
    sent = []

    async def fake_send(reminder):
        sent.append(reminder.id)
        return {"email_sent": True, "whatsapp_sent": False, "email_error": None, "whatsapp_error": None}

    monkeypatch.setattr("apl_backoffice.domain.reminders.notifier.send_reminder_notification", fake_send)
    return sent


@pytest.fixture
def client(session_factory, sent_notifications):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_order(db):
    """Create a client order; payments is a list of paid amounts"""
    counter = {"n": 0}

    def _make_order(
        fecha_vencimiento=None,
        fecha_pedido=None,
        estado=ORDER_STATUS_IN_PROGRESS,
        monto_total=0.0,
        payments=(),
        numero_pedido=None,
        cliente_nombre="Clínica Dental Sur",
        fecha_delete=None,
    ):
        counter["n"] += 1
        client = Client(nombre=cliente_nombre, email="clinica@example.com")
        db.add(client)
        db.flush()
        order = Order(
            numero_pedido=numero_pedido or f"P-{counter['n']:04d}",
            cliente_id=client.id,
            nombre_paciente="Paciente",
            fecha_pedido=fecha_pedido or datetime.now(),
            fecha_vencimiento=fecha_vencimiento,
            monto_total=monto_total,
            estado=estado,
            fecha_delete=fecha_delete,
        )
        db.add(order)
        db.flush()
        for monto in payments:
            db.add(Payment(pedido_id=order.id, monto=monto, metodo_pago="TRANSFERENCIA"))
        db.commit()
        db.refresh(order)
        return order

    return _make_order


@pytest.fixture
def make_reminder(db):
    def _make_reminder(**overrides):
        values = {
            "titulo": "Llamar a la clínica",
            "tipo": "LLAMADA",
            "tipo_entidad": "cliente",
            "entidad_id": "1",
            "fecha_recordatorio": datetime(2026, 3, 10, 9, 0),
            "prioridad": "NORMAL",
        }
        values.update(overrides)
        reminder = Reminder(**values)
        db.add(reminder)
        db.commit()
        db.refresh(reminder)
        return reminder

    return _make_reminder
