"""Shared fixtures: temporary SQLite database, seeded calendar and API client."""

from datetime import date, time, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from booking_app.database import get_db, init_db, make_engine
from booking_app.main import app
from booking_app.models import Appointment, AppointmentStatus, BlockedDate, Service, TrustedClient, WorkingHour
from booking_app.routes.appointments import get_notifier
from booking_app.services.notifications import NotificationService
from booking_app.services.schedule import local_today

# 2025-06-02 is a Monday; "today" for service-level tests is the Friday before
MONDAY = date(2025, 6, 2)
TODAY = date(2025, 5, 30)


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so that several threads can share it."""
    engine = make_engine(f"sqlite:///{tmp_path / 'booking_test.db'}")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def open_every_day(db):
    """Working window 09:00-13:00 on all seven weekdays."""
    rules = [
        WorkingHour(day_of_week=day, start_time=time(9, 0), end_time=time(13, 0), is_active=True)
        for day in range(7)
    ]
    db.add_all(rules)
    db.commit()
    return rules


@pytest.fixture
def monday_only(db):
    """Only Monday 09:00-13:00 is open."""
    rule = WorkingHour(day_of_week=1, start_time=time(9, 0), end_time=time(13, 0), is_active=True)
    db.add(rule)
    db.commit()
    return rule


@pytest.fixture
def haircut(db):
    service = Service(name="Corte de pelo", duration_minutes=30, price=Decimal("3500.00"), display_order=1)
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


@pytest.fixture
def cut_and_beard(db):
    service = Service(name="Corte + Barba", duration_minutes=45, price=Decimal("5000.00"), display_order=2)
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


@pytest.fixture
def trusted_phone(db):
    client = TrustedClient(phone="221555000", name="Juan")
    db.add(client)
    db.commit()
    return client.phone


@pytest.fixture
def block_date(db):
    def _block(target: date, reason: str = "Feriado"):
        db.add(BlockedDate(blocked_date=target, reason=reason))
        db.commit()
    return _block


@pytest.fixture
def make_appointment(db):
    """Insert an appointment directly, bypassing the booking flow."""
    def _make(service, target_date, at, status=AppointmentStatus.CONFIRMED, phone="1155550001", name="Cliente"):
        appointment = Appointment(
            client_name=name,
            client_phone=phone,
            service_id=service.id,
            appointment_date=target_date,
            appointment_time=at,
            status=status,
            is_auto_confirmed=False,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment
    return _make


@pytest.fixture
def upcoming_date():
    """A date inside the real booking horizon (API tests use the real clock)."""
    return local_today() + timedelta(days=2)


@pytest.fixture
def client(session_factory):
    """API client whose requests use the temporary database."""
    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_notifier] = lambda: NotificationService(bot_token="", chat_id="")
    yield TestClient(app)
    app.dependency_overrides.clear()
