"""
Модель записи на прием и её статусы
"""
import enum

from sqlalchemy import (
    Column, Integer, ForeignKey, Date, Time, String, Text, Boolean, TIMESTAMP, Enum, Index, text
)
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func
from ..database import Base
from ..validators import normalize_phone


class AppointmentStatus(str, enum.Enum):
    """Статус записи"""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]

    @property
    def holds_slot(self) -> bool:
        return self in HOLDING_STATUSES

    def can_transition_to(self, target: "AppointmentStatus") -> bool:
        return target in ALLOWED_TRANSITIONS[self]


# Таблица переходов: из статуса -> допустимые целевые статусы
ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.REJECTED,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.CONFIRMED: frozenset({
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.REJECTED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
}

# Статусы, которые занимают место в календаре
HOLDING_STATUSES = frozenset({AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED})

_HOLDING_SQL = "status IN ('PENDING', 'CONFIRMED')"


class Appointment(Base):
    """Запись на прием"""

    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    client_name = Column(String(100), nullable=False)
    client_phone = Column(String(20), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="RESTRICT"), nullable=False)
    appointment_date = Column(Date, nullable=False, index=True)
    appointment_time = Column(Time, nullable=False)
    status = Column(
        Enum(AppointmentStatus, native_enum=False, length=20, validate_strings=True),
        nullable=False,
        default=AppointmentStatus.PENDING
    )
    is_auto_confirmed = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    service = relationship("Service", lazy="joined")

    __table_args__ = (
        # Один занятый слот на (дата, время): последний рубеж против двойной записи
        Index(
            "uq_appointments_held_slot",
            "appointment_date",
            "appointment_time",
            unique=True,
            sqlite_where=text(_HOLDING_SQL),
            postgresql_where=text(_HOLDING_SQL),
        ),
    )

    @validates("client_phone")
    def _normalize_phone(self, key, value):
        return normalize_phone(value)

    def __repr__(self):
        return f"<Appointment {self.appointment_date} {self.appointment_time} (Status: {self.status})>"
