"""
Создание записи: проверка, повторный расчёт доступности и вставка
в одной эксклюзивной секции
"""
import logging
from dataclasses import dataclass, asdict
from datetime import date, time
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import booking_date_lock, storage_guard
from ..exceptions import ConflictError, NotFoundError, ValidationError, SLOT_UNAVAILABLE
from ..models.appointment import Appointment, AppointmentStatus
from ..models.trusted_client import TrustedClient
from ..validators import (
    format_display_date,
    mask_phone,
    parse_date,
    parse_time,
    validate_client_name,
    validate_client_phone,
)
from .availability import is_slot_free
from .calendar_rules import is_bookable, window_for
from .schedule import ScheduleService, booking_window
from .slots import generate_slots, to_minutes

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "Это время уже занято. Пожалуйста, выберите другое."


@dataclass(frozen=True)
class BookingRequest:
    """Проверенные данные запроса на запись"""

    service_id: int
    appointment_date: date
    appointment_time: time
    client_name: str
    client_phone: str


@dataclass(frozen=True)
class BookingOutcome:
    """Результат успешной записи с данными для экрана подтверждения"""

    appointment_id: int
    status: AppointmentStatus
    is_auto_confirmed: bool
    client_name: str
    service_name: str
    appointment_date: str  # YYYY-MM-DD
    display_date: str  # DD/MM/YYYY
    appointment_time: str  # HH:MM

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data


def initial_status(is_trusted: bool) -> AppointmentStatus:
    """Автоподтверждение: доверенный телефон - CONFIRMED, иначе PENDING"""
    return AppointmentStatus.CONFIRMED if is_trusted else AppointmentStatus.PENDING


def validate_booking(
    service_id,
    appointment_date: str,
    appointment_time: str,
    client_name: str,
    client_phone: str,
    today: Optional[date] = None
) -> BookingRequest:
    """
    Проверка входных данных без чтения общего состояния.
    Дата: от завтра до BOOKING_DAYS_AHEAD дней вперёд.
    """
    if isinstance(service_id, bool) or not isinstance(service_id, int) or service_id <= 0:
        raise ValidationError("Некорректная услуга", code="invalid_service", field="service_id")

    target_date = parse_date(appointment_date, field="appointment_date")
    min_date, max_date = booking_window(today)
    if target_date < min_date:
        raise ValidationError(
            "Запись возможна не раньше, чем на завтра",
            code="date_out_of_range",
            field="appointment_date"
        )
    if target_date > max_date:
        raise ValidationError(
            f"Запись возможна максимум до {format_display_date(max_date)}",
            code="date_out_of_range",
            field="appointment_date"
        )

    return BookingRequest(
        service_id=service_id,
        appointment_date=target_date,
        appointment_time=parse_time(appointment_time, field="appointment_time"),
        client_name=validate_client_name(client_name),
        client_phone=validate_client_phone(client_phone),
    )


class BookingService:
    """Сервис создания записей"""

    def __init__(self, db: Session):
        self.db = db
        self.schedule = ScheduleService(db)

    def is_trusted_phone(self, phone: str) -> bool:
        with storage_guard(self.db, "is_trusted_phone"):
            return self.db.query(TrustedClient.id).filter(TrustedClient.phone == phone).first() is not None

    def book(
        self,
        service_id,
        appointment_date: str,
        appointment_time: str,
        client_name: str,
        client_phone: str,
        today: Optional[date] = None
    ) -> BookingOutcome:
        """
        Создать запись.

        Raises:
            ValidationError: некорректные данные или время вне сетки
            NotFoundError: услуга не найдена или неактивна
            ConflictError: слот уже занят (code=slot_unavailable)
            DependencyError: хранилище недоступно
        """
        request = validate_booking(
            service_id, appointment_date, appointment_time, client_name, client_phone, today
        )

        try:
            with storage_guard(self.db, "book"), booking_date_lock(self.db, request.appointment_date):
                appointment, service_name = self._reserve(request)
        except IntegrityError:
            # Параллельная вставка на тот же слот (или повторная отправка формы)
            self.db.rollback()
            logger.info(
                f"Слот {request.appointment_date} {request.appointment_time:%H:%M} "
                f"занят параллельной записью ({mask_phone(request.client_phone)})"
            )
            raise ConflictError(SLOT_TAKEN_MESSAGE, code=SLOT_UNAVAILABLE)
        except (ConflictError, NotFoundError, ValidationError):
            self.db.rollback()
            raise

        logger.info(
            f"Запись #{appointment.id} создана: {request.appointment_date} "
            f"{request.appointment_time:%H:%M}, статус {appointment.status.value}, "
            f"телефон {mask_phone(request.client_phone)}"
        )

        return BookingOutcome(
            appointment_id=appointment.id,
            status=appointment.status,
            is_auto_confirmed=appointment.is_auto_confirmed,
            client_name=appointment.client_name,
            service_name=service_name,
            appointment_date=request.appointment_date.isoformat(),
            display_date=format_display_date(request.appointment_date),
            appointment_time=request.appointment_time.strftime("%H:%M"),
        )

    def _reserve(self, request: BookingRequest):
        """Повторная проверка доступности и вставка; вызывается под блокировкой даты"""
        service = self.schedule.get_active_service(request.service_id)
        if not service:
            raise NotFoundError("Услуга не найдена", code="service_not_found", field="service_id")

        target_date = request.appointment_date
        calendar = self.schedule.load_calendar(start=target_date, end=target_date)
        if not is_bookable(target_date, calendar):
            raise ConflictError(SLOT_TAKEN_MESSAGE, code=SLOT_UNAVAILABLE)

        slot_start = to_minutes(request.appointment_time)
        candidates = generate_slots(window_for(calendar, target_date), service.duration_minutes, self.schedule.slot_step)
        if slot_start not in candidates:
            raise ValidationError(
                "Выбранное время не совпадает с сеткой записи",
                code="invalid_time",
                field="appointment_time"
            )

        held = self.schedule.get_held_intervals(target_date)
        if not is_slot_free(slot_start, service.duration_minutes, held):
            raise ConflictError(SLOT_TAKEN_MESSAGE, code=SLOT_UNAVAILABLE)

        is_trusted = self.is_trusted_phone(request.client_phone)
        status = initial_status(is_trusted)

        appointment = Appointment(
            client_name=request.client_name,
            client_phone=request.client_phone,
            service_id=service.id,
            appointment_date=target_date,
            appointment_time=request.appointment_time,
            status=status,
            is_auto_confirmed=is_trusted,
        )
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)
        return appointment, service.name
