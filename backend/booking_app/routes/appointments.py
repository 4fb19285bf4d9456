"""
API роутер для публичной записи на прием
"""
from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.appointment import Appointment
from ..services.booking import BookingService
from ..services.lifecycle import AppointmentLifecycle
from ..services.notifications import NotificationService
from ..services.schedule import ScheduleService
from ..validators import (
    DATE_PATTERN,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    PHONE_MAX_LENGTH,
    PHONE_MIN_LENGTH,
    TIME_PATTERN,
    format_display_date,
    parse_date,
)

router = APIRouter(prefix="/api", tags=["appointments"])


# ==================== Pydantic Schemas ====================

class ServiceResponse(BaseModel):
    id: int
    name: str
    duration_minutes: int
    price: Decimal
    display_order: int

    class Config:
        from_attributes = True


class CalendarResponse(BaseModel):
    active_weekdays: List[int]  # 0=Вс, 6=Сб
    blocked_dates: List[date]
    min_date: date
    max_date: date


class SlotsResponse(BaseModel):
    date: str  # "YYYY-MM-DD"
    service_id: int
    slots: List[str]  # ["HH:MM", ...]


class AppointmentCreate(BaseModel):
    service_id: int
    appointment_date: str = Field(..., pattern=DATE_PATTERN)  # YYYY-MM-DD
    appointment_time: str = Field(..., pattern=TIME_PATTERN)  # HH:MM
    client_name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    client_phone: str = Field(..., min_length=PHONE_MIN_LENGTH, max_length=PHONE_MAX_LENGTH)


class BookingConfirmation(BaseModel):
    appointment_id: int
    status: str
    is_auto_confirmed: bool
    client_name: str
    service_name: str
    appointment_date: str
    display_date: str  # DD/MM/YYYY
    appointment_time: str


class BookingResponse(BaseModel):
    success: bool = True
    status: str
    appointment: BookingConfirmation


class AppointmentResponse(BaseModel):
    id: int
    client_name: str
    service_name: str
    appointment_date: str
    display_date: str
    appointment_time: str
    status: str
    created_at: Optional[str] = None


class CancelRequest(BaseModel):
    phone: str = Field(..., min_length=PHONE_MIN_LENGTH, max_length=PHONE_MAX_LENGTH)


def appointment_to_dict(apt: Appointment) -> dict:
    """Представление записи для ответа API"""
    return {
        "id": apt.id,
        "client_name": apt.client_name,
        "service_name": apt.service.name if apt.service else "Неизвестная услуга",
        "appointment_date": apt.appointment_date.isoformat(),
        "display_date": format_display_date(apt.appointment_date),
        "appointment_time": apt.appointment_time.strftime("%H:%M"),
        "status": apt.status.value,
        "created_at": apt.created_at.isoformat() if apt.created_at else None,
    }


def get_notifier() -> NotificationService:
    return NotificationService()


# ==================== API Endpoints ====================

@router.get("/services", response_model=List[ServiceResponse])
def get_services(db: Session = Depends(get_db)):
    """Получить список активных услуг"""
    return ScheduleService(db).list_active_services()


@router.get("/calendar", response_model=CalendarResponse)
def get_booking_calendar(db: Session = Depends(get_db)):
    """Рабочие дни недели, заблокированные даты и диапазон записи"""
    return ScheduleService(db).booking_calendar()


@router.get("/services/{service_id}/slots", response_model=SlotsResponse)
def list_available_slots(
    service_id: int,
    date_str: str = Query(..., alias="date", description="Дата YYYY-MM-DD"),
    db: Session = Depends(get_db)
):
    """Свободные слоты на дату для услуги"""
    target_date = parse_date(date_str)
    slots = ScheduleService(db).available_slots(service_id, target_date)
    return SlotsResponse(
        date=target_date.isoformat(),
        service_id=service_id,
        slots=[slot.strftime("%H:%M") for slot in slots]
    )


@router.post("/appointments", response_model=BookingResponse, status_code=201)
def create_appointment(
    data: AppointmentCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier)
):
    """Создать новую запись на прием"""
    outcome = BookingService(db).book(
        service_id=data.service_id,
        appointment_date=data.appointment_date,
        appointment_time=data.appointment_time,
        client_name=data.client_name,
        client_phone=data.client_phone
    )
    payload = outcome.to_dict()

    # Уведомление мастеру после ответа клиенту
    if notifier.is_configured:
        background_tasks.add_task(notifier.notify_new_booking, payload)

    return BookingResponse(status=outcome.status.value, appointment=BookingConfirmation(**payload))


@router.get("/appointments/lookup", response_model=Optional[AppointmentResponse])
def find_active_appointment(
    phone: str = Query(..., description="Номер телефона"),
    db: Session = Depends(get_db)
):
    """Ближайшая активная запись клиента по номеру телефона"""
    appointment = AppointmentLifecycle(db).find_active_by_phone(phone)
    if not appointment:
        return None
    return appointment_to_dict(appointment)


@router.post("/appointments/{appointment_id}/cancel")
def cancel_appointment(
    appointment_id: int,
    data: CancelRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier)
):
    """Отмена записи клиентом (нужен телефон, указанный при записи)"""
    appointment = AppointmentLifecycle(db).cancel_by_client(appointment_id, data.phone)

    if notifier.is_configured:
        payload = appointment_to_dict(appointment)
        background_tasks.add_task(notifier.notify_cancelled_by_client, {
            "appointment_id": payload["id"],
            "client_name": payload["client_name"],
            "service_name": payload["service_name"],
            "display_date": payload["display_date"],
            "appointment_time": payload["appointment_time"],
            "status": payload["status"],
        })

    return {"success": True, "status": appointment.status.value, "message": "Запись отменена"}
