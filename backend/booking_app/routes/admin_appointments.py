"""
API роутер администратора: вход и управление статусами записей
"""
import hmac
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_db
from ..exceptions import AuthorizationError, ADMIN_LOGIN_REQUIRED
from ..models.appointment import Appointment, AppointmentStatus
from ..services.lifecycle import AppointmentLifecycle
from .appointments import AppointmentResponse, appointment_to_dict

settings = get_settings()
router = APIRouter(prefix="/api/admin", tags=["admin"])


# ==================== Pydantic Schemas ====================

class LoginRequest(BaseModel):
    password: str


class AdminAppointmentResponse(AppointmentResponse):
    client_phone: str
    duration_minutes: Optional[int] = None
    is_auto_confirmed: bool
    notes: Optional[str] = None


class RejectRequest(BaseModel):
    reason: Optional[str] = None


class NotesRequest(BaseModel):
    notes: Optional[str] = None


class StatsResponse(BaseModel):
    pending: int
    today_confirmed: int
    total_this_month: int


def admin_appointment_to_dict(apt: Appointment) -> dict:
    data = appointment_to_dict(apt)
    data.update({
        "client_phone": apt.client_phone,
        "duration_minutes": apt.service.duration_minutes if apt.service else None,
        "is_auto_confirmed": apt.is_auto_confirmed,
        "notes": apt.notes,
    })
    return data


def require_admin(request: Request) -> None:
    """Dependency: пропускает только с сессией администратора"""
    if not request.session.get("authenticated", False):
        raise AuthorizationError(
            "Требуется вход администратора",
            code=ADMIN_LOGIN_REQUIRED,
            status_code=401
        )


# ==================== Сессия ====================

@router.post("/login")
def admin_login(data: LoginRequest, request: Request):
    """Вход по паролю администратора"""
    if not hmac.compare_digest(data.password.encode(), settings.ADMIN_PASSWORD.encode()):
        raise AuthorizationError("Неверный пароль", code="invalid_credentials", status_code=401)
    request.session.update({"authenticated": True})
    return {"success": True}


@router.post("/logout")
def admin_logout(request: Request):
    request.session.clear()
    return {"success": True}


# ==================== Записи ====================

@router.get(
    "/appointments",
    response_model=List[AdminAppointmentResponse],
    dependencies=[Depends(require_admin)]
)
def list_appointments(
    status: Optional[AppointmentStatus] = Query(None),
    on_date: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db)
):
    """Все записи с фильтром по статусу и дате"""
    appointments = AppointmentLifecycle(db).list_appointments(status=status, on_date=on_date)
    return [admin_appointment_to_dict(apt) for apt in appointments]


@router.get("/stats", response_model=StatsResponse, dependencies=[Depends(require_admin)])
def get_stats(db: Session = Depends(get_db)):
    """Счётчики для дашборда"""
    return AppointmentLifecycle(db).dashboard_stats()


@router.post(
    "/appointments/{appointment_id}/approve",
    response_model=AdminAppointmentResponse,
    dependencies=[Depends(require_admin)]
)
def approve_appointment(appointment_id: int, db: Session = Depends(get_db)):
    return admin_appointment_to_dict(AppointmentLifecycle(db).approve(appointment_id))


@router.post(
    "/appointments/{appointment_id}/reject",
    response_model=AdminAppointmentResponse,
    dependencies=[Depends(require_admin)]
)
def reject_appointment(
    appointment_id: int,
    data: Optional[RejectRequest] = None,
    db: Session = Depends(get_db)
):
    reason = data.reason if data else None
    return admin_appointment_to_dict(AppointmentLifecycle(db).reject(appointment_id, reason))


@router.post(
    "/appointments/{appointment_id}/complete",
    response_model=AdminAppointmentResponse,
    dependencies=[Depends(require_admin)]
)
def complete_appointment(appointment_id: int, db: Session = Depends(get_db)):
    return admin_appointment_to_dict(AppointmentLifecycle(db).complete(appointment_id))


@router.post(
    "/appointments/{appointment_id}/cancel",
    response_model=AdminAppointmentResponse,
    dependencies=[Depends(require_admin)]
)
def cancel_appointment(appointment_id: int, db: Session = Depends(get_db)):
    return admin_appointment_to_dict(AppointmentLifecycle(db).cancel_by_admin(appointment_id))


@router.patch(
    "/appointments/{appointment_id}/notes",
    response_model=AdminAppointmentResponse,
    dependencies=[Depends(require_admin)]
)
def annotate_appointment(appointment_id: int, data: NotesRequest, db: Session = Depends(get_db)):
    return admin_appointment_to_dict(AppointmentLifecycle(db).annotate(appointment_id, data.notes))


@router.delete("/appointments/{appointment_id}", dependencies=[Depends(require_admin)])
def delete_appointment(appointment_id: int, db: Session = Depends(get_db)):
    AppointmentLifecycle(db).delete(appointment_id)
    return {"success": True}
