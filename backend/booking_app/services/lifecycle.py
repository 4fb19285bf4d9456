"""
Жизненный цикл записи: подтверждение, отклонение, завершение, отмена

Переходы выполняются условным UPDATE (id + допустимый исходный статус),
поэтому из двух параллельных запросов на один переход выигрывает один.
"""
import logging
from datetime import date, datetime, time
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database import storage_guard
from ..exceptions import AuthorizationError, ConflictError, NotFoundError, INVALID_TRANSITION
from ..models.appointment import ALLOWED_TRANSITIONS, HOLDING_STATUSES, Appointment, AppointmentStatus
from ..validators import PHONE_MIN_LENGTH, mask_phone, normalize_phone, validate_client_phone, validate_note
from .schedule import local_today

logger = logging.getLogger(__name__)


def sources_for(target: AppointmentStatus) -> List[AppointmentStatus]:
    """Статусы, из которых разрешён переход в target"""
    return [status for status, targets in ALLOWED_TRANSITIONS.items() if target in targets]


class AppointmentLifecycle:
    """Сервис управления статусами записей"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, appointment_id: int) -> Appointment:
        with storage_guard(self.db, "get_appointment"):
            appointment = self.db.get(Appointment, appointment_id)
        if appointment is None:
            raise NotFoundError("Запись не найдена", code="appointment_not_found")
        return appointment

    # ==================== Переходы ====================

    def approve(self, appointment_id: int) -> Appointment:
        """PENDING -> CONFIRMED"""
        return self._transition(appointment_id, AppointmentStatus.CONFIRMED)

    def reject(self, appointment_id: int, reason: Optional[str] = None) -> Appointment:
        """PENDING -> REJECTED, причина сохраняется в заметке"""
        reason = validate_note(reason, field="reason")
        return self._transition(appointment_id, AppointmentStatus.REJECTED, notes=reason)

    def complete(self, appointment_id: int) -> Appointment:
        """CONFIRMED -> COMPLETED"""
        return self._transition(appointment_id, AppointmentStatus.COMPLETED)

    def cancel_by_admin(self, appointment_id: int) -> Appointment:
        """PENDING/CONFIRMED -> CANCELLED"""
        return self._transition(appointment_id, AppointmentStatus.CANCELLED)

    def cancel_by_client(self, appointment_id: int, phone: str) -> Appointment:
        """
        Отмена клиентом: телефон должен совпадать с телефоном записи.
        Проверка владельца и переход - в одном условном UPDATE.
        """
        phone = validate_client_phone(phone, field="phone")
        appointment = self.get(appointment_id)
        if appointment.client_phone != phone:
            logger.warning(
                f"Отмена записи #{appointment_id} отклонена: телефон {mask_phone(phone)} не совпадает"
            )
            raise AuthorizationError("Телефон не совпадает с телефоном записи", code="phone_mismatch")

        return self._transition(
            appointment_id,
            AppointmentStatus.CANCELLED,
            actor="client",
            extra_filters=[Appointment.client_phone == phone]
        )

    def _transition(
        self,
        appointment_id: int,
        target: AppointmentStatus,
        notes: Optional[str] = None,
        actor: str = "admin",
        extra_filters=()
    ) -> Appointment:
        values = {Appointment.status: target}
        if notes:
            values[Appointment.notes] = notes

        with storage_guard(self.db, f"transition_{target.value.lower()}"):
            updated = self.db.query(Appointment).filter(
                Appointment.id == appointment_id,
                Appointment.status.in_(sources_for(target)),
                *extra_filters
            ).update(values, synchronize_session=False)
            self.db.commit()

        if not updated:
            current = self.get(appointment_id)
            self.db.refresh(current)
            raise ConflictError(
                f"Нельзя перевести запись из {current.status.value} в {target.value}",
                code=INVALID_TRANSITION
            )

        appointment = self.get(appointment_id)
        self.db.refresh(appointment)
        logger.info(f"Запись #{appointment_id}: -> {target.value} ({actor})")
        return appointment

    # ==================== Прочие операции ====================

    def annotate(self, appointment_id: int, note: Optional[str]) -> Appointment:
        """Заметка администратора; допустима в любом статусе"""
        note = validate_note(note)
        appointment = self.get(appointment_id)
        with storage_guard(self.db, "annotate"):
            appointment.notes = note
            self.db.commit()
            self.db.refresh(appointment)
        return appointment

    def delete(self, appointment_id: int) -> None:
        """Жёсткое удаление записи в любом статусе"""
        appointment = self.get(appointment_id)
        with storage_guard(self.db, "delete"):
            self.db.delete(appointment)
            self.db.commit()
        logger.info(f"Запись #{appointment_id} удалена")

    def find_active_by_phone(self, phone: Optional[str]) -> Optional[Appointment]:
        """Ближайшая запись PENDING/CONFIRMED по телефону"""
        phone = normalize_phone(phone)
        if len(phone) < PHONE_MIN_LENGTH:
            return None
        with storage_guard(self.db, "find_active_by_phone"):
            return self.db.query(Appointment).filter(
                Appointment.client_phone == phone,
                Appointment.status.in_(HOLDING_STATUSES)
            ).order_by(Appointment.appointment_date, Appointment.appointment_time).first()

    def list_appointments(
        self,
        status: Optional[AppointmentStatus] = None,
        on_date: Optional[date] = None
    ) -> List[Appointment]:
        with storage_guard(self.db, "list_appointments"):
            query = self.db.query(Appointment)
            if status:
                query = query.filter(Appointment.status == status)
            if on_date:
                query = query.filter(Appointment.appointment_date == on_date)
            return query.order_by(Appointment.appointment_date, Appointment.appointment_time).all()

    def dashboard_stats(self, today: Optional[date] = None) -> dict:
        """Счётчики для главной страницы админки"""
        today = today or local_today()
        month_start = today.replace(day=1)
        with storage_guard(self.db, "dashboard_stats"):
            pending = self.db.query(func.count(Appointment.id)).filter(
                Appointment.status == AppointmentStatus.PENDING
            ).scalar()
            today_confirmed = self.db.query(func.count(Appointment.id)).filter(
                Appointment.appointment_date == today,
                Appointment.status == AppointmentStatus.CONFIRMED
            ).scalar()
            total_this_month = self.db.query(func.count(Appointment.id)).filter(
                Appointment.created_at >= datetime.combine(month_start, time.min)
            ).scalar()

        return {
            "pending": pending or 0,
            "today_confirmed": today_confirmed or 0,
            "total_this_month": total_this_month or 0,
        }
