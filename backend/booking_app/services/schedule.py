"""
Сервис для работы с расписанием и слотами
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import storage_guard
from ..models.appointment import Appointment, HOLDING_STATUSES
from ..models.blocked_date import BlockedDate
from ..models.service import Service
from ..models.working_hour import WorkingHour
from .availability import HeldInterval, resolve_available_slots
from .calendar_rules import CalendarSnapshot, WorkingWindow, is_bookable
from .slots import from_minutes, to_minutes

settings = get_settings()
logger = logging.getLogger(__name__)


def local_today() -> date:
    """Сегодняшняя дата в часовом поясе мастера"""
    return datetime.now(ZoneInfo(settings.TIMEZONE)).date()


def booking_window(today: Optional[date] = None) -> Tuple[date, date]:
    """Первая и последняя даты, на которые разрешена запись (включительно)"""
    today = today or local_today()
    return (
        today + timedelta(days=settings.BOOKING_MIN_DAYS_AHEAD),
        today + timedelta(days=settings.BOOKING_DAYS_AHEAD),
    )


class ScheduleService:
    """Сервис расписания: снимки конфигурации и свободные слоты"""

    def __init__(self, db: Session):
        self.db = db
        self.slot_step = settings.SLOT_STEP_MINUTES

    def load_calendar(self, start: Optional[date] = None, end: Optional[date] = None) -> CalendarSnapshot:
        """
        Снимок календаря: активные рабочие окна и заблокированные даты
        (опционально только в диапазоне [start, end])
        """
        with storage_guard(self.db, "load_calendar"):
            rules = self.db.query(WorkingHour).filter(WorkingHour.is_active.is_(True)).all()

            blocked_query = self.db.query(BlockedDate.blocked_date)
            if start:
                blocked_query = blocked_query.filter(BlockedDate.blocked_date >= start)
            if end:
                blocked_query = blocked_query.filter(BlockedDate.blocked_date <= end)
            blocked = [row[0] for row in blocked_query.all()]

        windows = {}
        for rule in rules:
            start_min, end_min = to_minutes(rule.start_time), to_minutes(rule.end_time)
            if start_min >= end_min:
                # Такое правило не проходит CHECK, но БД могла быть заполнена в обход
                logger.warning(f"Пропускаем некорректное окно: {rule!r}")
                continue
            windows[rule.day_of_week] = WorkingWindow(start_min, end_min)

        return CalendarSnapshot.build(windows, blocked)

    def get_active_service(self, service_id: int) -> Optional[Service]:
        with storage_guard(self.db, "get_active_service"):
            return self.db.query(Service).filter(
                Service.id == service_id,
                Service.is_active.is_(True)
            ).first()

    def list_active_services(self) -> List[Service]:
        with storage_guard(self.db, "list_active_services"):
            return self.db.query(Service).filter(
                Service.is_active.is_(True)
            ).order_by(Service.display_order, Service.id).all()

    def get_held_intervals(self, target_date: date) -> List[HeldInterval]:
        """
        Интервалы, занятые записями PENDING/CONFIRMED на дату.
        REJECTED/CANCELLED/COMPLETED место не держат.
        """
        with storage_guard(self.db, "get_held_intervals"):
            rows = self.db.query(Appointment.appointment_time, Service.duration_minutes).join(
                Service, Service.id == Appointment.service_id
            ).filter(
                Appointment.appointment_date == target_date,
                Appointment.status.in_(HOLDING_STATUSES)
            ).all()

        return [HeldInterval(to_minutes(apt_time), duration) for apt_time, duration in rows]

    def available_minutes(self, service: Service, target_date: date) -> List[int]:
        calendar = self.load_calendar(start=target_date, end=target_date)
        if not is_bookable(target_date, calendar):
            return []
        held = self.get_held_intervals(target_date)
        return resolve_available_slots(
            target_date,
            service.duration_minutes,
            calendar,
            held,
            self.slot_step
        )

    def available_slots(self, service_id: int, target_date: date) -> List[time]:
        """
        Получить все доступные слоты на дату для услуги.
        Нет услуги, нет рабочего окна, дата заблокирована - пустой список.
        """
        service = self.get_active_service(service_id)
        if not service:
            return []
        return [from_minutes(m) for m in self.available_minutes(service, target_date)]

    def is_bookable(self, target_date: date) -> bool:
        return is_bookable(target_date, self.load_calendar(start=target_date, end=target_date))

    def booking_calendar(self, today: Optional[date] = None) -> dict:
        """
        Данные для календаря на странице записи:
        рабочие дни недели, заблокированные даты и допустимый диапазон
        """
        min_date, max_date = booking_window(today)
        calendar = self.load_calendar(start=min_date, end=max_date)
        return {
            "active_weekdays": calendar.active_weekdays,
            "blocked_dates": sorted(calendar.blocked_dates),
            "min_date": min_date,
            "max_date": max_date,
        }
