"""Tests for ScheduleService: availability read from the database."""

from datetime import time, timedelta

import pytest

from booking_app.models import AppointmentStatus, WorkingHour
from booking_app.services.schedule import ScheduleService, booking_window

from conftest import MONDAY, TODAY


def hhmm(slots):
    return [slot.strftime("%H:%M") for slot in slots]


class TestAvailableSlots:
    """Tests for ScheduleService.available_slots()."""

    def test_free_monday(self, db, monday_only, haircut):
        slots = ScheduleService(db).available_slots(haircut.id, MONDAY)
        assert hhmm(slots) == ["09:00", "09:30", "10:00", "10:30", "11:00", "11:30", "12:00", "12:30"]

    def test_confirmed_45_minute_appointment(self, db, monday_only, haircut, cut_and_beard, make_appointment):
        make_appointment(cut_and_beard, MONDAY, time(10, 0), AppointmentStatus.CONFIRMED)
        slots = hhmm(ScheduleService(db).available_slots(haircut.id, MONDAY))
        assert "10:00" not in slots and "10:30" not in slots
        assert "09:30" in slots and "11:00" in slots

    @pytest.mark.parametrize("status", [
        AppointmentStatus.REJECTED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.COMPLETED,
    ])
    def test_terminal_appointments_do_not_hold_the_slot(self, db, monday_only, haircut, make_appointment, status):
        make_appointment(haircut, MONDAY, time(10, 0), status)
        assert "10:00" in hhmm(ScheduleService(db).available_slots(haircut.id, MONDAY))

    def test_pending_appointment_holds_the_slot(self, db, monday_only, haircut, make_appointment):
        make_appointment(haircut, MONDAY, time(10, 0), AppointmentStatus.PENDING)
        assert "10:00" not in hhmm(ScheduleService(db).available_slots(haircut.id, MONDAY))

    def test_closed_weekday(self, db, monday_only, haircut, make_appointment):
        tuesday = MONDAY + timedelta(days=1)
        assert ScheduleService(db).available_slots(haircut.id, tuesday) == []

    def test_inactive_rule_closes_the_day(self, db, haircut):
        db.add(WorkingHour(day_of_week=1, start_time=time(9, 0), end_time=time(13, 0), is_active=False))
        db.commit()
        assert ScheduleService(db).available_slots(haircut.id, MONDAY) == []

    def test_blocked_date(self, db, monday_only, haircut, block_date):
        block_date(MONDAY)
        assert ScheduleService(db).available_slots(haircut.id, MONDAY) == []

    def test_unknown_service(self, db, monday_only):
        assert ScheduleService(db).available_slots(9999, MONDAY) == []

    def test_inactive_service(self, db, monday_only, haircut):
        haircut.is_active = False
        db.commit()
        assert ScheduleService(db).available_slots(haircut.id, MONDAY) == []


class TestCatalogAndCalendar:
    def test_active_services_in_display_order(self, db, cut_and_beard, haircut):
        names = [s.name for s in ScheduleService(db).list_active_services()]
        assert names == ["Corte de pelo", "Corte + Barba"]

    def test_is_bookable(self, db, monday_only, block_date):
        service = ScheduleService(db)
        assert service.is_bookable(MONDAY) is True
        block_date(MONDAY)
        assert service.is_bookable(MONDAY) is False

    def test_booking_calendar(self, db, monday_only, block_date):
        block_date(MONDAY)
        block_date(MONDAY + timedelta(days=60), reason="Vacaciones")
        calendar = ScheduleService(db).booking_calendar(today=TODAY)

        assert calendar["active_weekdays"] == [1]
        assert calendar["blocked_dates"] == [MONDAY]
        assert calendar["min_date"] == TODAY + timedelta(days=1)
        assert calendar["max_date"] == TODAY + timedelta(days=14)

    def test_booking_window_excludes_today(self):
        min_date, max_date = booking_window(TODAY)
        assert min_date > TODAY
        assert (max_date - TODAY).days == 14
