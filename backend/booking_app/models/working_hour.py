"""
Модель рабочих часов
"""
from sqlalchemy import Column, Integer, Time, Boolean, CheckConstraint
from ..database import Base

DAY_NAMES = ["Вс", "Пн", "Вт", "Ср", "Чт", "Пт", "Сб"]


class WorkingHour(Base):
    """Рабочее окно на день недели (0=Вс, 6=Сб), не больше одного на день"""

    __tablename__ = "working_hours"

    id = Column(Integer, primary_key=True, index=True)
    day_of_week = Column(Integer, nullable=False, unique=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="working_hour_day_range"),
        CheckConstraint("NOT is_active OR start_time < end_time", name="working_hour_window_order"),
    )

    def __repr__(self):
        return f"<WorkingHour {DAY_NAMES[self.day_of_week]} {self.start_time}-{self.end_time}>"


# Дефолтное расписание для инициализации (Пн-Пт 9-19, Сб 9-15)
DEFAULT_WORKING_HOURS = [
    {"day_of_week": 1, "start_time": "09:00", "end_time": "19:00"},  # Пн
    {"day_of_week": 2, "start_time": "09:00", "end_time": "19:00"},  # Вт
    {"day_of_week": 3, "start_time": "09:00", "end_time": "19:00"},  # Ср
    {"day_of_week": 4, "start_time": "09:00", "end_time": "19:00"},  # Чт
    {"day_of_week": 5, "start_time": "09:00", "end_time": "19:00"},  # Пт
    {"day_of_week": 6, "start_time": "09:00", "end_time": "15:00"},  # Сб
]
