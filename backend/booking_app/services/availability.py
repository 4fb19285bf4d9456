"""
Вычисление свободных слотов

Чистые функции над снимками: без БД, без часов, без глобального состояния.
"""
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List

from .calendar_rules import CalendarSnapshot, is_bookable, window_for
from .slots import GRID_STEP_MINUTES, generate_slots


@dataclass(frozen=True)
class HeldInterval:
    """Интервал, занятый записью в статусе PENDING или CONFIRMED"""

    start: int
    duration: int

    @property
    def end(self) -> int:
        return self.start + self.duration


def overlaps(start: int, end: int, other_start: int, other_end: int) -> bool:
    """Пересечение полуоткрытых интервалов [start, end) и [other_start, other_end)"""
    return start < other_end and end > other_start


def is_slot_free(slot_start: int, duration: int, held: Iterable[HeldInterval]) -> bool:
    slot_end = slot_start + duration
    return not any(overlaps(slot_start, slot_end, busy.start, busy.end) for busy in held)


def free_slots(candidates: Iterable[int], duration: int, held: Iterable[HeldInterval]) -> List[int]:
    """
    Кандидаты, не пересекающиеся ни с одним занятым интервалом.
    Учитывается длительность и запрошенной услуги, и существующей записи.
    """
    held = list(held)
    return [slot for slot in candidates if is_slot_free(slot, duration, held)]


def resolve_available_slots(
    target_date: date,
    service_duration: int,
    calendar: CalendarSnapshot,
    held: Iterable[HeldInterval],
    step: int = GRID_STEP_MINUTES
) -> List[int]:
    """
    Свободные начала слотов на дату, по возрастанию.
    Закрытый день или заблокированная дата - пустой список, не ошибка.
    """
    if not is_bookable(target_date, calendar):
        return []
    window = window_for(calendar, target_date)
    candidates = generate_slots(window, service_duration, step)
    return free_slots(candidates, service_duration, held)
