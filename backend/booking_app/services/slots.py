"""
Сетка слотов и преобразования времени

Время внутри ядра - минуты от начала суток (int). Наружу - "HH:MM".
"""
from datetime import time
from typing import Iterable, List

# Шаг сетки, не зависит от длительности услуги
GRID_STEP_MINUTES = 30
MINUTES_PER_DAY = 24 * 60


def to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def from_minutes(minutes: int) -> time:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"minute-of-day out of range: {minutes}")
    return time(minutes // 60, minutes % 60)


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_slots(slots: Iterable[int]) -> List[str]:
    return [format_minutes(m) for m in slots]


def generate_slots(window, duration_minutes: int, step: int = GRID_STEP_MINUTES) -> range:
    """
    Все начала t на сетке от начала окна, такие что
    t >= window.start и t + duration <= window.end.

    Возвращает range: конечная, упорядоченная, перезапускаемая
    последовательность; пустая, если услуга не помещается.
    """
    if duration_minutes <= 0:
        raise ValueError("duration must be positive")
    if step <= 0:
        raise ValueError("grid step must be positive")
    last_start = window.end - duration_minutes
    return range(window.start, last_start + 1, step)
