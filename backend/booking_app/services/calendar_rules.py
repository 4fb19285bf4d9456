"""
Правила календаря: можно ли вообще записаться на дату
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, FrozenSet, Iterable, Optional


@dataclass(frozen=True)
class WorkingWindow:
    """Рабочее окно [start, end) в минутах от начала суток"""

    start: int
    end: int

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"working window must have start < end: {self.start}..{self.end}")


@dataclass(frozen=True)
class CalendarSnapshot:
    """
    Снимок конфигурации календаря на момент вызова.

    windows - только активные правила, ключ - день недели (0=Вс, 6=Сб).
    """

    windows: Dict[int, WorkingWindow] = field(default_factory=dict)
    blocked_dates: FrozenSet[date] = frozenset()

    @classmethod
    def build(cls, windows: Dict[int, WorkingWindow], blocked_dates: Iterable[date] = ()):
        return cls(windows=dict(windows), blocked_dates=frozenset(blocked_dates))

    @property
    def active_weekdays(self):
        return sorted(self.windows)


def weekday_index(target_date: date) -> int:
    """День недели в нумерации 0=Вс..6=Сб"""
    # Python: понедельник = 0, воскресенье = 6
    return (target_date.weekday() + 1) % 7


def window_for(snapshot: CalendarSnapshot, target_date: date) -> Optional[WorkingWindow]:
    """Рабочее окно на дату или None, если день закрыт"""
    return snapshot.windows.get(weekday_index(target_date))


def is_bookable(target_date: date, snapshot: CalendarSnapshot) -> bool:
    """
    Дата доступна, если у её дня недели есть активное правило
    и она не заблокирована. Нет правила - день закрыт.
    """
    if target_date in snapshot.blocked_dates:
        return False
    return window_for(snapshot, target_date) is not None
