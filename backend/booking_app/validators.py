"""
Общие проверки и нормализация входных данных
"""
import re
from datetime import date, datetime, time
from typing import Optional

from .exceptions import ValidationError

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^\d{2}:\d{2}$"

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
PHONE_MIN_LENGTH = 6
PHONE_MAX_LENGTH = 20
NOTE_MAX_LENGTH = 500

_PHONE_JUNK = re.compile(r"[\s\-().]")


def normalize_phone(phone: Optional[str]) -> str:
    """
    Нормализация телефона: убираем пробелы, дефисы, точки и скобки.
    Ведущий "+" сохраняется, код страны не добавляется.
    """
    if not phone:
        return ""
    return _PHONE_JUNK.sub("", phone.strip())


def mask_phone(phone: str) -> str:
    """Телефон для логов: видны только последние 3 цифры"""
    if len(phone) <= 3:
        return "***"
    return "*" * (len(phone) - 3) + phone[-3:]


def parse_date(value: str, field: str = "date") -> date:
    """Разбор даты YYYY-MM-DD (гражданская дата, без часового пояса)"""
    if not isinstance(value, str) or not re.match(DATE_PATTERN, value):
        raise ValidationError("Неверный формат даты. Используйте YYYY-MM-DD", code="invalid_date", field=field)
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Такой даты не существует", code="invalid_date", field=field)


def parse_time(value: str, field: str = "time") -> time:
    """Разбор времени HH:MM (24 часа)"""
    if not isinstance(value, str) or not re.match(TIME_PATTERN, value):
        raise ValidationError("Неверный формат времени. Используйте HH:MM", code="invalid_time", field=field)
    try:
        return datetime.strptime(value, "%H:%M").time()
    except ValueError:
        raise ValidationError("Такого времени не существует", code="invalid_time", field=field)


def validate_client_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not NAME_MIN_LENGTH <= len(cleaned) <= NAME_MAX_LENGTH:
        raise ValidationError(
            f"Имя должно быть от {NAME_MIN_LENGTH} до {NAME_MAX_LENGTH} символов",
            code="invalid_name",
            field="client_name"
        )
    return cleaned


def validate_client_phone(phone: Optional[str], field: str = "client_phone") -> str:
    cleaned = normalize_phone(phone)
    if not PHONE_MIN_LENGTH <= len(cleaned) <= PHONE_MAX_LENGTH:
        raise ValidationError(
            f"Телефон должен быть от {PHONE_MIN_LENGTH} до {PHONE_MAX_LENGTH} символов",
            code="invalid_phone",
            field=field
        )
    return cleaned


def validate_note(note: Optional[str], field: str = "notes") -> Optional[str]:
    if note is None:
        return None
    cleaned = note.strip()
    if len(cleaned) > NOTE_MAX_LENGTH:
        raise ValidationError(
            f"Заметка не длиннее {NOTE_MAX_LENGTH} символов",
            code="invalid_note",
            field=field
        )
    return cleaned or None


def format_display_date(value: date) -> str:
    """YYYY-MM-DD -> DD/MM/YYYY для подтверждения"""
    return value.strftime("%d/%m/%Y")
