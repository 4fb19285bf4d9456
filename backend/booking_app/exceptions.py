"""
Ошибки ядра записи

Каждая ошибка несёт машинный код (для UI) и человекочитаемое сообщение.
Роутеры превращают их в HTTP-ответы через обработчики в main.py.
"""
from typing import Optional


class BookingError(Exception):
    """Базовая ошибка ядра записи"""

    status_code = 400
    default_code = "booking_error"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        field: Optional[str] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
        self.message = message
        self.code = code or self.default_code
        self.field = field

    def to_dict(self) -> dict:
        data = {"detail": self.message, "code": self.code}
        if self.field:
            data["field"] = self.field
        return data


class ValidationError(BookingError):
    """Некорректные входные данные (до любого чтения общего состояния)"""

    status_code = 400
    default_code = "invalid_input"


class NotFoundError(BookingError):
    """Услуга или запись не найдена"""

    status_code = 404
    default_code = "not_found"


class ConflictError(BookingError):
    """Слот уже занят или переход статуса запрещён"""

    status_code = 409
    default_code = "conflict"


class AuthorizationError(BookingError):
    """Телефон не совпадает или нет сессии администратора"""

    status_code = 403
    default_code = "forbidden"


class DependencyError(BookingError):
    """Хранилище недоступно, запрос можно повторить"""

    status_code = 503
    default_code = "storage_unavailable"


# Коды, на которые опирается фронтенд
SLOT_UNAVAILABLE = "slot_unavailable"
INVALID_TRANSITION = "invalid_transition"
ADMIN_LOGIN_REQUIRED = "admin_login_required"
