"""
Админ-панель для справочников мастера
Доступ: http://localhost:8000/admin
Пароль: из .env (ADMIN_PASSWORD)

Статусы записей здесь не меняются: только через /api/admin/appointments/...
"""
import hmac

from sqladmin import Admin, ModelView
from sqladmin.authentication import AuthenticationBackend
from starlette.requests import Request
from .config import get_settings
from .models.appointment import Appointment
from .models.blocked_date import BlockedDate
from .models.service import Service
from .models.trusted_client import TrustedClient
from .models.working_hour import WorkingHour

settings = get_settings()

ADMIN_USERNAME = "admin"


class AdminAuth(AuthenticationBackend):
    """Авторизация по паролю, та же сессия, что и у /api/admin"""

    async def login(self, request: Request) -> bool:
        form = await request.form()
        username = form.get("username") or ""
        password = form.get("password") or ""

        if username == ADMIN_USERNAME and hmac.compare_digest(
            str(password).encode(), settings.ADMIN_PASSWORD.encode()
        ):
            request.session.update({"authenticated": True})
            return True
        return False

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        return request.session.get("authenticated", False)


# ==================== МОДЕЛИ ДЛЯ АДМИНКИ ====================

class AppointmentAdmin(ModelView, model=Appointment):
    """Записи клиентов (только просмотр)"""
    name = "Запись"
    name_plural = "Записи"
    icon = "fa-solid fa-calendar-check"

    can_create = False
    can_edit = False
    can_delete = False

    column_list = [
        Appointment.id,
        Appointment.appointment_date,
        Appointment.appointment_time,
        Appointment.status,
        Appointment.client_name,
        Appointment.client_phone,
        Appointment.service_id,
        Appointment.is_auto_confirmed,
        Appointment.created_at
    ]
    column_searchable_list = [Appointment.client_name, Appointment.client_phone]
    column_sortable_list = [Appointment.appointment_date, Appointment.created_at, Appointment.status]
    column_default_sort = [(Appointment.appointment_date, True)]

    column_labels = {
        "id": "ID",
        "appointment_date": "Дата",
        "appointment_time": "Время",
        "status": "Статус",
        "client_name": "Клиент",
        "client_phone": "Телефон",
        "service_id": "Услуга",
        "is_auto_confirmed": "Автоподтверждение",
        "notes": "Заметки",
        "created_at": "Создано"
    }


class ServiceAdmin(ModelView, model=Service):
    """Услуги"""
    name = "Услуга"
    name_plural = "Услуги"
    icon = "fa-solid fa-scissors"

    column_list = [
        Service.id,
        Service.name,
        Service.duration_minutes,
        Service.price,
        Service.display_order,
        Service.is_active
    ]
    column_searchable_list = [Service.name]
    column_sortable_list = [Service.name, Service.price, Service.display_order]
    form_excluded_columns = [Service.created_at]

    column_labels = {
        "id": "ID",
        "name": "Название",
        "price": "Цена",
        "duration_minutes": "Длительность (мин)",
        "display_order": "Порядок",
        "is_active": "Активна"
    }


class WorkingHourAdmin(ModelView, model=WorkingHour):
    """Рабочие часы"""
    name = "Рабочие часы"
    name_plural = "Рабочие часы"
    icon = "fa-solid fa-clock"

    column_list = [
        WorkingHour.day_of_week,
        WorkingHour.start_time,
        WorkingHour.end_time,
        WorkingHour.is_active
    ]
    column_sortable_list = [WorkingHour.day_of_week]
    column_default_sort = [(WorkingHour.day_of_week, False)]

    column_labels = {
        "day_of_week": "День (0=Вс)",
        "start_time": "Начало",
        "end_time": "Конец",
        "is_active": "Рабочий"
    }


class BlockedDateAdmin(ModelView, model=BlockedDate):
    """Заблокированные даты"""
    name = "Выходной"
    name_plural = "Заблокированные даты"
    icon = "fa-solid fa-ban"

    column_list = [BlockedDate.blocked_date, BlockedDate.reason]
    column_sortable_list = [BlockedDate.blocked_date]
    column_default_sort = [(BlockedDate.blocked_date, False)]
    form_excluded_columns = [BlockedDate.created_at]

    column_labels = {
        "blocked_date": "Дата",
        "reason": "Причина"
    }


class TrustedClientAdmin(ModelView, model=TrustedClient):
    """Доверенные клиенты (автоподтверждение)"""
    name = "Постоянный клиент"
    name_plural = "Постоянные клиенты"
    icon = "fa-solid fa-user-check"

    column_list = [
        TrustedClient.phone,
        TrustedClient.name,
        TrustedClient.notes,
        TrustedClient.created_at
    ]
    column_searchable_list = [TrustedClient.phone, TrustedClient.name]
    column_sortable_list = [TrustedClient.created_at]
    column_default_sort = [(TrustedClient.created_at, True)]
    form_excluded_columns = [TrustedClient.created_at]

    column_labels = {
        "phone": "Телефон",
        "name": "Имя",
        "notes": "Заметки",
        "created_at": "Добавлен"
    }


def setup_admin(app, engine):
    """Настройка админ-панели"""
    authentication_backend = AdminAuth(secret_key=settings.SECRET_KEY)

    admin = Admin(
        app,
        engine,
        authentication_backend=authentication_backend,
        title="Booking Admin",
        base_url="/admin"
    )

    # Регистрация моделей
    admin.add_view(AppointmentAdmin)
    admin.add_view(ServiceAdmin)
    admin.add_view(WorkingHourAdmin)
    admin.add_view(BlockedDateAdmin)
    admin.add_view(TrustedClientAdmin)

    return admin
