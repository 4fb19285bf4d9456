"""
Сервис для отправки уведомлений мастеру в Telegram

Уведомления не влияют на запись: ошибки только логируются.
"""
import html
import logging
from enum import Enum
from typing import Optional

import httpx

from ..config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class NotificationType(str, Enum):
    """Типы уведомлений"""
    NEW_BOOKING = "new_booking"
    CANCELLED_BOOKING = "cancelled_booking"


STATUS_LABELS = {
    "PENDING": "Ожидает подтверждения",
    "CONFIRMED": "Подтверждена автоматически",
    "CANCELLED": "Отменена клиентом",
}


class NotificationService:
    """Сервис для отправки уведомлений в Telegram"""

    def __init__(
        self,
        bot_token: Optional[str] = None,
        chat_id: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.bot_token = bot_token if bot_token is not None else settings.TELEGRAM_BOT_TOKEN
        self.chat_id = chat_id if chat_id is not None else settings.TELEGRAM_ADMIN_CHAT_ID
        self.api_url = f"https://api.telegram.org/bot{self.bot_token}"
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    async def send_telegram_message(self, text: str, parse_mode: str = "HTML") -> bool:
        """
        Отправить сообщение в Telegram

        Returns:
            bool: True если отправлено успешно
        """
        if not self.is_configured:
            logger.warning("Telegram не настроен, пропускаем отправку")
            return False

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=10.0) as client:
                response = await client.post(
                    f"{self.api_url}/sendMessage",
                    json={
                        "chat_id": self.chat_id,
                        "text": text,
                        "parse_mode": parse_mode
                    }
                )
        except httpx.HTTPError as e:
            logger.error(f"Исключение при отправке в Telegram: {e}")
            return False

        if response.status_code == 200:
            logger.info(f"Уведомление отправлено в чат {self.chat_id}")
            return True

        logger.error(f"Ошибка отправки в Telegram: {response.status_code} {response.text[:200]}")
        return False

    async def notify_new_booking(self, booking: dict) -> bool:
        """Новая запись (payload из BookingOutcome.to_dict())"""
        return await self.send_telegram_message(
            format_booking_message(NotificationType.NEW_BOOKING, booking)
        )

    async def notify_cancelled_by_client(self, booking: dict) -> bool:
        return await self.send_telegram_message(
            format_booking_message(NotificationType.CANCELLED_BOOKING, booking)
        )


def format_booking_message(notification_type: NotificationType, booking: dict) -> str:
    if notification_type == NotificationType.NEW_BOOKING:
        title = "📅 <b>НОВАЯ ЗАПИСЬ</b>"
    else:
        title = "❌ <b>ЗАПИСЬ ОТМЕНЕНА</b>"

    status = booking.get("status", "")
    return (
        f"{title}\n"
        f"━━━━━━━━━━━━━━━━━━\n\n"
        f"👤 <b>Клиент:</b> {html.escape(str(booking.get('client_name', '—')))}\n"
        f"💈 <b>Услуга:</b> {html.escape(str(booking.get('service_name', '—')))}\n"
        f"📆 <b>Дата:</b> {booking.get('display_date', '—')}\n"
        f"🕐 <b>Время:</b> {booking.get('appointment_time', '—')}\n"
        f"📋 <b>Статус:</b> {STATUS_LABELS.get(status, status)}\n\n"
        f"ID #{booking.get('appointment_id', '—')}"
    )
