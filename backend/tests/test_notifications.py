"""Tests for Telegram notifications (HTTP mocked with httpx.MockTransport)."""

import asyncio
import json

import httpx

from booking_app.services.notifications import (
    NotificationService,
    NotificationType,
    format_booking_message,
)

BOOKING = {
    "appointment_id": 7,
    "status": "PENDING",
    "client_name": "Ana <b>",
    "service_name": "Corte & Barba",
    "display_date": "02/06/2025",
    "appointment_time": "10:00",
}


def make_service(handler):
    return NotificationService(bot_token="123:abc", chat_id="42", transport=httpx.MockTransport(handler))


class TestSendMessage:
    def test_not_configured(self):
        service = NotificationService(bot_token="", chat_id="")
        assert service.is_configured is False
        assert asyncio.run(service.send_telegram_message("hola")) is False

    def test_success(self):
        sent = []

        def handler(request):
            sent.append(request)
            return httpx.Response(200, json={"ok": True})

        assert asyncio.run(make_service(handler).notify_new_booking(BOOKING)) is True

        request = sent[0]
        assert request.url.path == "/bot123:abc/sendMessage"
        body = json.loads(request.content)
        assert body["chat_id"] == "42"
        assert body["parse_mode"] == "HTML"
        assert "НОВАЯ ЗАПИСЬ" in body["text"]

    def test_api_error(self):
        def handler(request):
            return httpx.Response(500, text="boom")

        assert asyncio.run(make_service(handler).send_telegram_message("hola")) is False

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        assert asyncio.run(make_service(handler).notify_cancelled_by_client(BOOKING)) is False


class TestFormatMessage:
    def test_user_input_is_escaped(self):
        text = format_booking_message(NotificationType.NEW_BOOKING, BOOKING)
        assert "Ana &lt;b&gt;" in text
        assert "Corte &amp; Barba" in text

    def test_status_label(self):
        text = format_booking_message(NotificationType.NEW_BOOKING, BOOKING)
        assert "Ожидает подтверждения" in text
        assert "ID #7" in text

    def test_cancellation_title(self):
        text = format_booking_message(NotificationType.CANCELLED_BOOKING, dict(BOOKING, status="CANCELLED"))
        assert "ЗАПИСЬ ОТМЕНЕНА" in text
        assert "Отменена клиентом" in text
