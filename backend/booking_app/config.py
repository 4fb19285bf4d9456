"""
Конфигурация приложения
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from pathlib import Path
from typing import Optional


class Settings(BaseSettings):
    """Настройки приложения"""

    # Database
    DATABASE_URL: str = "sqlite:///./booking.db"

    # Security
    SECRET_KEY: str = "local-development-secret-key-change-in-production"

    # Admin Panel
    ADMIN_PASSWORD: str = "admin2025"

    # Telegram для мастера (новые записи и отмены)
    TELEGRAM_BOT_TOKEN: Optional[str] = None
    TELEGRAM_ADMIN_CHAT_ID: Optional[str] = None

    # Application
    SITE_URL: str = "http://localhost:8000"

    # Booking Settings
    SLOT_STEP_MINUTES: int = 30
    BOOKING_MIN_DAYS_AHEAD: int = 1  # 1 = с завтрашнего дня, запись на сегодня запрещена
    BOOKING_DAYS_AHEAD: int = 14
    TIMEZONE: str = "America/Argentina/Buenos_Aires"

    # Development
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    class Config:
        # Путь к .env относительно корня проекта
        env_file = Path(__file__).resolve().parent.parent.parent / ".env"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Получить настройки приложения (с кешированием)"""
    return Settings()
