"""
Главный файл FastAPI приложения
Booking System - запись к мастеру без двойных бронирований
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from .admin import setup_admin
from .config import get_settings
from .database import engine, init_db
from .exceptions import BookingError
from .routes.admin_appointments import router as admin_appointments_router
from .routes.appointments import router as appointments_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Не засоряем лог запросами к Telegram
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Создаём таблицы при старте
    init_db()
    logger.info(f"Приложение запущено ({settings.ENVIRONMENT})")
    yield


app = FastAPI(
    title="Booking API",
    description="API для онлайн-записи к мастеру",
    version="1.0.0",
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.DEBUG else [settings.SITE_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Сессии (вход администратора)
app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY)


# ==================== ОБРАБОТКА ОШИБОК ====================

@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    """Ошибки ядра -> структурированный ответ, который UI может показать"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.code} - {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Ошибки схемы запроса в том же формате, что и ValidationError ядра"""
    errors = exc.errors()
    field = None
    message = "Некорректные данные"
    if errors:
        first = errors[0]
        location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(location) or None
        message = first.get("msg", message)
    content = {"detail": message, "code": "invalid_input"}
    if field:
        content["field"] = field
    return JSONResponse(status_code=400, content=content)


# Подключение роутеров
app.include_router(appointments_router)
app.include_router(admin_appointments_router)

# Админ-панель для справочников
setup_admin(app, engine)


@app.get("/health")
def health_check():
    return {"status": "ok", "environment": settings.ENVIRONMENT}
