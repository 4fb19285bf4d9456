"""
Подключение к базе данных (PostgreSQL или SQLite)
"""
import logging
from contextlib import contextmanager
from datetime import date

from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import get_settings
from .exceptions import DependencyError

settings = get_settings()
logger = logging.getLogger(__name__)

# Пространство имён для pg_advisory_xact_lock(int, int)
BOOKING_LOCK_NAMESPACE = 4711


def make_engine(database_url: str, echo: bool = False):
    """Создать движок для SQLite (разработка, тесты) или PostgreSQL (продакшен)"""
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": 30},
            echo=echo
        )

        @event.listens_for(engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        echo=echo
    )


# Создание движка базы данных
engine = make_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Создание фабрики сессий
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Базовый класс для моделей
Base = declarative_base()


def get_db():
    """
    Dependency для получения сессии базы данных
    Использование:
        @router.get("/items")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """
    Инициализация базы данных
    Создание всех таблиц, определенных в моделях
    """
    from . import models  # noqa: F401  регистрирует таблицы в Base.metadata

    Base.metadata.create_all(bind=bind or engine)


@contextmanager
def storage_guard(db: Session, operation: str):
    """
    Превращает сбой хранилища в DependencyError.

    Нарушения ограничений (IntegrityError) пропускаются наверх как есть:
    их трактует вызывающий код. Повторов здесь нет.
    """
    try:
        yield
    except IntegrityError:
        raise
    except DBAPIError as exc:
        db.rollback()
        logger.error(f"Хранилище недоступно ({operation}): {exc}")
        raise DependencyError(
            "Сервис временно недоступен, попробуйте ещё раз",
            code="storage_unavailable"
        ) from exc


@contextmanager
def booking_date_lock(db: Session, target_date: date):
    """
    Эксклюзивная секция записи на одну дату.

    PostgreSQL: транзакционная advisory-блокировка на дату.
    SQLite: BEGIN IMMEDIATE сразу берёт блокировку записи на всю базу,
    остальные процессы ждут её в пределах busy timeout.
    Обе блокировки снимаются при commit/rollback и действуют между процессами,
    поэтому коммит должен выполняться внутри блока. Частичный уникальный индекс
    по (дата, время) остаётся последним рубежом.
    """
    if db.get_bind().dialect.name == "postgresql":
        db.execute(
            text("SELECT pg_advisory_xact_lock(:ns, :day)"),
            {"ns": BOOKING_LOCK_NAMESPACE, "day": target_date.toordinal()}
        )
    else:
        db.execute(text("BEGIN IMMEDIATE"))
    yield
