"""
Скрипт инициализации базы данных
Создаёт таблицы и добавляет начальные данные
Запустить: python init_db.py (из папки backend)
"""
from datetime import datetime

from booking_app.database import SessionLocal, init_db
from booking_app.models.service import Service
from booking_app.models.working_hour import WorkingHour, DEFAULT_WORKING_HOURS

# Начальные услуги
INITIAL_SERVICES = [
    {"name": "Corte de pelo", "duration_minutes": 30, "price": 3500, "display_order": 1},
    {"name": "Corte + Barba", "duration_minutes": 45, "price": 5000, "display_order": 2},
    {"name": "Barba", "duration_minutes": 20, "price": 2000, "display_order": 3},
    {"name": "Corte niños", "duration_minutes": 25, "price": 2500, "display_order": 4},
]


def init_services(db):
    """Добавить начальные услуги"""
    existing = db.query(Service).count()
    if existing > 0:
        print(f"Услуги уже существуют ({existing} шт.), пропускаем...")
        return

    for service_data in INITIAL_SERVICES:
        db.add(Service(**service_data))
    db.commit()
    print(f"Добавлено {len(INITIAL_SERVICES)} услуг!")


def init_working_hours(db):
    """Рабочие часы по умолчанию (Пн-Сб)"""
    existing = db.query(WorkingHour).count()
    if existing > 0:
        print("Расписание уже есть, пропускаем...")
        return

    for day_data in DEFAULT_WORKING_HOURS:
        db.add(WorkingHour(
            day_of_week=day_data["day_of_week"],
            start_time=datetime.strptime(day_data["start_time"], "%H:%M").time(),
            end_time=datetime.strptime(day_data["end_time"], "%H:%M").time(),
            is_active=True
        ))
    db.commit()
    print(f"Добавлено {len(DEFAULT_WORKING_HOURS)} рабочих дней!")


def main():
    print("Создание таблиц...")
    init_db()
    print("Таблицы созданы!")

    db = SessionLocal()
    try:
        init_services(db)
        init_working_hours(db)
    finally:
        db.close()

    print("\nИнициализация завершена!")
    print("Теперь можно запустить сервер: python -m uvicorn booking_app.main:app --reload")


if __name__ == "__main__":
    main()
