"""
Модель услуги
"""
from sqlalchemy import Column, Integer, String, Boolean, Numeric, TIMESTAMP, CheckConstraint
from sqlalchemy.sql import func
from ..database import Base

SERVICE_MIN_DURATION = 10
SERVICE_MAX_DURATION = 240


class Service(Base):
    """Услуга мастера"""

    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)  # Decimal, никогда не float
    is_active = Column(Boolean, default=True, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            f"duration_minutes BETWEEN {SERVICE_MIN_DURATION} AND {SERVICE_MAX_DURATION}",
            name="service_duration_range"
        ),
        CheckConstraint("price >= 0", name="service_price_non_negative"),
    )

    def __repr__(self):
        return f"<Service {self.name} ({self.duration_minutes} мин, {self.price})>"
