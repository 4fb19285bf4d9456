"""
Модель заблокированных дат
"""
from sqlalchemy import Column, Integer, Date, String, TIMESTAMP
from sqlalchemy.sql import func
from ..database import Base


class BlockedDate(Base):
    """Дата, полностью закрытая для записи (отпуск, праздник)"""

    __tablename__ = "blocked_dates"

    id = Column(Integer, primary_key=True, index=True)
    blocked_date = Column(Date, nullable=False, unique=True, index=True)
    reason = Column(String(200), nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    def __repr__(self):
        return f"<BlockedDate {self.blocked_date} - {self.reason}>"
