"""
Модель доверенного клиента
"""
from sqlalchemy import Column, Integer, String, Text, TIMESTAMP
from sqlalchemy.orm import validates
from sqlalchemy.sql import func
from ..database import Base
from ..validators import normalize_phone


class TrustedClient(Base):
    """Постоянный клиент: его записи подтверждаются автоматически"""

    __tablename__ = "trusted_clients"

    id = Column(Integer, primary_key=True, index=True)
    phone = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    @validates("phone")
    def _normalize_phone(self, key, value):
        return normalize_phone(value)

    def __repr__(self):
        return f"<TrustedClient {self.name or '-'} ({self.phone})>"
