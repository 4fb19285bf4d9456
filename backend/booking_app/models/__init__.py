"""
SQLAlchemy модели для базы данных
"""
from .service import Service
from .working_hour import WorkingHour
from .blocked_date import BlockedDate
from .trusted_client import TrustedClient
from .appointment import Appointment, AppointmentStatus

__all__ = [
    "Service",
    "WorkingHour",
    "BlockedDate",
    "TrustedClient",
    "Appointment",
    "AppointmentStatus",
]
