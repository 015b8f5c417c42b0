# app/models/__init__.py
from .base import Base
from .service import Service
from .availability import WeeklyHoursRule, DateOverride
from .customer import Customer
from .booking import Booking
from .booking_log import BookingLog

__all__ = [
    "Base",
    "Service",
    "WeeklyHoursRule",
    "DateOverride",
    "Customer",
    "Booking",
    "BookingLog",
]
