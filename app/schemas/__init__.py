# app/schemas/__init__.py
from .availability import (
    ServiceOut,
    DaySlots,
    MonthDates,
    CustomHoursIn,
    CloseDayIn,
    DaySchedule
)

from .booking import (
    BookingCreate,
    BookingConfirmation,
    BookingReschedule,
    BookingCancel,
    BookingOut,
    BookingList
)
