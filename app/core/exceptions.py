# app/core/exceptions.py
"""Domain errors raised by the booking engine and mapped to HTTP in app.main"""
from typing import Any, Dict, Optional


class BookingError(Exception):
    """Base class for booking engine errors"""

    status_code = 500
    code = "booking_error"
    public_message: Optional[str] = None  # shown instead of the internal message

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detail": self.public_message or self.message,
            "code": self.code,
        }


class ValidationError(BookingError):
    """Malformed input, rejected before any store access"""
    status_code = 422
    code = "validation_error"


class NotFoundError(BookingError):
    """Unknown or inactive service, unknown booking"""
    status_code = 404
    code = "not_found"


class ConflictError(BookingError):
    """Requested interval is taken; retry with a fresh slot"""
    status_code = 409
    code = "slot_conflict"
    public_message = "Sorry, this time was just booked. Please pick another time."


class WriteVerificationError(BookingError):
    """Insert reported success but the confirmed row is not visible"""
    status_code = 503
    code = "write_not_verified"
    public_message = "We could not confirm your booking. Please try again."


class StoreError(BookingError):
    """Any other failure talking to the database"""
    status_code = 503
    code = "store_error"
    public_message = "Something went wrong. Please try again."
