# app/services/booking/audit.py
import logging
from typing import Any, Dict
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.booking_log import BookingLog

logger = logging.getLogger(__name__)


def record_booking_event(db: Session, booking_id: UUID, action: str, details: Dict[str, Any]) -> bool:
    """
    Write an audit entry in its own commit.

    Best effort: a failure is logged and rolled back, never raised, so it
    cannot undo the booking change it describes.
    """
    try:
        db.add(BookingLog(booking_id=booking_id, action=action, details=details))
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Audit log '{action}' for booking {booking_id} failed: {e}")
        return False
