# ============================================================================
# app/services/booking/booking_admin_service.py
# Back-office booking operations - no FastAPI dependencies
# ============================================================================
import logging
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import ConflictError, NotFoundError, StoreError, ValidationError
from app.models.booking import Booking, BOOKING_CANCELLED, BOOKING_CONFIRMED
from app.schemas.booking import BookingList, BookingOut
from app.services.availability.availability_filter import conflicts_with
from app.services.availability.availability_service import AvailabilityService
from app.services.booking.audit import record_booking_event
from app.services.booking.booking_service import SLOT_TAKEN_MESSAGE, is_overlap_violation
from app.services.scheduling.civil_time import (
    civil_day_bounds,
    instant_to_civil_date,
    instant_to_civil_time,
    parse_civil_date,
    to_iso_utc,
)

logger = logging.getLogger(__name__)


class BookingAdminService:
    """Service layer for back-office booking operations."""

    @staticmethod
    def serialize(booking: Booking) -> BookingOut:
        return BookingOut(
            id=booking.id,
            status=booking.status,
            created_via=booking.created_via,
            service_id=booking.service_id,
            service_name=booking.service.name if booking.service else None,
            customer_name=booking.customer.name if booking.customer else None,
            customer_phone=booking.customer.phone_e164 if booking.customer else None,
            start_time=booking.start_time_utc,
            end_time=booking.end_time_utc,
            civil_date=instant_to_civil_date(booking.start_time_utc),
            civil_start=instant_to_civil_time(booking.start_time_utc),
            civil_end=instant_to_civil_time(booking.end_time_utc),
            notes=booking.notes,
            cancelled_at=booking.cancelled_at,
        )

    @staticmethod
    def list_bookings(
            db: Session,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            status: Optional[str] = None
    ) -> BookingList:
        """Bookings whose start falls in [start_date, end_date] civil days"""
        query = db.query(Booking).options(
            joinedload(Booking.service),
            joinedload(Booking.customer)
        )

        if start_date:
            query = query.filter(Booking.start_time_utc >= civil_day_bounds(start_date)[0])
        if end_date:
            query = query.filter(Booking.start_time_utc < civil_day_bounds(end_date)[1])
        if status:
            query = query.filter(Booking.status == status)

        bookings = query.order_by(Booking.start_time_utc.asc()).all()

        return BookingList(
            total=len(bookings),
            start_date=start_date,
            end_date=end_date,
            status=status,
            bookings=[BookingAdminService.serialize(b) for b in bookings],
        )

    @staticmethod
    def get_booking(db: Session, booking_id: UUID) -> Booking:
        booking = db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    @staticmethod
    def get_by_manage_token(db: Session, manage_token: str) -> Booking:
        booking = db.query(Booking).filter(Booking.manage_token == manage_token).first()
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    @staticmethod
    def cancel_booking(db: Session, booking_id: UUID, reason: Optional[str] = None) -> Booking:
        """Tombstone a booking. Cancelling twice is a no-op."""
        booking = BookingAdminService.get_booking(db, booking_id)
        if booking.status == BOOKING_CANCELLED:
            return booking

        booking.status = BOOKING_CANCELLED
        booking.cancelled_at = datetime.now(timezone.utc)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Cancelling booking {booking_id} failed: {e}")
            raise StoreError("Could not cancel booking") from e

        record_booking_event(db, booking.id, "booking_cancelled", {
            "start_time": to_iso_utc(booking.start_time_utc),
            "reason": reason,
        })
        logger.info(f"Booking {booking_id} cancelled")
        return booking

    @staticmethod
    def cancel_day(db: Session, day: date) -> List[UUID]:
        """Cancel every confirmed booking starting on a civil day, without committing"""
        day_start, day_end = civil_day_bounds(day)
        bookings = db.query(Booking).filter(
            Booking.status == BOOKING_CONFIRMED,
            Booking.start_time_utc >= day_start,
            Booking.start_time_utc < day_end
        ).all()

        cancelled_at = datetime.now(timezone.utc)
        for booking in bookings:
            booking.status = BOOKING_CANCELLED
            booking.cancelled_at = cancelled_at
        return [b.id for b in bookings]

    @staticmethod
    def reschedule_booking(db: Session, booking_id: UUID, new_start: datetime) -> Booking:
        """
        Move a confirmed booking to a new start on the same row.

        The end follows the service duration. Overlap rules are those of
        booking creation: an application pre-check, then the store constraint.
        Working hours are not enforced here; the back office may book outside them.
        """
        if new_start.tzinfo is None:
            raise ValidationError("Start time must include a timezone offset")
        new_start = new_start.astimezone(timezone.utc)

        booking = BookingAdminService.get_booking(db, booking_id)
        if not booking.is_confirmed:
            raise ValidationError("Only confirmed bookings can be rescheduled")

        new_end = new_start + timedelta(minutes=booking.service.duration_min)
        old_start, old_end = booking.start_time_utc, booking.end_time_utc

        day = parse_civil_date(instant_to_civil_date(new_start))
        busy = AvailabilityService.list_busy_intervals(db, day, exclude_booking_id=booking.id)
        if conflicts_with(new_start, new_end, busy):
            raise ConflictError(SLOT_TAKEN_MESSAGE)

        booking.start_time_utc = new_start
        booking.end_time_utc = new_end
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if is_overlap_violation(e):
                raise ConflictError(SLOT_TAKEN_MESSAGE) from e
            logger.error(f"Rescheduling booking {booking_id} failed: {e}")
            raise StoreError("Could not reschedule booking") from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Rescheduling booking {booking_id} failed: {e}")
            raise StoreError("Could not reschedule booking") from e

        record_booking_event(db, booking.id, "booking_rescheduled", {
            "old_start_time": to_iso_utc(old_start),
            "old_end_time": to_iso_utc(old_end),
            "new_start_time": to_iso_utc(new_start),
            "new_end_time": to_iso_utc(new_end),
        })
        logger.info(f"Booking {booking_id} moved from {to_iso_utc(old_start)} to {to_iso_utc(new_start)}")
        return booking
