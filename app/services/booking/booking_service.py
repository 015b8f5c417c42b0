# ============================================================================
# app/services/booking/booking_service.py
# Booking creation - the write path of the reservation wizard
# ============================================================================
"""Service for creating bookings"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import ConflictError, StoreError, ValidationError, WriteVerificationError
from app.models.booking import Booking, BOOKING_CONFIRMED, NO_OVERLAP_CONSTRAINT
from app.models.customer import Customer
from app.models.service import Service
from app.schemas.booking import BookingCreate, BookingConfirmation
from app.services.availability.availability_filter import conflicts_with
from app.services.availability.availability_service import AvailabilityService
from app.services.availability.slot_generator import generate_candidates
from app.services.availability.working_hours import resolve_effective_hours
from app.services.booking.audit import record_booking_event
from app.services.booking.phone import InvalidPhoneNumber, normalize_phone
from app.services.scheduling.civil_time import civil_today, instant_to_civil_date, parse_civil_date, to_iso_utc

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "Sorry, this time was just booked. Please pick another time."


def is_overlap_violation(error: IntegrityError) -> bool:
    """True when the store rejected a write because confirmed bookings would overlap"""
    orig = getattr(error, "orig", None)
    diag = getattr(orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None) if diag is not None else None
    if constraint_name:
        return constraint_name == NO_OVERLAP_CONSTRAINT
    return NO_OVERLAP_CONSTRAINT in str(orig if orig is not None else error)


class BookingService:
    """Handles booking creation"""

    @staticmethod
    def validate_input(payload: BookingCreate) -> dict:
        """Shape and bounds checks. Never touches the database."""
        settings = get_settings()

        if payload.honeypot:
            raise ValidationError("Invalid request")

        name = (payload.name or "").strip()
        if len(name) < settings.NAME_MIN_LENGTH:
            raise ValidationError("Please enter your name")
        if len(name) > settings.NAME_MAX_LENGTH:
            raise ValidationError(f"Name must be at most {settings.NAME_MAX_LENGTH} characters")

        try:
            phone_e164 = normalize_phone(payload.phone)
        except InvalidPhoneNumber as e:
            raise ValidationError("Please enter a valid phone number") from e

        note = (payload.note or "").strip() or None
        if note and len(note) > settings.NOTE_MAX_LENGTH:
            raise ValidationError(f"Note must be at most {settings.NOTE_MAX_LENGTH} characters")

        if payload.start_time.tzinfo is None:
            raise ValidationError("Start time must include a timezone offset")

        return {
            "name": name,
            "phone_e164": phone_e164,
            "note": note,
            "start": payload.start_time.astimezone(timezone.utc),
        }

    @staticmethod
    def ensure_bookable_start(db: Session, service: Service, start: datetime, now: datetime) -> None:
        """The start instant must be one of the generated slots for its civil date, ignoring bookings"""
        settings = get_settings()
        day = parse_civil_date(instant_to_civil_date(start))

        today = civil_today(now)
        if day < today:
            raise ValidationError("This time is in the past")
        if day == today and not settings.ALLOW_SAME_DAY_BOOKINGS:
            raise ValidationError("Same-day bookings are not available")
        if start < now + timedelta(minutes=settings.BOOKING_LEAD_MINUTES):
            raise ValidationError("This time is too soon to book")

        hours = resolve_effective_hours(db, day)
        candidates = generate_candidates(day, hours, service.duration_min, settings.SLOT_STEP_MINUTES)
        if start not in candidates:
            raise ValidationError("This time is not bookable")

    @staticmethod
    def _get_or_create_customer(db: Session, name: str, phone_e164: str) -> Customer:
        customer = db.query(Customer).filter(Customer.phone_e164 == phone_e164).first()
        if customer:
            return customer

        customer = Customer(name=name, phone_e164=phone_e164)
        db.add(customer)
        try:
            db.flush()
        except IntegrityError:
            # Another request created the same customer first
            db.rollback()
            customer = db.query(Customer).filter(Customer.phone_e164 == phone_e164).first()
            if customer is None:
                raise
        return customer

    @staticmethod
    def _fetch_confirmed(db: Session, booking_id: UUID) -> Optional[Booking]:
        return db.query(Booking).filter(
            Booking.id == booking_id,
            Booking.status == BOOKING_CONFIRMED
        ).first()

    @staticmethod
    def create_booking(
            db: Session,
            payload: BookingCreate,
            now: Optional[datetime] = None
    ) -> BookingConfirmation:
        """
        Turn a chosen slot into a confirmed booking.

        Raises:
            ValidationError: bad input or a start time that is not a slot
            NotFoundError: unknown or inactive service
            ConflictError: slot overlaps a confirmed booking (pre-check or store constraint)
            WriteVerificationError: insert succeeded but the confirmed row is not visible
            StoreError: any other database failure
        """
        now = now or datetime.now(timezone.utc)
        data = BookingService.validate_input(payload)
        start = data["start"]

        try:
            service = AvailabilityService.get_active_service(db, payload.service_id)
            end = start + timedelta(minutes=service.duration_min)

            BookingService.ensure_bookable_start(db, service, start, now)

            # Optimistic pre-check; the store constraint below is the real guard
            day = parse_civil_date(instant_to_civil_date(start))
            busy = AvailabilityService.list_busy_intervals(db, day)
            if conflicts_with(start, end, busy):
                logger.info(f"Pre-check conflict for {to_iso_utc(start)}")
                raise ConflictError(SLOT_TAKEN_MESSAGE)

            customer = BookingService._get_or_create_customer(db, data["name"], data["phone_e164"])

            booking = Booking(
                service_id=service.id,
                customer_id=customer.id,
                start_time_utc=start,
                end_time_utc=end,
                status=BOOKING_CONFIRMED,
                created_via="web",
                notes=data["note"],
            )
            db.add(booking)
            db.flush()
            booking_id = booking.id
            manage_token = booking.manage_token
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if is_overlap_violation(e):
                logger.info(f"Store rejected overlapping booking at {to_iso_utc(start)}")
                raise ConflictError(SLOT_TAKEN_MESSAGE) from e
            logger.error(f"Booking insert failed: {e}")
            raise StoreError("Could not create booking") from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Booking insert failed: {e}")
            raise StoreError("Could not create booking") from e

        # Re-read so a row hidden from this session is treated as a failure
        db.expire_all()
        try:
            verified = BookingService._fetch_confirmed(db, booking_id)
        except SQLAlchemyError as e:
            logger.error(f"Booking verification query failed for ID {booking_id}: {e}")
            raise WriteVerificationError("Booking could not be verified") from e
        if verified is None:
            logger.error(f"Booking verification failed for ID: {booking_id}")
            raise WriteVerificationError("Booking could not be verified")

        record_booking_event(db, booking_id, "booking_created", {
            "service": service.name,
            "customer_phone": data["phone_e164"],
            "start_time": to_iso_utc(start),
            "source": "web",
        })

        logger.info(f"Booking {booking_id} created for {to_iso_utc(start)}")
        return BookingConfirmation(
            booking_id=booking_id,
            manage_token=manage_token,
            service=service.name,
            customer_name=data["name"],
            customer_phone=data["phone_e164"],
            start_time=start,
            end_time=end,
        )
