# ===== app/services/availability/availability_service.py =====
import asyncio
import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.config.settings import get_settings
from app.core.exceptions import NotFoundError, StoreError
from app.models.booking import Booking, BOOKING_CONFIRMED
from app.models.service import Service
from app.services.availability.availability_filter import BusyInterval, filter_candidates
from app.services.availability.slot_generator import generate_candidates
from app.services.availability.working_hours import resolve_effective_hours
from app.services.scheduling.civil_time import civil_day_bounds, civil_today

logger = logging.getLogger(__name__)


@dataclass
class MonthAvailability:
    """Result of the month fan-out; failed dates are reported, not hidden"""
    year: int
    month: int
    available_dates: List[date] = field(default_factory=list)
    failed_dates: List[date] = field(default_factory=list)


class AvailabilityService:
    """Public availability: which start instants can be booked"""

    @staticmethod
    def list_active_services(db: Session) -> List[Service]:
        try:
            return db.query(Service).filter(
                Service.is_active.is_(True)
            ).order_by(Service.display_order.asc(), Service.name.asc()).all()
        except SQLAlchemyError as e:
            logger.error(f"Service list query failed: {e}")
            raise StoreError("Could not load services") from e

    @staticmethod
    def get_active_service(db: Session, service_id: UUID) -> Service:
        service = db.query(Service).filter(
            Service.id == service_id,
            Service.is_active.is_(True)
        ).first()
        if not service:
            raise NotFoundError("Service not found")
        return service

    @staticmethod
    def list_busy_intervals(
            db: Session,
            day: date,
            exclude_booking_id: Optional[UUID] = None
    ) -> List[BusyInterval]:
        """Confirmed bookings intersecting the civil day"""
        day_start, day_end = civil_day_bounds(day)

        query = db.query(Booking.start_time_utc, Booking.end_time_utc).filter(
            Booking.status == BOOKING_CONFIRMED,
            Booking.start_time_utc < day_end,
            Booking.end_time_utc > day_start
        )
        if exclude_booking_id is not None:
            query = query.filter(Booking.id != exclude_booking_id)

        return [BusyInterval(start=start, end=end) for start, end in query.all()]

    @staticmethod
    def compute_day_slots(
            db: Session,
            day: date,
            duration_minutes: int,
            now: Optional[datetime] = None
    ) -> List[datetime]:
        """Generate candidates for the day and run them through every policy"""
        settings = get_settings()
        now = now or datetime.now(timezone.utc)

        # Cheap exits before touching the database
        today = civil_today(now)
        if day < today or (day == today and not settings.ALLOW_SAME_DAY_BOOKINGS):
            logger.debug(f"[Slots] {day}: past or same-day, no slots")
            return []

        hours = resolve_effective_hours(db, day)
        if hours is None:
            logger.debug(f"[Slots] {day}: closed")
            return []

        candidates = generate_candidates(day, hours, duration_minutes, settings.SLOT_STEP_MINUTES)
        busy = AvailabilityService.list_busy_intervals(db, day)

        slots = filter_candidates(
            day,
            candidates,
            duration_minutes,
            now=now,
            busy=busy,
            lead_minutes=settings.BOOKING_LEAD_MINUTES,
            allow_same_day=settings.ALLOW_SAME_DAY_BOOKINGS,
        )
        logger.debug(
            f"[Slots] {day}: hours={hours.start}-{hours.end} ({hours.source}), "
            f"candidates={len(candidates)}, busy={len(busy)}, available={len(slots)}"
        )
        return slots

    @staticmethod
    def get_available_slots(
            db: Session,
            service_id: UUID,
            day: date,
            now: Optional[datetime] = None
    ) -> List[datetime]:
        """Ordered bookable start instants for a service on a civil date"""
        try:
            service = AvailabilityService.get_active_service(db, service_id)
            return AvailabilityService.compute_day_slots(db, day, service.duration_min, now)
        except SQLAlchemyError as e:
            logger.error(f"Availability query failed for {day}: {e}")
            raise StoreError("Could not load availability") from e

    @staticmethod
    def bookable_window(now: Optional[datetime] = None) -> tuple:
        """First and last civil dates offered by the date picker"""
        settings = get_settings()
        today = civil_today(now)
        first = today if settings.ALLOW_SAME_DAY_BOOKINGS else today + timedelta(days=1)
        return first, today + timedelta(days=settings.BOOKING_HORIZON_DAYS)

    @staticmethod
    def _require_service(session_factory: sessionmaker, service_id: UUID) -> None:
        db = session_factory()
        try:
            AvailabilityService.get_active_service(db, service_id)
        except SQLAlchemyError as e:
            logger.error(f"[DatePicker] Service lookup failed: {e}")
            raise StoreError("Could not load service") from e
        finally:
            db.close()

    @staticmethod
    def _day_has_slots(
            session_factory: sessionmaker,
            service_id: UUID,
            day: date,
            now: Optional[datetime]
    ) -> bool:
        # Runs in a worker thread: one session per day, nothing shared
        db = session_factory()
        try:
            return bool(AvailabilityService.get_available_slots(db, service_id, day, now))
        finally:
            db.close()

    @staticmethod
    async def get_available_dates(
            session_factory: sessionmaker,
            service_id: UUID,
            year: int,
            month: int,
            now: Optional[datetime] = None
    ) -> MonthAvailability:
        """
        Dates of a month that have at least one free slot.

        Each date is an independent task; results are joined before returning.
        Dates that fail are listed in failed_dates while the others are still
        returned. If every date fails, the first error is raised.
        """
        now = now or datetime.now(timezone.utc)
        result = MonthAvailability(year=year, month=month)

        # Unknown service is a request error, not a per-date failure
        await asyncio.to_thread(AvailabilityService._require_service, session_factory, service_id)

        first, last = AvailabilityService.bookable_window(now)
        days_in_month = calendar.monthrange(year, month)[1]
        days = [
            d for d in (date(year, month, n) for n in range(1, days_in_month + 1))
            if first <= d <= last
        ]
        if not days:
            return result

        outcomes = await asyncio.gather(
            *(
                asyncio.to_thread(AvailabilityService._day_has_slots, session_factory, service_id, d, now)
                for d in days
            ),
            return_exceptions=True,
        )

        errors = []
        for day, outcome in zip(days, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"[DatePicker] Error checking {day}: {outcome}")
                result.failed_dates.append(day)
                errors.append(outcome)
            elif outcome:
                result.available_dates.append(day)

        if errors and len(errors) == len(days):
            raise errors[0]

        logger.info(
            f"[DatePicker] {year}-{month:02d}: {len(result.available_dates)} available, "
            f"{len(result.failed_dates)} failed"
        )
        return result
