# ============================================================================
# app/services/schedule/schedule_service.py
# Day-level schedule changes made from the back-office calendar
# ============================================================================
import logging
from datetime import date, time
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, StoreError, ValidationError
from app.models.availability import DateOverride, OVERRIDE_CLOSED, OVERRIDE_CUSTOM_HOURS
from app.schemas.availability import DaySchedule
from app.services.availability.working_hours import effective_hours_from, get_override, get_weekly_rule
from app.services.booking.audit import record_booking_event
from app.services.booking.booking_admin_service import BookingAdminService
from app.services.scheduling.civil_time import parse_time_to_minutes

logger = logging.getLogger(__name__)


def _to_time(clock: str) -> time:
    minutes = parse_time_to_minutes(clock)
    return time(minutes // 60, minutes % 60)


class ScheduleService:
    """Overrides on top of the weekly hours"""

    @staticmethod
    def describe_day(db: Session, day: date, cancelled: Optional[List[UUID]] = None) -> DaySchedule:
        override = get_override(db, day)
        rule = None if override is not None else get_weekly_rule(db, day)
        hours = effective_hours_from(override, rule)

        if hours is not None:
            source = hours.source
        else:
            source = "override" if override is not None else "none"

        return DaySchedule(
            date=day,
            closed=hours is None,
            start=hours.start if hours else None,
            end=hours.end if hours else None,
            source=source,
            override_kind=override.kind if override is not None else None,
            reason=override.reason if override is not None else None,
            cancelled_bookings=cancelled or [],
        )

    @staticmethod
    def _upsert_override(db: Session, day: date) -> DateOverride:
        override = get_override(db, day)
        if override is None:
            override = DateOverride(date=day)
            db.add(override)
        return override

    @staticmethod
    def set_custom_hours(db: Session, day: date, start: str, end: str, reason: Optional[str] = None) -> DaySchedule:
        """Replace the weekly hours for one date. Existing bookings are left as they are."""
        start_time, end_time = _to_time(start), _to_time(end)
        if start_time >= end_time:
            raise ValidationError("Opening time must be before closing time")

        override = ScheduleService._upsert_override(db, day)
        override.kind = OVERRIDE_CUSTOM_HOURS
        override.start_time = start_time
        override.end_time = end_time
        override.reason = reason

        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Saving custom hours for {day} failed: {e}")
            raise StoreError("Could not save working hours") from e

        logger.info(f"Custom hours for {day}: {start}-{end}")
        return ScheduleService.describe_day(db, day)

    @staticmethod
    def mark_day_closed(db: Session, day: date, reason: Optional[str] = None) -> DaySchedule:
        """
        Free day: cancel the date's confirmed bookings and close the date.

        Both changes are committed together so a half-closed day cannot remain.
        """
        cancelled = BookingAdminService.cancel_day(db, day)

        override = ScheduleService._upsert_override(db, day)
        override.kind = OVERRIDE_CLOSED
        override.start_time = None
        override.end_time = None
        override.reason = reason

        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Closing {day} failed: {e}")
            raise StoreError("Could not close the day") from e

        for booking_id in cancelled:
            record_booking_event(db, booking_id, "booking_cancelled", {"reason": reason or "day closed", "date": day.isoformat()})

        logger.info(f"{day} marked as closed, {len(cancelled)} booking(s) cancelled")
        return ScheduleService.describe_day(db, day, cancelled)

    @staticmethod
    def remove_override(db: Session, day: date) -> DaySchedule:
        """Drop the override so the weekly default applies again"""
        override = get_override(db, day)
        if override is None:
            raise NotFoundError("No override for this date")

        db.delete(override)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Removing override for {day} failed: {e}")
            raise StoreError("Could not restore the day") from e

        logger.info(f"Override for {day} removed")
        return ScheduleService.describe_day(db, day)
