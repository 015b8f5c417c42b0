import uuid
from datetime import datetime, timedelta

import pytest

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.booking import Booking, BOOKING_CANCELLED, BOOKING_CONFIRMED
from app.models.booking_log import BookingLog
from app.schemas.booking import BookingCreate
from app.services.availability.availability_service import AvailabilityService
from app.services.booking.booking_admin_service import BookingAdminService
from app.services.booking.booking_service import BookingService
from app.services.schedule.schedule_service import ScheduleService

from tests.conftest import FIXED_NOW, MONDAY, SUNDAY, at


def _create(db, service, clock, phone="+37061234567", day=MONDAY):
    payload = BookingCreate(service_id=service.id, start_time=at(day, clock), name="Ona", phone=phone)
    return BookingService.create_booking(db, payload, now=FIXED_NOW)


def _actions(db, booking_id):
    return [log.action for log in db.query(BookingLog).filter(BookingLog.booking_id == booking_id).all()]


# ------------------ bookings ------------------
def test_cancel_frees_the_slot(db, service, monday_hours):
    confirmation = _create(db, service, "10:00")

    booking = BookingAdminService.cancel_booking(db, confirmation.booking_id, reason="Customer called")

    assert booking.status == BOOKING_CANCELLED
    assert booking.cancelled_at is not None
    assert "booking_cancelled" in _actions(db, booking.id)
    slots = AvailabilityService.get_available_slots(db, service.id, MONDAY, now=FIXED_NOW)
    assert at(MONDAY, "10:00") in slots


def test_cancel_twice_is_noop(db, service, monday_hours):
    confirmation = _create(db, service, "10:00")

    first = BookingAdminService.cancel_booking(db, confirmation.booking_id)
    cancelled_at = first.cancelled_at
    second = BookingAdminService.cancel_booking(db, confirmation.booking_id)

    assert second.cancelled_at == cancelled_at
    assert _actions(db, confirmation.booking_id).count("booking_cancelled") == 1


def test_cancel_unknown_booking(db):
    with pytest.raises(NotFoundError):
        BookingAdminService.cancel_booking(db, uuid.uuid4())


def test_reschedule_moves_same_row(db, service, monday_hours):
    confirmation = _create(db, service, "10:00")

    booking = BookingAdminService.reschedule_booking(db, confirmation.booking_id, at(MONDAY, "12:00"))

    assert booking.id == confirmation.booking_id
    assert booking.start_time_utc == at(MONDAY, "12:00")
    assert booking.end_time_utc == at(MONDAY, "12:40")
    assert db.query(Booking).count() == 1
    assert "booking_rescheduled" in _actions(db, booking.id)


def test_reschedule_into_own_interval(db, service, monday_hours):
    confirmation = _create(db, service, "10:00")

    booking = BookingAdminService.reschedule_booking(db, confirmation.booking_id, at(MONDAY, "10:20"))

    assert booking.end_time_utc == at(MONDAY, "11:00")


def test_reschedule_onto_other_booking_conflicts(db, service, monday_hours):
    _create(db, service, "10:00")
    second = _create(db, service, "12:00", phone="+37061234568")

    with pytest.raises(ConflictError):
        BookingAdminService.reschedule_booking(db, second.booking_id, at(MONDAY, "10:20"))

    db.expire_all()
    booking = BookingAdminService.get_booking(db, second.booking_id)
    assert booking.start_time_utc == at(MONDAY, "12:00")


def test_reschedule_conflict_caught_by_store(db, service, monday_hours, monkeypatch):
    _create(db, service, "10:00")
    second = _create(db, service, "12:00", phone="+37061234568")
    monkeypatch.setattr(AvailabilityService, "list_busy_intervals", staticmethod(lambda *args, **kwargs: []))

    with pytest.raises(ConflictError):
        BookingAdminService.reschedule_booking(db, second.booking_id, at(MONDAY, "10:20"))


def test_reschedule_requires_confirmed_and_aware(db, service, monday_hours):
    confirmation = _create(db, service, "10:00")

    with pytest.raises(ValidationError):
        BookingAdminService.reschedule_booking(db, confirmation.booking_id, datetime(2030, 6, 3, 12, 0))

    BookingAdminService.cancel_booking(db, confirmation.booking_id)
    assert not BookingAdminService.get_booking(db, confirmation.booking_id).is_confirmed
    with pytest.raises(ValidationError):
        BookingAdminService.reschedule_booking(db, confirmation.booking_id, at(MONDAY, "12:00"))


def test_list_bookings_by_civil_range_and_status(db, service, monday_hours):
    first = _create(db, service, "10:00")
    second = _create(db, service, "12:00")
    BookingAdminService.cancel_booking(db, second.booking_id)

    everything = BookingAdminService.list_bookings(db, start_date=MONDAY, end_date=MONDAY)
    assert everything.total == 2
    assert [b.civil_start for b in everything.bookings] == ["10:00", "12:00"]

    confirmed = BookingAdminService.list_bookings(db, start_date=MONDAY, end_date=MONDAY, status=BOOKING_CONFIRMED)
    assert [b.id for b in confirmed.bookings] == [first.booking_id]

    assert BookingAdminService.list_bookings(db, start_date=MONDAY + timedelta(days=1)).total == 0


# ------------------ schedule ------------------
def test_close_day_cancels_bookings_and_blocks_slots(db, service, monday_hours):
    confirmation = _create(db, service, "10:00")

    schedule = ScheduleService.mark_day_closed(db, MONDAY, reason="Vacation")

    assert schedule.closed is True
    assert schedule.override_kind == "closed"
    assert schedule.cancelled_bookings == [confirmation.booking_id]
    assert BookingAdminService.get_booking(db, confirmation.booking_id).status == BOOKING_CANCELLED
    assert AvailabilityService.get_available_slots(db, service.id, MONDAY, now=FIXED_NOW) == []
    assert "booking_cancelled" in _actions(db, confirmation.booking_id)


def test_remove_override_restores_weekly_hours(db, service, monday_hours):
    ScheduleService.mark_day_closed(db, MONDAY)

    schedule = ScheduleService.remove_override(db, MONDAY)

    assert schedule.closed is False
    assert schedule.source == "weekly"
    assert len(AvailabilityService.get_available_slots(db, service.id, MONDAY, now=FIXED_NOW)) == 46

    with pytest.raises(NotFoundError):
        ScheduleService.remove_override(db, MONDAY)


def test_custom_hours_open_a_closed_weekday(db, service, monday_hours):
    schedule = ScheduleService.set_custom_hours(db, SUNDAY, "10:00", "12:00", reason="Open Sunday")

    assert schedule.source == "override"
    assert (schedule.start, schedule.end) == ("10:00", "12:00")
    assert len(AvailabilityService.get_available_slots(db, service.id, SUNDAY, now=FIXED_NOW)) == 6


def test_custom_hours_replace_closed_override(db, service, monday_hours):
    ScheduleService.mark_day_closed(db, MONDAY)

    schedule = ScheduleService.set_custom_hours(db, MONDAY, "14:00", "16:00")

    assert schedule.closed is False
    assert schedule.override_kind == "custom_hours"


def test_custom_hours_must_be_ordered(db):
    with pytest.raises(ValidationError):
        ScheduleService.set_custom_hours(db, MONDAY, "12:00", "10:00")


def test_describe_plain_day(db, monday_hours):
    assert ScheduleService.describe_day(db, SUNDAY).source == "none"
    assert ScheduleService.describe_day(db, MONDAY).start == "08:00"
