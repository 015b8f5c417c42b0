import asyncio
import uuid
from datetime import date, time, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import NotFoundError, StoreError
from app.models.availability import DateOverride, OVERRIDE_CLOSED, OVERRIDE_CUSTOM_HOURS
from app.models.booking import Booking, BOOKING_CANCELLED
from app.models.customer import Customer
from app.services.availability.availability_service import AvailabilityService

from tests.conftest import FIXED_NOW, MONDAY, SUNDAY, at


def _book(db, service, day, clock, status="confirmed"):
    customer = Customer(name="Ona", phone_e164=f"+3706{uuid.uuid4().int % 10**7:07d}")
    db.add(customer)
    db.flush()
    start = at(day, clock)
    booking = Booking(
        service_id=service.id,
        customer_id=customer.id,
        start_time_utc=start,
        end_time_utc=start + timedelta(minutes=service.duration_min),
        status=status,
    )
    db.add(booking)
    db.commit()
    return booking


def test_open_monday(db, service, monday_hours):
    slots = AvailabilityService.get_available_slots(db, service.id, MONDAY, now=FIXED_NOW)

    assert len(slots) == 46
    assert slots[0] == at(MONDAY, "08:00")


def test_closed_override_on_open_weekday(db, service, monday_hours):
    db.add(DateOverride(date=MONDAY, kind=OVERRIDE_CLOSED, reason="Holiday"))
    db.commit()

    assert AvailabilityService.get_available_slots(db, service.id, MONDAY, now=FIXED_NOW) == []


def test_custom_hours_override(db, service, monday_hours):
    db.add(DateOverride(date=MONDAY, kind=OVERRIDE_CUSTOM_HOURS, start_time=time(10, 0), end_time=time(12, 0)))
    db.commit()

    slots = AvailabilityService.get_available_slots(db, service.id, MONDAY, now=FIXED_NOW)

    assert slots[0] == at(MONDAY, "10:00")
    assert slots[-1] == at(MONDAY, "11:15")
    assert len(slots) == 6


def test_day_without_rule_is_closed(db, service, monday_hours):
    assert AvailabilityService.get_available_slots(db, service.id, SUNDAY, now=FIXED_NOW) == []


def test_confirmed_bookings_block_cancelled_do_not(db, service, monday_hours):
    _book(db, service, MONDAY, "10:00")
    _book(db, service, MONDAY, "14:00", status=BOOKING_CANCELLED)

    slots = AvailabilityService.get_available_slots(db, service.id, MONDAY, now=FIXED_NOW)

    assert at(MONDAY, "10:00") not in slots
    assert at(MONDAY, "10:30") not in slots
    assert at(MONDAY, "10:45") in slots
    assert at(MONDAY, "14:00") in slots


def test_booking_from_previous_evening_reaches_into_day(db, service, monday_hours):
    db.add(DateOverride(date=MONDAY, kind=OVERRIDE_CUSTOM_HOURS, start_time=time(0, 0), end_time=time(2, 0)))
    db.commit()
    # Sunday 23:40 to Monday 00:20
    _book(db, service, SUNDAY, "23:40")

    slots = AvailabilityService.get_available_slots(db, service.id, MONDAY, now=FIXED_NOW)

    assert at(MONDAY, "00:00") not in slots
    assert at(MONDAY, "00:15") not in slots
    assert slots[0] == at(MONDAY, "00:30")


def test_same_request_twice_gives_same_answer(db, service, monday_hours):
    _book(db, service, MONDAY, "12:00")

    first = AvailabilityService.get_available_slots(db, service.id, MONDAY, now=FIXED_NOW)
    second = AvailabilityService.get_available_slots(db, service.id, MONDAY, now=FIXED_NOW)

    assert first == second


def test_past_and_today_are_empty(db, service, monday_hours):
    today = FIXED_NOW.date()
    assert AvailabilityService.get_available_slots(db, service.id, today, now=FIXED_NOW) == []
    assert AvailabilityService.get_available_slots(db, service.id, today - timedelta(days=4), now=FIXED_NOW) == []


def test_unknown_or_inactive_service(db, service, monday_hours):
    with pytest.raises(NotFoundError):
        AvailabilityService.get_available_slots(db, uuid.uuid4(), MONDAY, now=FIXED_NOW)

    service.is_active = False
    db.commit()
    with pytest.raises(NotFoundError):
        AvailabilityService.get_available_slots(db, service.id, MONDAY, now=FIXED_NOW)


def test_store_failure_is_reported(db, service, monday_hours, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr("app.services.availability.availability_service.resolve_effective_hours", broken)

    with pytest.raises(StoreError):
        AvailabilityService.get_available_slots(db, service.id, MONDAY, now=FIXED_NOW)


def test_active_services_in_display_order(db, service):
    from app.models.service import Service

    db.add(Service(name="Massage", duration_min=60, display_order=-1, is_active=True))
    db.add(Service(name="Retired", duration_min=30, is_active=False))
    db.commit()

    names = [s.name for s in AvailabilityService.list_active_services(db)]
    assert names == ["Massage", "Consultation"]


def test_services_list_store_failure(db, service, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(db, "query", broken)

    with pytest.raises(StoreError):
        AvailabilityService.list_active_services(db)


# ------------------ month view ------------------
def test_month_lists_open_mondays(session_factory, service, monday_hours):
    result = asyncio.run(
        AvailabilityService.get_available_dates(session_factory, service.id, 2030, 6, now=FIXED_NOW)
    )

    assert result.available_dates == [date(2030, 6, 3), date(2030, 6, 10), date(2030, 6, 17), date(2030, 6, 24)]
    assert result.failed_dates == []


def test_month_outside_horizon_is_empty(session_factory, service, monday_hours):
    result = asyncio.run(
        AvailabilityService.get_available_dates(session_factory, service.id, 2030, 9, now=FIXED_NOW)
    )
    assert result.available_dates == []


def test_month_reports_failed_dates_and_keeps_the_rest(session_factory, service, monday_hours, monkeypatch):
    original = AvailabilityService.compute_day_slots

    def flaky(db, day, duration_minutes, now=None):
        if day == date(2030, 6, 10):
            raise OperationalError("SELECT", {}, Exception("timeout"))
        return original(db, day, duration_minutes, now)

    monkeypatch.setattr(AvailabilityService, "compute_day_slots", staticmethod(flaky))

    result = asyncio.run(
        AvailabilityService.get_available_dates(session_factory, service.id, 2030, 6, now=FIXED_NOW)
    )

    assert result.failed_dates == [date(2030, 6, 10)]
    assert result.available_dates == [date(2030, 6, 3), date(2030, 6, 17), date(2030, 6, 24)]


def test_month_raises_when_every_date_fails(session_factory, service, monday_hours, monkeypatch):
    def broken(db, day, duration_minutes, now=None):
        raise OperationalError("SELECT", {}, Exception("down"))

    monkeypatch.setattr(AvailabilityService, "compute_day_slots", staticmethod(broken))

    with pytest.raises(StoreError):
        asyncio.run(
            AvailabilityService.get_available_dates(session_factory, service.id, 2030, 6, now=FIXED_NOW)
        )


def test_month_unknown_service(session_factory, service):
    with pytest.raises(NotFoundError):
        asyncio.run(AvailabilityService.get_available_dates(session_factory, uuid.uuid4(), 2030, 6, now=FIXED_NOW))


def test_month_service_lookup_failure_is_store_error(session_factory, service, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(AvailabilityService, "get_active_service", staticmethod(broken))

    with pytest.raises(StoreError):
        asyncio.run(AvailabilityService.get_available_dates(session_factory, service.id, 2030, 6, now=FIXED_NOW))
