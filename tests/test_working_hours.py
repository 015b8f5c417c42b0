from datetime import time

from app.models.availability import DateOverride, WeeklyHoursRule, OVERRIDE_CLOSED, OVERRIDE_CUSTOM_HOURS
from app.services.availability.working_hours import effective_hours_from, resolve_effective_hours

from tests.conftest import MONDAY, SUNDAY


def _rule(is_active=True):
    return WeeklyHoursRule(weekday=0, start_time=time(8, 0), end_time=time(20, 0), is_active=is_active)


def test_weekly_rule_applies_without_override():
    hours = effective_hours_from(None, _rule())
    assert (hours.start, hours.end, hours.source) == ("08:00", "20:00", "weekly")


def test_inactive_or_missing_rule_is_closed():
    assert effective_hours_from(None, _rule(is_active=False)) is None
    assert effective_hours_from(None, None) is None


def test_closed_override_shadows_open_rule():
    override = DateOverride(date=MONDAY, kind=OVERRIDE_CLOSED)
    assert effective_hours_from(override, _rule()) is None


def test_custom_hours_replace_rule():
    override = DateOverride(date=MONDAY, kind=OVERRIDE_CUSTOM_HOURS, start_time=time(10, 0), end_time=time(14, 0))
    hours = effective_hours_from(override, _rule())
    assert (hours.start, hours.end, hours.source) == ("10:00", "14:00", "override")


def test_resolve_from_database(db, monday_hours):
    assert resolve_effective_hours(db, MONDAY).start == "08:00"
    assert resolve_effective_hours(db, SUNDAY) is None

    db.add(DateOverride(date=SUNDAY, kind=OVERRIDE_CUSTOM_HOURS, start_time=time(9, 0), end_time=time(12, 0)))
    db.add(DateOverride(date=MONDAY, kind=OVERRIDE_CLOSED))
    db.commit()

    assert resolve_effective_hours(db, MONDAY) is None
    assert resolve_effective_hours(db, SUNDAY).end == "12:00"
