# ============================================================================
# app/services/scheduling/civil_time.py
# Conversions between the business's civil time and absolute instants
# ============================================================================
"""
All calendar logic runs in one fixed zone (BUSINESS_TIMEZONE), whatever the
caller's locale. Instants are always timezone-aware UTC datetimes.

Weekday convention: Monday = 0 ... Sunday = 6, everywhere in the engine.
"""
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo

from app.config.settings import get_settings

DateLike = Union[date, str]
TimeLike = Union[time, str]


@lru_cache()
def business_tz() -> ZoneInfo:
    return ZoneInfo(get_settings().BUSINESS_TIMEZONE)


def parse_civil_date(value: DateLike) -> date:
    """'YYYY-MM-DD' -> date. Dates pass through unchanged."""
    if isinstance(value, datetime):
        raise TypeError("expected a calendar date, got a datetime")
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def parse_time_to_minutes(value: TimeLike) -> int:
    """'HH:MM' or 'HH:MM:SS' (or a time) -> minutes since midnight"""
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    parts = value.split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid clock time: {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"Invalid clock time: {value!r}")
    return hours * 60 + minutes


def minutes_to_time_string(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _wall_clock(day: DateLike, clock: TimeLike, fold: int = 0) -> datetime:
    minutes = parse_time_to_minutes(clock)
    return datetime.combine(
        parse_civil_date(day),
        time(minutes // 60, minutes % 60),
        tzinfo=business_tz(),
    ).replace(fold=fold)


def civil_to_instant(day: DateLike, clock: TimeLike) -> datetime:
    """
    Interpret date + clock time as wall-clock time in the business zone.

    Ambiguous times (the repeated hour when clocks go back) resolve to the
    earlier instant. Nonexistent times (skipped hour when clocks go forward)
    map forward by the gap; use is_existing_civil_time() to detect them.
    """
    return _wall_clock(day, clock).astimezone(timezone.utc)


def is_existing_civil_time(day: DateLike, clock: TimeLike) -> bool:
    """False for wall-clock times skipped by a DST transition"""
    local = _wall_clock(day, clock)
    round_trip = local.astimezone(timezone.utc).astimezone(business_tz())
    return round_trip.replace(tzinfo=None) == local.replace(tzinfo=None)


def _to_local(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        raise ValueError("instant must be timezone-aware")
    return instant.astimezone(business_tz())


def instant_to_civil_date(instant: datetime) -> str:
    return _to_local(instant).strftime("%Y-%m-%d")


def instant_to_civil_time(instant: datetime) -> str:
    return _to_local(instant).strftime("%H:%M")


def weekday_index(value: Union[date, datetime]) -> int:
    """Monday = 0. Instants are projected into the business zone first."""
    if isinstance(value, datetime):
        return _to_local(value).weekday()
    return value.weekday()


def civil_today(now: Optional[datetime] = None) -> date:
    now = now or datetime.now(timezone.utc)
    return _to_local(now).date()


def civil_day_bounds(day: DateLike) -> Tuple[datetime, datetime]:
    """[start, end) instants of a civil day; not always 24h long"""
    day = parse_civil_date(day)
    start = civil_to_instant(day, "00:00")
    end = civil_to_instant(day + timedelta(days=1), "00:00")
    return start, end


def to_iso_utc(instant: datetime) -> str:
    """Canonical text form of an instant: 2026-10-20T05:00:00.000Z"""
    utc = instant.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
