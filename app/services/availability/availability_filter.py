# ===== app/services/availability/availability_filter.py =====
"""Booking policies applied to generated candidates"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Sequence

from app.services.scheduling.civil_time import civil_today


@dataclass(frozen=True)
class BusyInterval:
    """A confirmed booking's [start, end) in UTC"""
    start: datetime
    end: datetime


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open interval intersection: touching intervals do not overlap"""
    return a_start < b_end and a_end > b_start


def conflicts_with(start: datetime, end: datetime, busy: Iterable[BusyInterval]) -> bool:
    return any(overlaps(start, end, b.start, b.end) for b in busy)


def apply_lead_time(candidates: Sequence[datetime], now: datetime, lead_minutes: int) -> List[datetime]:
    earliest = now + timedelta(minutes=lead_minutes)
    return [c for c in candidates if c >= earliest]


def filter_candidates(
        day: date,
        candidates: Sequence[datetime],
        duration_minutes: int,
        now: datetime,
        busy: Sequence[BusyInterval],
        lead_minutes: int = 0,
        allow_same_day: bool = False
) -> List[datetime]:
    """
    Apply, in order:
    1. past/same-day policy - past dates and (by default) today return nothing
    2. lead time - drop candidates earlier than now + lead_minutes
    3. overlap - drop candidates intersecting a confirmed booking
    """
    today = civil_today(now)
    if day < today:
        return []
    if day == today and not allow_same_day:
        return []

    remaining = apply_lead_time(candidates, now, lead_minutes)

    duration = timedelta(minutes=duration_minutes)
    available = [
        start for start in remaining
        if not conflicts_with(start, start + duration, busy)
    ]
    return sorted(available)
