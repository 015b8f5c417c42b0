# ===== app/services/availability/working_hours.py =====
"""Effective opening hours for a calendar date"""
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from app.models.availability import WeeklyHoursRule, DateOverride, OVERRIDE_CLOSED
from app.services.scheduling.civil_time import weekday_index


@dataclass(frozen=True)
class EffectiveHours:
    """Open/close window in civil 'HH:MM' time"""
    start: str
    end: str
    source: str  # "override" or "weekly"


def _hhmm(value) -> str:
    return value.strftime("%H:%M")


def effective_hours_from(
        override: Optional[DateOverride],
        rule: Optional[WeeklyHoursRule]
) -> Optional[EffectiveHours]:
    """
    Decide the window for a date. None means closed.

    An override fully shadows the weekly rule, whatever that rule says;
    the two are never merged.
    """
    if override is not None:
        if override.kind == OVERRIDE_CLOSED:
            return None
        return EffectiveHours(
            start=_hhmm(override.start_time),
            end=_hhmm(override.end_time),
            source="override",
        )

    if rule is None or not rule.is_active:
        return None

    return EffectiveHours(start=_hhmm(rule.start_time), end=_hhmm(rule.end_time), source="weekly")


def get_override(db: Session, day: date) -> Optional[DateOverride]:
    return db.query(DateOverride).filter(DateOverride.date == day).first()


def get_weekly_rule(db: Session, day: date) -> Optional[WeeklyHoursRule]:
    return db.query(WeeklyHoursRule).filter(
        WeeklyHoursRule.weekday == weekday_index(day),
        WeeklyHoursRule.is_active.is_(True)
    ).first()


def resolve_effective_hours(db: Session, day: date) -> Optional[EffectiveHours]:
    """Override for the date if any, else the active weekly rule, else closed"""
    override = get_override(db, day)
    if override is not None:
        return effective_hours_from(override, None)
    return effective_hours_from(None, get_weekly_rule(db, day))
