# ===== app/services/availability/slot_generator.py =====
from datetime import date, datetime
from typing import List, Optional

from app.services.availability.working_hours import EffectiveHours
from app.services.scheduling.civil_time import (
    civil_to_instant,
    is_existing_civil_time,
    minutes_to_time_string,
    parse_time_to_minutes,
)

DEFAULT_STEP_MINUTES = 15


def generate_candidates(
        day: date,
        hours: Optional[EffectiveHours],
        duration_minutes: int,
        step_minutes: int = DEFAULT_STEP_MINUTES
) -> List[datetime]:
    """
    Candidate start instants for one day, ascending.

    Clock times are walked in civil minutes and converted to instants one by
    one, so DST is resolved once per candidate. A candidate is kept only if
    start + duration still fits before closing time. Wall-clock times skipped
    by a DST jump are dropped.
    """
    if hours is None:
        return []
    if duration_minutes <= 0 or step_minutes <= 0:
        raise ValueError("duration and step must be positive")

    start_min = parse_time_to_minutes(hours.start)
    end_min = parse_time_to_minutes(hours.end)

    candidates = []
    current = start_min
    while current + duration_minutes <= end_min:
        clock = minutes_to_time_string(current)
        if is_existing_civil_time(day, clock):
            candidates.append(civil_to_instant(day, clock))
        current += step_minutes

    return candidates
