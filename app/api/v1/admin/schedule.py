# ============================================================================
# app/api/v1/admin/schedule.py
# Back-office day overrides - thin HTTP layer
# ============================================================================
from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends, Path
from sqlalchemy.orm import Session

from app.api.dependencies import require_admin
from app.config.database import get_db
from app.schemas.availability import CloseDayIn, CustomHoursIn, DaySchedule
from app.services.schedule.schedule_service import ScheduleService

router = APIRouter(prefix="/admin/schedule", dependencies=[Depends(require_admin)])


@router.get("/{day}", response_model=DaySchedule)
def get_day(
        day: date = Path(..., description="Civil date YYYY-MM-DD"),
        db: Session = Depends(get_db)
):
    """Effective hours for a date and where they come from."""
    return ScheduleService.describe_day(db, day)


@router.put("/{day}/hours", response_model=DaySchedule)
def set_custom_hours(
        payload: CustomHoursIn,
        day: date = Path(..., description="Civil date YYYY-MM-DD"),
        db: Session = Depends(get_db)
):
    """Set special opening hours for one date."""
    return ScheduleService.set_custom_hours(db, day, payload.start, payload.end, payload.reason)


@router.post("/{day}/close", response_model=DaySchedule)
def close_day(
        day: date = Path(..., description="Civil date YYYY-MM-DD"),
        payload: Optional[CloseDayIn] = Body(None),
        db: Session = Depends(get_db)
):
    """Mark a free day: cancels that day's bookings and blocks new ones."""
    return ScheduleService.mark_day_closed(db, day, reason=payload.reason if payload else None)


@router.delete("/{day}", response_model=DaySchedule)
def remove_override(
        day: date = Path(..., description="Civil date YYYY-MM-DD"),
        db: Session = Depends(get_db)
):
    """Restore the weekly hours for a date."""
    return ScheduleService.remove_override(db, day)
