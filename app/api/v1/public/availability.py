# ============================================================================
# app/api/v1/public/availability.py
# Public read endpoints for the reservation wizard - thin HTTP layer
# ============================================================================
from datetime import date
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, sessionmaker

from app.config.database import get_db, get_session_factory
from app.config.settings import settings
from app.schemas.availability import DaySlots, MonthDates, ServiceOut
from app.services.availability.availability_service import AvailabilityService
from app.services.scheduling.civil_time import to_iso_utc

router = APIRouter()


@router.get("/services", response_model=List[ServiceOut])
async def list_services(db: Session = Depends(get_db)):
    """Active services in display order."""
    return [ServiceOut(**s.to_dict()) for s in AvailabilityService.list_active_services(db)]


@router.get("/availability", response_model=DaySlots)
def get_day_availability(
        service_id: UUID = Query(..., description="Service to book"),
        day: date = Query(..., alias="date", description="Civil date YYYY-MM-DD in the business timezone"),
        db: Session = Depends(get_db)
):
    """
    Bookable start instants for one service on one date.
    An empty list is a normal answer (closed or fully booked).
    """
    slots = AvailabilityService.get_available_slots(db, service_id, day)
    return DaySlots(
        service_id=service_id,
        date=day,
        timezone=settings.BUSINESS_TIMEZONE,
        slots=[to_iso_utc(s) for s in slots],
    )


@router.get("/availability/dates", response_model=MonthDates)
async def get_month_availability(
        service_id: UUID = Query(..., description="Service to book"),
        month: str = Query(..., pattern=r"^[1-9]\d{3}-(0[1-9]|1[0-2])$", description="Month YYYY-MM"),
        session_factory: sessionmaker = Depends(get_session_factory)
):
    """Dates in the month (within the booking horizon) with at least one free slot."""
    year, month_number = (int(part) for part in month.split("-"))
    result = await AvailabilityService.get_available_dates(session_factory, service_id, year, month_number)
    return MonthDates(
        service_id=service_id,
        month=month,
        available_dates=result.available_dates,
        failed_dates=result.failed_dates,
    )
