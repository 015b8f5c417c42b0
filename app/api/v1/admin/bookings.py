# ============================================================================
# app/api/v1/admin/bookings.py
# Back-office booking endpoints - thin HTTP layer
# ============================================================================
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, Query
from sqlalchemy.orm import Session

from app.api.dependencies import require_admin
from app.config.database import get_db
from app.schemas.booking import BookingCancel, BookingList, BookingOut, BookingReschedule
from app.services.booking.booking_admin_service import BookingAdminService

router = APIRouter(prefix="/admin/bookings", dependencies=[Depends(require_admin)])


@router.get("", response_model=BookingList)
def list_bookings(
        start_date: Optional[date] = Query(None, description="Bookings starting on or after this civil date"),
        end_date: Optional[date] = Query(None, description="Bookings starting on or before this civil date"),
        status: Optional[str] = Query(None, pattern="^(confirmed|cancelled)$", description="confirmed or cancelled"),
        db: Session = Depends(get_db)
):
    """Bookings for the back-office calendar."""
    return BookingAdminService.list_bookings(db, start_date=start_date, end_date=end_date, status=status)


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(
        booking_id: UUID = Path(..., description="The booking ID"),
        db: Session = Depends(get_db)
):
    return BookingAdminService.serialize(BookingAdminService.get_booking(db, booking_id))


@router.post("/{booking_id}/cancel", response_model=BookingOut)
def cancel_booking(
        booking_id: UUID = Path(..., description="The booking ID"),
        payload: Optional[BookingCancel] = Body(None),
        db: Session = Depends(get_db)
):
    """Cancel a booking. The row is kept with status cancelled."""
    booking = BookingAdminService.cancel_booking(db, booking_id, reason=payload.reason if payload else None)
    return BookingAdminService.serialize(booking)


@router.post("/{booking_id}/reschedule", response_model=BookingOut)
def reschedule_booking(
        payload: BookingReschedule,
        booking_id: UUID = Path(..., description="The booking ID"),
        db: Session = Depends(get_db)
):
    """Move a confirmed booking. 409 if the new time overlaps another booking."""
    booking = BookingAdminService.reschedule_booking(db, booking_id, payload.start_time)
    return BookingAdminService.serialize(booking)
