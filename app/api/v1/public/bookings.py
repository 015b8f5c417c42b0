# ============================================================================
# app/api/v1/public/bookings.py
# Public booking endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, BackgroundTasks, Depends, Path, status
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.schemas.booking import BookingConfirmation, BookingCreate, BookingOut
from app.services.booking.booking_admin_service import BookingAdminService
from app.services.booking.booking_service import BookingService
from app.services.notification.notification_service import notify_booking_created

router = APIRouter(prefix="/bookings")


@router.post("", response_model=BookingConfirmation, status_code=status.HTTP_201_CREATED)
def create_booking(
        payload: BookingCreate,
        background_tasks: BackgroundTasks,
        db: Session = Depends(get_db)
):
    """
    Book a slot returned by /availability.
    409 means the slot was taken meanwhile; fetch availability again.
    """
    confirmation = BookingService.create_booking(db, payload)
    background_tasks.add_task(notify_booking_created, confirmation)
    return confirmation


@router.get("/{manage_token}", response_model=BookingOut)
def get_booking_by_token(
        manage_token: str = Path(..., min_length=16, max_length=64, description="Token from the confirmation"),
        db: Session = Depends(get_db)
):
    """Look up a booking from its management link."""
    booking = BookingAdminService.get_by_manage_token(db, manage_token)
    return BookingAdminService.serialize(booking)
