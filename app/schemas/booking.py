from __future__ import annotations
from pydantic import BaseModel, Field, AwareDatetime, field_serializer
from typing import Optional, List
from datetime import datetime, date
from uuid import UUID

from app.services.scheduling.civil_time import to_iso_utc


class BookingCreate(BaseModel):
    """Public booking request from the reservation wizard"""
    service_id: UUID = Field(..., description="Service to book")
    start_time: AwareDatetime = Field(..., description="Chosen slot start, ISO 8601 with offset")
    name: str = Field(..., description="Customer name")
    phone: str = Field(..., description="Customer phone as typed; normalised to E.164")
    note: Optional[str] = Field(None, description="Optional note for the practitioner")
    honeypot: Optional[str] = Field(None, description="Anti-bot trap, must stay empty")


class BookingConfirmation(BaseModel):
    """Echo of the created booking for the confirmation screen"""
    booking_id: UUID
    manage_token: str
    service: str
    customer_name: str
    customer_phone: str
    start_time: datetime
    end_time: datetime

    @field_serializer("start_time", "end_time")
    def _serialize_instant(self, value: datetime) -> str:
        return to_iso_utc(value)


class BookingReschedule(BaseModel):
    start_time: AwareDatetime = Field(..., description="New start, ISO 8601 with offset")


class BookingCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class BookingOut(BaseModel):
    """Booking as shown in the back office and the manage link"""
    id: UUID
    status: str
    created_via: str
    service_id: UUID
    service_name: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    start_time: datetime
    end_time: datetime
    civil_date: str
    civil_start: str
    civil_end: str
    notes: Optional[str] = None
    cancelled_at: Optional[datetime] = None

    @field_serializer("start_time", "end_time")
    def _serialize_instant(self, value: datetime) -> str:
        return to_iso_utc(value)

    @field_serializer("cancelled_at")
    def _serialize_cancelled(self, value: Optional[datetime]) -> Optional[str]:
        return to_iso_utc(value) if value else None


class BookingList(BaseModel):
    total: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[str] = None
    bookings: List[BookingOut]
