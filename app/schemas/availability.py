from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import date
from uuid import UUID

from app.services.scheduling.civil_time import parse_time_to_minutes


class ServiceOut(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    price_eur: Optional[float] = None
    duration_min: int
    formatted_duration: str
    display_order: int = 0


class DaySlots(BaseModel):
    """Public availability for one service on one civil date"""
    service_id: UUID
    date: date
    timezone: str
    slots: List[str] = Field(default_factory=list, description="Start instants, ISO 8601 UTC")


class MonthDates(BaseModel):
    service_id: UUID
    month: str
    available_dates: List[date] = Field(default_factory=list)
    failed_dates: List[date] = Field(default_factory=list)


class CustomHoursIn(BaseModel):
    start: str = Field(..., description="Opening time HH:MM")
    end: str = Field(..., description="Closing time HH:MM")
    reason: Optional[str] = Field(None, max_length=200)

    @field_validator("start", "end")
    @classmethod
    def validate_clock(cls, v: str) -> str:
        parse_time_to_minutes(v)
        return v


class CloseDayIn(BaseModel):
    reason: Optional[str] = Field(None, max_length=200)


class DaySchedule(BaseModel):
    """Effective hours for a date plus the override that produced them, if any"""
    date: date
    closed: bool
    start: Optional[str] = None
    end: Optional[str] = None
    source: str  # override, weekly, none
    override_kind: Optional[str] = None
    reason: Optional[str] = None
    cancelled_bookings: List[UUID] = Field(default_factory=list)
