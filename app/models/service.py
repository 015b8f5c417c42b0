# app/models/service.py
"""
Service Model - bookable services
Duration drives slot length; inactive services are invisible to booking.
"""
from sqlalchemy import Column, String, Numeric, Integer, Boolean, Text, Uuid, CheckConstraint
from sqlalchemy.orm import relationship
import uuid
from app.models.base import Base, UTCDateTime, utc_now


class Service(Base):
    """Source of truth for price and duration of a bookable service."""
    __tablename__ = "services"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Core service details
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    # Pricing (nullable - some services may not have fixed pricing)
    price_eur = Column(Numeric(10, 2), nullable=True)

    # Duration in minutes
    duration_min = Column(Integer, nullable=False)

    # Status and ordering
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    display_order = Column(Integer, default=0)  # For UI sorting

    # Timestamps
    created_at = Column(UTCDateTime, default=utc_now)
    updated_at = Column(UTCDateTime, default=utc_now, onupdate=utc_now)

    bookings = relationship("Booking", back_populates="service")

    __table_args__ = (
        CheckConstraint("duration_min > 0", name="ck_services_duration_positive"),
    )

    def __repr__(self):
        return f"<Service(id={self.id}, name={self.name}, duration_min={self.duration_min})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "price_eur": float(self.price_eur) if self.price_eur is not None else None,
            "duration_min": self.duration_min,
            "formatted_duration": self.formatted_duration,
            "display_order": self.display_order,
        }

    @property
    def formatted_duration(self) -> str:
        """Return human-readable duration string"""
        hours = self.duration_min // 60
        minutes = self.duration_min % 60

        if hours > 0 and minutes > 0:
            return f"{hours}h {minutes}m"
        elif hours > 0:
            return f"{hours}h"
        else:
            return f"{minutes}m"
