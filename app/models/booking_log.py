from sqlalchemy import Column, String, JSON, ForeignKey, Uuid
from sqlalchemy.orm import relationship
import uuid

from app.models.base import Base, UTCDateTime, utc_now


class BookingLog(Base):
    """Audit trail for booking changes (best effort)"""
    __tablename__ = "booking_logs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    booking_id = Column(Uuid(as_uuid=True), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    action = Column(String(50), nullable=False)  # booking_created, booking_cancelled, booking_rescheduled
    details = Column(JSON, default=dict)

    created_at = Column(UTCDateTime, default=utc_now)

    booking = relationship("Booking", back_populates="logs")
