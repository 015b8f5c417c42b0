from sqlalchemy import Column, String, Uuid
from sqlalchemy.orm import relationship
import uuid

from app.models.base import Base, UTCDateTime, utc_now


class Customer(Base):
    """Customer identified by canonical E.164 phone number"""
    __tablename__ = "customers"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    phone_e164 = Column(String(20), nullable=False, unique=True)

    created_at = Column(UTCDateTime, default=utc_now)

    bookings = relationship("Booking", back_populates="customer")

    def __repr__(self):
        return f"<Customer(id={self.id}, phone={self.phone_e164})>"
