# ===== app/models/booking.py =====
from sqlalchemy import Column, String, Text, ForeignKey, Uuid, CheckConstraint, Index, DDL, event, func, text
from sqlalchemy.dialects.postgresql import ExcludeConstraint
from sqlalchemy.orm import relationship
import secrets
import uuid

from app.models.base import Base, UTCDateTime, utc_now

BOOKING_CONFIRMED = "confirmed"
BOOKING_CANCELLED = "cancelled"

# Name shared by the PostgreSQL exclusion constraint and the SQLite triggers,
# used to tell a double booking apart from other integrity failures.
NO_OVERLAP_CONSTRAINT = "bookings_no_overlap"


def generate_manage_token() -> str:
    return secrets.token_urlsafe(24)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    service_id = Column(Uuid(as_uuid=True), ForeignKey("services.id"), nullable=False)
    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id"), nullable=False)

    # Interval, always [start, end) in UTC
    start_time_utc = Column(UTCDateTime, nullable=False)
    end_time_utc = Column(UTCDateTime, nullable=False)

    # Status tracking
    status = Column(String(20), nullable=False, default=BOOKING_CONFIRMED)  # confirmed, cancelled
    created_via = Column(String(20), nullable=False, default="web")  # web, admin
    notes = Column(Text, nullable=True)
    manage_token = Column(String(64), nullable=False, unique=True, default=generate_manage_token)

    created_at = Column(UTCDateTime, default=utc_now)
    updated_at = Column(UTCDateTime, default=utc_now, onupdate=utc_now)
    cancelled_at = Column(UTCDateTime, nullable=True)

    service = relationship("Service", back_populates="bookings")
    customer = relationship("Customer", back_populates="bookings")
    logs = relationship("BookingLog", back_populates="booking")

    __table_args__ = (
        CheckConstraint("start_time_utc < end_time_utc", name="ck_bookings_time_order"),
        CheckConstraint("status IN ('confirmed', 'cancelled')", name="ck_bookings_status"),
        Index("ix_bookings_status_time", "status", "start_time_utc", "end_time_utc"),
        # Single practitioner: confirmed bookings never overlap, globally
        ExcludeConstraint(
            (func.tstzrange(start_time_utc, end_time_utc, text("'[)'")), "&&"),
            name=NO_OVERLAP_CONSTRAINT,
            using="gist",
            where=text("status = 'confirmed'"),
        ).ddl_if(dialect="postgresql"),
    )

    def __repr__(self):
        return f"<Booking(id={self.id}, start={self.start_time_utc}, status={self.status})>"

    @property
    def is_confirmed(self) -> bool:
        return self.status == BOOKING_CONFIRMED


# SQLite has no exclusion constraints; triggers give the same guarantee for
# development databases and the test suite.
_sqlite_overlap_check = f"""
    SELECT RAISE(ABORT, '{NO_OVERLAP_CONSTRAINT}')
    WHERE EXISTS (
        SELECT 1 FROM bookings
        WHERE status = 'confirmed'
          AND id != NEW.id
          AND start_time_utc < NEW.end_time_utc
          AND end_time_utc > NEW.start_time_utc
    );
"""

event.listen(
    Booking.__table__,
    "after_create",
    DDL(
        f"""
        CREATE TRIGGER {NO_OVERLAP_CONSTRAINT}_insert
        BEFORE INSERT ON bookings
        WHEN NEW.status = 'confirmed'
        BEGIN {_sqlite_overlap_check} END
        """
    ).execute_if(dialect="sqlite"),
)

event.listen(
    Booking.__table__,
    "after_create",
    DDL(
        f"""
        CREATE TRIGGER {NO_OVERLAP_CONSTRAINT}_update
        BEFORE UPDATE OF start_time_utc, end_time_utc, status ON bookings
        WHEN NEW.status = 'confirmed'
        BEGIN {_sqlite_overlap_check} END
        """
    ).execute_if(dialect="sqlite"),
)
