# ===== app/models/availability.py =====
from sqlalchemy import Column, String, Integer, Boolean, Time, Date, Uuid, CheckConstraint, Index, text
from app.models.base import Base, UTCDateTime, utc_now
import uuid

OVERRIDE_CLOSED = "closed"
OVERRIDE_CUSTOM_HOURS = "custom_hours"


class WeeklyHoursRule(Base):
    """Default opening hours for one weekday"""
    __tablename__ = "working_hours"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    weekday = Column(Integer, nullable=False)  # 0=Monday, 6=Sunday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_working_hours_weekday"),
        CheckConstraint("start_time < end_time", name="ck_working_hours_order"),
        # one active rule per weekday
        Index(
            "uq_working_hours_active_weekday",
            "weekday",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )


class DateOverride(Base):
    """Specific date overrides (holidays, time-off, special hours)"""
    __tablename__ = "date_overrides"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    date = Column(Date, nullable=False, unique=True)
    kind = Column(String(20), nullable=False)  # closed, custom_hours
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    reason = Column(String, nullable=True)  # "Holiday", "Vacation", etc.

    created_at = Column(UTCDateTime, default=utc_now)

    __table_args__ = (
        CheckConstraint(
            "kind IN ('closed', 'custom_hours')",
            name="ck_date_overrides_kind",
        ),
        CheckConstraint(
            "kind = 'closed' OR (start_time IS NOT NULL AND end_time IS NOT NULL AND start_time < end_time)",
            name="ck_date_overrides_custom_hours",
        ),
    )
