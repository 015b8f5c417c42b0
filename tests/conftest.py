import os

# must be set before app modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["BUSINESS_TIMEZONE"] = "Europe/Vilnius"
os.environ.pop("BOOKING_WEBHOOK_URL", None)

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import app.models  # noqa: F401
from app.config.database import get_db, get_session_factory
from app.models.availability import WeeklyHoursRule
from app.models.base import Base
from app.models.service import Service
from app.services.scheduling.civil_time import civil_to_instant, civil_today

# Friday 2030-05-31, 12:00 in Vilnius
FIXED_NOW = datetime(2030, 5, 31, 9, 0, tzinfo=timezone.utc)
MONDAY = date(2030, 6, 3)
SUNDAY = date(2030, 6, 2)

ADMIN_HEADERS = {"Authorization": "Bearer test-admin-key"}


def at(day, clock):
    """Wall-clock time in the business zone as a UTC instant"""
    return civil_to_instant(day, clock)


# ------------------ engine ------------------
@pytest.fixture
def engine(tmp_path):
    # file database so that separate sessions (threads) see each other's commits
    engine = create_engine(
        f"sqlite:///{tmp_path / 'bookings.db'}",
        connect_args={"check_same_thread": False, "timeout": 15},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


# ------------------ client ------------------
@pytest.fixture
def client(session_factory):
    from app.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


# ------------------ data ------------------
@pytest.fixture
def service(db):
    service = Service(name="Consultation", duration_min=40, price_eur=Decimal("35.00"), is_active=True)
    db.add(service)
    db.commit()
    return service


@pytest.fixture
def monday_hours(db):
    rule = WeeklyHoursRule(weekday=0, start_time=time(8, 0), end_time=time(20, 0), is_active=True)
    db.add(rule)
    db.commit()
    return rule


@pytest.fixture
def upcoming_monday():
    """A Monday at least two days ahead of the real clock, inside the booking horizon"""
    today = civil_today()
    offset = (7 - today.weekday()) % 7 or 7
    if offset < 2:
        offset += 7
    return today + timedelta(days=offset)
