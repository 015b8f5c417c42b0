# ===== seed_availability.py =====
"""Seed services and weekly hours for a fresh database"""
import logging
from datetime import time
from decimal import Decimal

from app.config.database import SessionLocal
from app.models.availability import WeeklyHoursRule
from app.models.service import Service
from app.utils.my_logging import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_SERVICES = [
    {"name": "Consultation", "duration_min": 40, "price_eur": Decimal("35.00"), "display_order": 0},
    {"name": "Full treatment", "duration_min": 90, "price_eur": Decimal("70.00"), "display_order": 1},
]


def seed_availability(db) -> int:
    """Mon-Fri 08:00-20:00, Saturday 09:00-15:00, Sunday closed. Returns rows added."""
    added = 0

    if not db.query(WeeklyHoursRule).first():
        rules = [
            WeeklyHoursRule(weekday=day, start_time=time(8, 0), end_time=time(20, 0), is_active=True)
            for day in range(0, 5)  # 0=Monday ... 4=Friday
        ]
        rules.append(WeeklyHoursRule(weekday=5, start_time=time(9, 0), end_time=time(15, 0), is_active=True))
        db.add_all(rules)
        added += len(rules)

    if not db.query(Service).first():
        services = [Service(**data) for data in DEFAULT_SERVICES]
        db.add_all(services)
        added += len(services)

    db.commit()
    return added


if __name__ == "__main__":
    setup_logging()
    session = SessionLocal()
    try:
        count = seed_availability(session)
        logger.info(f"Seeded {count} rows")
    except Exception:
        session.rollback()
        logger.exception("Error seeding availability")
        raise
    finally:
        session.close()
