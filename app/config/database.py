"""Database configuration and connection setup"""
import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool

from app.config.settings import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    """Create an engine; SQLite gets its own connect args instead of pool sizing."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=False,
        )

    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        echo=False,
    )


# Create database engine with connection pooling
engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Database dependency for FastAPI"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> sessionmaker:
    """Session factory dependency for code that opens one session per task"""
    return SessionLocal


def create_tables():
    """Create all tables, constraints and triggers for the configured database"""
    import app.models  # noqa: F401  registers every model on the shared Base
    from app.models.base import Base

    logger.info("Creating all tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")


if __name__ == "__main__":
    create_tables()
