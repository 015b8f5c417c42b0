# app/utils/my_logging.py
"""Logging configuration"""
import logging
import sys
import time

from app.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s"


class CorrelationIdFilter(logging.Filter):
    """Records logged outside a request (startup, worker threads) get '-'"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        return True


def setup_logging(verbose=True):
    """Configure application logging; timestamps are UTC like every stored instant"""
    settings = get_settings()

    if verbose:
        level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    else:
        level = logging.WARNING

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%SZ")
    formatter.converter = time.gmtime

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())

    logging.basicConfig(level=level, handlers=[handler], force=True)

    if not verbose:
        # Booking and availability logs stay; library chatter goes
        for name in ("sqlalchemy", "alembic", "httpx", "uvicorn.access"):
            logger = logging.getLogger(name)
            logger.setLevel(logging.ERROR)
            logger.propagate = False
