"""
FastAPI application for the booking website backend

Availability for the reservation wizard, booking creation, and the
back-office booking/schedule operations
"""
import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from contextlib import asynccontextmanager

from app.config.settings import get_settings
from app.core.exceptions import BookingError, StoreError, WriteVerificationError
from app.core.middleware import correlation_id_middleware, request_logging_middleware
from app.core.monitoring import health_router
from app.api.v1.router import api_v1_router
from app.utils.my_logging import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    setup_logging()
    logger.info(f"{settings.APP_NAME} starting up (timezone {settings.BUSINESS_TIMEZONE})")

    routes = sorted(
        (method, route.path)
        for route in app.routes if isinstance(route, APIRoute)
        for method in route.methods
    )
    for method, path in routes:
        logger.debug(f"  {method:8} {path}")
    logger.info(f"Total routes registered: {len(routes)}")

    yield

    # Shutdown
    logger.info(f"{settings.APP_NAME} shutting down")


async def booking_error_handler(request: Request, exc: BookingError):
    """Map engine errors to HTTP; internal details never reach the client"""
    if isinstance(exc, (WriteVerificationError, StoreError)):
        logger.error(
            f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
            extra={"correlation_id": getattr(request.state, "correlation_id", "unknown")}
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title="Booking Service API",
        description="Availability and reservations for a single practitioner",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    # Add custom middleware
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    app.add_exception_handler(BookingError, booking_error_handler)

    # Include routers
    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_v1_router, prefix="/api/v1", tags=["api"])

    @app.get("/")
    async def root():
        return {
            "service": settings.APP_NAME,
            "version": "0.1.0",
            "status": "running",
            "endpoints": {
                "api": "/api/v1/",
                "health": "/health",
                "docs": "/docs" if settings.DEBUG else "disabled"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
