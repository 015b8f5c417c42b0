"""
API v1 router setup
Organized into: public (reservation wizard) and admin (back office) routes
"""
from fastapi import APIRouter

from app.api.v1.public import availability, bookings
from app.api.v1.admin import bookings as admin_bookings, schedule

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (No authentication required)
# ============================================================================
api_v1_router.include_router(
    availability.router,
    prefix="/public",
    tags=["Public"]
)

api_v1_router.include_router(
    bookings.router,
    prefix="/public",
    tags=["Public"]
)

# ============================================================================
# ADMIN ROUTES (admin API key required)
# ============================================================================
api_v1_router.include_router(
    admin_bookings.router,
    # No prefix needed - router already has "/admin/bookings" prefix
    tags=["Admin"]
)

api_v1_router.include_router(
    schedule.router,
    tags=["Admin"]
)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """
    API information and available endpoints.
    """
    return {
        "version": "1.0",
        "authentication": {
            "public": "No authentication required",
            "admin": "Bearer admin API key required",
        }
    }
