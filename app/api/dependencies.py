# ============================================================================
# FILE: app/api/dependencies.py
# Authentication dependencies for back-office routes
# ============================================================================
import hmac

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.config.settings import settings

# ============================================================================
# Security Schemes
# ============================================================================

admin_key_security = HTTPBearer(
    scheme_name="Admin API Key",
    description="Enter the back-office API key",
    auto_error=False
)


def require_admin(
        credentials: HTTPAuthorizationCredentials = Depends(admin_key_security)
) -> None:
    """
    Guard for back-office routes.

    The key itself is issued and rotated outside this service; here it is
    only compared in constant time.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing admin credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not hmac.compare_digest(credentials.credentials, settings.ADMIN_API_KEY):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin credentials"
        )
