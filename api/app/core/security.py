"""
Security utilities for the TrackPulse API.

Admin endpoints (trending recomputation) are protected by a shared API key
that is sent as ``X-API-KEY`` or as an ``Authorization: Bearer`` token.
"""

import logging
import secrets
from typing import Optional

from app.core.config import MIN_ADMIN_KEY_LENGTH, get_settings
from fastapi import HTTPException, Request, status

logger = logging.getLogger(__name__)


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _extract_admin_key(request: Request) -> Optional[str]:
    """Read the admin key from the X-API-KEY header or a Bearer token."""
    header_key = request.headers.get("X-API-KEY")
    if header_key:
        return header_key
    authorization = request.headers.get("Authorization", "")
    if authorization.startswith("Bearer "):
        return authorization[len("Bearer ") :]
    return None


def verify_admin_key(provided_key: str) -> bool:
    """Verify that the provided API key is valid.

    Args:
        provided_key: The API key to verify

    Returns:
        bool: True if the key is valid

    Raises:
        HTTPException: If admin access is not configured
    """
    admin_api_key = get_settings().ADMIN_API_KEY

    if not admin_api_key:
        logger.warning("Admin access attempted but ADMIN_API_KEY is not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin access not configured",
        )

    if len(admin_api_key) < MIN_ADMIN_KEY_LENGTH:
        logger.warning(
            f"ADMIN_API_KEY is configured with insecure length: {len(admin_api_key)} (min: {MIN_ADMIN_KEY_LENGTH})"
        )

    return secrets.compare_digest(provided_key, admin_api_key)


def verify_admin_access(request: Request) -> bool:
    """FastAPI dependency granting access to admin routes.

    Args:
        request: The FastAPI request object

    Returns:
        bool: True if access is granted

    Raises:
        HTTPException: 401 without credentials, 403 with wrong credentials
    """
    provided_key = _extract_admin_key(request)

    if provided_key:
        if verify_admin_key(provided_key):
            logger.debug(f"Admin access granted from {_client_host(request)}")
            return True
        logger.warning(f"Invalid admin credentials provided from {_client_host(request)}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin credentials",
        )

    logger.warning(f"Missing admin authentication from {_client_host(request)}")
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin authentication required"
    )
