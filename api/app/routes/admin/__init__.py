"""
Admin routes package for the TrackPulse API.

This package organizes admin routes by domain:
- trending: On-demand trending ranking runs (2 endpoints)
"""

from app.routes.admin import trending
from fastapi import FastAPI


def include_admin_routers(app: FastAPI) -> None:
    """Include all admin routers in the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.include_router(trending.router)
