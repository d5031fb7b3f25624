"""
Middleware package for the TrackPulse API.
"""

from app.middleware.cache_control import CacheControlMiddleware

__all__ = ["CacheControlMiddleware"]
