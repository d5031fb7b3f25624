"""Track catalog package."""

from app.services.catalog.track_repository import TrackRepository
from app.services.catalog.track_service import TrackService

__all__ = ["TrackRepository", "TrackService"]
