"""Artist profiles package."""

from app.services.artists.artist_repository import ArtistRepository
from app.services.artists.artist_service import ArtistService

__all__ = ["ArtistRepository", "ArtistService"]
