"""User playlists package."""

from app.services.playlists.playlist_repository import PlaylistRepository
from app.services.playlists.playlist_service import PlaylistService

__all__ = ["PlaylistRepository", "PlaylistService"]
