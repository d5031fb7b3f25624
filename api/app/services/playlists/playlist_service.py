"""User playlist service."""

import logging
from typing import List

import aiosqlite
from app.core.exceptions import PlaylistNotFoundError, TrackNotFoundError
from app.core.identity import CallerIdentity, require_user_id
from app.db.database import Database
from app.models.playlist import Playlist, PlaylistCreate, PlaylistWithTracks
from app.services.catalog.track_repository import TrackRepository
from app.services.playlists.playlist_repository import PlaylistRepository
from app.utils.clock import Clock, now_ms
from app.utils.logging import mask_identity
from fastapi import Request

logger = logging.getLogger(__name__)


class PlaylistService:
    """Create playlists and manage their tracks.

    A playlist that is missing and one owned by someone else look the same
    to a caller trying to change it: both raise PlaylistNotFoundError.
    """

    def __init__(self, database: Database, clock: Clock = now_ms):
        self.database = database
        self.clock = clock

    async def create_playlist(
        self, data: PlaylistCreate, caller: CallerIdentity
    ) -> Playlist:
        owner_id = require_user_id(caller)
        async with self.database.transaction() as conn:
            playlist = await PlaylistRepository(conn).create(data, owner_id, self.clock())
        logger.info("Playlist %s created by %s", playlist.id, mask_identity(owner_id))
        return playlist

    async def _get_owned(
        self, conn: aiosqlite.Connection, playlist_id: str, owner_id: str
    ) -> PlaylistRepository:
        repo = PlaylistRepository(conn)
        playlist = await repo.get(playlist_id)
        if playlist is None or playlist.owner_id != owner_id:
            raise PlaylistNotFoundError(playlist_id)
        return repo

    async def add_track(
        self, playlist_id: str, track_id: str, caller: CallerIdentity
    ) -> Playlist:
        """Append a track; adding one that is already present changes nothing."""
        owner_id = require_user_id(caller)
        async with self.database.transaction() as conn:
            repo = await self._get_owned(conn, playlist_id, owner_id)
            if not await TrackRepository(conn).exists(track_id):
                raise TrackNotFoundError(track_id)
            await repo.add_track(playlist_id, track_id, self.clock())
            return await repo.get(playlist_id)

    async def remove_track(
        self, playlist_id: str, track_id: str, caller: CallerIdentity
    ) -> Playlist:
        owner_id = require_user_id(caller)
        async with self.database.transaction() as conn:
            repo = await self._get_owned(conn, playlist_id, owner_id)
            await repo.remove_track(playlist_id, track_id, self.clock())
            return await repo.get(playlist_id)

    async def list_user_playlists(self, caller: CallerIdentity) -> List[Playlist]:
        if not caller.is_authenticated:
            return []
        async with self.database.connection() as conn:
            return await PlaylistRepository(conn).list_by_owner(caller.user_id)

    async def get_playlist(
        self, playlist_id: str, caller: CallerIdentity
    ) -> PlaylistWithTracks:
        """Playlist with its tracks in order; private playlists only for the owner."""
        async with self.database.connection() as conn:
            playlist = await PlaylistRepository(conn).get(playlist_id)
            if playlist is None or (
                not playlist.is_public and playlist.owner_id != caller.user_id
            ):
                raise PlaylistNotFoundError(playlist_id)
            tracks = await TrackRepository(conn).get_many(playlist.track_ids)

        return PlaylistWithTracks(
            playlist=playlist,
            tracks=[tracks[t] for t in playlist.track_ids if t in tracks],
        )


def get_playlist_service(request: Request) -> PlaylistService:
    """Get the playlist service from the request state."""
    return request.app.state.playlist_service
