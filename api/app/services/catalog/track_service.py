"""Track catalog service."""

import logging
from typing import List, Optional

from app.core.exceptions import NotAuthorizedError, TrackNotFoundError
from app.core.identity import CallerIdentity, require_user_id
from app.db.database import Database
from app.models.track import Track, TrackCreate
from app.services.catalog.track_repository import TrackRepository
from app.utils.clock import Clock, now_ms
from app.utils.logging import mask_identity
from fastapi import Request

logger = logging.getLogger(__name__)


class TrackService:
    """Registers, lists and deletes track metadata.

    Also answers "does this track exist" and "get track by reference" for the
    feedback and trending components.
    """

    def __init__(self, database: Database, clock: Clock = now_ms):
        self.database = database
        self.clock = clock

    async def create_track(self, data: TrackCreate, caller: CallerIdentity) -> Track:
        user_id = require_user_id(caller)
        async with self.database.transaction() as conn:
            track = await TrackRepository(conn).create(data, user_id, self.clock())
        logger.info(
            "Track %s registered by %s", track.id, mask_identity(user_id)
        )
        return track

    async def get_track(self, track_id: str) -> Optional[Track]:
        async with self.database.connection() as conn:
            return await TrackRepository(conn).get(track_id)

    async def require_track(self, track_id: str) -> Track:
        track = await self.get_track(track_id)
        if track is None:
            raise TrackNotFoundError(track_id)
        return track

    async def list_tracks(self, limit: int = 50, offset: int = 0) -> List[Track]:
        async with self.database.connection() as conn:
            return await TrackRepository(conn).list_recent(limit, offset)

    async def list_user_tracks(self, caller: CallerIdentity) -> List[Track]:
        if not caller.is_authenticated:
            return []
        async with self.database.connection() as conn:
            return await TrackRepository(conn).list_by_uploader(caller.user_id)

    async def delete_track(self, track_id: str, caller: CallerIdentity) -> None:
        """Delete a track owned by the caller.

        Reactions, the feedback summary and playlist membership go with it.
        Trending rows are left for the next ranking run; readers skip them.
        """
        user_id = require_user_id(caller)
        async with self.database.transaction() as conn:
            repo = TrackRepository(conn)
            track = await repo.get(track_id)
            if track is None:
                raise TrackNotFoundError(track_id)
            if track.uploaded_by != user_id:
                raise NotAuthorizedError("delete", "track")
            await repo.delete(track_id)
        logger.info("Track %s deleted by %s", track_id, mask_identity(user_id))


def get_track_service(request: Request) -> TrackService:
    """Get the track service from the request state."""
    return request.app.state.track_service
