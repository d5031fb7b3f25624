"""Artist profile service."""

import logging
from typing import List, Optional

from app.core.exceptions import ArtistNotFoundError
from app.core.identity import CallerIdentity, require_user_id
from app.db.database import Database
from app.models.artist import ArtistProfile, ArtistProfileUpdate, artist_slug
from app.models.track import Track
from app.services.artists.artist_repository import ArtistRepository
from app.services.catalog.track_repository import TrackRepository
from app.utils.clock import Clock, now_ms
from app.utils.logging import mask_identity
from fastapi import Request

logger = logging.getLogger(__name__)


class ArtistService:
    """Public artist profiles, one per user, plus their uploaded tracks."""

    def __init__(self, database: Database, clock: Clock = now_ms):
        self.database = database
        self.clock = clock

    async def save_profile(
        self, data: ArtistProfileUpdate, caller: CallerIdentity
    ) -> ArtistProfile:
        """Create the caller's profile, or update it in place.

        On update only the fields present in the request change.
        """
        user_id = require_user_id(caller)
        async with self.database.transaction() as conn:
            repo = ArtistRepository(conn)
            now = self.clock()
            existing = await repo.get_by_user(user_id)
            if existing is None:
                profile = ArtistProfile(
                    id=repo.new_id(),
                    user_id=user_id,
                    slug=artist_slug(data.display_name),
                    created_at=now,
                    updated_at=now,
                    **data.model_dump(),
                )
                await repo.insert(profile)
                outcome = "created"
            else:
                changes = {name: getattr(data, name) for name in data.model_fields_set}
                changes["slug"] = artist_slug(data.display_name)
                changes["updated_at"] = now
                profile = existing.model_copy(update=changes)
                await repo.update(profile)
                outcome = "updated"

        logger.info(
            "Artist profile %s %s for %s", profile.id, outcome, mask_identity(user_id)
        )
        return profile

    async def get_profile(self, user_id: str) -> Optional[ArtistProfile]:
        async with self.database.connection() as conn:
            return await ArtistRepository(conn).get_by_user(user_id)

    async def require_profile(self, user_id: str) -> ArtistProfile:
        profile = await self.get_profile(user_id)
        if profile is None:
            raise ArtistNotFoundError(user_id)
        return profile

    async def get_by_name(self, name: str) -> ArtistProfile:
        """Look a profile up by its URL name, e.g. ``the-night-shift``."""
        async with self.database.connection() as conn:
            profile = await ArtistRepository(conn).get_by_slug(name.lower())
        if profile is None:
            raise ArtistNotFoundError(name)
        return profile

    async def get_my_profile(self, caller: CallerIdentity) -> Optional[ArtistProfile]:
        if not caller.is_authenticated:
            return None
        return await self.get_profile(caller.user_id)

    async def list_profiles(self) -> List[ArtistProfile]:
        async with self.database.connection() as conn:
            return await ArtistRepository(conn).list_all()

    async def get_artist_tracks(self, user_id: str) -> List[Track]:
        """Tracks uploaded by the artist, newest first."""
        async with self.database.connection() as conn:
            return await TrackRepository(conn).list_by_uploader(user_id)


def get_artist_service(request: Request) -> ArtistService:
    """Get the artist service from the request state."""
    return request.app.state.artist_service
