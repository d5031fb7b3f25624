"""Async SQLite queries for artist profiles.

Social links and theme colors are stored as JSON text columns.
"""

import logging
import uuid
from typing import List, Optional

import aiosqlite
from app.models.artist import ArtistProfile, CustomColors, SocialLinks

logger = logging.getLogger(__name__)


def _row_to_profile(row: aiosqlite.Row) -> ArtistProfile:
    """Convert an aiosqlite Row to an ArtistProfile model."""
    d = dict(row)
    if d.get("social_links"):
        d["social_links"] = SocialLinks.model_validate_json(d["social_links"])
    if d.get("custom_colors"):
        d["custom_colors"] = CustomColors.model_validate_json(d["custom_colors"])
    return ArtistProfile(**d)


def _json_or_none(value) -> Optional[str]:
    return value.model_dump_json() if value is not None else None


class ArtistRepository:
    """Artist profile CRUD bound to one connection."""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn

    async def get_by_user(self, user_id: str) -> Optional[ArtistProfile]:
        cursor = await self.conn.execute(
            "SELECT * FROM artist_profiles WHERE user_id = ?", (user_id,)
        )
        row = await cursor.fetchone()
        return _row_to_profile(row) if row else None

    async def get_by_slug(self, slug: str) -> Optional[ArtistProfile]:
        """Oldest profile whose slug matches; display names are not unique."""
        cursor = await self.conn.execute(
            "SELECT * FROM artist_profiles WHERE slug = ? "
            "ORDER BY created_at, id LIMIT 1",
            (slug,),
        )
        row = await cursor.fetchone()
        return _row_to_profile(row) if row else None

    async def list_all(self) -> List[ArtistProfile]:
        cursor = await self.conn.execute(
            "SELECT * FROM artist_profiles ORDER BY created_at, id"
        )
        return [_row_to_profile(row) for row in await cursor.fetchall()]

    async def insert(self, profile: ArtistProfile) -> None:
        await self.conn.execute(
            """
            INSERT INTO artist_profiles (
                id, user_id, display_name, slug, bio, genre, website,
                social_links, custom_colors, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                profile.id,
                profile.user_id,
                profile.display_name,
                profile.slug,
                profile.bio,
                profile.genre,
                profile.website,
                _json_or_none(profile.social_links),
                _json_or_none(profile.custom_colors),
                profile.created_at,
                profile.updated_at,
            ),
        )

    async def update(self, profile: ArtistProfile) -> None:
        await self.conn.execute(
            """
            UPDATE artist_profiles SET
                display_name = ?, slug = ?, bio = ?, genre = ?, website = ?,
                social_links = ?, custom_colors = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                profile.display_name,
                profile.slug,
                profile.bio,
                profile.genre,
                profile.website,
                _json_or_none(profile.social_links),
                _json_or_none(profile.custom_colors),
                profile.updated_at,
                profile.id,
            ),
        )

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex
