"""Async SQLite queries for playlists and their ordered track membership."""

import logging
import uuid
from typing import List, Optional

import aiosqlite
from app.models.playlist import Playlist, PlaylistCreate

logger = logging.getLogger(__name__)


class PlaylistRepository:
    """Playlist CRUD bound to one connection."""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn

    async def _track_ids(self, playlist_id: str) -> List[str]:
        cursor = await self.conn.execute(
            "SELECT track_id FROM playlist_tracks WHERE playlist_id = ? "
            "ORDER BY position",
            (playlist_id,),
        )
        return [row["track_id"] for row in await cursor.fetchall()]

    async def _to_playlist(self, row: aiosqlite.Row) -> Playlist:
        d = dict(row)
        d["is_public"] = bool(d.get("is_public"))
        d["track_ids"] = await self._track_ids(d["id"])
        return Playlist(**d)

    async def create(self, data: PlaylistCreate, owner_id: str, now: int) -> Playlist:
        playlist = Playlist(
            id=uuid.uuid4().hex,
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        await self.conn.execute(
            """
            INSERT INTO playlists (
                id, name, description, owner_id, is_public, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                playlist.id,
                playlist.name,
                playlist.description,
                playlist.owner_id,
                int(playlist.is_public),
                playlist.created_at,
                playlist.updated_at,
            ),
        )
        return playlist

    async def get(self, playlist_id: str) -> Optional[Playlist]:
        cursor = await self.conn.execute(
            "SELECT * FROM playlists WHERE id = ?", (playlist_id,)
        )
        row = await cursor.fetchone()
        return await self._to_playlist(row) if row else None

    async def list_by_owner(self, owner_id: str) -> List[Playlist]:
        cursor = await self.conn.execute(
            "SELECT * FROM playlists WHERE owner_id = ? ORDER BY created_at DESC, id",
            (owner_id,),
        )
        return [await self._to_playlist(row) for row in await cursor.fetchall()]

    async def add_track(self, playlist_id: str, track_id: str, now: int) -> bool:
        """Append a track. Returns False when it is already in the playlist."""
        cursor = await self.conn.execute(
            """
            INSERT OR IGNORE INTO playlist_tracks (playlist_id, track_id, position, added_at)
            SELECT ?, ?, COALESCE(MAX(position), -1) + 1, ?
            FROM playlist_tracks WHERE playlist_id = ?
            """,
            (playlist_id, track_id, now, playlist_id),
        )
        if cursor.rowcount == 0:
            return False
        await self.touch(playlist_id, now)
        return True

    async def remove_track(self, playlist_id: str, track_id: str, now: int) -> bool:
        cursor = await self.conn.execute(
            "DELETE FROM playlist_tracks WHERE playlist_id = ? AND track_id = ?",
            (playlist_id, track_id),
        )
        await self.touch(playlist_id, now)
        return cursor.rowcount > 0

    async def touch(self, playlist_id: str, now: int) -> None:
        await self.conn.execute(
            "UPDATE playlists SET updated_at = ? WHERE id = ?", (now, playlist_id)
        )
