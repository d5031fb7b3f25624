"""Async SQLite queries for the track catalog.

Repositories operate on a connection handed in by the caller so that a
service can run several of them inside one ``Database.transaction()``.
"""

import logging
import uuid
from typing import Dict, Iterable, List, Optional

import aiosqlite
from app.models.track import Track, TrackCreate

logger = logging.getLogger(__name__)


def _row_to_track(row: aiosqlite.Row) -> Track:
    """Convert an aiosqlite Row to a Track model."""
    d = dict(row)
    d["allow_download"] = bool(d.get("allow_download"))
    return Track(**d)


class TrackRepository:
    """Track CRUD bound to one connection."""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn

    async def create(self, data: TrackCreate, uploaded_by: str, now: int) -> Track:
        track = Track(
            id=uuid.uuid4().hex,
            uploaded_by=uploaded_by,
            uploaded_at=now,
            **data.model_dump(),
        )
        await self.conn.execute(
            """
            INSERT INTO tracks (
                id, title, artist, duration, genre, audio_quality,
                allow_download, uploaded_by, uploaded_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                track.id,
                track.title,
                track.artist,
                track.duration,
                track.genre,
                track.audio_quality,
                int(track.allow_download),
                track.uploaded_by,
                track.uploaded_at,
            ),
        )
        return track

    async def get(self, track_id: str) -> Optional[Track]:
        cursor = await self.conn.execute(
            "SELECT * FROM tracks WHERE id = ?", (track_id,)
        )
        row = await cursor.fetchone()
        return _row_to_track(row) if row else None

    async def exists(self, track_id: str) -> bool:
        cursor = await self.conn.execute(
            "SELECT 1 FROM tracks WHERE id = ?", (track_id,)
        )
        return await cursor.fetchone() is not None

    async def get_many(self, track_ids: Iterable[str]) -> Dict[str, Track]:
        """Fetch tracks by id. Missing ids are simply absent from the result."""
        ids = list(dict.fromkeys(track_ids))
        if not ids:
            return {}
        placeholders = ",".join("?" for _ in ids)
        cursor = await self.conn.execute(
            f"SELECT * FROM tracks WHERE id IN ({placeholders})", ids
        )
        rows = await cursor.fetchall()
        return {row["id"]: _row_to_track(row) for row in rows}

    async def list_recent(self, limit: int, offset: int = 0) -> List[Track]:
        cursor = await self.conn.execute(
            "SELECT * FROM tracks ORDER BY uploaded_at DESC, id LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [_row_to_track(row) for row in await cursor.fetchall()]

    async def list_by_uploader(self, user_id: str) -> List[Track]:
        cursor = await self.conn.execute(
            "SELECT * FROM tracks WHERE uploaded_by = ? ORDER BY uploaded_at DESC, id",
            (user_id,),
        )
        return [_row_to_track(row) for row in await cursor.fetchall()]

    async def delete(self, track_id: str) -> bool:
        """Delete a track. Reactions, summary and playlist membership cascade."""
        cursor = await self.conn.execute("DELETE FROM tracks WHERE id = ?", (track_id,))
        return cursor.rowcount > 0
