"""Async SQLite queries for reactions and feedback summaries."""

import logging
import uuid
from typing import Dict, List, Optional

import aiosqlite
from app.models.feedback import FeedbackSummary, Reaction, ReactionKind

logger = logging.getLogger(__name__)


def _row_to_reaction(row: aiosqlite.Row) -> Reaction:
    """Convert an aiosqlite Row to a Reaction model."""
    d = dict(row)
    d["is_anonymous"] = bool(d.get("is_anonymous"))
    return Reaction(**d)


def _row_to_summary(row: aiosqlite.Row) -> FeedbackSummary:
    return FeedbackSummary(**dict(row))


class ReactionRepository:
    """Typed reaction lookups bound to one connection."""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get(self, reaction_id: str) -> Optional[Reaction]:
        cursor = await self.conn.execute(
            "SELECT * FROM reactions WHERE id = ?", (reaction_id,)
        )
        row = await cursor.fetchone()
        return _row_to_reaction(row) if row else None

    async def find_by_track_and_user(
        self, track_id: str, user_id: str
    ) -> Optional[Reaction]:
        cursor = await self.conn.execute(
            "SELECT * FROM reactions WHERE track_id = ? AND user_id = ?",
            (track_id, user_id),
        )
        row = await cursor.fetchone()
        return _row_to_reaction(row) if row else None

    async def find_by_session_and_track(
        self, session_id: str, track_id: str
    ) -> Optional[Reaction]:
        """Anonymous reaction for a session; rows carrying a user id are skipped."""
        cursor = await self.conn.execute(
            "SELECT * FROM reactions "
            "WHERE session_id = ? AND track_id = ? AND user_id IS NULL",
            (session_id, track_id),
        )
        row = await cursor.fetchone()
        return _row_to_reaction(row) if row else None

    async def count_by_user_since(self, user_id: str, since: int) -> int:
        """Reaction rows owned by a user with a timestamp newer than ``since``."""
        cursor = await self.conn.execute(
            "SELECT COUNT(*) FROM reactions WHERE user_id = ? AND timestamp > ?",
            (user_id, since),
        )
        row = await cursor.fetchone()
        return row[0]

    async def kinds_for_track(self, track_id: str) -> List[ReactionKind]:
        cursor = await self.conn.execute(
            "SELECT kind FROM reactions WHERE track_id = ?", (track_id,)
        )
        return [ReactionKind(row["kind"]) for row in await cursor.fetchall()]

    async def list_by_user(
        self, user_id: str, track_id: Optional[str] = None
    ) -> List[Reaction]:
        query = "SELECT * FROM reactions WHERE user_id = ?"
        params: list = [user_id]
        if track_id is not None:
            query += " AND track_id = ?"
            params.append(track_id)
        query += " ORDER BY timestamp DESC"
        cursor = await self.conn.execute(query, params)
        return [_row_to_reaction(row) for row in await cursor.fetchall()]

    async def list_by_session(
        self, session_id: str, track_id: Optional[str] = None
    ) -> List[Reaction]:
        query = "SELECT * FROM reactions WHERE session_id = ? AND user_id IS NULL"
        params: list = [session_id]
        if track_id is not None:
            query += " AND track_id = ?"
            params.append(track_id)
        query += " ORDER BY timestamp DESC"
        cursor = await self.conn.execute(query, params)
        return [_row_to_reaction(row) for row in await cursor.fetchall()]

    async def list_since(self, since: int) -> List[Reaction]:
        """Reactions with a timestamp strictly newer than ``since``."""
        cursor = await self.conn.execute(
            "SELECT * FROM reactions WHERE timestamp > ? ORDER BY timestamp",
            (since,),
        )
        return [_row_to_reaction(row) for row in await cursor.fetchall()]

    async def list_recent(self, limit: int) -> List[Reaction]:
        cursor = await self.conn.execute(
            "SELECT * FROM reactions ORDER BY timestamp DESC, id LIMIT ?", (limit,)
        )
        return [_row_to_reaction(row) for row in await cursor.fetchall()]

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def insert(
        self,
        track_id: str,
        user_id: Optional[str],
        kind: ReactionKind,
        timestamp: int,
        is_anonymous: bool,
        device_type: str,
        session_id: str,
    ) -> Reaction:
        reaction = Reaction(
            id=uuid.uuid4().hex,
            track_id=track_id,
            user_id=user_id,
            kind=kind,
            timestamp=timestamp,
            is_anonymous=is_anonymous,
            device_type=device_type,
            session_id=session_id,
        )
        await self.conn.execute(
            """
            INSERT INTO reactions (
                id, track_id, user_id, kind, timestamp,
                is_anonymous, device_type, session_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                reaction.id,
                reaction.track_id,
                reaction.user_id,
                reaction.kind.value,
                reaction.timestamp,
                int(reaction.is_anonymous),
                reaction.device_type,
                reaction.session_id,
            ),
        )
        return reaction

    async def overwrite(
        self,
        reaction_id: str,
        kind: ReactionKind,
        timestamp: int,
        device_type: Optional[str] = None,
    ) -> None:
        """Replace kind and timestamp in place; device type only when given."""
        if device_type is None:
            await self.conn.execute(
                "UPDATE reactions SET kind = ?, timestamp = ? WHERE id = ?",
                (kind.value, timestamp, reaction_id),
            )
        else:
            await self.conn.execute(
                "UPDATE reactions SET kind = ?, timestamp = ?, device_type = ? "
                "WHERE id = ?",
                (kind.value, timestamp, device_type, reaction_id),
            )

    async def delete(self, reaction_id: str) -> None:
        await self.conn.execute("DELETE FROM reactions WHERE id = ?", (reaction_id,))


class SummaryRepository:
    """The single summary row per track."""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn

    async def get(self, track_id: str) -> Optional[FeedbackSummary]:
        cursor = await self.conn.execute(
            "SELECT * FROM feedback_summaries WHERE track_id = ?", (track_id,)
        )
        row = await cursor.fetchone()
        return _row_to_summary(row) if row else None

    async def get_many(self, track_ids: List[str]) -> Dict[str, FeedbackSummary]:
        ids = list(dict.fromkeys(track_ids))
        if not ids:
            return {}
        placeholders = ",".join("?" for _ in ids)
        cursor = await self.conn.execute(
            f"SELECT * FROM feedback_summaries WHERE track_id IN ({placeholders})",
            ids,
        )
        return {row["track_id"]: _row_to_summary(row) for row in await cursor.fetchall()}

    async def upsert(self, summary: FeedbackSummary) -> None:
        await self.conn.execute(
            """
            INSERT INTO feedback_summaries (
                track_id, love_count, like_count, meh_count, dislike_count,
                total_count, average_score, last_updated
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(track_id) DO UPDATE SET
                love_count = excluded.love_count,
                like_count = excluded.like_count,
                meh_count = excluded.meh_count,
                dislike_count = excluded.dislike_count,
                total_count = excluded.total_count,
                average_score = excluded.average_score,
                last_updated = excluded.last_updated
            """,
            (
                summary.track_id,
                summary.love_count,
                summary.like_count,
                summary.meh_count,
                summary.dislike_count,
                summary.total_count,
                summary.average_score,
                summary.last_updated,
            ),
        )

    async def list_with_reactions(self, limit: int, offset: int) -> List[FeedbackSummary]:
        """Summaries with at least one reaction, most reacted first."""
        cursor = await self.conn.execute(
            "SELECT * FROM feedback_summaries WHERE total_count > 0 "
            "ORDER BY total_count DESC, track_id LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [_row_to_summary(row) for row in await cursor.fetchall()]

    async def list_controversial(
        self, min_total: int, limit: int, offset: int
    ) -> List[FeedbackSummary]:
        """Summaries averaging within 0.5 of the 2.5 midpoint, most reacted first."""
        cursor = await self.conn.execute(
            "SELECT * FROM feedback_summaries "
            "WHERE total_count > ? AND ABS(average_score - 2.5) < 0.5 "
            "ORDER BY total_count DESC, track_id LIMIT ? OFFSET ?",
            (min_total, limit, offset),
        )
        return [_row_to_summary(row) for row in await cursor.fetchall()]
