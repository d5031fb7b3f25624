"""Async SQLite queries for stored trending rankings."""

import logging
from typing import List, Optional, Sequence

import aiosqlite
from app.models.trending import TrackScore, TrendingEntry

logger = logging.getLogger(__name__)


def _row_to_entry(row: aiosqlite.Row) -> TrendingEntry:
    return TrendingEntry(**dict(row))


class TrendingRepository:
    """Trending entries bound to one connection."""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn

    async def list_ranked(
        self, timeframe: str, category: Optional[str], limit: int
    ) -> List[TrendingEntry]:
        """Entries for a timeframe by ascending rank; no category means all."""
        query = "SELECT * FROM trending_entries WHERE timeframe = ?"
        params: list = [timeframe]
        if category is not None:
            query += " AND category = ?"
            params.append(category)
        query += " ORDER BY rank ASC LIMIT ?"
        params.append(limit)
        cursor = await self.conn.execute(query, params)
        return [_row_to_entry(row) for row in await cursor.fetchall()]

    async def delete_timeframe(self, timeframe: str) -> int:
        cursor = await self.conn.execute(
            "DELETE FROM trending_entries WHERE timeframe = ?", (timeframe,)
        )
        return cursor.rowcount

    async def insert_ranking(
        self,
        timeframe: str,
        category: str,
        scores: Sequence[TrackScore],
        computed_at: int,
    ) -> int:
        """Insert scores in order with ranks starting at 1."""
        rows = [
            (s.track_id, s.score, timeframe, category, rank, computed_at)
            for rank, s in enumerate(scores, start=1)
        ]
        await self.conn.executemany(
            """
            INSERT INTO trending_entries (
                track_id, score, timeframe, category, rank, computed_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            rows,
        )
        return len(rows)
