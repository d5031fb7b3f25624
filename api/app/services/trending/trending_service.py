"""Trending ranking computation and reads."""

import asyncio
import logging
import time
from typing import Dict, List, Optional

from app.core.config import Settings
from app.db.database import Database
from app.metrics.feedback_metrics import (
    record_trending_failure,
    record_trending_success,
)
from app.models.feedback import FeedbackSummary
from app.models.trending import (
    DEFAULT_CATEGORY,
    TrendingComputeResponse,
    TrendingTrack,
    window_for,
)
from app.services.catalog.track_repository import TrackRepository
from app.services.feedback.reaction_repository import (
    ReactionRepository,
    SummaryRepository,
)
from app.services.trending.ranking import score_tracks
from app.services.trending.trending_repository import TrendingRepository
from app.utils.clock import Clock, now_ms
from fastapi import Request

logger = logging.getLogger(__name__)


class TrendingService:
    """Builds and serves per-timeframe trending rankings.

    A ranking run reads the window's reactions, deletes the timeframe's old
    entries and inserts the new ones inside one transaction, so readers see
    either the old ranking or the new one. Runs for the same timeframe are
    also serialized within the process.
    """

    def __init__(self, database: Database, settings: Settings, clock: Clock = now_ms):
        self.database = database
        self.settings = settings
        self.clock = clock
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, timeframe: str) -> asyncio.Lock:
        lock = self._locks.get(timeframe)
        if lock is None:
            lock = self._locks[timeframe] = asyncio.Lock()
        return lock

    async def compute_trending(self, timeframe: str) -> TrendingComputeResponse:
        """Replace the stored ranking for ``timeframe``.

        Unknown labels are scored with the 24h window but stored under the
        label as given.
        """
        window_ms = window_for(timeframe)
        started = time.perf_counter()

        async with self._lock_for(timeframe):
            try:
                async with self.database.transaction() as conn:
                    now = self.clock()
                    cutoff = now - window_ms
                    reactions = await ReactionRepository(conn).list_since(cutoff)
                    scores = score_tracks(reactions, cutoff, window_ms)

                    trending = TrendingRepository(conn)
                    removed = await trending.delete_timeframe(timeframe)
                    stored = await trending.insert_ranking(
                        timeframe,
                        DEFAULT_CATEGORY,
                        scores[: self.settings.TRENDING_MAX_ENTRIES],
                        now,
                    )
            except Exception:
                record_trending_failure(timeframe)
                logger.exception(
                    "Trending computation failed for %s; previous ranking kept",
                    timeframe,
                )
                raise

        duration = time.perf_counter() - started
        record_trending_success(timeframe, stored, duration)
        logger.info(
            "Trending %s: scored %d tracks from %d reactions, stored %d "
            "(replaced %d) in %.3fs",
            timeframe,
            len(scores),
            len(reactions),
            stored,
            removed,
            duration,
        )
        return TrendingComputeResponse(processed_count=len(scores), timeframe=timeframe)

    async def compute_all(
        self, timeframes: Optional[List[str]] = None
    ) -> List[TrendingComputeResponse]:
        """Run the ranker for each configured timeframe in turn."""
        results = []
        for timeframe in timeframes or self.settings.TRENDING_TIMEFRAMES:
            results.append(await self.compute_trending(timeframe))
        return results

    async def get_trending_tracks(
        self,
        timeframe: str = "24h",
        category: Optional[str] = None,
        limit: int = 20,
    ) -> List[TrendingTrack]:
        """Ranked tracks joined with their track record and summary.

        ``category`` of ``"all"`` or ``None`` applies no filter. Entries whose
        track no longer exists are dropped.
        """
        if category == DEFAULT_CATEGORY:
            category = None
        now = self.clock()

        async with self.database.connection() as conn:
            entries = await TrendingRepository(conn).list_ranked(timeframe, category, limit)
            track_ids = [e.track_id for e in entries]
            tracks = await TrackRepository(conn).get_many(track_ids)
            summaries = await SummaryRepository(conn).get_many(track_ids)

        results = []
        for entry in entries:
            track = tracks.get(entry.track_id)
            if track is None:
                logger.debug("Dropping trending entry for missing track %s", entry.track_id)
                continue
            results.append(
                TrendingTrack(
                    track=track,
                    trending_score=entry.score,
                    trending_rank=entry.rank,
                    feedback_summary=summaries.get(entry.track_id)
                    or FeedbackSummary.empty(entry.track_id, now),
                )
            )
        return results


def get_trending_service(request: Request) -> TrendingService:
    """Get the trending service from the request state."""
    return request.app.state.trending_service
