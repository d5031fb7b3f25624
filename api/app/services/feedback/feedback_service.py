"""Reaction lifecycle and per-track feedback summaries."""

import logging
import secrets
import time
from typing import List, Optional

from app.core.config import Settings
from app.core.exceptions import (
    NotAuthorizedError,
    RateLimitExceededError,
    ReactionNotFoundError,
    TrackNotFoundError,
)
from app.core.identity import CallerIdentity
from app.db.database import Database
from app.metrics.feedback_metrics import (
    reaction_operations_total,
    reaction_rate_limited_total,
    reactions_by_kind_total,
    summary_recompute_seconds,
)
from app.models.feedback import (
    FeedbackSummary,
    Reaction,
    ReactionKind,
    ReactionSubmitResponse,
    StreamSort,
    TrackWithSummary,
)
from app.services.catalog.track_repository import TrackRepository
from app.services.feedback.aggregation import tally_summary
from app.services.feedback.reaction_repository import (
    ReactionRepository,
    SummaryRepository,
)
from app.utils.clock import Clock, now_ms
from app.utils.logging import mask_identity
from fastapi import Request

logger = logging.getLogger(__name__)

DEFAULT_DEVICE_TYPE = "unknown"
CONTROVERSIAL_MIN_REACTIONS = 5


def generate_session_id(now: int) -> str:
    """Session token for anonymous reactions submitted without one."""
    return f"anon_{now}_{secrets.token_hex(8)}"


class FeedbackService:
    """Submits, changes and removes reactions and keeps summaries in step.

    Each write and the summary recompute for its track share one
    ``BEGIN IMMEDIATE`` transaction, so a summary always matches the
    reactions committed with it.

    Dependencies injected via constructor:
    - database: Database (async SQLite)
    - settings: Settings (rate limit configuration)
    - clock: callable returning epoch milliseconds
    """

    def __init__(self, database: Database, settings: Settings, clock: Clock = now_ms):
        self.database = database
        self.settings = settings
        self.clock = clock

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    async def submit_reaction(
        self,
        track_id: str,
        kind: ReactionKind,
        caller: CallerIdentity,
        is_anonymous: bool = False,
        session_id: Optional[str] = None,
        device_type: Optional[str] = None,
    ) -> ReactionSubmitResponse:
        """Record the caller's reaction to a track, replacing any earlier one.

        Authenticated callers reacting under their own name are deduplicated
        by (track, user) and rate limited. Everyone else is deduplicated by
        (session, track); a session token is generated when none is known.

        Raises:
            TrackNotFoundError: The track does not exist
            RateLimitExceededError: Too many recent reactions from this user
        """
        caller = caller.with_session(session_id)
        named = caller.is_authenticated and not is_anonymous
        device_type = device_type or DEFAULT_DEVICE_TYPE

        async with self.database.transaction() as conn:
            now = self.clock()
            if not await TrackRepository(conn).exists(track_id):
                raise TrackNotFoundError(track_id)

            reactions = ReactionRepository(conn)
            if named:
                await self._check_rate_limit(reactions, caller.user_id, now)
                existing = await reactions.find_by_track_and_user(
                    track_id, caller.user_id
                )
            elif caller.session_id:
                existing = await reactions.find_by_session_and_track(
                    caller.session_id, track_id
                )
            else:
                existing = None

            if existing is not None:
                await reactions.overwrite(existing.id, kind, now, device_type)
                reaction_id = existing.id
                stored_session = existing.session_id
                outcome = "updated"
            else:
                stored_session = caller.session_id or generate_session_id(now)
                created = await reactions.insert(
                    track_id=track_id,
                    user_id=caller.user_id if named else None,
                    kind=kind,
                    timestamp=now,
                    is_anonymous=is_anonymous,
                    device_type=device_type,
                    session_id=stored_session,
                )
                reaction_id = created.id
                outcome = "created"

            await self._recompute(conn, track_id, now)

        reaction_operations_total.labels(operation="submit", outcome=outcome).inc()
        reactions_by_kind_total.labels(
            kind=kind.value, anonymous=str(not named).lower()
        ).inc()
        logger.info(
            "Reaction %s %s on track %s by %s",
            reaction_id,
            outcome,
            track_id,
            mask_identity(caller.user_id if named else stored_session),
        )
        return ReactionSubmitResponse(feedback_id=reaction_id, session_id=stored_session)

    async def _check_rate_limit(
        self, reactions: ReactionRepository, user_id: str, now: int
    ) -> None:
        since = now - self.settings.REACTION_RATE_LIMIT_WINDOW_MS
        recent = await reactions.count_by_user_since(user_id, since)
        if recent >= self.settings.REACTION_RATE_LIMIT_MAX:
            reaction_rate_limited_total.inc()
            reaction_operations_total.labels(operation="submit", outcome="rejected").inc()
            logger.warning(
                "Rate limit hit by %s (%d reactions in window)",
                mask_identity(user_id),
                recent,
            )
            raise RateLimitExceededError(
                self.settings.REACTION_RATE_LIMIT_MAX,
                self.settings.REACTION_RATE_LIMIT_WINDOW_SECONDS,
            )

    # ------------------------------------------------------------------
    # Update / delete
    # ------------------------------------------------------------------

    async def update_reaction(
        self, reaction_id: str, kind: ReactionKind, caller: CallerIdentity
    ) -> bool:
        async with self.database.transaction() as conn:
            reactions = ReactionRepository(conn)
            reaction = await self._get_owned(reactions, reaction_id, caller, "update")
            now = self.clock()
            await reactions.overwrite(reaction.id, kind, now)
            await self._recompute(conn, reaction.track_id, now)

        reaction_operations_total.labels(operation="update", outcome="updated").inc()
        logger.info("Reaction %s changed to %s", reaction_id, kind.value)
        return True

    async def delete_reaction(self, reaction_id: str, caller: CallerIdentity) -> bool:
        async with self.database.transaction() as conn:
            reactions = ReactionRepository(conn)
            reaction = await self._get_owned(reactions, reaction_id, caller, "delete")
            await reactions.delete(reaction.id)
            await self._recompute(conn, reaction.track_id, self.clock())

        reaction_operations_total.labels(operation="delete", outcome="deleted").inc()
        logger.info("Reaction %s deleted", reaction_id)
        return True

    async def _get_owned(
        self,
        reactions: ReactionRepository,
        reaction_id: str,
        caller: CallerIdentity,
        action: str,
    ) -> Reaction:
        """Load a reaction the caller may change.

        Named reactions belong to their user. Anonymous ones belong to the
        session token stored with them.
        """
        reaction = await reactions.get(reaction_id)
        if reaction is None:
            raise ReactionNotFoundError(reaction_id)

        if reaction.is_anonymous or reaction.user_id is None:
            allowed = (
                caller.session_id is not None
                and caller.session_id == reaction.session_id
            )
        else:
            allowed = caller.user_id == reaction.user_id

        if not allowed:
            reaction_operations_total.labels(operation=action, outcome="rejected").inc()
            logger.warning(
                "Refused to %s reaction %s for %s",
                action,
                reaction_id,
                mask_identity(caller.user_id or caller.session_id),
            )
            raise NotAuthorizedError(action, "feedback")
        return reaction

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    async def _recompute(self, conn, track_id: str, now: int) -> FeedbackSummary:
        started = time.perf_counter()
        kinds = await ReactionRepository(conn).kinds_for_track(track_id)
        summary = tally_summary(track_id, kinds, now)
        await SummaryRepository(conn).upsert(summary)
        summary_recompute_seconds.observe(time.perf_counter() - started)
        return summary

    async def recompute_summary(self, track_id: str) -> FeedbackSummary:
        """Rebuild a track's summary from every stored reaction."""
        async with self.database.transaction() as conn:
            if not await TrackRepository(conn).exists(track_id):
                raise TrackNotFoundError(track_id)
            return await self._recompute(conn, track_id, self.clock())

    async def get_summary(self, track_id: str) -> FeedbackSummary:
        """Stored summary, or all zeros when the track has none yet."""
        async with self.database.connection() as conn:
            summary = await SummaryRepository(conn).get(track_id)
        return summary or FeedbackSummary.empty(track_id, self.clock())

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_user_reactions(
        self, caller: CallerIdentity, track_id: Optional[str] = None
    ) -> List[Reaction]:
        """Reactions owned by the caller, newest first."""
        async with self.database.connection() as conn:
            reactions = ReactionRepository(conn)
            if caller.is_authenticated:
                return await reactions.list_by_user(caller.user_id, track_id)
            if caller.session_id:
                return await reactions.list_by_session(caller.session_id, track_id)
        return []

    async def get_feedback_stream(
        self, sort_by: StreamSort = StreamSort.RECENT, limit: int = 20, offset: int = 0
    ) -> List[TrackWithSummary]:
        """Tracks with their summaries for the discovery feed.

        ``trending`` orders tracks by reaction count, ``controversial`` keeps
        busy tracks with a split average, and ``recent`` lists tracks by their
        latest reactions.
        """
        now = self.clock()
        async with self.database.connection() as conn:
            summaries = SummaryRepository(conn)
            if sort_by == StreamSort.TRENDING:
                page = await summaries.list_with_reactions(limit, offset)
                track_ids = [s.track_id for s in page]
                by_track = {s.track_id: s for s in page}
            elif sort_by == StreamSort.CONTROVERSIAL:
                page = await summaries.list_controversial(
                    CONTROVERSIAL_MIN_REACTIONS, limit, offset
                )
                track_ids = [s.track_id for s in page]
                by_track = {s.track_id: s for s in page}
            else:
                recent = await ReactionRepository(conn).list_recent(limit * 2)
                distinct = list(dict.fromkeys(r.track_id for r in recent))
                track_ids = distinct[offset : offset + limit]
                by_track = await summaries.get_many(track_ids)

            tracks = await TrackRepository(conn).get_many(track_ids)

        return [
            TrackWithSummary(
                track=tracks[track_id],
                feedback_summary=by_track.get(track_id)
                or FeedbackSummary.empty(track_id, now),
            )
            for track_id in track_ids
            if track_id in tracks
        ]


def get_feedback_service(request: Request) -> FeedbackService:
    """Get the feedback service from the request state."""
    return request.app.state.feedback_service
