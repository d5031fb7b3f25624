import logging
from typing import Optional

from app.core.config import get_settings
from app.core.exceptions import BaseAppException
from app.core.identity import CallerIdentity, get_caller_identity
from app.models.feedback import (
    FeedbackStreamResponse,
    FeedbackSummary,
    ReactionListResponse,
    ReactionSubmitRequest,
    ReactionSubmitResponse,
    ReactionUpdateRequest,
    StreamSort,
)
from app.models.trending import TrendingTracksResponse
from app.services.feedback.feedback_service import (
    FeedbackService,
    get_feedback_service,
)
from app.services.trending.trending_service import (
    TrendingService,
    get_trending_service,
)
from fastapi import APIRouter, Depends, Query, status

router = APIRouter(prefix="/feedback", tags=["Feedback"])
logger = logging.getLogger(__name__)


@router.post("/reactions", response_model=ReactionSubmitResponse)
async def submit_reaction(
    body: ReactionSubmitRequest,
    caller: CallerIdentity = Depends(get_caller_identity),
    service: FeedbackService = Depends(get_feedback_service),
):
    """
    Submit a reaction to a track, replacing the caller's earlier one.
    """
    try:
        return await service.submit_reaction(
            track_id=body.track_id,
            kind=body.kind,
            caller=caller,
            is_anonymous=body.is_anonymous,
            session_id=body.session_id,
            device_type=body.device_type,
        )
    except BaseAppException:
        # Let service-level exceptions bubble up to centralized error handler
        raise
    except Exception as e:
        logger.error(f"Error recording reaction: {e!s}", exc_info=True)
        raise BaseAppException(
            detail="An error occurred while recording your feedback",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="FEEDBACK_SUBMISSION_FAILED",
        ) from e


@router.patch("/reactions/{reaction_id}")
async def update_reaction(
    reaction_id: str,
    body: ReactionUpdateRequest,
    caller: CallerIdentity = Depends(get_caller_identity),
    service: FeedbackService = Depends(get_feedback_service),
):
    """
    Change the kind of an existing reaction.
    """
    try:
        success = await service.update_reaction(
            reaction_id, body.kind, caller.with_session(body.session_id)
        )
        return {"success": success}
    except BaseAppException:
        raise
    except Exception as e:
        logger.error(f"Error updating reaction: {e!s}", exc_info=True)
        raise BaseAppException(
            detail="An error occurred while updating your feedback",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="FEEDBACK_UPDATE_FAILED",
        ) from e


@router.delete("/reactions/{reaction_id}")
async def delete_reaction(
    reaction_id: str,
    session_id: Optional[str] = Query(None, max_length=128),
    caller: CallerIdentity = Depends(get_caller_identity),
    service: FeedbackService = Depends(get_feedback_service),
):
    """
    Remove a reaction. Anonymous reactions need their session token.
    """
    try:
        success = await service.delete_reaction(
            reaction_id, caller.with_session(session_id)
        )
        return {"success": success}
    except BaseAppException:
        raise
    except Exception as e:
        logger.error(f"Error deleting reaction: {e!s}", exc_info=True)
        raise BaseAppException(
            detail="An error occurred while deleting your feedback",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="FEEDBACK_DELETE_FAILED",
        ) from e


@router.get("/reactions/me", response_model=ReactionListResponse)
async def get_my_reactions(
    track_id: Optional[str] = None,
    caller: CallerIdentity = Depends(get_caller_identity),
    service: FeedbackService = Depends(get_feedback_service),
):
    """List the caller's own reactions, optionally for one track."""
    reactions = await service.get_user_reactions(caller, track_id)
    return ReactionListResponse(reactions=reactions)


@router.get("/tracks/{track_id}/summary", response_model=FeedbackSummary)
async def get_track_summary(
    track_id: str,
    service: FeedbackService = Depends(get_feedback_service),
):
    """Per-track reaction counts and average. All zeros for unrated tracks."""
    return await service.get_summary(track_id)


@router.get("/stream", response_model=FeedbackStreamResponse)
async def get_feedback_stream(
    sort_by: str = Query(StreamSort.RECENT.value),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: FeedbackService = Depends(get_feedback_service),
):
    """
    Tracks with their feedback summaries.

    Unknown ``sort_by`` values fall back to ``recent``.
    """
    try:
        sort = StreamSort(sort_by)
    except ValueError:
        sort = StreamSort.RECENT
    items = await service.get_feedback_stream(sort, limit, offset)
    return FeedbackStreamResponse(sort_by=sort, items=items, limit=limit, offset=offset)


@router.get("/trending", response_model=TrendingTracksResponse)
async def get_trending(
    timeframe: Optional[str] = Query(None, max_length=16),
    category: Optional[str] = Query(None, max_length=64),
    limit: Optional[int] = Query(None, ge=1, le=100),
    service: TrendingService = Depends(get_trending_service),
):
    """Ranked trending tracks for a timeframe."""
    settings = get_settings()
    timeframe = timeframe or settings.TRENDING_DEFAULT_TIMEFRAME
    tracks = await service.get_trending_tracks(
        timeframe=timeframe,
        category=category,
        limit=limit or settings.TRENDING_DEFAULT_LIMIT,
    )
    return TrendingTracksResponse(
        timeframe=timeframe,
        category=category or settings.TRENDING_DEFAULT_CATEGORY,
        tracks=tracks,
    )
