"""Pydantic models for trending rankings."""

from typing import Dict, List

from app.models.feedback import FeedbackSummary
from app.models.track import Track
from pydantic import BaseModel, Field

HOUR_MS = 60 * 60 * 1000

# Scoring window per timeframe label
TIMEFRAME_WINDOWS_MS: Dict[str, int] = {
    "1h": HOUR_MS,
    "24h": 24 * HOUR_MS,
    "7d": 7 * 24 * HOUR_MS,
    "30d": 30 * 24 * HOUR_MS,
}
FALLBACK_TIMEFRAME = "24h"
DEFAULT_CATEGORY = "all"


def window_for(timeframe: str) -> int:
    """Scoring window in milliseconds; unknown labels use the 24h window."""
    return TIMEFRAME_WINDOWS_MS.get(timeframe, TIMEFRAME_WINDOWS_MS[FALLBACK_TIMEFRAME])


class TrackScore(BaseModel):
    """Intermediate ranking result for one track."""

    track_id: str
    score: float
    reaction_count: int


class TrendingEntry(BaseModel):
    """One ranked row for a track within a timeframe (database row)."""

    id: int
    track_id: str
    score: float
    timeframe: str
    category: str = DEFAULT_CATEGORY
    rank: int = Field(..., ge=1)
    computed_at: int


class TrendingComputeResponse(BaseModel):
    processed_count: int = Field(description="Distinct tracks scored in the window")
    timeframe: str


class TrendingTrack(BaseModel):
    """A ranked track joined with its track record and feedback summary."""

    track: Track
    trending_score: float
    trending_rank: int
    feedback_summary: FeedbackSummary


class TrendingTracksResponse(BaseModel):
    timeframe: str
    category: str
    tracks: List[TrendingTrack]
