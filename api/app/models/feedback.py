"""Pydantic models for track reactions and their per-track summary."""

from enum import Enum
from typing import Dict, List, Optional

from app.models.track import Track
from pydantic import BaseModel, Field, field_validator


class ReactionKind(str, Enum):
    LOVE = "love"
    LIKE = "like"
    MEH = "meh"
    DISLIKE = "dislike"


# Ordinal value of each reaction kind, used for averages and trending scores
REACTION_SCORES: Dict[ReactionKind, int] = {
    ReactionKind.LOVE: 4,
    ReactionKind.LIKE: 3,
    ReactionKind.MEH: 2,
    ReactionKind.DISLIKE: 1,
}


class StreamSort(str, Enum):
    RECENT = "recent"
    TRENDING = "trending"
    CONTROVERSIAL = "controversial"


class Reaction(BaseModel):
    """One identity's current reaction to one track (database row)."""

    id: str
    track_id: str
    user_id: Optional[str] = None
    kind: ReactionKind
    timestamp: int
    is_anonymous: bool = False
    device_type: str = "unknown"
    session_id: str


class ReactionSubmitRequest(BaseModel):
    """Request body for submitting a reaction."""

    track_id: str = Field(..., min_length=1, max_length=64)
    kind: ReactionKind
    is_anonymous: bool = False
    device_type: Optional[str] = Field(None, max_length=32)
    session_id: Optional[str] = Field(None, max_length=128)

    @field_validator("device_type", mode="before")
    @classmethod
    def normalize_device_type(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v


class ReactionUpdateRequest(BaseModel):
    """Request body for changing an existing reaction."""

    kind: ReactionKind
    session_id: Optional[str] = Field(
        None, max_length=128, description="Session token for anonymous reactions"
    )


class ReactionSubmitResponse(BaseModel):
    success: bool = True
    feedback_id: str
    session_id: str = Field(
        description="Session token stored with the reaction; reuse it for later updates"
    )


class ReactionListResponse(BaseModel):
    reactions: List[Reaction]


class FeedbackSummary(BaseModel):
    """Denormalized per-track tally, fully recomputed on every reaction write."""

    track_id: str
    love_count: int = 0
    like_count: int = 0
    meh_count: int = 0
    dislike_count: int = 0
    total_count: int = 0
    average_score: float = Field(default=0.0, ge=0.0, le=4.0)
    last_updated: int

    @classmethod
    def empty(cls, track_id: str, now: int) -> "FeedbackSummary":
        """Zero-valued summary for a track without reactions."""
        return cls(track_id=track_id, last_updated=now)


class TrackWithSummary(BaseModel):
    """A track joined with its feedback summary."""

    track: Track
    feedback_summary: FeedbackSummary


class FeedbackStreamResponse(BaseModel):
    sort_by: StreamSort
    items: List[TrackWithSummary]
    limit: int
    offset: int
