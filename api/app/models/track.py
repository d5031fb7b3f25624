"""Pydantic models for the track catalog."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class TrackCreate(BaseModel):
    """Fields required to register a track."""

    title: str = Field(..., min_length=1, max_length=200)
    artist: str = Field(..., min_length=1, max_length=200)
    duration: float = Field(..., gt=0, description="Duration in seconds")
    genre: Optional[str] = Field(None, max_length=64)
    audio_quality: Optional[str] = Field(
        None, max_length=32, description='e.g. "128k", "320k", "lossless"'
    )
    allow_download: bool = False

    @field_validator("title", "artist", mode="before")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v

    @field_validator("genre", mode="before")
    @classmethod
    def normalize_genre(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v


class Track(BaseModel):
    """Full track record (database row)."""

    id: str
    title: str
    artist: str
    duration: float
    genre: Optional[str] = None
    audio_quality: Optional[str] = None
    allow_download: bool = False
    uploaded_by: str
    uploaded_at: int


class TrackListResponse(BaseModel):
    tracks: List[Track]
    limit: int
    offset: int
