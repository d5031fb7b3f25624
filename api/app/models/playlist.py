"""Pydantic models for user playlists."""

from typing import List, Optional

from app.models.track import Track
from pydantic import BaseModel, Field, field_validator


class PlaylistCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    is_public: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v


class Playlist(BaseModel):
    """Playlist record with its ordered track ids."""

    id: str
    name: str
    description: Optional[str] = None
    owner_id: str
    is_public: bool = False
    created_at: int
    updated_at: int
    track_ids: List[str] = Field(default_factory=list)


class PlaylistTrackRequest(BaseModel):
    track_id: str = Field(..., min_length=1, max_length=64)


class PlaylistWithTracks(BaseModel):
    playlist: Playlist
    tracks: List[Track]


class PlaylistListResponse(BaseModel):
    playlists: List[Playlist]
