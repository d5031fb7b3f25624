"""Pydantic models for artist profiles."""

import re
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

_WHITESPACE = re.compile(r"\s+")


def artist_slug(display_name: str) -> str:
    """URL name of an artist: lowercased, whitespace runs become hyphens."""
    return _WHITESPACE.sub("-", display_name.lower())


class SocialLinks(BaseModel):
    spotify: Optional[str] = Field(None, max_length=500)
    bandcamp: Optional[str] = Field(None, max_length=500)
    soundcloud: Optional[str] = Field(None, max_length=500)
    youtube: Optional[str] = Field(None, max_length=500)


class CustomColors(BaseModel):
    """Profile page theme colors."""

    primary: str = Field(..., max_length=32)
    secondary: str = Field(..., max_length=32)
    accent: str = Field(..., max_length=32)


class ArtistProfileUpdate(BaseModel):
    """Request body for creating or updating the caller's artist profile.

    Optional fields left out of the request keep their stored values.
    """

    display_name: str = Field(..., min_length=1, max_length=100)
    bio: Optional[str] = Field(None, max_length=5000)
    genre: Optional[str] = Field(None, max_length=64)
    website: Optional[str] = Field(None, max_length=500)
    social_links: Optional[SocialLinks] = None
    custom_colors: Optional[CustomColors] = None

    @field_validator("display_name", mode="before")
    @classmethod
    def strip_display_name(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v


class ArtistProfile(BaseModel):
    """Artist profile record (database row); one per user."""

    id: str
    user_id: str
    display_name: str
    slug: str
    bio: Optional[str] = None
    genre: Optional[str] = None
    website: Optional[str] = None
    social_links: Optional[SocialLinks] = None
    custom_colors: Optional[CustomColors] = None
    created_at: int
    updated_at: int


class ArtistProfileListResponse(BaseModel):
    artists: List[ArtistProfile]
