"""
Artist profile routes.
"""

import logging
from typing import List, Optional

from app.core.identity import CallerIdentity, get_caller_identity, require_authenticated
from app.models.artist import (
    ArtistProfile,
    ArtistProfileListResponse,
    ArtistProfileUpdate,
)
from app.models.track import Track
from app.services.artists.artist_service import ArtistService, get_artist_service
from fastapi import APIRouter, Depends, Path

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/artists", tags=["Artists"])


@router.put("/me", response_model=ArtistProfile)
async def save_my_profile(
    body: ArtistProfileUpdate,
    caller: CallerIdentity = Depends(require_authenticated),
    service: ArtistService = Depends(get_artist_service),
):
    """Create or update the caller's artist profile."""
    return await service.save_profile(body, caller)


@router.get("/me", response_model=Optional[ArtistProfile])
async def get_my_profile(
    caller: CallerIdentity = Depends(get_caller_identity),
    service: ArtistService = Depends(get_artist_service),
):
    """The caller's profile, or null when they have none."""
    return await service.get_my_profile(caller)


@router.get("", response_model=ArtistProfileListResponse)
async def list_artists(service: ArtistService = Depends(get_artist_service)):
    return ArtistProfileListResponse(artists=await service.list_profiles())


@router.get("/by-name/{name}", response_model=ArtistProfile)
async def get_artist_by_name(
    name: str = Path(..., max_length=200),
    service: ArtistService = Depends(get_artist_service),
):
    return await service.get_by_name(name)


@router.get("/{user_id}", response_model=ArtistProfile)
async def get_artist(
    user_id: str,
    service: ArtistService = Depends(get_artist_service),
):
    return await service.require_profile(user_id)


@router.get("/{user_id}/tracks", response_model=List[Track])
async def get_artist_tracks(
    user_id: str,
    service: ArtistService = Depends(get_artist_service),
):
    """Tracks uploaded by the artist, newest first."""
    return await service.get_artist_tracks(user_id)
