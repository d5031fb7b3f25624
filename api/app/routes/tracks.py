"""
Track catalog routes.
"""

import logging
from typing import List

from app.core.identity import CallerIdentity, get_caller_identity, require_authenticated
from app.models.track import Track, TrackCreate, TrackListResponse
from app.services.catalog.track_service import TrackService, get_track_service
from fastapi import APIRouter, Depends, Query, status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tracks", tags=["Tracks"])


@router.post("", response_model=Track, status_code=status.HTTP_201_CREATED)
async def create_track(
    body: TrackCreate,
    caller: CallerIdentity = Depends(require_authenticated),
    service: TrackService = Depends(get_track_service),
):
    return await service.create_track(body, caller)


@router.get("", response_model=TrackListResponse)
async def list_tracks(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    service: TrackService = Depends(get_track_service),
):
    tracks = await service.list_tracks(limit, offset)
    return TrackListResponse(tracks=tracks, limit=limit, offset=offset)


@router.get("/mine", response_model=List[Track])
async def list_my_tracks(
    caller: CallerIdentity = Depends(get_caller_identity),
    service: TrackService = Depends(get_track_service),
):
    """Tracks uploaded by the caller; empty for anonymous callers."""
    return await service.list_user_tracks(caller)


@router.get("/{track_id}", response_model=Track)
async def get_track(
    track_id: str,
    service: TrackService = Depends(get_track_service),
):
    return await service.require_track(track_id)


@router.delete("/{track_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_track(
    track_id: str,
    caller: CallerIdentity = Depends(require_authenticated),
    service: TrackService = Depends(get_track_service),
):
    """Delete an uploaded track together with its reactions and summary."""
    await service.delete_track(track_id, caller)
