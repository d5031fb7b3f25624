"""
Playlist routes.
"""

import logging

from app.core.identity import CallerIdentity, get_caller_identity, require_authenticated
from app.models.playlist import (
    Playlist,
    PlaylistCreate,
    PlaylistListResponse,
    PlaylistTrackRequest,
    PlaylistWithTracks,
)
from app.services.playlists.playlist_service import (
    PlaylistService,
    get_playlist_service,
)
from fastapi import APIRouter, Depends, status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/playlists", tags=["Playlists"])


@router.post("", response_model=Playlist, status_code=status.HTTP_201_CREATED)
async def create_playlist(
    body: PlaylistCreate,
    caller: CallerIdentity = Depends(require_authenticated),
    service: PlaylistService = Depends(get_playlist_service),
):
    return await service.create_playlist(body, caller)


@router.get("", response_model=PlaylistListResponse)
async def list_my_playlists(
    caller: CallerIdentity = Depends(get_caller_identity),
    service: PlaylistService = Depends(get_playlist_service),
):
    return PlaylistListResponse(playlists=await service.list_user_playlists(caller))


@router.get("/{playlist_id}", response_model=PlaylistWithTracks)
async def get_playlist(
    playlist_id: str,
    caller: CallerIdentity = Depends(get_caller_identity),
    service: PlaylistService = Depends(get_playlist_service),
):
    """A playlist with its tracks. Private playlists are visible to their owner only."""
    return await service.get_playlist(playlist_id, caller)


@router.post("/{playlist_id}/tracks", response_model=Playlist)
async def add_playlist_track(
    playlist_id: str,
    body: PlaylistTrackRequest,
    caller: CallerIdentity = Depends(require_authenticated),
    service: PlaylistService = Depends(get_playlist_service),
):
    return await service.add_track(playlist_id, body.track_id, caller)


@router.delete("/{playlist_id}/tracks/{track_id}", response_model=Playlist)
async def remove_playlist_track(
    playlist_id: str,
    track_id: str,
    caller: CallerIdentity = Depends(require_authenticated),
    service: PlaylistService = Depends(get_playlist_service),
):
    return await service.remove_track(playlist_id, track_id, caller)
