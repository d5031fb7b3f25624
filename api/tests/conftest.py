"""
Pytest configuration and fixtures for the TrackPulse API.

This module provides:
- Test settings with isolated test environment
- A temporary SQLite database per test
- Service fixtures sharing a controllable clock
- Helpers for seeding tracks
"""

from typing import Callable

import pytest
import pytest_asyncio
from app.core.config import Settings, reset_settings
from app.core.identity import CallerIdentity
from app.db.database import Database
from app.models.track import Track, TrackCreate
from app.services.artists.artist_service import ArtistService
from app.services.catalog.track_service import TrackService
from app.services.feedback.feedback_service import FeedbackService
from app.services.playlists.playlist_service import PlaylistService
from app.services.trending.trending_service import TrendingService

# 2026-01-01T00:00:00Z in epoch milliseconds
START_MS = 1_767_225_600_000

TEST_ADMIN_KEY = "test-admin-key-0123456789abcdef"


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


@pytest.fixture(autouse=True)
def _reset_cached_settings():
    """Keep get_settings() from leaking environment changes between tests."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings configured for an isolated test environment."""
    return Settings(
        DEBUG=True,
        DATA_DIR=str(tmp_path / "data"),
        ADMIN_API_KEY=TEST_ADMIN_KEY,
        ENVIRONMENT="testing",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def database(tmp_path) -> Database:
    """Initialized Database on a temporary file."""
    db = Database(str(tmp_path / "test_trackpulse.db"))
    await db.initialize()
    return db


@pytest.fixture
def track_service(database, clock) -> TrackService:
    return TrackService(database, clock=clock)


@pytest.fixture
def feedback_service(database, test_settings, clock) -> FeedbackService:
    return FeedbackService(database, test_settings, clock=clock)


@pytest.fixture
def trending_service(database, test_settings, clock) -> TrendingService:
    return TrendingService(database, test_settings, clock=clock)


@pytest.fixture
def playlist_service(database, clock) -> PlaylistService:
    return PlaylistService(database, clock=clock)


@pytest.fixture
def artist_service(database, clock) -> ArtistService:
    return ArtistService(database, clock=clock)


@pytest.fixture
def uploader() -> CallerIdentity:
    return CallerIdentity(user_id="uploader-1")


@pytest.fixture
def make_track(track_service, uploader) -> Callable:
    """Factory that registers a track and returns it."""

    async def _make(title: str = "Night Drive", **overrides) -> Track:
        data = dict(title=title, artist="The Examples", duration=201.5)
        data.update(overrides)
        return await track_service.create_track(TrackCreate(**data), uploader)

    return _make
