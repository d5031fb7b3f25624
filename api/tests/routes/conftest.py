"""Fixtures for HTTP route tests: a FastAPI app wired to real services."""

import asyncio

import pytest
from app.core.error_handlers import register_exception_handlers
from app.db.database import Database
from app.middleware.cache_control import CacheControlMiddleware
from app.routes import artists, feedback_routes, health, playlists, tracks
from app.routes.admin import include_admin_routers
from app.services.artists.artist_service import ArtistService
from app.services.catalog.track_service import TrackService
from app.services.feedback.feedback_service import FeedbackService
from app.services.playlists.playlist_service import PlaylistService
from app.services.trending.trending_service import TrendingService
from fastapi import FastAPI
from fastapi.testclient import TestClient


@pytest.fixture
def api_settings(test_settings, monkeypatch):
    """Route-level settings come from get_settings(); point it at the test values."""
    monkeypatch.setenv("ADMIN_API_KEY", test_settings.ADMIN_API_KEY)
    monkeypatch.setenv("ENVIRONMENT", "testing")
    monkeypatch.setenv("DATA_DIR", test_settings.DATA_DIR)
    return test_settings


@pytest.fixture
def route_database(tmp_path) -> Database:
    db = Database(str(tmp_path / "routes.db"))
    asyncio.run(db.initialize())
    return db


@pytest.fixture
def app(api_settings, route_database, clock) -> FastAPI:
    app = FastAPI()
    app.state.database = route_database
    app.state.track_service = TrackService(route_database, clock=clock)
    app.state.feedback_service = FeedbackService(route_database, api_settings, clock=clock)
    app.state.trending_service = TrendingService(route_database, api_settings, clock=clock)
    app.state.playlist_service = PlaylistService(route_database, clock=clock)
    app.state.artist_service = ArtistService(route_database, clock=clock)

    app.add_middleware(CacheControlMiddleware)
    app.include_router(health.router)
    app.include_router(feedback_routes.router)
    app.include_router(tracks.router)
    app.include_router(playlists.router)
    app.include_router(artists.router)
    include_admin_routers(app)
    register_exception_handlers(app)
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def create_track(client):
    """Register a track through the API and return its JSON."""

    def _create(title: str = "Night Drive", user: str = "uploader-1") -> dict:
        response = client.post(
            "/tracks",
            json={"title": title, "artist": "The Examples", "duration": 200},
            headers={"X-User-Id": user},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create
