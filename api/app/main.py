"""
FastAPI application for the TrackPulse music feedback service.
This module sets up the API server with routes, middleware, and error handling.
"""

import ipaddress
import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, Dict

from app.core.config import get_settings
from app.core.error_handlers import register_exception_handlers
from app.db.database import get_database
from app.middleware import CacheControlMiddleware
from app.routes import artists, feedback_routes, health, playlists, tracks
from app.routes.admin import include_admin_routers
from app.services.artists.artist_service import ArtistService
from app.services.catalog.track_service import TrackService
from app.services.feedback.feedback_service import FeedbackService
from app.services.playlists.playlist_service import PlaylistService
from app.services.trending.refresher import TrendingRefresher
from app.services.trending.trending_service import TrendingService
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from prometheus_fastapi_instrumentator import Instrumentator
from prometheus_fastapi_instrumentator import metrics as instrumentator_metrics

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger("app.main")

# Settings are read lazily; nothing touches the filesystem at import time


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Application startup...")

    settings = get_settings()
    app.state.settings = settings
    settings.ensure_data_dirs()

    database = get_database(settings.MUSIC_DB_PATH)
    await database.initialize()
    app.state.database = database

    # Assign services to app state
    app.state.track_service = TrackService(database)
    app.state.feedback_service = FeedbackService(database, settings)
    app.state.trending_service = TrendingService(database, settings)
    app.state.playlist_service = PlaylistService(database)
    app.state.artist_service = ArtistService(database)

    trending_refresher = TrendingRefresher(app.state.trending_service, settings)
    await trending_refresher.start()
    app.state.trending_refresher = trending_refresher

    logger.info("Application startup complete")
    yield

    # Shutdown
    logger.info("Application shutdown...")
    await app.state.trending_refresher.stop()


# Create FastAPI application
app = FastAPI(
    title=get_settings().PROJECT_NAME,
    docs_url="/api/docs",
    openapi_url=f"{get_settings().API_V1_STR}/openapi.json",
    lifespan=lifespan,
)


# Custom OpenAPI with security scheme
def custom_openapi() -> Dict[str, Any]:
    """Generate custom OpenAPI schema with admin authentication.

    Returns:
        OpenAPI schema dictionary with security schemes configured
    """
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    openapi_schema["components"] = openapi_schema.get("components", {})
    openapi_schema["components"]["securitySchemes"] = {
        "AdminApiKeyAuth": {
            "type": "apiKey",
            "in": "header",
            "name": "X-API-KEY",
            "description": "Admin API key",
        },
        "AdminBearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "description": "Admin API key sent as a bearer token",
        },
    }

    # Apply security to admin routes
    for path, operations in openapi_schema["paths"].items():
        if not path.startswith("/admin/"):
            continue
        for method, operation in operations.items():
            if method == "parameters" or not isinstance(operation, dict):
                continue
            operation["security"] = [
                {"AdminApiKeyAuth": []},
                {"AdminBearerAuth": []},
            ]

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi  # type: ignore[method-assign]

# Configure CORS
# Toggle credentials off when wildcard is used (Starlette forbids wildcard + credentials)
_origins = get_settings().CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=False if _origins == ["*"] else True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(CacheControlMiddleware)
logger.info("Cache control middleware registered")

# Set up Prometheus metrics
# DON'T call .expose() - the /metrics endpoint below applies its own access check
instrumentator = Instrumentator(
    should_group_status_codes=False,
    should_ignore_untemplated=True,
    should_respect_env_var=False,  # Always enable metrics
    should_instrument_requests_inprogress=True,
    excluded_handlers=["/health", "/health/live", "/health/ready", "/metrics"],
    inprogress_name="http_requests_inprogress",
    inprogress_labels=True,
)

instrumentator.add(instrumentator_metrics.default())
instrumentator.add(
    instrumentator_metrics.latency(buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5))
)

instrumentator.instrument(app)
logger.info("Prometheus metrics instrumentation initialized")


def _is_private_client(request: Request) -> bool:
    client_host = (request.client.host if request.client else "") or ""
    if client_host in {"localhost", "testclient"}:
        return True
    # "[2001:db8::1]:8000" -> "2001:db8::1", "127.0.0.1:8000" -> "127.0.0.1"
    parsed_host = client_host.strip("[]")
    if parsed_host.count(":") == 1:
        parsed_host = parsed_host.rsplit(":", 1)[0]
    try:
        ip = ipaddress.ip_address(parsed_host)
    except ValueError:
        # Unparsable address - deny (fail closed)
        return False
    return ip.is_private or ip.is_loopback or ip.is_link_local


@app.get("/metrics", include_in_schema=False)
async def metrics(request: Request):
    """
    Prometheus metrics endpoint.

    In production only private, loopback and link-local clients may scrape it.
    """
    if get_settings().ENVIRONMENT in {"production", "prod"} and not _is_private_client(
        request
    ):
        raise HTTPException(status_code=404)

    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


# Include routers
app.include_router(health.router)
app.include_router(feedback_routes.router)
app.include_router(tracks.router)
app.include_router(playlists.router)
app.include_router(artists.router)
include_admin_routers(app)

register_exception_handlers(app)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    # Bind to 0.0.0.0 only in DEBUG mode (container/development)
    # Otherwise bind to 127.0.0.1 for local security
    host = "0.0.0.0" if settings.DEBUG else "127.0.0.1"

    uvicorn.run(
        "app.main:app",
        host=host,
        port=8000,
        reload=settings.DEBUG,
    )
