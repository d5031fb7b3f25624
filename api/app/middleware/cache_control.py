"""
Cache control middleware for API responses.

Trending rankings and per-track summaries are public aggregates that change
at most once per write, so successful GETs on them may be cached briefly.
Every other response is marked as not cacheable.
"""

import re

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

PUBLIC_CACHE_PATTERNS = (
    re.compile(r"^/feedback/trending$"),
    re.compile(r"^/feedback/tracks/[^/]+/summary$"),
)
NO_STORE = "no-store, no-cache, must-revalidate, private"


class CacheControlMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add Cache-Control headers to API responses.

    Headers added:
    - Cache-Control: public, max-age=N for cacheable aggregate reads,
      otherwise no-store, no-cache, must-revalidate, private
    - Pragma / Expires for HTTP/1.0 clients on non-cacheable responses
    """

    def __init__(self, app: ASGIApp, public_max_age: int = 30):
        """
        Args:
            app: The ASGI application to wrap
            public_max_age: Seconds shared caches may keep aggregate reads
        """
        super().__init__(app)
        self.public_max_age = public_max_age

    def _is_public(self, request: Request, response: Response) -> bool:
        if request.method != "GET" or response.status_code != 200:
            return False
        path = request.url.path
        return any(pattern.match(path) for pattern in PUBLIC_CACHE_PATTERNS)

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        if self._is_public(request, response):
            response.headers["Cache-Control"] = f"public, max-age={self.public_max_age}"
            return response

        response.headers["Cache-Control"] = NO_STORE
        # HTTP/1.0 compatibility headers
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"

        return response
