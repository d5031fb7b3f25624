"""Caller identity resolution.

Authentication is delegated to an upstream provider that forwards the
verified user id in a trusted header. Callers without a user id are
anonymous and are tracked by an opaque session token taken from a header
or cookie. Request bodies may supply their own session token as well.
"""

from dataclasses import dataclass, replace
from typing import Optional

from app.core.config import get_settings
from app.core.exceptions import AuthenticationError
from fastapi import Request

MAX_IDENTITY_LENGTH = 128


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    return value[:MAX_IDENTITY_LENGTH]


@dataclass(frozen=True)
class CallerIdentity:
    """Who is calling: an authenticated user, an anonymous session, or neither."""

    user_id: Optional[str] = None
    session_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def with_session(self, session_id: Optional[str]) -> "CallerIdentity":
        """Return a copy whose session is overridden by an explicit token."""
        session_id = _clean(session_id)
        if session_id is None:
            return self
        return replace(self, session_id=session_id)


ANONYMOUS = CallerIdentity()


def require_user_id(identity: CallerIdentity) -> str:
    """Return the caller's user id or raise AuthenticationError."""
    if identity.user_id is None:
        raise AuthenticationError()
    return identity.user_id


def get_caller_identity(request: Request) -> CallerIdentity:
    """FastAPI dependency resolving the caller from headers and cookies."""
    settings = get_settings()
    user_id = _clean(request.headers.get(settings.AUTH_USER_HEADER))
    session_id = _clean(
        request.headers.get(settings.SESSION_HEADER)
        or request.cookies.get(settings.SESSION_COOKIE)
    )
    return CallerIdentity(user_id=user_id, session_id=session_id)


def require_authenticated(request: Request) -> CallerIdentity:
    """FastAPI dependency for routes that need a signed-in user."""
    identity = get_caller_identity(request)
    if not identity.is_authenticated:
        raise AuthenticationError()
    return identity
