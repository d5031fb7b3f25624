"""
Custom exception hierarchy for the TrackPulse API.

This module defines a standardized exception hierarchy for consistent
error handling across the application.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class BaseAppException(HTTPException):
    """Base exception for all application errors."""

    def __init__(
        self,
        detail: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        headers: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code or self.__class__.__name__


# Authentication / Authorization Exceptions


class AuthenticationError(BaseAppException):
    """Raised when an operation requires an authenticated caller."""

    def __init__(
        self, detail: str = "Not authenticated", error_code: Optional[str] = None
    ):
        super().__init__(
            detail, status.HTTP_401_UNAUTHORIZED, error_code=error_code or "AUTH_ERROR"
        )


class NotAuthorizedError(BaseAppException):
    """Raised when the caller does not own the resource it tries to change."""

    def __init__(self, action: str, resource_type: str):
        super().__init__(
            f"Not authorized to {action} this {resource_type}",
            status.HTTP_403_FORBIDDEN,
            error_code="NOT_AUTHORIZED",
        )


class RateLimitExceededError(BaseAppException):
    """Raised when a caller exceeds the submission quota."""

    def __init__(self, limit: int, window_seconds: int):
        super().__init__(
            "Rate limit exceeded. Please wait before submitting more feedback.",
            status.HTTP_429_TOO_MANY_REQUESTS,
            headers={"Retry-After": str(window_seconds)},
            error_code="RATE_LIMITED",
        )
        self.limit = limit
        self.window_seconds = window_seconds


# Resource Exceptions


class ResourceNotFoundError(BaseAppException):
    """Raised when a resource is not found."""

    def __init__(self, resource_type: str, resource_id: str):
        detail = f"{resource_type} with ID '{resource_id}' not found"
        super().__init__(
            detail, status.HTTP_404_NOT_FOUND, error_code="RESOURCE_NOT_FOUND"
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class TrackNotFoundError(ResourceNotFoundError):
    """Raised when a track is not found."""

    def __init__(self, track_id: str):
        super().__init__("Track", track_id)


class ReactionNotFoundError(ResourceNotFoundError):
    """Raised when a reaction is not found."""

    def __init__(self, reaction_id: str):
        super().__init__("Reaction", reaction_id)


class PlaylistNotFoundError(ResourceNotFoundError):
    """Raised when a playlist is missing or not visible to the caller."""

    def __init__(self, playlist_id: str):
        super().__init__("Playlist", playlist_id)


class ArtistNotFoundError(ResourceNotFoundError):
    """Raised when no artist profile matches a user id or name."""

    def __init__(self, artist_ref: str):
        super().__init__("Artist profile", artist_ref)


# Storage Exceptions


class StorageError(BaseAppException):
    """Raised when the SQLite store rejects a read or a transaction."""

    def __init__(self, operation: str, detail: str):
        # Only "read" and "write" reach the error code
        normalized_op = "READ" if operation == "read" else "WRITE"
        super().__init__(
            f"Storage {operation} failed: {detail}",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code=f"STORAGE_{normalized_op}_ERROR",
        )
        self.operation = operation
