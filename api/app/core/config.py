import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Minimum length accepted for ADMIN_API_KEY in production
MIN_ADMIN_KEY_LENGTH = 24


class Settings(BaseSettings):
    # API settings
    DEBUG: bool = False
    # Validators below read ENVIRONMENT, so it must be declared first
    ENVIRONMENT: str = "development"
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "TrackPulse API"

    # CORS settings - accepts string or list, normalized to list[str] by validator
    CORS_ORIGINS: str | list[str] = "*"

    # Directory settings
    DATA_DIR: str = "api/data"

    # Admin settings (protects the trending recomputation endpoint)
    ADMIN_API_KEY: str = ""

    # Identity resolution. Authentication itself happens upstream; the auth
    # proxy forwards the verified user id in AUTH_USER_HEADER.
    AUTH_USER_HEADER: str = "X-User-Id"
    SESSION_HEADER: str = "X-Session-Id"
    SESSION_COOKIE: str = "session_id"

    # Reaction rate limiting (authenticated, non-anonymous callers only)
    REACTION_RATE_LIMIT_MAX: int = 30  # Max reaction rows per window
    REACTION_RATE_LIMIT_WINDOW_SECONDS: int = 60

    # Trending settings
    TRENDING_MAX_ENTRIES: int = 100  # Ranked rows kept per timeframe
    TRENDING_DEFAULT_TIMEFRAME: str = "24h"
    TRENDING_DEFAULT_CATEGORY: str = "all"
    TRENDING_DEFAULT_LIMIT: int = 20
    TRENDING_TIMEFRAMES: str | list[str] = "1h,24h,7d,30d"
    TRENDING_REFRESH_INTERVAL_SECONDS: int = 0  # 0 disables the background refresh

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @property
    def MUSIC_DB_PATH(self) -> str:
        """Complete path to the SQLite database file"""
        return os.path.join(self.DATA_DIR, "trackpulse.db")

    @property
    def REACTION_RATE_LIMIT_WINDOW_MS(self) -> int:
        return self.REACTION_RATE_LIMIT_WINDOW_SECONDS * 1000

    @field_validator("REACTION_RATE_LIMIT_MAX", "REACTION_RATE_LIMIT_WINDOW_SECONDS")
    @classmethod
    def validate_rate_limit(cls, v: int) -> int:
        """Rate limit values must be positive."""
        if v < 1:
            raise ValueError("Rate limit settings must be >= 1")
        return v

    @field_validator("TRENDING_MAX_ENTRIES")
    @classmethod
    def validate_trending_max_entries(cls, v: int) -> int:
        if not 1 <= v <= 1000:
            raise ValueError("TRENDING_MAX_ENTRIES must be between 1 and 1000")
        return v

    @field_validator("TRENDING_DEFAULT_LIMIT")
    @classmethod
    def validate_trending_default_limit(cls, v: int) -> int:
        if not 1 <= v <= 100:
            raise ValueError("TRENDING_DEFAULT_LIMIT must be between 1 and 100")
        return v

    @field_validator("TRENDING_REFRESH_INTERVAL_SECONDS")
    @classmethod
    def validate_refresh_interval(cls, v: int) -> int:
        """Allow 0 (disabled) or a sensible interval of at least 10 seconds."""
        if v < 0:
            raise ValueError("TRENDING_REFRESH_INTERVAL_SECONDS must be >= 0")
        if 0 < v < 10:
            logger.warning(
                f"TRENDING_REFRESH_INTERVAL_SECONDS={v} is very low, raising to 10"
            )
            return 10
        return v

    @field_validator("AUTH_USER_HEADER", "SESSION_HEADER", "SESSION_COOKIE")
    @classmethod
    def validate_header_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Identity header and cookie names must not be empty")
        return v

    @field_validator("TRENDING_TIMEFRAMES", mode="after")
    @classmethod
    def parse_trending_timeframes(cls, v: str | list[str]) -> list[str]:
        """Parse timeframe labels from a comma-separated string or list.

        Args:
            v: Comma-separated string or list of labels

        Returns:
            List of labels without empty entries
        """
        if isinstance(v, list):
            return [label.strip() for label in v if label and label.strip()]
        if isinstance(v, str):
            return [label.strip() for label in v.split(",") if label.strip()]
        return []

    @field_validator("CORS_ORIGINS", mode="after")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from a comma-separated string or list.

        Args:
            v: Comma-separated string, "*" or list of origins

        Returns:
            List of origin strings
        """
        if isinstance(v, list):
            return [origin.strip() for origin in v if origin and origin.strip()]
        if isinstance(v, str):
            if v.strip() == "*":
                return ["*"]
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return []

    @classmethod
    def _is_production(cls, info: ValidationInfo) -> bool:
        environment = str(info.data.get("ENVIRONMENT", "development")).strip().lower()
        return environment in {"production", "prod"}

    @field_validator("ADMIN_API_KEY", mode="after")
    @classmethod
    def validate_admin_key_in_production(cls, v: str, info: ValidationInfo) -> str:
        """Require a sufficiently long admin key in production.

        Raises:
            ValueError: If the key is missing or too short in production
        """
        v = v.strip()
        if cls._is_production(info) and len(v) < MIN_ADMIN_KEY_LENGTH:
            raise ValueError(
                f"ADMIN_API_KEY must be at least {MIN_ADMIN_KEY_LENGTH} characters in production"
            )
        return v

    @field_validator("ENVIRONMENT", mode="before")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        return str(v).strip().lower() or "development"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Make paths absolute
        self.DATA_DIR = os.path.abspath(self.DATA_DIR)
        if self.ENVIRONMENT in {"production", "prod"} and self.CORS_ORIGINS == ["*"]:
            raise ValueError("Wildcard CORS_ORIGINS is not allowed in production")

    def ensure_data_dirs(self) -> None:
        """Create required data directories if they don't exist.

        Called during application startup (lifespan) to avoid import-time I/O.
        """
        Path(self.DATA_DIR).mkdir(parents=True, exist_ok=True)


# Thread-safe lazy initialization using lru_cache
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings instance with lazy initialization.

    Returns:
        Settings: Application settings object
    """
    return Settings()


def reset_settings() -> None:
    """Reset the cached settings instance.

    Useful for testing when you need to reload settings with different values.
    """
    get_settings.cache_clear()
