"""
Database connection and initialization for the TrackPulse store.

This module provides async SQLite connectivity (aiosqlite), schema creation
and a transaction helper. Every mutation runs inside a single
``BEGIN IMMEDIATE`` transaction so SQLite serializes writers.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import aiosqlite
from app.core.exceptions import StorageError

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS tracks (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    artist TEXT NOT NULL,
    duration REAL NOT NULL CHECK(duration > 0),
    genre TEXT,
    audio_quality TEXT,
    allow_download INTEGER NOT NULL DEFAULT 0 CHECK(allow_download IN (0, 1)),
    uploaded_by TEXT NOT NULL,
    uploaded_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS reactions (
    id TEXT PRIMARY KEY,
    track_id TEXT NOT NULL REFERENCES tracks(id) ON DELETE CASCADE,
    user_id TEXT,
    kind TEXT NOT NULL CHECK(kind IN ('love', 'like', 'meh', 'dislike')),
    timestamp INTEGER NOT NULL,
    is_anonymous INTEGER NOT NULL DEFAULT 0 CHECK(is_anonymous IN (0, 1)),
    device_type TEXT NOT NULL DEFAULT 'unknown',
    session_id TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS feedback_summaries (
    track_id TEXT PRIMARY KEY REFERENCES tracks(id) ON DELETE CASCADE,
    love_count INTEGER NOT NULL DEFAULT 0,
    like_count INTEGER NOT NULL DEFAULT 0,
    meh_count INTEGER NOT NULL DEFAULT 0,
    dislike_count INTEGER NOT NULL DEFAULT 0,
    total_count INTEGER NOT NULL DEFAULT 0,
    average_score REAL NOT NULL DEFAULT 0
        CHECK(average_score >= 0 AND average_score <= 4),
    last_updated INTEGER NOT NULL
);

-- No foreign key: readers drop entries whose track has gone away.
CREATE TABLE IF NOT EXISTS trending_entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    track_id TEXT NOT NULL,
    score REAL NOT NULL,
    timeframe TEXT NOT NULL,
    category TEXT NOT NULL,
    rank INTEGER NOT NULL CHECK(rank >= 1),
    computed_at INTEGER NOT NULL,
    UNIQUE(timeframe, category, rank)
);

CREATE TABLE IF NOT EXISTS playlists (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    owner_id TEXT NOT NULL,
    is_public INTEGER NOT NULL DEFAULT 0 CHECK(is_public IN (0, 1)),
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS playlist_tracks (
    playlist_id TEXT NOT NULL REFERENCES playlists(id) ON DELETE CASCADE,
    track_id TEXT NOT NULL REFERENCES tracks(id) ON DELETE CASCADE,
    position INTEGER NOT NULL,
    added_at INTEGER NOT NULL,
    PRIMARY KEY (playlist_id, track_id)
);

CREATE TABLE IF NOT EXISTS artist_profiles (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL UNIQUE,
    display_name TEXT NOT NULL,
    slug TEXT NOT NULL,
    bio TEXT,
    genre TEXT,
    website TEXT,
    social_links TEXT,
    custom_colors TEXT,
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL
);
"""

CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_tracks_uploaded_at ON tracks(uploaded_at);",
    "CREATE INDEX IF NOT EXISTS idx_tracks_uploaded_by ON tracks(uploaded_by, uploaded_at);",
    "CREATE INDEX IF NOT EXISTS idx_reactions_track ON reactions(track_id);",
    "CREATE INDEX IF NOT EXISTS idx_reactions_user ON reactions(user_id, timestamp);",
    "CREATE INDEX IF NOT EXISTS idx_reactions_timestamp ON reactions(timestamp);",
    "CREATE INDEX IF NOT EXISTS idx_reactions_session ON reactions(session_id);",
    # One reaction per (track, user) and one anonymous reaction per (session, track)
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_reactions_track_user "
    "ON reactions(track_id, user_id) WHERE user_id IS NOT NULL;",
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_reactions_session_track "
    "ON reactions(session_id, track_id) WHERE user_id IS NULL;",
    "CREATE INDEX IF NOT EXISTS idx_summaries_total ON feedback_summaries(total_count);",
    "CREATE INDEX IF NOT EXISTS idx_summaries_average ON feedback_summaries(average_score);",
    "CREATE INDEX IF NOT EXISTS idx_trending_timeframe_rank ON trending_entries(timeframe, rank);",
    "CREATE INDEX IF NOT EXISTS idx_playlists_owner ON playlists(owner_id, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_playlist_tracks_track ON playlist_tracks(track_id);",
    "CREATE INDEX IF NOT EXISTS idx_artist_profiles_slug ON artist_profiles(slug, created_at);",
]


class Database:
    """Async SQLite database manager."""

    def __init__(self, db_path: str, timeout: float = 30.0) -> None:
        self.db_path = Path(db_path)
        self.timeout = timeout
        self.initialized = False

    async def initialize(self) -> None:
        """Create the database file, tables and indices if not present."""
        if self.initialized:
            logger.info("Database already initialized")
            return

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Initializing database at: {self.db_path}")

        async with aiosqlite.connect(str(self.db_path), timeout=self.timeout) as db:
            await db.execute("PRAGMA journal_mode = WAL")
            await db.executescript(SCHEMA_SQL)
            for idx_sql in CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()

        self.initialized = True
        logger.info("Database initialized successfully")

    async def _open(self) -> aiosqlite.Connection:
        if not self.initialized:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        # isolation_level=None: transactions are managed explicitly below
        db = await aiosqlite.connect(
            str(self.db_path), timeout=self.timeout, isolation_level=None
        )
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys = ON")
        return db

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Yield a read connection in autocommit mode.

        SQLite errors surface as StorageError.

        Example:
            async with database.connection() as conn:
                cursor = await conn.execute("SELECT * FROM tracks")
        """
        db = await self._open()
        try:
            yield db
        except aiosqlite.Error as e:
            logger.error(f"Read failed on {self.db_path}: {e}")
            raise StorageError("read", str(e)) from e
        finally:
            await db.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Yield a connection inside a ``BEGIN IMMEDIATE`` transaction.

        Commits when the block exits normally and rolls back on any exception.
        SQLite errors, constraint violations included, are re-raised as
        StorageError; anything else propagates unchanged.
        """
        db = await self._open()
        try:
            await db.execute("BEGIN IMMEDIATE")
            try:
                yield db
            except BaseException:
                await db.execute("ROLLBACK")
                raise
            await db.execute("COMMIT")
        except aiosqlite.Error as e:
            logger.error(f"Transaction failed on {self.db_path}: {e}")
            raise StorageError("write", str(e)) from e
        finally:
            await db.close()


# Global database instance
_db_instance: Optional[Database] = None


def get_database(db_path: Optional[str] = None) -> Database:
    """Get the global database instance, creating it on first use.

    Args:
        db_path: Database file path; required on the first call

    Returns:
        Database: Global database instance
    """
    global _db_instance
    if _db_instance is None or (
        db_path is not None and Path(db_path) != _db_instance.db_path
    ):
        if db_path is None:
            raise RuntimeError("Database path required for first initialization")
        _db_instance = Database(db_path)
    return _db_instance
