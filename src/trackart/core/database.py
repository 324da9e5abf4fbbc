"""
SQLite database operations for trackart
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from .config import get_data_dir


# Database schema version for migrations
SCHEMA_VERSION = 1

_TRACK_COLUMNS = (
    "id, file_path, title, artist, album, duration, file_format, "
    "file_size, cover_url, play_count"
)


def get_database_path() -> Path:
    """Get the path to the SQLite database file."""
    return get_data_dir() / "trackart.db"


@contextmanager
def get_db_connection(db_path: Optional[Path] = None):
    """Get a database connection with proper cleanup and concurrency support."""
    db_path = db_path or get_database_path()
    # One connection per operation; WAL lets resolver threads read during writes
    conn = sqlite3.connect(db_path, timeout=30.0)
    conn.row_factory = sqlite3.Row

    conn.execute("PRAGMA journal_mode=WAL")

    try:
        yield conn
    finally:
        conn.close()


def migrate_database(conn, current_version: int) -> None:
    """Migrate database from current_version to latest schema."""
    if current_version < 1:
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_tracks_artist ON tracks (artist)"
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_tracks_title ON tracks (title)"
        )
        conn.commit()


def init_database(db_path: Optional[Path] = None) -> None:
    """Initialize the database with required tables."""
    db_path = db_path or get_database_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection(db_path) as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS tracks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                file_path TEXT NOT NULL UNIQUE, -- relative to the storage root
                title TEXT NOT NULL,
                artist TEXT NOT NULL,
                album TEXT,
                duration INTEGER, -- seconds
                file_format TEXT,
                file_size INTEGER NOT NULL DEFAULT 0,
                cover_url TEXT,
                play_count INTEGER NOT NULL DEFAULT 0 CHECK (play_count >= 0),
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor = conn.execute("SELECT MAX(version) as version FROM schema_version")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] else 0
        cursor.close()

        if current_version < SCHEMA_VERSION:
            logger.info(
                f"Migrating database {db_path} from v{current_version} to v{SCHEMA_VERSION}"
            )
            migrate_database(conn, current_version)

        conn.execute("DELETE FROM schema_version")
        conn.execute(
            "INSERT INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,),
        )

        conn.commit()


def db_row_to_track(row: sqlite3.Row | Dict[str, Any]):
    """Convert a tracks row to a library Track."""
    from trackart.domain.library.models import Track

    return Track(
        id=row["id"],
        file_path=row["file_path"],
        title=row["title"],
        artist=row["artist"],
        album=row["album"],
        duration=row["duration"],
        file_format=row["file_format"],
        file_size=row["file_size"] or 0,
        cover_url=row["cover_url"],
        play_count=row["play_count"] or 0,
    )


def get_all_tracks(db_path: Optional[Path] = None) -> List[Any]:
    """Get all tracks ordered by id."""
    with get_db_connection(db_path) as conn:
        cursor = conn.execute(f"SELECT {_TRACK_COLUMNS} FROM tracks ORDER BY id")
        return [db_row_to_track(row) for row in cursor.fetchall()]


def get_track_by_path(file_path: str, db_path: Optional[Path] = None) -> Optional[Any]:
    """Get a track by its path relative to the storage root."""
    with get_db_connection(db_path) as conn:
        cursor = conn.execute(
            f"SELECT {_TRACK_COLUMNS} FROM tracks WHERE file_path = ?",
            (file_path,),
        )
        row = cursor.fetchone()
        return db_row_to_track(row) if row else None


def get_track_by_id(track_id: int, db_path: Optional[Path] = None) -> Optional[Any]:
    """Get a track by ID."""
    with get_db_connection(db_path) as conn:
        cursor = conn.execute(
            f"SELECT {_TRACK_COLUMNS} FROM tracks WHERE id = ?",
            (track_id,),
        )
        row = cursor.fetchone()
        return db_row_to_track(row) if row else None


def save_track(track, db_path: Optional[Path] = None):
    """Insert a new track or update an existing one.

    Tracks without an id are inserted and returned with the assigned id.
    Updates never lower play_count, so a stale snapshot written back by the
    cover resolver cannot undo playback events recorded in between.

    Raises:
        TrackNotFoundError: If the track has an id that is not in the database
        sqlite3.IntegrityError: If a new track reuses an existing file_path
    """
    from trackart.domain.library.exceptions import TrackNotFoundError

    with get_db_connection(db_path) as conn:
        if track.id is None:
            cursor = conn.execute(
                """
                INSERT INTO tracks (file_path, title, artist, album, duration,
                                    file_format, file_size, cover_url, play_count)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    track.file_path,
                    track.title,
                    track.artist,
                    track.album,
                    track.duration,
                    track.file_format,
                    track.file_size,
                    track.cover_url,
                    track.play_count,
                ),
            )
            conn.commit()
            return track._replace(id=cursor.lastrowid)

        cursor = conn.execute(
            """
            UPDATE tracks SET
                file_path = ?,
                title = ?,
                artist = ?,
                album = ?,
                duration = ?,
                file_format = ?,
                file_size = ?,
                cover_url = ?,
                play_count = MAX(play_count, ?),
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        """,
            (
                track.file_path,
                track.title,
                track.artist,
                track.album,
                track.duration,
                track.file_format,
                track.file_size,
                track.cover_url,
                track.play_count,
                track.id,
            ),
        )
        conn.commit()
        if cursor.rowcount == 0:
            raise TrackNotFoundError(track.id)
        return track


def increment_play_count(track_id: int, db_path: Optional[Path] = None) -> int:
    """Record one playback of a track.

    Returns:
        The new play count

    Raises:
        TrackNotFoundError: If no track has this id
    """
    from trackart.domain.library.exceptions import TrackNotFoundError

    with get_db_connection(db_path) as conn:
        cursor = conn.execute(
            """
            UPDATE tracks SET
                play_count = play_count + 1,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        """,
            (track_id,),
        )
        if cursor.rowcount == 0:
            raise TrackNotFoundError(track_id)
        row = conn.execute(
            "SELECT play_count FROM tracks WHERE id = ?", (track_id,)
        ).fetchone()
        conn.commit()
        return row["play_count"]


def search_tracks(query: str, db_path: Optional[Path] = None) -> List[Any]:
    """Search tracks by title, artist, or album (case-insensitive substring)."""
    pattern = f"%{query.lower()}%"
    with get_db_connection(db_path) as conn:
        cursor = conn.execute(
            f"""
            SELECT {_TRACK_COLUMNS} FROM tracks
            WHERE LOWER(title) LIKE ?
               OR LOWER(artist) LIKE ?
               OR LOWER(COALESCE(album, '')) LIKE ?
            ORDER BY id
        """,
            (pattern, pattern, pattern),
        )
        return [db_row_to_track(row) for row in cursor.fetchall()]


def get_cover_stats(db_path: Optional[Path] = None) -> Dict[str, int]:
    """Count tracks with and without a cover reference."""
    with get_db_connection(db_path) as conn:
        row = conn.execute("""
            SELECT
                COUNT(*) AS total,
                SUM(CASE WHEN cover_url IS NOT NULL AND cover_url != '' THEN 1 ELSE 0 END) AS with_cover
            FROM tracks
        """).fetchone()
        total = row["total"] or 0
        with_cover = row["with_cover"] or 0
        return {"total": total, "with_cover": with_cover, "missing": total - with_cover}
