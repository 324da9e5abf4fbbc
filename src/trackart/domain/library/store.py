"""
Track record store interface.

The scanner and the cover resolver only need three operations from the
persistence layer. Anything implementing TrackStore can back them; the
default implementation delegates to the SQLite functions in core.database.
"""

from pathlib import Path
from typing import List, Optional, Protocol

from trackart.core import database

from .models import Track


class TrackStore(Protocol):
    """Persistence operations consumed by the scanner and the cover resolver.

    The core never deletes records.
    """

    def find_all(self) -> List[Track]:
        """Return every known track."""
        ...

    def find_by_file_path(self, file_path: str) -> Optional[Track]:
        """Return the track stored under this relative path, if any."""
        ...

    def save(self, track: Track) -> Track:
        """Insert (id is None) or update a track; returns the stored track."""
        ...


class DatabaseTrackStore:
    """TrackStore backed by the SQLite tracks table."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path or database.get_database_path()
        database.init_database(self.db_path)

    def find_all(self) -> List[Track]:
        return database.get_all_tracks(self.db_path)

    def find_by_file_path(self, file_path: str) -> Optional[Track]:
        return database.get_track_by_path(file_path, self.db_path)

    def find_by_id(self, track_id: int) -> Optional[Track]:
        return database.get_track_by_id(track_id, self.db_path)

    def save(self, track: Track) -> Track:
        return database.save_track(track, self.db_path)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(db_path={str(self.db_path)!r})"
