"""
Music library domain models.

Contains data structures for representing tracks and scan results.
"""

from typing import NamedTuple, Optional


UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_ALBUM = "Unknown Album"


class Track(NamedTuple):
    """Represents one audio file in the library with its metadata.

    file_path is relative to the storage root and is the natural key: a file
    already represented by a Track is never ingested twice. Tracks are
    immutable; updates go through ``_replace`` and ``TrackStore.save``.
    """
    file_path: str  # Relative to storage root, POSIX separators
    title: str
    artist: str = UNKNOWN_ARTIST
    album: Optional[str] = None
    duration: Optional[int] = None  # whole seconds, from the audio header
    file_format: Optional[str] = None  # lower-case extension without dot
    file_size: int = 0
    cover_url: Optional[str] = None
    play_count: int = 0
    id: Optional[int] = None  # Assigned by the store on first save


class ScanResult(NamedTuple):
    """Outcome of one library scan pass."""
    added: list[Track]
    skipped: int = 0
    errors: int = 0
