"""
Playback-facing track helpers.

The streaming layer only needs to know where a track's file lives and which
content type to announce; play events bump the track's counter.
"""

from pathlib import Path
from typing import Optional

from trackart.core import database
from trackart.core.path_security import resolve_track_file

from .exceptions import TrackNotFoundError
from .models import Track

DEFAULT_CONTENT_TYPE = "audio/mpeg"

CONTENT_TYPES = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "flac": "audio/flac",
    "m4a": "audio/mp4",
    "ogg": "audio/ogg",
}


def content_type_for_format(file_format: Optional[str]) -> str:
    """Map a track's file format to the content type used when streaming it."""
    if not file_format:
        return DEFAULT_CONTENT_TYPE
    return CONTENT_TYPES.get(file_format.lower().lstrip("."), DEFAULT_CONTENT_TYPE)


def track_file(track: Track, storage_root: Path) -> Path:
    """Return the audio file backing a track.

    Raises:
        FileNotFoundError: If the file is missing or lies outside the storage root
    """
    local_path = resolve_track_file(storage_root, track.file_path)
    if local_path is None:
        raise FileNotFoundError(
            f"File not found or not readable: {track.file_path}"
        )
    return local_path


def record_play(track_id: int, db_path: Optional[Path] = None) -> int:
    """Record one playback event and return the new play count.

    Raises:
        TrackNotFoundError: If no track has this id
    """
    if track_id is None:
        raise TrackNotFoundError(track_id, "Track ID cannot be None")
    return database.increment_play_count(track_id, db_path)
