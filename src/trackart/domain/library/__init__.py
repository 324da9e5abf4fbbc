"""Library domain - audio file scanning and metadata.

This domain handles:
- Track data models
- Tag and embedded artwork reading from audio files
- Library scanning against the track store
- Playback helpers (content type, file resolution, play counts)
"""

# Models
from .models import Track, ScanResult, UNKNOWN_ARTIST, UNKNOWN_ALBUM

# Exceptions
from .exceptions import LibraryError, LibraryRootError, TrackNotFoundError

# Tag reading
from .metadata import (
    TagInfo,
    EmbeddedArtwork,
    get_tag_value,
    read_tags,
    extract_embedded_artwork,
)

# Store
from .store import TrackStore, DatabaseTrackStore

# Library scanning
from .scanner import (
    is_supported_format,
    find_audio_files,
    extract_track_metadata,
    scan_library,
)

# Playback
from .playback import content_type_for_format, track_file, record_play

__all__ = [
    # Models
    "Track",
    "ScanResult",
    "UNKNOWN_ARTIST",
    "UNKNOWN_ALBUM",
    # Exceptions
    "LibraryError",
    "LibraryRootError",
    "TrackNotFoundError",
    # Tag reading
    "TagInfo",
    "EmbeddedArtwork",
    "get_tag_value",
    "read_tags",
    "extract_embedded_artwork",
    # Store
    "TrackStore",
    "DatabaseTrackStore",
    # Scanner
    "is_supported_format",
    "find_audio_files",
    "extract_track_metadata",
    "scan_library",
    # Playback
    "content_type_for_format",
    "track_file",
    "record_play",
]
