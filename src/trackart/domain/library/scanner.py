"""
Music library scanning.

Walks the storage root for audio files, skips files already known to the
track store and turns the rest into new Track records.
"""

import os
from pathlib import Path
from typing import Callable, Iterator, Optional

from loguru import logger

from .exceptions import LibraryRootError
from .metadata import TagInfo, read_tags
from .models import UNKNOWN_ALBUM, UNKNOWN_ARTIST, ScanResult, Track
from .store import TrackStore

DEFAULT_FORMATS = [".mp3", ".flac", ".m4a", ".wav", ".ogg"]
DEFAULT_MAX_DEPTH = 3


def is_supported_format(local_path: Path, supported_formats: list[str]) -> bool:
    """Check if file format is supported (case-insensitive)."""
    return local_path.suffix.lower() in {ext.lower() for ext in supported_formats}


def find_audio_files(
    root: Path,
    max_depth: int = DEFAULT_MAX_DEPTH,
    supported_formats: Optional[list[str]] = None,
) -> Iterator[Path]:
    """Yield audio files under root, never descending past max_depth.

    Files directly inside root are at depth 1, files one directory down at
    depth 2, and so on. Directories are visited in sorted order.

    Args:
        root: Storage root directory
        max_depth: Deepest level to include
        supported_formats: Extension allow-list (with leading dot)

    Yields:
        Absolute paths of recognised audio files
    """
    formats = supported_formats or DEFAULT_FORMATS
    root = Path(root)

    def _on_error(error: OSError) -> None:
        logger.warning(f"Cannot read directory {error.filename}: {error.strerror}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        current = Path(dirpath)
        depth = len(current.relative_to(root).parts) + 1

        if depth >= max_depth:
            # Files here are still in range, anything below is not
            dirnames.clear()
        else:
            dirnames.sort()

        if depth > max_depth:
            continue

        for name in sorted(filenames):
            local_path = current / name
            if is_supported_format(local_path, formats) and local_path.is_file():
                yield local_path


def to_relative_path(local_path: Path, root: Path) -> str:
    """Store paths relative to the root with POSIX separators."""
    return local_path.relative_to(root).as_posix()


def build_track(local_path: Path, relative_path: str, tags: TagInfo) -> Track:
    """Create a new Track from tag data, falling back to filename-derived values."""
    try:
        file_size = local_path.stat().st_size
    except OSError:
        file_size = 0

    return Track(
        file_path=relative_path,
        title=tags.title or local_path.stem,
        artist=tags.artist or UNKNOWN_ARTIST,
        album=tags.album or UNKNOWN_ALBUM,
        duration=tags.duration,
        file_format=local_path.suffix.lower().lstrip(".") or None,
        file_size=file_size,
        cover_url=None,
        play_count=0,
    )


def extract_track_metadata(local_path: Path, root: Path) -> Track:
    """Read one file's tags into a new Track; never raises for tag problems."""
    relative_path = to_relative_path(local_path, root)
    try:
        tags = read_tags(local_path)
    except Exception as e:
        logger.warning(f"Could not read metadata for {relative_path}, using filename: {e}")
        tags = TagInfo()
    return build_track(local_path, relative_path, tags)


def ensure_library_root(root: Path) -> bool:
    """Create the storage root if missing.

    Returns:
        True if the directory already existed, False if it was just created

    Raises:
        LibraryRootError: If the directory cannot be created
    """
    if root.is_dir():
        return True
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise LibraryRootError(f"Cannot create music directory {root}: {e}") from e
    logger.info(f"Created music directory: {root}")
    return False


def scan_library(
    root: Path | str,
    store: TrackStore,
    max_depth: int = DEFAULT_MAX_DEPTH,
    supported_formats: Optional[list[str]] = None,
    progress_callback: Optional[Callable[[str, Track], None]] = None,
) -> ScanResult:
    """Scan the storage root and save a Track for every file not yet known.

    Re-scanning an unchanged directory adds nothing: a file whose relative
    path already has a Track is skipped. A file that fails to persist is
    logged and counted; the scan continues.

    Args:
        root: Storage root directory (created if missing)
        store: Track record store
        max_depth: Deepest directory level to include
        supported_formats: Extension allow-list
        progress_callback: Optional callback(relative_path, track) per added track

    Returns:
        ScanResult with the added tracks and skip/error counts

    Raises:
        LibraryRootError: If the storage root cannot be created
    """
    root = Path(root)
    if not ensure_library_root(root):
        return ScanResult(added=[])

    added: list[Track] = []
    skipped = 0
    errors = 0

    for local_path in find_audio_files(root, max_depth, supported_formats):
        relative_path = to_relative_path(local_path, root)
        try:
            if store.find_by_file_path(relative_path) is not None:
                skipped += 1
                continue

            track = store.save(extract_track_metadata(local_path, root))
            added.append(track)
            logger.info(f"Added track: {track.artist} - {track.title}")

            if progress_callback:
                progress_callback(relative_path, track)
        except Exception as e:
            errors += 1
            logger.error(f"Error processing file {relative_path}: {e}")

    logger.info(
        f"Music scan complete. Added: {len(added)}, Skipped: {skipped}, Errors: {errors}"
    )
    return ScanResult(added=added, skipped=skipped, errors=errors)
