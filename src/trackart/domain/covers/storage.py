"""
Cover artifact naming and storage.

Covers live in one flat directory as ``<unix-millis>_<token>.jpg`` where the
token is the track's file path with everything outside [a-zA-Z0-9.-]
replaced by an underscore. Tracks reference a cover as ``<prefix>/<filename>``.
"""

import os
import re
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from .exceptions import CoverStorageError

COVER_EXTENSION = ".jpg"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")
_ARTIFACT_NAME = re.compile(r"^\d+_(?P<token>.+)\.jpg$")


def sanitize_path_token(file_path: str) -> str:
    """Turn a track file path into a filename-safe token."""
    return _UNSAFE_CHARS.sub("_", file_path)


def cover_filename(file_path: str, timestamp_ms: int) -> str:
    """Build the artifact filename for a track at the given time."""
    return f"{timestamp_ms}_{sanitize_path_token(file_path)}{COVER_EXTENSION}"


def cover_url(url_prefix: str, filename: str) -> str:
    """Build the cover reference stored on a track."""
    return f"{url_prefix.rstrip('/')}/{filename}"


def filename_from_url(url: Optional[str]) -> Optional[str]:
    """Return the filename part of a stored cover reference."""
    if not url:
        return None
    return url.rsplit("/", 1)[-1] or None


def ensure_covers_dir(covers_dir: Path) -> None:
    """Create the covers directory if it does not exist.

    Raises:
        CoverStorageError: If the directory cannot be created
    """
    if covers_dir.is_dir():
        return
    try:
        covers_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise CoverStorageError(f"Cannot create covers directory {covers_dir}: {e}") from e
    logger.info(f"Created covers directory: {covers_dir}")


def list_cover_files(covers_dir: Path) -> list[str]:
    """List artifact filenames in the covers directory (hidden temp files excluded).

    Raises:
        CoverStorageError: If the directory cannot be listed
    """
    try:
        with os.scandir(covers_dir) as entries:
            return sorted(
                entry.name
                for entry in entries
                if entry.is_file() and not entry.name.startswith(".")
            )
    except OSError as e:
        raise CoverStorageError(f"Cannot list covers directory {covers_dir}: {e}") from e


def match_existing_cover(
    filenames: Iterable[str], token: str, current_filename: Optional[str] = None
) -> Optional[str]:
    """Find an existing artifact whose name contains the track's token.

    Names following the ``<millis>_<token>.jpg`` scheme belong to exactly one
    token, so a track never adopts the artifact of another track whose path
    merely contains its own (``my_song.mp3`` vs ``song.mp3``). Other names
    are matched by plain substring.

    Among the candidates the track's current reference wins; otherwise
    artifacts named for this exact token come first, then the first match
    in sorted order.
    """
    exact = []
    loose = []
    for name in sorted(filenames):
        if token not in name:
            continue
        owner = _ARTIFACT_NAME.match(name)
        if owner is None:
            loose.append(name)
        elif owner.group("token") == token:
            exact.append(name)

    matches = exact + loose
    if not matches:
        return None
    if current_filename in matches:
        return current_filename
    return matches[0]


def write_cover(covers_dir: Path, filename: str, data: bytes) -> Path:
    """Write cover bytes atomically and return the final path."""
    target = covers_dir / filename
    tmp = covers_dir / f".{filename}.tmp"
    try:
        tmp.write_bytes(data)
        os.replace(tmp, target)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise
    return target
