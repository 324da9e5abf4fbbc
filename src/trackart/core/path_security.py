"""
Path security validation utilities for trackart.

Track records store paths relative to the storage root; these pure functions
turn them back into real files without letting a record point outside it.
"""

from pathlib import Path
from typing import Optional


def is_path_within_root(file_path: Path, root: Path) -> bool:
    """Pure function - validates path is within the storage root.

    Uses Path.resolve() to handle symlinks and relative paths, then checks if the
    resolved path is a child of the resolved root.

    Args:
        file_path: The file path to validate
        root: The storage root directory

    Returns:
        True if path is within the root, False otherwise
    """
    try:
        file_path.resolve().relative_to(root.resolve())
        return True
    except ValueError:
        # relative_to raises ValueError if path is not a subpath
        return False
    except (OSError, RuntimeError):
        # Path.resolve() can raise OSError for invalid paths or RuntimeError for recursion
        return False


def resolve_track_file(root: Path, relative_path: str) -> Optional[Path]:
    """Pure function - returns the existing file for a stored track path or None.

    Args:
        root: The storage root directory
        relative_path: Track file path as stored (relative, POSIX separators)

    Returns:
        The absolute Path if it exists inside the root, None otherwise
    """
    if not relative_path:
        return None

    candidate = Path(root) / relative_path
    if not is_path_within_root(candidate, Path(root)):
        return None
    if not candidate.is_file():
        return None
    return candidate
