"""Library-specific exceptions for error handling."""

from typing import Optional


class LibraryError(Exception):
    """Base exception for library operations."""

    pass


class LibraryRootError(LibraryError):
    """Raised when the storage root cannot be created or read."""

    pass


class TrackNotFoundError(LibraryError):
    """Raised when a track id has no record in the store."""

    def __init__(self, track_id: int, message: Optional[str] = None):
        self.track_id = track_id
        super().__init__(message or f"Track #{track_id} not found")
