"""Cover-specific exceptions for error handling."""


class CoverError(Exception):
    """Base exception for cover operations."""

    pass


class ImageDecodeError(CoverError):
    """Raised when image bytes are not a decodable raster image."""

    pass


class CoverStorageError(CoverError):
    """Raised when the covers directory cannot be created or listed."""

    pass
