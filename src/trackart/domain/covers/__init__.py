"""Covers domain - cover-art reconciliation for library tracks.

This domain handles:
- Image composition (letterboxing, gradient placeholders)
- iTunes artwork lookup
- Cover artifact naming and storage
- The strategy chain and the reconciliation pass
"""

from .exceptions import CoverError, CoverStorageError, ImageDecodeError
from .models import CoverOutcome, CoverSource, CoverStrategy, ReconcileResult
from .compositor import (
    GRADIENT_PALETTE,
    fit_dimensions,
    generate_gradient_cover,
    resize_and_letterbox,
    truncate_text,
)
from .itunes import ThreadLocalSession, lookup_artwork, search_artwork_url, upgrade_artwork_url
from .storage import cover_filename, cover_url, match_existing_cover, sanitize_path_token
from .strategies import (
    build_strategies,
    embedded_artwork_strategy,
    gradient_strategy,
    itunes_strategy,
)
from .resolver import reconcile_covers, resolve_track_cover

__all__ = [
    # Exceptions
    "CoverError",
    "CoverStorageError",
    "ImageDecodeError",
    # Models
    "CoverOutcome",
    "CoverSource",
    "CoverStrategy",
    "ReconcileResult",
    # Compositor
    "GRADIENT_PALETTE",
    "fit_dimensions",
    "generate_gradient_cover",
    "resize_and_letterbox",
    "truncate_text",
    # Lookup
    "ThreadLocalSession",
    "lookup_artwork",
    "search_artwork_url",
    "upgrade_artwork_url",
    # Storage
    "cover_filename",
    "cover_url",
    "match_existing_cover",
    "sanitize_path_token",
    # Strategies
    "build_strategies",
    "embedded_artwork_strategy",
    "gradient_strategy",
    "itunes_strategy",
    # Resolver
    "reconcile_covers",
    "resolve_track_cover",
]
