"""
Cover strategies: the fallback chain as data.

Each strategy wraps a function (Track) -> Optional[bytes] that returns a
finished, letterboxed JPEG or None. The resolver applies them in order and
keeps the first success, so reordering or dropping a source is a list edit.
"""

import random
from pathlib import Path
from typing import Optional

import requests
from loguru import logger

from trackart.core.config import Config, CoversConfig, ITunesConfig
from trackart.core.path_security import resolve_track_file
from trackart.domain.library.metadata import extract_embedded_artwork
from trackart.domain.library.models import Track

from . import compositor, itunes
from .exceptions import ImageDecodeError
from .models import CoverOutcome, CoverStrategy


def _letterbox(data: bytes, covers: CoversConfig, source: str, track: Track) -> Optional[bytes]:
    """Letterbox source bytes; undecodable images fall through to the next strategy."""
    try:
        return compositor.resize_and_letterbox(
            data, size=covers.target_size, quality=covers.jpeg_quality
        )
    except ImageDecodeError as e:
        logger.warning(f"Ignoring {source} artwork for {track.file_path}: {e}")
        return None


def embedded_artwork_strategy(storage_root: Path, covers: CoversConfig) -> CoverStrategy:
    """Cover from the picture embedded in the track's own audio file."""

    def fetch(track: Track) -> Optional[bytes]:
        local_path = resolve_track_file(storage_root, track.file_path)
        if local_path is None:
            logger.info(f"Music file not found for embedded artwork extraction: {track.file_path}")
            return None
        artwork = extract_embedded_artwork(local_path)
        if artwork is None:
            logger.info(f"No embedded artwork found for track: {track.file_path}")
            return None
        return _letterbox(artwork.data, covers, "embedded", track)

    return CoverStrategy("embedded", CoverOutcome.EXTRACTED, fetch)


def itunes_strategy(
    itunes_config: ITunesConfig,
    covers: CoversConfig,
    session: Optional[requests.Session] = None,
) -> CoverStrategy:
    """Cover downloaded from the iTunes Search API by artist and title."""

    def fetch(track: Track) -> Optional[bytes]:
        data = itunes.lookup_artwork(
            track.artist,
            track.title,
            session=session,
            search_url=itunes_config.search_url,
            limit=itunes_config.result_limit,
            artwork_size=itunes_config.artwork_size,
            timeout=itunes_config.timeout,
            user_agent=itunes_config.user_agent,
        )
        if data is None:
            return None
        return _letterbox(data, covers, "iTunes", track)

    return CoverStrategy("itunes", CoverOutcome.DOWNLOADED, fetch)


def gradient_strategy(covers: CoversConfig, rng: Optional[random.Random] = None) -> CoverStrategy:
    """Procedural placeholder; never returns None."""
    rng = rng or random.Random(covers.seed)

    def fetch(track: Track) -> Optional[bytes]:
        return compositor.generate_gradient_cover(
            track.title,
            track.artist,
            size=covers.target_size,
            quality=covers.jpeg_quality,
            rng=rng,
        )

    return CoverStrategy("gradient", CoverOutcome.GENERATED, fetch)


def build_strategies(
    config: Config,
    rng: Optional[random.Random] = None,
    session: Optional[requests.Session] = None,
    external_lookup: Optional[bool] = None,
) -> list[CoverStrategy]:
    """Assemble the default chain: embedded -> iTunes -> gradient.

    Args:
        config: Application configuration
        rng: Generator for gradient colours (seeded from config.covers.seed if omitted)
        session: requests session shared by lookups in this pass
        external_lookup: Override config.covers.external_lookup
    """
    storage_root = Path(config.library.storage_path)
    strategies = [embedded_artwork_strategy(storage_root, config.covers)]

    use_lookup = config.covers.external_lookup if external_lookup is None else external_lookup
    if use_lookup:
        strategies.append(itunes_strategy(config.itunes, config.covers, session=session))

    strategies.append(gradient_strategy(config.covers, rng=rng))
    return strategies
