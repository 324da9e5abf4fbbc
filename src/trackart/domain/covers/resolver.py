"""
Cover reconciliation.

Guarantees every known track ends a pass with a cover reference:

1. reuse an artifact already in the covers directory whose name contains
   the track's sanitized path (repairing a stale reference if needed)
2. otherwise apply the strategy chain (embedded -> iTunes -> gradient) and
   write the first result as a fresh timestamped artifact

A failure on one track is logged and counted; the pass moves on. Running a
pass twice on unchanged input writes nothing the second time, because step
1 finds the artifacts created by the first.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, Sequence

from loguru import logger

from trackart.domain.library.models import Track
from trackart.domain.library.store import TrackStore

from .exceptions import CoverError
from .models import CoverOutcome, CoverStrategy, ReconcileResult
from .storage import (
    cover_filename,
    cover_url,
    ensure_covers_dir,
    filename_from_url,
    list_cover_files,
    match_existing_cover,
    sanitize_path_token,
    write_cover,
)

Clock = Callable[[], float]


def resolve_track_cover(
    track: Track,
    store: TrackStore,
    covers_dir: Path,
    strategies: Sequence[CoverStrategy],
    existing_files: Iterable[str] = (),
    url_prefix: str = "/covers",
    clock: Clock = time.time,
) -> CoverOutcome:
    """Give one track a cover, trying at most one new artifact.

    Args:
        track: Track to reconcile
        store: Track record store receiving the updated reference
        covers_dir: Directory holding cover artifacts
        strategies: Ordered fallback chain
        existing_files: Artifact filenames present when the pass started
        url_prefix: Prefix of the stored cover reference
        clock: Time source in seconds (for the artifact timestamp)

    Returns:
        The outcome describing which step produced the cover

    Raises:
        CoverError: If no strategy produced a cover
        OSError: If the artifact cannot be written
    """
    token = sanitize_path_token(track.file_path)

    existing = match_existing_cover(existing_files, token, filename_from_url(track.cover_url))
    if existing:
        expected_url = cover_url(url_prefix, existing)
        if track.cover_url != expected_url:
            store.save(track._replace(cover_url=expected_url))
            logger.debug(f"Updated cover URL for track {track.file_path} (existing cover)")
        return CoverOutcome.EXISTING

    for strategy in strategies:
        try:
            data = strategy.fetch(track)
        except Exception as e:
            logger.warning(f"Cover strategy {strategy.name} failed for {track.file_path}: {e}")
            continue
        if data is None:
            continue

        filename = cover_filename(track.file_path, int(clock() * 1000))
        write_cover(covers_dir, filename, data)
        store.save(track._replace(cover_url=cover_url(url_prefix, filename)))
        logger.info(f"Cover for {track.file_path} from {strategy.name}: {filename}")
        return strategy.outcome

    raise CoverError(f"No cover strategy produced artwork for {track.file_path}")


def log_summary(result: ReconcileResult) -> None:
    """Write the end-of-run summary to the log."""
    logger.info("Cover verification completed:")
    for label, count in result.summary_rows():
        logger.info(f"  - {label}: {count}")


def reconcile_covers(
    store: TrackStore,
    covers_dir: Path | str,
    strategies: Sequence[CoverStrategy],
    url_prefix: str = "/covers",
    max_workers: int = 1,
    clock: Clock = time.time,
) -> ReconcileResult:
    """Run one reconciliation pass over every track in the store.

    Per-track work is independent, so it runs on a thread pool when
    max_workers > 1. Counts come back as a ReconcileResult.

    Raises:
        CoverStorageError: If the covers directory cannot be created or listed
    """
    covers_dir = Path(covers_dir)
    logger.info("Starting cover verification and generation process...")
    ensure_covers_dir(covers_dir)

    tracks = store.find_all()
    existing_files = tuple(list_cover_files(covers_dir))
    logger.info(f"Found {len(tracks)} tracks in database, {len(existing_files)} cover files")

    def _resolve(track: Track) -> CoverOutcome:
        try:
            return resolve_track_cover(
                track,
                store,
                covers_dir,
                strategies,
                existing_files=existing_files,
                url_prefix=url_prefix,
                clock=clock,
            )
        except Exception as e:
            logger.error(f"Error processing cover for track {track.file_path}: {e}")
            return CoverOutcome.ERROR

    if max_workers > 1 and len(tracks) > 1:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="cover") as pool:
            outcomes = list(pool.map(_resolve, tracks))
    else:
        outcomes = [_resolve(track) for track in tracks]

    result = ReconcileResult.from_outcomes(outcomes)
    log_summary(result)
    return result
