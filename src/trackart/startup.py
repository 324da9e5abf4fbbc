"""
Startup sequence: scan the library, then reconcile covers.

Each pass is independent. A pass that cannot even start (storage directory
cannot be created, store unavailable) is logged and skipped; the other pass
and the process carry on.
"""

import random
from contextlib import nullcontext
from pathlib import Path
from typing import NamedTuple, Optional

import requests
from loguru import logger

from trackart.core.config import Config
from trackart.domain.covers import (
    CoverError,
    ReconcileResult,
    ThreadLocalSession,
    build_strategies,
    reconcile_covers,
)
from trackart.domain.library import LibraryError, ScanResult, TrackStore, scan_library


class StartupReport(NamedTuple):
    """Results of the startup passes; None marks a pass that did not run."""
    scan: Optional[ScanResult] = None
    covers: Optional[ReconcileResult] = None


def run_scan(config: Config, store: TrackStore) -> ScanResult:
    """Scan the configured storage root once."""
    logger.info(f"Starting music library scan of {config.library.storage_path}")
    return scan_library(
        Path(config.library.storage_path),
        store,
        max_depth=config.library.max_depth,
        supported_formats=config.library.supported_formats,
    )


def run_covers(
    config: Config,
    store: TrackStore,
    rng: Optional[random.Random] = None,
    session: Optional[requests.Session] = None,
    external_lookup: Optional[bool] = None,
    max_workers: Optional[int] = None,
) -> ReconcileResult:
    """Run one cover reconciliation pass with the configured strategy chain.

    Without an explicit session each worker thread gets its own
    requests.Session for the lookup, all closed when the pass ends.
    """
    with ThreadLocalSession() if session is None else nullcontext(session) as http:
        strategies = build_strategies(
            config, rng=rng, session=http, external_lookup=external_lookup
        )
        return reconcile_covers(
            store,
            Path(config.library.covers_path),
            strategies,
            url_prefix=config.covers.url_prefix,
            max_workers=max_workers or config.covers.max_workers,
        )


def run_startup(
    config: Config,
    store: TrackStore,
    rng: Optional[random.Random] = None,
    session: Optional[requests.Session] = None,
) -> StartupReport:
    """Scan (when auto_scan is on) and then reconcile covers for all tracks."""
    scan_result = None
    if config.library.auto_scan:
        try:
            scan_result = run_scan(config, store)
        except LibraryError as e:
            logger.error(f"Music library scan aborted: {e}")
        except Exception:
            logger.exception("Error scanning music library")
    else:
        logger.info("Automatic library scan disabled")

    covers_result = None
    try:
        covers_result = run_covers(config, store, rng=rng, session=session)
    except CoverError as e:
        logger.error(f"Cover verification aborted: {e}")
    except Exception:
        logger.exception("Error during cover verification process")

    return StartupReport(scan=scan_result, covers=covers_result)
