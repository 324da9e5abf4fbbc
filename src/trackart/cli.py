"""
trackart CLI - Entry point

Runs the library scan and cover reconciliation passes on demand, and exposes
the small track operations used by the streaming layer (play counts, file
and content-type resolution, search).
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from trackart.core import database
from trackart.core.config import Config, load_config
from trackart.core.console import get_console, print_count_table, safe_print
from trackart.core.output import log, setup_from_config
from trackart.domain.covers import CoverError
from trackart.domain.library import (
    DatabaseTrackStore,
    LibraryError,
    Track,
    TrackNotFoundError,
    content_type_for_format,
    record_play,
    track_file,
)
from trackart.startup import run_covers, run_scan, run_startup


def _scan_rows(result) -> list[tuple[str, int]]:
    return [
        ("Added", len(result.added)),
        ("Already known", result.skipped),
        ("Errors", result.errors),
    ]


def cmd_scan(config: Config, store: DatabaseTrackStore) -> int:
    """Run the library scanner once."""
    try:
        result = run_scan(config, store)
    except LibraryError as e:
        safe_print(f"Scan failed: {e}", style="bold red")
        return 1

    print_count_table("Library scan", _scan_rows(result))
    return 0


def cmd_covers(
    config: Config,
    store: DatabaseTrackStore,
    no_lookup: bool = False,
    workers: Optional[int] = None,
) -> int:
    """Run one cover reconciliation pass."""
    try:
        result = run_covers(
            config,
            store,
            external_lookup=False if no_lookup else None,
            max_workers=workers,
        )
    except CoverError as e:
        safe_print(f"Cover verification failed: {e}", style="bold red")
        return 1

    print_count_table("Cover verification", result.summary_rows())
    return 0


def cmd_run(config: Config, store: DatabaseTrackStore) -> int:
    """Run the startup sequence: scan, then covers."""
    report = run_startup(config, store)

    if report.scan is not None:
        print_count_table("Library scan", _scan_rows(report.scan))
    if report.covers is not None:
        print_count_table("Cover verification", report.covers.summary_rows())

    if report.covers is None or (config.library.auto_scan and report.scan is None):
        safe_print("Startup finished with errors (see log)", style="bold red")
        return 1
    return 0


def cmd_play(store: DatabaseTrackStore, track_id: int) -> int:
    """Record one playback of a track."""
    try:
        play_count = record_play(track_id, store.db_path)
    except TrackNotFoundError as e:
        safe_print(str(e), style="bold red")
        return 1

    log(f"Track {track_id} play count: {play_count}")
    return 0


def _print_track(track: Track, storage_root: Path) -> None:
    console = get_console()
    console.print(f"[bold]#{track.id}[/bold] {track.artist} - {track.title}")
    if track.album:
        console.print(f"  Album:        {track.album}")
    console.print(f"  File:         {track.file_path}")
    console.print(f"  Content type: {content_type_for_format(track.file_format)}")
    if track.duration is not None:
        minutes, seconds = divmod(track.duration, 60)
        console.print(f"  Duration:     {minutes}:{seconds:02d}")
    console.print(f"  Cover:        {track.cover_url or '[dim]none[/dim]'}")
    console.print(f"  Plays:        {track.play_count}")

    try:
        console.print(f"  Local file:   {track_file(track, storage_root)}")
    except FileNotFoundError:
        console.print("  Local file:   [red]missing[/red]")


def cmd_info(config: Config, store: DatabaseTrackStore, track_id: int) -> int:
    """Show one track with its content type and resolved file."""
    track = store.find_by_id(track_id)
    if track is None:
        safe_print(f"Track not found: {track_id}", style="bold red")
        return 1

    _print_track(track, Path(config.library.storage_path))
    return 0


def cmd_search(store: DatabaseTrackStore, query: str) -> int:
    """Search tracks by title, artist or album."""
    tracks = database.search_tracks(query, store.db_path)
    if not tracks:
        safe_print(f"No tracks match '{query}'", style="yellow")
        return 0

    console = get_console()
    for track in tracks:
        cover = "" if track.cover_url else " [dim](no cover)[/dim]"
        console.print(f"#{track.id}  {track.artist} - {track.title}{cover}")
    console.print(f"\n{len(tracks)} track(s)")
    return 0


def cmd_stats(store: DatabaseTrackStore) -> int:
    """Show how many tracks carry a cover reference."""
    stats = database.get_cover_stats(store.db_path)
    print_count_table(
        "Library",
        [
            ("Tracks", stats["total"]),
            ("With cover", stats["with_cover"]),
            ("Missing cover", stats["missing"]),
        ],
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the trackart command."""
    parser = argparse.ArgumentParser(
        prog="trackart",
        description="trackart - audio library scanner and cover-art reconciler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Global options
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config.toml (default: project, CWD, then XDG config dir)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log at DEBUG level and echo log records to stderr",
    )

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    subparsers.add_parser("scan", help="Scan the storage directory for new audio files")

    covers_parser = subparsers.add_parser("covers", help="Give every track a cover")
    covers_parser.add_argument(
        "--no-lookup",
        action="store_true",
        help="Skip the iTunes artwork lookup",
    )
    covers_parser.add_argument(
        "--workers",
        type=int,
        help="Number of tracks processed in parallel (default: from config)",
    )

    subparsers.add_parser("run", help="Startup sequence: scan, then covers")

    play_parser = subparsers.add_parser("play", help="Record a playback of a track")
    play_parser.add_argument("track_id", type=int, help="Track ID")

    info_parser = subparsers.add_parser("info", help="Show a track")
    info_parser.add_argument("track_id", type=int, help="Track ID")

    search_parser = subparsers.add_parser("search", help="Search tracks")
    search_parser.add_argument("query", nargs="+", help="Text to look for")

    subparsers.add_parser("stats", help="Show cover coverage of the library")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the trackart command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.subcommand:
        parser.print_help()
        sys.exit(1)

    config = load_config(args.config)
    if args.verbose:
        config.logging.level = "DEBUG"
        config.logging.console_output = True
    setup_from_config(config.logging)

    try:
        config.covers.validate()
    except ValueError as e:
        safe_print(f"Invalid configuration: {e}", style="bold red")
        sys.exit(1)

    store = DatabaseTrackStore()

    if args.subcommand == "scan":
        sys.exit(cmd_scan(config, store))

    elif args.subcommand == "covers":
        sys.exit(cmd_covers(config, store, no_lookup=args.no_lookup, workers=args.workers))

    elif args.subcommand == "run":
        sys.exit(cmd_run(config, store))

    elif args.subcommand == "play":
        sys.exit(cmd_play(store, args.track_id))

    elif args.subcommand == "info":
        sys.exit(cmd_info(config, store, args.track_id))

    elif args.subcommand == "search":
        sys.exit(cmd_search(store, " ".join(args.query)))

    elif args.subcommand == "stats":
        sys.exit(cmd_stats(store))


if __name__ == "__main__":
    main()
