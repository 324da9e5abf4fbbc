"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Database operations (SQLite)
- Logging (Loguru) and console output (Rich)
- Path validation against the storage root
"""

# Configuration
from .config import (
    Config,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    create_default_config,
)

# Database
from .database import (
    get_database_path,
    get_db_connection,
    init_database,
    get_all_tracks,
    get_track_by_path,
    get_track_by_id,
    save_track,
    increment_play_count,
    search_tracks,
    get_cover_stats,
)

# Output
from .console import get_console, safe_print, print_count_table
from .output import log, setup_loguru

# Paths
from .path_security import is_path_within_root, resolve_track_file

__all__ = [
    # Config
    "Config",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "create_default_config",
    # Database
    "get_database_path",
    "get_db_connection",
    "init_database",
    "get_all_tracks",
    "get_track_by_path",
    "get_track_by_id",
    "save_track",
    "increment_play_count",
    "search_tracks",
    "get_cover_stats",
    # Output
    "get_console",
    "safe_print",
    "print_count_table",
    "log",
    "setup_loguru",
    # Paths
    "is_path_within_root",
    "resolve_track_file",
]
