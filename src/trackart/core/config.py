"""
Configuration management for trackart
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "trackart"
    return Path.home() / ".config" / "trackart"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "trackart"
    return Path.home() / ".local" / "share" / "trackart"


@dataclass
class LibraryConfig:
    """Configuration for the audio library and cover storage."""

    storage_path: str = field(default_factory=lambda: str(Path.home() / "Music"))
    covers_path: str = field(default_factory=lambda: str(get_data_dir() / "covers"))
    auto_scan: bool = True
    max_depth: int = 3
    supported_formats: List[str] = field(
        default_factory=lambda: [".mp3", ".flac", ".m4a", ".wav", ".ogg"]
    )


@dataclass
class CoversConfig:
    """Configuration for cover reconciliation and rendering."""

    target_size: int = 400
    jpeg_quality: int = 85
    url_prefix: str = "/covers"  # "/api/covers" when served behind the API router
    external_lookup: bool = True
    max_workers: int = 4
    seed: Optional[int] = None  # Pins gradient colour selection when set

    def validate(self) -> None:
        """Validate cover configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.target_size <= 0:
            raise ValueError(f"target_size must be positive, got {self.target_size}")
        if not 1 <= self.jpeg_quality <= 95:
            raise ValueError(
                f"jpeg_quality must be between 1 and 95, got {self.jpeg_quality}"
            )
        if not self.url_prefix.startswith("/"):
            raise ValueError(f"url_prefix must start with '/', got {self.url_prefix!r}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")


@dataclass
class ITunesConfig:
    """Configuration for the iTunes Search API artwork lookup."""

    search_url: str = "https://itunes.apple.com/search"
    result_limit: int = 1
    artwork_size: str = "600x600"
    timeout: float = 5.0
    user_agent: str = "trackart/0.1"


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # Default: ~/.local/share/trackart/trackart.log
    console_output: bool = False


@dataclass
class Config:
    """Main configuration object."""

    library: LibraryConfig = field(default_factory=LibraryConfig)
    covers: CoversConfig = field(default_factory=CoversConfig)
    itunes: ITunesConfig = field(default_factory=ITunesConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/trackart (or ~/.config/trackart)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# trackart configuration

[library]
# Root directory holding the audio files (track paths are stored relative to it)
storage_path = "~/Music"

# Directory receiving generated cover images
# covers_path = "~/.local/share/trackart/covers"

# Scan the library when `trackart run` starts
auto_scan = true

# Maximum directory depth to descend into (1 = only files in storage_path)
max_depth = 3

# Recognised audio file extensions
supported_formats = [".mp3", ".flac", ".m4a", ".wav", ".ogg"]

[covers]
# Edge length of the square cover images in pixels
target_size = 400

# JPEG quality for written covers (1-95)
jpeg_quality = 85

# Prefix of the cover reference stored on each track
url_prefix = "/covers"

# Query the iTunes Search API when a file has no embedded artwork
external_lookup = true

# Number of tracks resolved in parallel
max_workers = 4

# Fix the gradient colour selection (omit for a fresh choice every run)
# seed = 42

[itunes]
search_url = "https://itunes.apple.com/search"
result_limit = 1
artwork_size = "600x600"
timeout = 5.0

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/trackart/trackart.log)
# log_file = "/path/to/trackart.log"

# Also output logs to console
console_output = false
""".strip()


def _apply_env_overrides(config: Config) -> Config:
    """Override path settings with environment variables if present."""
    storage_path = os.environ.get("TRACKART_STORAGE_PATH")
    covers_path = os.environ.get("TRACKART_COVERS_PATH")
    url_prefix = os.environ.get("TRACKART_URL_PREFIX")

    if storage_path:
        config.library.storage_path = str(Path(storage_path).expanduser())
    if covers_path:
        config.library.covers_path = str(Path(covers_path).expanduser())
    if url_prefix:
        config.covers.url_prefix = url_prefix
    return config


def parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML data, keeping defaults for missing keys."""
    config = Config()

    if "library" in toml_data:
        library_data = toml_data["library"]
        config.library = LibraryConfig(
            storage_path=str(
                Path(
                    library_data.get("storage_path", config.library.storage_path)
                ).expanduser()
            ),
            covers_path=str(
                Path(
                    library_data.get("covers_path", config.library.covers_path)
                ).expanduser()
            ),
            auto_scan=library_data.get("auto_scan", config.library.auto_scan),
            max_depth=library_data.get("max_depth", config.library.max_depth),
            supported_formats=[
                ext.lower()
                for ext in library_data.get(
                    "supported_formats", config.library.supported_formats
                )
            ],
        )

    if "covers" in toml_data:
        covers_data = toml_data["covers"]
        config.covers = CoversConfig(
            target_size=covers_data.get("target_size", config.covers.target_size),
            jpeg_quality=covers_data.get("jpeg_quality", config.covers.jpeg_quality),
            url_prefix=covers_data.get("url_prefix", config.covers.url_prefix),
            external_lookup=covers_data.get(
                "external_lookup", config.covers.external_lookup
            ),
            max_workers=covers_data.get("max_workers", config.covers.max_workers),
            seed=covers_data.get("seed", config.covers.seed),
        )
        try:
            config.covers.validate()
        except ValueError as e:
            logger.warning(f"Invalid covers configuration: {e}. Using defaults.")
            config.covers = CoversConfig()

    if "itunes" in toml_data:
        itunes_data = toml_data["itunes"]
        config.itunes = ITunesConfig(
            search_url=itunes_data.get("search_url", config.itunes.search_url),
            result_limit=itunes_data.get("result_limit", config.itunes.result_limit),
            artwork_size=itunes_data.get("artwork_size", config.itunes.artwork_size),
            timeout=itunes_data.get("timeout", config.itunes.timeout),
            user_agent=itunes_data.get("user_agent", config.itunes.user_agent),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - TRACKART_STORAGE_PATH
    - TRACKART_COVERS_PATH
    - TRACKART_URL_PREFIX
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = config_path or get_config_path()

    if not config_path.exists():
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            config_path.write_text(create_default_config(), encoding="utf-8")
            logger.info(f"Created default configuration at: {config_path}")
        except OSError as e:
            logger.warning(f"Could not write default configuration to {config_path}: {e}")
        return _apply_env_overrides(Config())

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.error(f"Error loading configuration from {config_path}: {e}")
        logger.warning("Using default configuration.")
        return _apply_env_overrides(Config())

    return _apply_env_overrides(parse_config(toml_data))

