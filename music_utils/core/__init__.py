"""
Core module for music-utils.

Foundational components shared by every command:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with console, file and missing-track outputs
    - progress: Rich progress bars for reconciliation and imports
    - storage: JSON snapshots, review files and .m3u8 playlists

Usage:
    from music_utils.core import (
        Config, load_config,
        DataStore,
        setup_logging, get_logger,
        MusicUtilsError, ConfigError, AdapterError
    )
"""

from music_utils.core.config import (
    Config,
    DataConfig,
    LidarrConfig,
    NavidromeConfig,
    SpotifyConfig,
    TidalConfig,
    load_config,
)
from music_utils.core.exceptions import (
    AdapterError,
    ConfigError,
    LibraryError,
    LidarrError,
    MusicUtilsError,
    MutationError,
    SinkError,
    SpotifyError,
    TidalError,
)
from music_utils.core.logger import (
    get_logger,
    log_missing_track,
    setup_logging,
    shutdown_logging,
)
from music_utils.core.storage import (
    M3U8Playlist,
    DataStore,
    MissingTrackWriter,
)

__all__ = [
    # Config
    "Config",
    "DataConfig",
    "SpotifyConfig",
    "TidalConfig",
    "NavidromeConfig",
    "LidarrConfig",
    "load_config",
    # Storage
    "DataStore",
    "MissingTrackWriter",
    "M3U8Playlist",
    # Exceptions
    "MusicUtilsError",
    "ConfigError",
    "AdapterError",
    "SpotifyError",
    "TidalError",
    "LidarrError",
    "LibraryError",
    "MutationError",
    "SinkError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_missing_track",
    "shutdown_logging",
]
