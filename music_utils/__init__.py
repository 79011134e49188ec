"""
music-utils: keep playlists in sync across music catalogs.

Saves Spotify playlists, reconciles them into Tidal playlists by matching
each track against Tidal's search results, and mirrors the Tidal
playlists into a local Navidrome library as .m3u8 files. Tracks that
cannot be matched are written to JSON review files.

Architecture:
    spotify/    Source catalog: playlist snapshots (--save-spotify)
    matching/   ISRC identity matching and title/artist heuristics
    reconcile/  Per-playlist reconciliation against a target catalog
    tidal/      Target catalog client (--to-tidal, --save-tidal)
    navidrome/  Local library lookups and .m3u8 import (--import-navidrome)
    lidarr/     Wanted albums (--lidarr-wanted)
    core/       Configuration, logging, progress bars, storage, exceptions
    utils/      Filename and URL helpers
    cli.py      Command-line interface

Usage:
    Command Line:
        music-utils --save-spotify --to-tidal
        music-utils --save-tidal --import-navidrome

    Python API:
        from music_utils.core import load_config, setup_logging, DataStore, MissingTrackWriter
        from music_utils.reconcile import Reconciler
        from music_utils.tidal import TidalClient

        config = load_config()
        setup_logging(config.data.directory)
        store = DataStore(config.data.directory)

        client = TidalClient(config.tidal.access_token, config.tidal.user_id)
        reconciler = Reconciler(client, sink=MissingTrackWriter(store))
        reconciler.sync_playlists(store.read_playlists("spotify"))

Dependencies:
    - spotipy: Spotify API client
    - requests: Tidal and Lidarr HTTP APIs
    - yt-dlp: Filename sanitization
    - click / rich-click: CLI
    - rich: Progress bars
    - tqdm: tqdm-safe console logging
    - pyyaml: Configuration file parsing
"""

__version__ = "0.1.0"
__author__ = "music-utils"
__license__ = "MIT"

from music_utils.core import (
    AdapterError,
    Config,
    ConfigError,
    DataStore,
    MusicUtilsError,
    MutationError,
    SinkError,
    get_logger,
    load_config,
    setup_logging,
)
from music_utils.matching import CatalogPlaylist, CatalogTrack, MatchMethod
from music_utils.reconcile import Reconciler

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "DataStore",
    "setup_logging",
    "get_logger",
    # Exceptions
    "MusicUtilsError",
    "ConfigError",
    "AdapterError",
    "MutationError",
    "SinkError",
    # Models
    "CatalogTrack",
    "CatalogPlaylist",
    "MatchMethod",
    "Reconciler",
]
