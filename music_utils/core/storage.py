"""
Data directory bookkeeping for music-utils.

Everything music-utils writes lives under the configured data directory:

    data_directory/
    ├── spotify/                  # Source playlist snapshots (--save-spotify)
    │   └── Chill Mix.json
    ├── tidal/                    # Target playlist snapshots
    │   ├── playlists.txt         # URLs of playlists to snapshot (--save-tidal)
    │   └── Chill Mix.json
    ├── missing/                  # Tracks not found in the target catalog
    │   └── Chill Mix.json
    ├── navidrome-missing/        # Tracks not found in the local library
    │   └── Chill Mix.json
    ├── wanted/
    │   └── missing-albums.json   # Albums Lidarr still wants (--lidarr-wanted)
    └── logs/

File Naming:
    Every per-playlist file is named after the playlist title, sanitized
    with music_utils.utils.sanitize_filename. Writing a playlist twice
    overwrites the earlier file.

Formats:
    Snapshot:        CatalogPlaylist.to_dict()
    Missing tracks:  [{"name", "album", "artists": [...]}, ...]
    Wanted albums:   [{"name", "artist"}, ...]

Usage:
    store = DataStore(config.data.directory)
    store.initialize()
    store.write_playlist(SPOTIFY_DIR, playlist)
    playlists = store.read_playlists(SPOTIFY_DIR)
"""

import json
from pathlib import Path
from typing import Any, Sequence

from music_utils.core.exceptions import MusicUtilsError, SinkError
from music_utils.core.logger import get_logger
from music_utils.matching.models import CatalogPlaylist, MissingAlbum, MissingRecord
from music_utils.utils import ensure_directory, sanitize_filename


logger = get_logger(__name__)


SPOTIFY_DIR = "spotify"
TIDAL_DIR = "tidal"
MISSING_DIR = "missing"
NAVIDROME_MISSING_DIR = "navidrome-missing"
WANTED_DIR = "wanted"

TIDAL_PLAYLIST_URLS_FILENAME = "playlists.txt"
WANTED_ALBUMS_FILENAME = "missing-albums.json"

M3U8_HEADER = "#EXTM3U"


class DataStore:
    """
    Reads and writes the JSON files under the data directory.

    Attributes:
        data_dir: Root data directory from config.yaml.
    """

    SUBDIRECTORIES = (SPOTIFY_DIR, TIDAL_DIR, MISSING_DIR, NAVIDROME_MISSING_DIR, WANTED_DIR)

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = data_dir

    def initialize(self) -> None:
        """Create the data directory and its subdirectories."""
        for name in self.SUBDIRECTORIES:
            ensure_directory(self.data_dir / name)

    def path_for(self, category: str, title: str, suffix: str = ".json") -> Path:
        """Path of the per-playlist file for a title in a category directory."""
        return self.data_dir / category / f"{sanitize_filename(title)}{suffix}"

    def _write_json(self, path: Path, data: Any) -> Path:
        ensure_directory(path.parent)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        return path

    # =========================================================================
    # Playlist snapshots
    # =========================================================================

    def write_playlist(self, category: str, playlist: CatalogPlaylist) -> Path:
        """
        Write a playlist snapshot.

        Args:
            category: SPOTIFY_DIR or TIDAL_DIR.
            playlist: Playlist to save, tracks included.

        Returns:
            Path of the written file.
        """
        path = self._write_json(self.path_for(category, playlist.title), playlist.to_dict())
        logger.debug(f"Saved snapshot of '{playlist.title}' to {path}")
        return path

    def read_playlists(self, category: str) -> list[CatalogPlaylist]:
        """
        Read every playlist snapshot in a category directory, sorted by file name.

        Raises:
            MusicUtilsError: If a snapshot cannot be read or parsed.
        """
        directory = self.data_dir / category
        if not directory.is_dir():
            return []

        playlists = []
        for path in sorted(directory.glob("*.json")):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise MusicUtilsError(
                    f"Cannot read playlist snapshot {path}: {e}",
                    details={"file_path": str(path)}
                ) from e

            if not isinstance(data, dict):
                raise MusicUtilsError(
                    f"Playlist snapshot {path} is not a JSON object",
                    details={"file_path": str(path)}
                )
            playlists.append(CatalogPlaylist.from_dict(data))

        return playlists

    def read_tidal_playlist_urls(self) -> list[str]:
        """
        Read tidal/playlists.txt: one playlist URL per line.

        Blank lines and lines starting with '#' are ignored. A missing file
        yields an empty list.
        """
        path = self.data_dir / TIDAL_DIR / TIDAL_PLAYLIST_URLS_FILENAME
        if not path.exists():
            logger.warning(f"{path} not found, no Tidal playlists to save")
            return []

        with open(path, "r", encoding="utf-8") as f:
            lines = [line.strip() for line in f]
        return [line for line in lines if line and not line.startswith("#")]

    # =========================================================================
    # Review files
    # =========================================================================

    def write_missing(
        self,
        category: str,
        records: Sequence[MissingRecord],
        label: str
    ) -> Path:
        """Write a playlist's missing tracks to <category>/<label>.json."""
        return self._write_json(
            self.path_for(category, label),
            [record.to_dict() for record in records]
        )

    def write_wanted_albums(self, albums: Sequence[MissingAlbum]) -> Path:
        """Write wanted/missing-albums.json."""
        return self._write_json(
            self.data_dir / WANTED_DIR / WANTED_ALBUMS_FILENAME,
            [album.to_dict() for album in albums]
        )


class MissingTrackWriter:
    """
    MissingSink that writes one JSON review file per playlist.

    Attributes:
        store: DataStore owning the data directory.
        category: Subdirectory the files go to (MISSING_DIR for the target
                  catalog, NAVIDROME_MISSING_DIR for the local library).
    """

    def __init__(self, store: DataStore, category: str = MISSING_DIR) -> None:
        self.store = store
        self.category = category

    def record_missing(self, records: Sequence[MissingRecord], label: str) -> None:
        """
        Persist a playlist's missing tracks.

        Raises:
            SinkError: If the file cannot be written.
        """
        try:
            path = self.store.write_missing(self.category, records, label)
        except OSError as e:
            raise SinkError(
                f"Cannot write missing tracks for '{label}': {e}",
                details={"playlist": label, "category": self.category}
            ) from e
        logger.info(f"Saved {len(records)} missing tracks for '{label}' to {path}")


class M3U8Playlist:
    """
    An extended-M3U playlist file holding absolute track paths.

    Only the header and plain path lines are written; Navidrome reads
    the rest of the metadata from its own database.

    Attributes:
        path: Location of the .m3u8 file.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def for_title(cls, directory: Path, title: str) -> "M3U8Playlist":
        return cls(directory / f"{sanitize_filename(title)}.m3u8")

    def create_if_absent(self) -> bool:
        """
        Create the file with just the #EXTM3U header when it does not exist.

        Returns:
            True if the file was created.
        """
        if self.path.exists():
            return False
        ensure_directory(self.path.parent)
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(f"{M3U8_HEADER}\n")
        return True

    def entries(self) -> list[str]:
        """Track paths in the file, comment and directive lines excluded."""
        if not self.path.exists():
            return []
        with open(self.path, "r", encoding="utf-8") as f:
            lines = [line.strip() for line in f]
        return [line for line in lines if line and not line.startswith("#")]

    def append(self, track_path: str) -> bool:
        """
        Append a path unless the file already lists it.

        Returns:
            True if the path was written.
        """
        if track_path in self.entries():
            return False
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(f"{track_path}\n")
        return True
