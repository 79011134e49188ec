"""
Lookups against Navidrome's SQLite database.

Navidrome keeps one row per audio file in its media_file table. Unlike a
streaming catalog there is no ranked search, so tracks are found by
substring matching with LIKE, trying progressively looser spellings.

Tiers, first row found wins:
    1. title LIKE %title% AND artist LIKE %artist%
    2. title LIKE %title% AND album LIKE %album%     (skipped without album)
    3. as 1, qualifier-stripped title, both values with the typographic ’
    4. as 1, qualifier-stripped title, both values with the ASCII '

The database is opened read-only; music-utils never writes to it.

Usage:
    library = NavidromeLibrary(Path("/navidrome/navidrome.db"))
    path = library.find_track_path("Lover (Deluxe)", "Lover", "Taylor Swift")
    library.close()
"""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from music_utils.core.exceptions import LibraryError
from music_utils.core.logger import get_logger
from music_utils.matching.normalizer import apostrophe_variants, strip_qualifiers


logger = get_logger(__name__)


_TITLE_ARTIST_SQL = "SELECT path FROM media_file WHERE title LIKE ? AND artist LIKE ? LIMIT 1"
_TITLE_ALBUM_SQL = "SELECT path FROM media_file WHERE title LIKE ? AND album LIKE ? LIMIT 1"


def _contains(value: str) -> str:
    return f"%{value}%"


class NavidromeLibrary:
    """
    Read-only access to a Navidrome library database.

    Uses a single lazily-opened connection guarded by a lock.

    Attributes:
        db_path: Path to navidrome.db.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        if self._conn is None:
            if not self.db_path.exists():
                raise LibraryError(
                    f"Navidrome database not found: {self.db_path}",
                    details={"path": str(self.db_path)}
                )
            try:
                self._conn = sqlite3.connect(
                    f"{self.db_path.resolve().as_uri()}?mode=ro",
                    uri=True,
                    timeout=30.0,
                )
            except sqlite3.Error as e:
                raise LibraryError(
                    f"Cannot open Navidrome database: {e}",
                    details={"path": str(self.db_path)}
                ) from e
            self._conn.row_factory = sqlite3.Row
        yield self._conn

    def open(self) -> None:
        """
        Open the connection now instead of on the first lookup.

        Raises:
            LibraryError: If the database is missing or cannot be opened.
        """
        with self._lock:
            with self._get_connection():
                pass

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "NavidromeLibrary":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _query_path(self, sql: str, first: str, second: str) -> str | None:
        with self._lock:
            with self._get_connection() as conn:
                try:
                    row = conn.execute(sql, (_contains(first), _contains(second))).fetchone()
                except sqlite3.Error as e:
                    raise LibraryError(
                        f"Navidrome query failed: {e}",
                        details={"path": str(self.db_path), "title": first}
                    ) from e
        return row["path"] if row is not None else None

    def find_track_path(self, title: str, album: str, artist: str) -> str | None:
        """
        Find the file path of a track in the library.

        Args:
            title: Track title as the source catalog spells it.
            album: Album name, may be empty.
            artist: Primary artist.

        Returns:
            The media file path, or None when no tier finds a row.

        Raises:
            LibraryError: If the database cannot be opened or queried.
        """
        path = self._query_path(_TITLE_ARTIST_SQL, title, artist)
        if path:
            return path

        if album.strip():
            path = self._query_path(_TITLE_ALBUM_SQL, title, album)
            if path:
                return path

        stripped = strip_qualifiers(title)
        typographic_title, ascii_title = apostrophe_variants(stripped)
        typographic_artist, ascii_artist = apostrophe_variants(artist)

        for tier_title, tier_artist in (
            (typographic_title, typographic_artist),
            (ascii_title, ascii_artist),
        ):
            path = self._query_path(_TITLE_ARTIST_SQL, tier_title, tier_artist)
            if path:
                return path

        logger.debug(f"Not in library: {artist} - {title}")
        return None
