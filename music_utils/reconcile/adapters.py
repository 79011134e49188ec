"""
Interfaces the reconciliation engine consumes.

The engine never talks to a provider directly. Everything that performs
I/O is reached through one of the protocols below, so the matching core
can be exercised in tests with plain in-memory fakes.

Implementations:
    TargetCatalog  -> music_utils.tidal.client.TidalClient
    LocalLibrary   -> music_utils.navidrome.library.NavidromeLibrary
    MissingSink    -> music_utils.core.storage.MissingTrackWriter

Error contract:
    - Nothing found is never an error: search_tracks() returns an empty
      SearchResponse and find_track_path() returns None.
    - Transport or query failures raise AdapterError (or a subclass).
    - MissingSink.record_missing() raises SinkError.
"""

from enum import Enum
from typing import Protocol, Sequence

from music_utils.matching.models import (
    CatalogPlaylist,
    CatalogTrack,
    MissingRecord,
    SearchResponse,
)


class AddResult(Enum):
    """Outcome of adding a track to a target playlist."""

    ADDED = "added"
    # The target already holds the track; counts as success.
    CONFLICT = "conflict"


class TargetCatalog(Protocol):
    """A catalog reached through search that playlists are mirrored into."""

    def search_tracks(self, query: str) -> SearchResponse:
        """Free-text search, candidates in the catalog's relevance order."""
        ...

    def add_track_to_playlist(self, playlist_id: str, track_id: str) -> AddResult:
        """Append a track to a playlist. Raises AdapterError on failure."""
        ...

    def create_playlist(self, name: str, description: str) -> CatalogPlaylist:
        """Create an empty playlist and return it."""
        ...

    def get_playlists(self) -> list[CatalogPlaylist]:
        """Playlists owned by the configured user, without tracks."""
        ...

    def get_playlist_tracks(self, playlist_id: str) -> list[CatalogTrack]:
        """Current tracks of a playlist, in playlist order."""
        ...


class LocalLibrary(Protocol):
    """A local music library queried by substring search."""

    def find_track_path(self, title: str, album: str, artist: str) -> str | None:
        ...


class MissingSink(Protocol):
    """Side channel persisting unmatched tracks for human review."""

    def record_missing(self, records: Sequence[MissingRecord], label: str) -> None:
        ...
