"""
Spotify playlist snapshots (--save-spotify).

Workflow:
    1. List every playlist of the current user (paginated)
    2. Fetch each playlist's metadata and all of its items
    3. Convert the items to CatalogTrack
    4. Write one JSON snapshot per playlist under <data>/spotify/

Conversion rules:
    - Items without a track object (removed tracks) and podcast episodes
      are dropped
    - Tracks Spotify could not resolve (local files, unavailable entries)
      are KEPT with an empty external_id; the reconciliation sync skips
      them, so the snapshot stays a faithful copy of the playlist
    - ISRCs are uppercased; a track without one gets ""
"""

from typing import Any

from music_utils.core.exceptions import SpotifyError
from music_utils.core.logger import get_logger
from music_utils.core.storage import SPOTIFY_DIR, DataStore
from music_utils.matching.models import CatalogPlaylist, CatalogTrack
from music_utils.spotify.client import SpotifyClient


logger = get_logger(__name__)


def track_from_spotify(item: dict[str, Any] | None) -> CatalogTrack | None:
    """
    Convert a Spotify playlist item into a CatalogTrack.

    Args:
        item: Playlist track object ({'added_at', 'track': {...}, ...}).

    Returns:
        CatalogTrack, or None for items that are not tracks at all.
    """
    if not item or not isinstance(item, dict):
        return None

    track = item.get("track")
    if not track or track.get("type", "track") != "track":
        return None

    artists = tuple(
        artist["name"] for artist in track.get("artists") or () if artist and artist.get("name")
    )
    album = (track.get("album") or {}).get("name") or ""
    isrc = ((track.get("external_ids") or {}).get("isrc") or "").strip().upper()

    return CatalogTrack(
        title=(track.get("name") or "").strip(),
        artists=artists,
        album=album,
        isrc=isrc,
        external_id=track.get("id") or "",
    )


def playlist_from_spotify(
    playlist_data: dict[str, Any],
    items: list[dict[str, Any]]
) -> CatalogPlaylist:
    """Build a CatalogPlaylist from playlist metadata and its items."""
    tracks = [track for track in map(track_from_spotify, items) if track is not None]
    return CatalogPlaylist(
        id=playlist_data.get("id") or "",
        title=(playlist_data.get("name") or "").strip(),
        description=playlist_data.get("description") or "",
        tracks=tuple(tracks),
    )


class SpotifyFetcher:
    """
    Fetches the current user's playlists from Spotify.

    Requires SpotifyClient.init() to have been called.
    """

    def __init__(self) -> None:
        if not SpotifyClient.is_initialized():
            raise SpotifyError(
                "SpotifyClient not initialized. Call SpotifyClient.init() first.",
                is_auth_error=True
            )
        self._client = SpotifyClient()

    def fetch_playlist(self, playlist_id: str) -> CatalogPlaylist:
        """Fetch one playlist with all of its tracks."""
        playlist_data = self._client.playlist(playlist_id)
        items = self._client.playlist_all_items(playlist_id)
        return playlist_from_spotify(playlist_data, items)

    def fetch_user_playlists(self) -> list[CatalogPlaylist]:
        """
        Fetch every playlist of the current user, tracks included.

        Playlists without a name are skipped with a warning, since they
        could neither be paired with a target playlist nor saved to a file.
        """
        summaries = self._client.current_user_all_playlists()
        logger.info(f"Found {len(summaries)} Spotify playlists")

        playlists = []
        for summary in summaries:
            playlist = self.fetch_playlist(summary["id"])
            if not playlist.title:
                logger.warning(f"Skipping playlist {summary['id']}: it has no name")
                continue
            logger.debug(f"Fetched '{playlist.title}' ({len(playlist.tracks)} tracks)")
            playlists.append(playlist)

        return playlists

    def save_user_playlists(self, store: DataStore) -> list[CatalogPlaylist]:
        """
        Fetch every playlist of the current user and write snapshots.

        Returns:
            The saved playlists.
        """
        playlists = self.fetch_user_playlists()
        for playlist in playlists:
            store.write_playlist(SPOTIFY_DIR, playlist)
            logger.info(f"Saved playlist: {playlist.title}")
        return playlists
