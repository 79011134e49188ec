"""
Tidal API client for music-utils.

Implements the TargetCatalog interface on top of Tidal's web API using a
requests Session. The access token and user ID come from config.yaml;
this client performs no login or token refresh.

Endpoints:
    GET  v1/search                                     track search
    GET  v1/users/{user_id}/playlists                  user's playlists
    GET  v1/playlists/{uuid}                           playlist (+ ETag)
    GET  v1/playlists/{uuid}/tracks                    playlist tracks
    POST v1/playlists/{uuid}/items                     add a track
    PUT  v2/my-collection/playlists/folders/create-playlist

Error Handling:
    Any transport failure or non-2xx response raises TidalError carrying
    the status code. The one exception is a 409 when adding a track,
    which means the track is already in the playlist and is reported as
    AddResult.CONFLICT.

Usage:
    client = TidalClient(access_token, user_id)
    response = client.search_tracks("Kids MGMT")
"""

from typing import Any

import requests

from music_utils.core.exceptions import TidalError
from music_utils.core.logger import get_logger
from music_utils.matching.models import CatalogPlaylist, CatalogTrack, SearchResponse
from music_utils.reconcile.adapters import AddResult
from music_utils.tidal.models import (
    playlist_from_tidal,
    search_response_from_tidal,
    tracks_from_page,
)


logger = get_logger(__name__)


API_URL = "https://listen.tidal.com/v1"
API_URL_V2 = "https://listen.tidal.com/v2"

SEARCH_LIMIT = 20
PAGE_LIMIT = 10000
DEFAULT_TIMEOUT = 30


class TidalClient:
    """
    Tidal catalog client.

    Attributes:
        user_id: Tidal user owning the playlists.
        country_code: Sent with every request; search results depend on it.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        access_token: str,
        user_id: str,
        country_code: str = "US",
        timeout: int = DEFAULT_TIMEOUT,
        session: requests.Session | None = None
    ) -> None:
        self.user_id = user_id
        self.country_code = country_code
        self.timeout = timeout

        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "Authorization": f"Bearer {access_token}",
        })

    def _request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        allowed_status: tuple[int, ...] = (),
        **kwargs: Any
    ) -> requests.Response:
        """
        Send a request with the country code added to its query.

        Args:
            allowed_status: Non-2xx status codes returned to the caller
                            instead of raising.

        Raises:
            TidalError: On transport failure or an unexpected status.
        """
        query = {"countryCode": self.country_code}
        if params:
            query.update(params)

        logger.debug(f"Tidal {method} {url} {params or ''}")
        try:
            response = self.session.request(
                method, url, params=query, timeout=self.timeout, **kwargs
            )
        except requests.exceptions.RequestException as e:
            raise TidalError(
                f"Tidal request failed: {e}",
                details={"url": url, "original_error": str(e)}
            ) from e

        if response.ok or response.status_code in allowed_status:
            return response

        raise TidalError(
            f"Tidal returned HTTP {response.status_code} for {method} {url}: "
            f"{response.text[:200]}",
            details={"url": url, "status_code": response.status_code},
            status_code=response.status_code
        )

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        response = self._request("GET", url, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise TidalError(
                f"Tidal returned invalid JSON for {url}",
                details={"url": url},
                status_code=response.status_code
            ) from e

    # =========================================================================
    # Search
    # =========================================================================

    def search_tracks(self, query: str) -> SearchResponse:
        """Search Tidal's track catalog. An empty response is not an error."""
        data = self._get_json(
            f"{API_URL}/search",
            params={"query": query, "limit": SEARCH_LIMIT, "types": "TRACKS"}
        )
        return search_response_from_tidal(data)

    # =========================================================================
    # Playlists
    # =========================================================================

    def get_playlists(self) -> list[CatalogPlaylist]:
        """Playlists of the configured user, without tracks."""
        data = self._get_json(
            f"{API_URL}/users/{self.user_id}/playlists",
            params={"limit": PAGE_LIMIT}
        )
        return [playlist_from_tidal(item) for item in data.get("items") or ()]

    def get_playlist(self, playlist_id: str) -> CatalogPlaylist:
        """Playlist metadata, without tracks."""
        return playlist_from_tidal(self._get_json(f"{API_URL}/playlists/{playlist_id}"))

    def get_playlist_tracks(self, playlist_id: str) -> list[CatalogTrack]:
        """Current tracks of a playlist, in playlist order."""
        data = self._get_json(
            f"{API_URL}/playlists/{playlist_id}/tracks",
            params={"limit": PAGE_LIMIT}
        )
        return tracks_from_page(data)

    def get_full_playlist(self, playlist_id: str) -> CatalogPlaylist:
        """Playlist metadata together with its tracks."""
        playlist = self.get_playlist(playlist_id)
        return playlist.with_tracks(self.get_playlist_tracks(playlist_id))

    def create_playlist(self, name: str, description: str) -> CatalogPlaylist:
        """
        Create an empty playlist in the root folder.

        Raises:
            TidalError: If the playlist could not be created.
        """
        response = self._request(
            "PUT",
            f"{API_URL_V2}/my-collection/playlists/folders/create-playlist",
            params={"folderId": "root", "name": name, "description": description}
        )
        try:
            data = response.json().get("data") or {}
        except ValueError as e:
            raise TidalError(
                "Tidal returned invalid JSON after creating a playlist",
                details={"name": name},
                status_code=response.status_code
            ) from e

        playlist = playlist_from_tidal(data)
        if not playlist.id:
            raise TidalError(
                f"Tidal did not return the created playlist '{name}'",
                details={"name": name}
            )
        logger.info(f"Created Tidal playlist '{playlist.title or name}'")
        return playlist

    def _playlist_etag(self, playlist_id: str) -> str:
        response = self._request("GET", f"{API_URL}/playlists/{playlist_id}")
        return response.headers.get("ETag", "")

    def add_track_to_playlist(self, playlist_id: str, track_id: str) -> AddResult:
        """
        Append a track to a playlist.

        Tidal requires the playlist's current ETag; it is fetched right
        before the write.

        Returns:
            AddResult.ADDED, or AddResult.CONFLICT when the track is already
            in the playlist.

        Raises:
            TidalError: On any other failure.
        """
        etag = self._playlist_etag(playlist_id)
        response = self._request(
            "POST",
            f"{API_URL}/playlists/{playlist_id}/items",
            data={"trackIds": track_id, "onArtifactNotFound": "FAIL", "onDupes": "FAIL"},
            headers={"If-None-Match": etag},
            allowed_status=(409,)
        )
        if response.status_code == 409:
            logger.debug(f"Track {track_id} already exists in playlist {playlist_id}")
            return AddResult.CONFLICT
        return AddResult.ADDED

    def close(self) -> None:
        self.session.close()
