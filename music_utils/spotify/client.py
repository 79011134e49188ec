"""
Spotify API client singleton for music-utils.

This module provides a singleton wrapper around the spotipy library,
ensuring that only one Spotify client instance exists throughout the
application lifetime.

Singleton Pattern:
    SpotifyClient must be initialized once with init(); subsequent calls
    to SpotifyClient() return the same instance. Calling init() twice
    raises an error.

Authentication:
    Saving a user's playlists needs user authorization, so the client
    always uses spotipy's SpotifyOAuth with read-only playlist scopes.
    spotipy owns the browser flow and the token cache; music-utils only
    passes the credentials from config.yaml through.

Usage:
    from music_utils.spotify.client import SpotifyClient

    SpotifyClient.init(
        client_id=config.spotify.client_id,
        client_secret=config.spotify.client_secret,
        redirect_uri=config.spotify.redirect_uri,
    )

    client = SpotifyClient()
    playlists = client.current_user_all_playlists()
"""

from pathlib import Path
from typing import Any, Callable

import spotipy
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError

from music_utils.core.exceptions import SpotifyError


SPOTIFY_SCOPE = "playlist-read-private playlist-read-collaborative"

PLAYLISTS_PAGE_SIZE = 50
PLAYLIST_ITEMS_PAGE_SIZE = 100


class SpotifyClientMeta(type):
    """
    Metaclass implementing the singleton pattern for SpotifyClient.

    This metaclass ensures:
    1. SpotifyClient cannot be instantiated before init() is called
    2. init() can only be called once
    3. After init(), SpotifyClient() always returns the same instance
    """

    _instance: "SpotifyClient | None" = None
    _initialized: bool = False

    def __call__(cls) -> "SpotifyClient":
        if cls._instance is None:
            raise SpotifyError(
                "SpotifyClient not initialized. Call SpotifyClient.init() first.",
                is_auth_error=True
            )
        return cls._instance

    def init(
        cls,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        cache_path: Path | None = None
    ) -> "SpotifyClient":
        """
        Initialize the SpotifyClient singleton.

        Args:
            client_id: Spotify application client ID.
            client_secret: Spotify application client secret.
            redirect_uri: Redirect URI registered for the application.
            cache_path: Where spotipy caches the OAuth token. spotipy's
                        default (.cache in the working directory) when None.

        Returns:
            The initialized SpotifyClient singleton instance.

        Raises:
            SpotifyError: If init() has already been called, or if the
                          credentials are rejected.
        """
        if cls._initialized:
            raise SpotifyError(
                "SpotifyClient.init() has already been called. "
                "Use SpotifyClient() to get the existing instance.",
                is_auth_error=True
            )

        try:
            auth_manager = SpotifyOAuth(
                client_id=client_id,
                client_secret=client_secret,
                redirect_uri=redirect_uri,
                scope=SPOTIFY_SCOPE,
                cache_path=str(cache_path) if cache_path else None,
                open_browser=False
            )
            spotify_instance = spotipy.Spotify(auth_manager=auth_manager)

            # Forces the authorization flow now rather than mid-run
            spotify_instance.current_user()
        except spotipy.SpotifyException as e:
            raise SpotifyError(
                f"Spotify authentication failed: {e}",
                details={"original_error": str(e)},
                is_auth_error=True
            ) from e
        except SpotifyOauthError as e:
            raise SpotifyError(
                f"Spotify authorization failed: {e}",
                details={"original_error": str(e)},
                is_auth_error=True
            ) from e

        instance = super().__call__(spotify_instance)
        cls._instance = instance
        cls._initialized = True
        return instance

    def is_initialized(cls) -> bool:
        """True once init() has succeeded."""
        return cls._initialized

    def reset(cls) -> None:
        """
        Reset the singleton state (for testing only).

        Clears the instance so init() can be called again.
        """
        cls._instance = None
        cls._initialized = False


class SpotifyClient(metaclass=SpotifyClientMeta):
    """
    Singleton Spotify API client.

    Wraps spotipy.Spotify and converts spotipy exceptions into
    SpotifyError. Must be initialized with SpotifyClient.init() before use.

    Rate Limiting:
        spotipy retries rate-limited requests with backoff on its own. A
        429 that survives those retries surfaces as SpotifyError with
        is_rate_limit=True.
    """

    def __init__(self, spotify_instance: spotipy.Spotify) -> None:
        """
        Note:
            Called by the metaclass init(). Do not call directly.
        """
        self._spotify = spotify_instance

    def _call(
        self,
        action: str,
        func: Callable[..., Any],
        *args: Any,
        **kwargs: Any
    ) -> dict[str, Any]:
        """
        Run a spotipy call, translating failures into SpotifyError.

        Args:
            action: Description used in error messages ("fetch playlist").
            func: The spotipy method.

        Raises:
            SpotifyError: On any API failure or an empty response.
        """
        try:
            result = func(*args, **kwargs)
        except spotipy.SpotifyException as e:
            if e.http_status == 429:
                raise SpotifyError(
                    f"Rate limited while trying to {action}",
                    details={"http_status": 429},
                    is_rate_limit=True
                ) from e
            if e.http_status == 401:
                raise SpotifyError(
                    f"Not authorized to {action}: {e}",
                    details={"http_status": 401},
                    is_auth_error=True
                ) from e
            raise SpotifyError(
                f"Failed to {action}: {e}",
                details={"http_status": e.http_status, "original_error": str(e)}
            ) from e

        if result is None:
            raise SpotifyError(f"Failed to {action}: empty response")
        return result

    # =========================================================================
    # Playlist Operations
    # =========================================================================

    def current_user_playlists(
        self,
        limit: int = PLAYLISTS_PAGE_SIZE,
        offset: int = 0
    ) -> dict[str, Any]:
        """
        Get one page of the current user's playlists.

        Returns:
            Paging object with 'items' (simplified playlists) and 'next'.
        """
        return self._call(
            "fetch user playlists",
            self._spotify.current_user_playlists,
            limit=min(limit, PLAYLISTS_PAGE_SIZE),
            offset=offset
        )

    def current_user_all_playlists(self) -> list[dict[str, Any]]:
        """
        Get ALL of the current user's playlists, paginating automatically.

        Returns:
            Simplified playlist objects (id, name, description, owner).
        """
        all_items: list[dict[str, Any]] = []
        offset = 0

        while True:
            response = self.current_user_playlists(offset=offset)
            all_items.extend(item for item in response.get("items", []) if item)

            if response.get("next") is None:
                break
            offset += PLAYLISTS_PAGE_SIZE

        return all_items

    def playlist(self, playlist_id: str) -> dict[str, Any]:
        """
        Get playlist metadata (without its track list).

        Raises:
            SpotifyError: If the playlist is not found, private, or on
                          network error.
        """
        return self._call(
            f"fetch playlist {playlist_id}",
            self._spotify.playlist,
            playlist_id,
            fields="id,name,description,owner,tracks.total"
        )

    def playlist_items(
        self,
        playlist_id: str,
        limit: int = PLAYLIST_ITEMS_PAGE_SIZE,
        offset: int = 0
    ) -> dict[str, Any]:
        """
        Get one page of a playlist's tracks.

        Returns:
            Paging object with 'items' (playlist track objects) and 'next'.
        """
        return self._call(
            f"fetch items of playlist {playlist_id}",
            self._spotify.playlist_items,
            playlist_id,
            limit=min(limit, PLAYLIST_ITEMS_PAGE_SIZE),
            offset=offset,
            additional_types=["track"]
        )

    def playlist_all_items(self, playlist_id: str) -> list[dict[str, Any]]:
        """
        Get ALL items of a playlist, handling pagination automatically.

        Note:
            Large playlists (1000+ tracks) take ten or more requests.
        """
        all_items: list[dict[str, Any]] = []
        offset = 0

        while True:
            response = self.playlist_items(playlist_id, offset=offset)
            all_items.extend(response.get("items", []))

            if response.get("next") is None:
                break
            offset += PLAYLIST_ITEMS_PAGE_SIZE

        return all_items
