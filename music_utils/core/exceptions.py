"""
Exception classes for music-utils.

This module defines all custom exceptions used throughout the application.
The hierarchy follows the failure modes of a reconciliation run: some
errors only cost a single track, others end the current playlist.

Exception Hierarchy:
    MusicUtilsError (base)
        ConfigError - Configuration file issues
        AdapterError - A catalog/library query failed (track becomes missing)
            SpotifyError - Spotify API issues
            TidalError - Tidal API issues
            LidarrError - Lidarr API issues
            LibraryError - Local library database issues
        MutationError - Adding a matched track to the target failed (fatal
                        for the current playlist)
        SinkError - Missing-track records could not be written

Note:
    A track that simply has no match is NOT an error. Empty search results
    and lookups returning None are normal outcomes routed to "missing".
"""


class MusicUtilsError(Exception):
    """
    Base exception for all music-utils errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., playlist
                 name, query, HTTP status).

    Example:
        try:
            reconciler.sync_playlists(playlists)
        except MusicUtilsError as e:
            logger.error(f"Sync failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description shown to the user.
            details: Optional dictionary containing additional context.
                     Common keys include:
                     - 'playlist': Playlist title involved in the error
                     - 'query': Search query that failed
                     - 'original_error': The wrapped exception as a string
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(MusicUtilsError):
    """
    Raised when there's an issue with the configuration file.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - config.yaml not found
        - config.yaml has invalid YAML syntax
        - A section needed by the selected command is missing or empty
          (e.g., --to-tidal without a tidal.access_token)

    Example:
        raise ConfigError(
            "'tidal.access_token' must be a non-empty string",
            details={'field': 'tidal.access_token'}
        )
    """
    pass


class AdapterError(MusicUtilsError):
    """
    Raised when an external catalog or library cannot answer a query.

    This is a NON-CRITICAL error during reconciliation: the track being
    looked up is recorded as missing and the playlist continues. Retry
    policy, if any, belongs to the adapter raising it.
    """
    pass


class SpotifyError(AdapterError):
    """
    Raised when there's an issue with the Spotify API.

    Attributes:
        is_auth_error: True if this is an authentication error (CRITICAL).
        is_rate_limit: True if this is a rate limit error.

    Example:
        raise SpotifyError(
            "Failed to fetch playlist: playlist is private",
            details={'playlist_id': playlist_id, 'status_code': 403}
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        is_auth_error: bool = False,
        is_rate_limit: bool = False
    ) -> None:
        """
        Initialize Spotify error with additional flags.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
            is_auth_error: Set to True if this is an authentication failure.
            is_rate_limit: Set to True if this is a rate limit error.
        """
        super().__init__(message, details)
        self.is_auth_error = is_auth_error
        self.is_rate_limit = is_rate_limit


class TidalError(AdapterError):
    """
    Raised when a Tidal API request fails.

    Attributes:
        status_code: HTTP status code of the failed response, or None when
                     the request never reached the server.
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        status_code: int | None = None
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class LidarrError(AdapterError):
    """Raised when the Lidarr API cannot be queried."""
    pass


class LibraryError(AdapterError):
    """
    Raised when the local library database cannot be opened or queried.

    A track that is simply not in the library is NOT a LibraryError;
    lookups return None in that case.
    """
    pass


class MutationError(MusicUtilsError):
    """
    Raised when a matched track could not be added to the target playlist.

    This is fatal for the CURRENT playlist: the remaining tracks are not
    processed because a partially mutated target playlist is unsafe to keep
    working against. Tracks linked before the failure are not rolled back.

    Example:
        raise MutationError(
            "Failed to add track to playlist",
            details={'playlist_id': playlist_id, 'track_id': track_id}
        )
    """
    pass


class SinkError(MusicUtilsError):
    """
    Raised when missing-track records cannot be persisted for review.

    Reported to the user but never invalidates tracks already linked.
    """
    pass
