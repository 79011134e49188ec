"""
Tidal module for music-utils: the target catalog.

Usage:
    from music_utils.tidal import TidalClient

    client = TidalClient(config.tidal.access_token, config.tidal.user_id)
"""

from music_utils.tidal.client import TidalClient
from music_utils.tidal.models import (
    playlist_from_tidal,
    search_response_from_tidal,
    track_from_tidal,
)

__all__ = [
    "TidalClient",
    "playlist_from_tidal",
    "search_response_from_tidal",
    "track_from_tidal",
]
