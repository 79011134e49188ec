"""
Spotify module for music-utils.

Reads the current user's playlists (the source catalog) and saves them as
JSON snapshots under <data>/spotify/.

Usage:
    from music_utils.spotify import SpotifyClient, SpotifyFetcher

    SpotifyClient.init(client_id, client_secret, redirect_uri)
    SpotifyFetcher().save_user_playlists(store)
"""

from music_utils.spotify.client import SpotifyClient
from music_utils.spotify.fetcher import SpotifyFetcher, playlist_from_spotify, track_from_spotify

__all__ = [
    "SpotifyClient",
    "SpotifyFetcher",
    "playlist_from_spotify",
    "track_from_spotify",
]
