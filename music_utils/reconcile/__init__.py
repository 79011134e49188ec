"""
Playlist reconciliation for music-utils.

Makes a target catalog playlist contain the tracks of a source playlist,
searching the target for every track not already there and adding the
matches. Unmatched tracks are handed to a MissingSink for review.

Usage:
    from music_utils.reconcile import Reconciler

    reconciler = Reconciler(catalog=tidal_client, sink=missing_writer)
    reports = reconciler.sync_playlists(spotify_playlists, show_progress=True)
"""

from music_utils.reconcile.adapters import AddResult, LocalLibrary, MissingSink, TargetCatalog
from music_utils.reconcile.orchestrator import (
    Reconciler,
    build_query,
    find_playlist,
    playable_tracks,
)

__all__ = [
    "AddResult",
    "TargetCatalog",
    "LocalLibrary",
    "MissingSink",
    "Reconciler",
    "build_query",
    "find_playlist",
    "playable_tracks",
]
