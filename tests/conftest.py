"""Test configuration and fixtures"""

import sqlite3
from pathlib import Path

import pytest

from music_utils.core.exceptions import SinkError, TidalError
from music_utils.core.storage import DataStore
from music_utils.matching.models import CatalogPlaylist, CatalogTrack, SearchResponse
from music_utils.reconcile.adapters import AddResult


def make_track(title, *artists, album="", isrc="", external_id="src-1"):
    """Build a CatalogTrack with sensible defaults."""
    return CatalogTrack(
        title=title,
        artists=tuple(artists),
        album=album,
        isrc=isrc,
        external_id=external_id,
    )


class FakeCatalog:
    """
    In-memory TargetCatalog.

    Search responses are keyed by query; playlists live in a dict of
    id -> list of tracks so adds are visible to later calls.
    """

    def __init__(self, responses=None, playlists=None):
        self.responses = dict(responses or {})
        self.playlists = {p.id: p for p in playlists or ()}
        self.playlist_tracks = {p.id: list(p.tracks) for p in playlists or ()}
        self.searches = []
        self.added = []
        self.created = []
        self.fail_search = set()
        self.fail_add = set()
        self.conflict_add = set()

    def search_tracks(self, query):
        self.searches.append(query)
        if query in self.fail_search:
            raise TidalError("search unavailable", status_code=503)
        return self.responses.get(query, SearchResponse())

    def add_track_to_playlist(self, playlist_id, track_id):
        if track_id in self.fail_add:
            raise TidalError("add rejected", status_code=500)
        if track_id in self.conflict_add:
            return AddResult.CONFLICT
        self.added.append((playlist_id, track_id))
        return AddResult.ADDED

    def create_playlist(self, name, description):
        playlist = CatalogPlaylist(id=f"created-{len(self.created) + 1}", title=name,
                                   description=description)
        self.created.append(playlist)
        self.playlists[playlist.id] = playlist
        self.playlist_tracks[playlist.id] = []
        return playlist

    def get_playlists(self):
        return [p.with_tracks(()) for p in self.playlists.values()]

    def get_playlist_tracks(self, playlist_id):
        return list(self.playlist_tracks.get(playlist_id, ()))


class RecordingSink:
    """MissingSink that keeps every call, optionally failing."""

    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def record_missing(self, records, label):
        if self.fail:
            raise SinkError(f"cannot write {label}")
        self.calls.append((label, list(records)))


@pytest.fixture
def fake_catalog():
    return FakeCatalog()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def data_store(tmp_path):
    """DataStore rooted in a temporary directory"""
    store = DataStore(tmp_path / "data")
    store.initialize()
    return store


@pytest.fixture
def navidrome_db(tmp_path):
    """
    Minimal Navidrome database with a media_file table.

    Returns a function adding rows (title, album, artist, path) and the
    database path as its .path attribute.
    """
    db_path = tmp_path / "navidrome.db"
    conn = sqlite3.connect(db_path)
    conn.execute(
        "CREATE TABLE media_file (id TEXT, path TEXT, title TEXT, album TEXT, artist TEXT)"
    )
    conn.commit()

    def add(title, album, artist, path):
        conn.execute(
            "INSERT INTO media_file (id, path, title, album, artist) VALUES (?, ?, ?, ?, ?)",
            (path, path, title, album, artist),
        )
        conn.commit()

    add.path = db_path
    yield add
    conn.close()


@pytest.fixture
def sample_tidal_track():
    """Tidal v1 track object"""
    return {
        "id": 77646168,
        "title": "Kids",
        "isrc": "usqx90800121",
        "artists": [{"id": 4217, "name": "MGMT", "type": "MAIN"}],
        "album": {"id": 77646161, "title": "Oracular Spectacular"},
    }


@pytest.fixture
def sample_spotify_item():
    """Spotify playlist track object"""
    return {
        "added_at": "2023-01-01T00:00:00Z",
        "track": {
            "id": "1jJci4qxiYcOHhQR247rEU",
            "type": "track",
            "name": "Kids",
            "artists": [{"id": "0SwO7SWeDHJijQ3XNS7xEE", "name": "MGMT"}],
            "album": {"name": "Oracular Spectacular"},
            "external_ids": {"isrc": "usqx90800121"},
        },
    }
