"""Test Spotify snapshot fetching"""

from unittest.mock import Mock, patch

import pytest
import spotipy

from music_utils.core.exceptions import SpotifyError
from music_utils.core.storage import SPOTIFY_DIR
from music_utils.spotify.client import SpotifyClient
from music_utils.spotify.fetcher import SpotifyFetcher, playlist_from_spotify, track_from_spotify


class TestSpotifyConversion:
    """Test conversion of Spotify playlist items"""

    def test_track(self, sample_spotify_item):
        track = track_from_spotify(sample_spotify_item)

        assert track.title == "Kids"
        assert track.artists == ("MGMT",)
        assert track.album == "Oracular Spectacular"
        assert track.isrc == "USQX90800121"
        assert track.external_id == "1jJci4qxiYcOHhQR247rEU"

    def test_removed_track(self):
        assert track_from_spotify({"track": None}) is None
        assert track_from_spotify(None) is None

    def test_episode_dropped(self, sample_spotify_item):
        item = {"track": dict(sample_spotify_item["track"], type="episode")}

        assert track_from_spotify(item) is None

    def test_local_file_kept_without_id(self, sample_spotify_item):
        item = {"track": dict(sample_spotify_item["track"], id=None, external_ids={})}

        track = track_from_spotify(item)

        assert track.external_id == ""
        assert track.isrc == ""

    def test_playlist(self, sample_spotify_item):
        playlist = playlist_from_spotify(
            {"id": "p1", "name": " Road Trip ", "description": "Summer"},
            [sample_spotify_item, {"track": None}],
        )

        assert playlist.title == "Road Trip"
        assert len(playlist.tracks) == 1


@pytest.fixture
def spotify_client(sample_spotify_item):
    client = Mock()
    client.current_user_all_playlists.return_value = [{"id": "p1"}, {"id": "p2"}]
    client.playlist.side_effect = lambda playlist_id: {
        "p1": {"id": "p1", "name": "Road Trip"},
        "p2": {"id": "p2", "name": ""},
    }[playlist_id]
    client.playlist_all_items.return_value = [sample_spotify_item]
    with patch("music_utils.spotify.fetcher.SpotifyClient") as client_class:
        client_class.is_initialized.return_value = True
        client_class.return_value = client
        yield client


class TestSpotifyFetcher:
    """Test fetching and saving the user's playlists"""

    def test_requires_initialized_client(self):
        SpotifyClient.reset()

        with pytest.raises(SpotifyError):
            SpotifyFetcher()

    def test_nameless_playlists_skipped(self, spotify_client):
        playlists = SpotifyFetcher().fetch_user_playlists()

        assert [p.id for p in playlists] == ["p1"]

    def test_save_user_playlists(self, spotify_client, data_store):
        SpotifyFetcher().save_user_playlists(data_store)

        saved = data_store.read_playlists(SPOTIFY_DIR)
        assert [p.title for p in saved] == ["Road Trip"]
        assert saved[0].tracks[0].isrc == "USQX90800121"


class TestSpotifyClient:
    """Test error translation in the client wrapper"""

    def test_rate_limit(self):
        spotify = Mock()
        spotify.playlist.side_effect = spotipy.SpotifyException(429, -1, "rate limited")
        client = object.__new__(SpotifyClient)
        client._spotify = spotify

        with pytest.raises(SpotifyError) as exc_info:
            client.playlist("p1")

        assert exc_info.value.is_rate_limit

    def test_pagination(self):
        spotify = Mock()
        spotify.playlist_items.side_effect = [
            {"items": [{"track": {"id": "a"}}], "next": "page2"},
            {"items": [{"track": {"id": "b"}}], "next": None},
        ]
        client = object.__new__(SpotifyClient)
        client._spotify = spotify

        items = client.playlist_all_items("p1")

        assert [item["track"]["id"] for item in items] == ["a", "b"]
        assert spotify.playlist_items.call_args.kwargs["offset"] == 100

    def test_not_initialized(self):
        SpotifyClient.reset()

        with pytest.raises(SpotifyError):
            SpotifyClient()
