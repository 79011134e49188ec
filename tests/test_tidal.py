"""Test the Tidal client and payload conversion"""

from unittest.mock import Mock

import pytest
import requests

from music_utils.core.exceptions import TidalError
from music_utils.reconcile.adapters import AddResult
from music_utils.tidal.client import API_URL, API_URL_V2, TidalClient
from music_utils.tidal.models import (
    playlist_from_tidal,
    search_response_from_tidal,
    track_from_tidal,
    tracks_from_page,
)


def _response(status_code=200, json_data=None, headers=None):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = json_data if json_data is not None else {}
    response.headers = headers or {}
    response.text = ""
    return response


@pytest.fixture
def session():
    session = Mock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def client(session):
    return TidalClient("token", "42", country_code="GB", session=session)


class TestTidalModels:
    """Test conversion of Tidal payloads"""

    def test_track(self, sample_tidal_track):
        track = track_from_tidal(sample_tidal_track)

        assert track.title == "Kids"
        assert track.artists == ("MGMT",)
        assert track.album == "Oracular Spectacular"
        assert track.isrc == "USQX90800121"
        assert track.external_id == "77646168"

    def test_playlist(self):
        playlist = playlist_from_tidal({"uuid": "abc", "title": "Mix", "description": None})

        assert playlist.id == "abc"
        assert playlist.title == "Mix"
        assert playlist.description == ""

    def test_page_skips_non_tracks(self, sample_tidal_track):
        page = {"items": [
            {"item": sample_tidal_track, "type": "track"},
            {"item": {"id": 1, "title": "A Video"}, "type": "video"},
            {"id": None, "title": "broken"},
        ]}

        assert [t.external_id for t in tracks_from_page(page)] == ["77646168"]

    def test_search_response_top_hit(self, sample_tidal_track):
        other = dict(sample_tidal_track, id=1, title="Electric Feel")
        response = search_response_from_tidal({
            "tracks": {"items": [other, sample_tidal_track]},
            "topHit": {"type": "TRACKS", "value": sample_tidal_track},
        })

        assert len(response.candidates) == 2
        assert response.top_hit.title == "Kids"

    def test_search_response_artist_top_hit_ignored(self, sample_tidal_track):
        response = search_response_from_tidal({
            "tracks": {"items": [sample_tidal_track]},
            "topHit": {"type": "ARTISTS", "value": {"id": 4217, "name": "MGMT"}},
        })

        assert response.top_hit == response.candidates[0]

    def test_empty_search_response(self):
        assert search_response_from_tidal({}).is_empty


class TestTidalClient:
    """Test the HTTP calls made by TidalClient"""

    def test_headers(self, session):
        TidalClient("token", "42", session=session)

        assert session.headers["Authorization"] == "Bearer token"
        assert session.headers["Accept"] == "application/json"

    def test_search(self, client, session, sample_tidal_track):
        session.request.return_value = _response(json_data={"tracks": {"items": [sample_tidal_track]}})

        response = client.search_tracks("Kids MGMT")

        method, url = session.request.call_args.args
        params = session.request.call_args.kwargs["params"]
        assert (method, url) == ("GET", f"{API_URL}/search")
        assert params == {"countryCode": "GB", "query": "Kids MGMT", "limit": 20, "types": "TRACKS"}
        assert response.candidates[0].external_id == "77646168"

    def test_get_playlists(self, client, session):
        session.request.return_value = _response(json_data={"items": [{"uuid": "u1", "title": "Mix"}]})

        playlists = client.get_playlists()

        assert session.request.call_args.args[1] == f"{API_URL}/users/42/playlists"
        assert [p.id for p in playlists] == ["u1"]

    def test_create_playlist(self, client, session):
        session.request.return_value = _response(
            json_data={"data": {"uuid": "new", "title": "Road Trip"}}
        )

        playlist = client.create_playlist("Road Trip", "From Spotify")

        method, url = session.request.call_args.args
        assert (method, url) == ("PUT", f"{API_URL_V2}/my-collection/playlists/folders/create-playlist")
        assert session.request.call_args.kwargs["params"]["folderId"] == "root"
        assert playlist.id == "new"

    def test_create_playlist_without_data(self, client, session):
        session.request.return_value = _response(json_data={})

        with pytest.raises(TidalError):
            client.create_playlist("Road Trip", "")

    def test_add_track_uses_etag(self, client, session):
        session.request.side_effect = [
            _response(headers={"ETag": '"1700000000"'}),
            _response(),
        ]

        assert client.add_track_to_playlist("u1", "77646168") is AddResult.ADDED

        post = session.request.call_args
        assert post.args == ("POST", f"{API_URL}/playlists/u1/items")
        assert post.kwargs["headers"] == {"If-None-Match": '"1700000000"'}
        assert post.kwargs["data"]["trackIds"] == "77646168"

    def test_add_track_conflict(self, client, session):
        session.request.side_effect = [_response(), _response(status_code=409)]

        assert client.add_track_to_playlist("u1", "1") is AddResult.CONFLICT

    def test_http_error(self, client, session):
        session.request.return_value = _response(status_code=401)

        with pytest.raises(TidalError) as exc_info:
            client.get_playlist_tracks("u1")

        assert exc_info.value.status_code == 401

    def test_transport_error(self, client, session):
        session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(TidalError) as exc_info:
            client.search_tracks("Kids")

        assert exc_info.value.status_code is None

    def test_full_playlist(self, client, session, sample_tidal_track):
        session.request.side_effect = [
            _response(json_data={"uuid": "u1", "title": "Mix"}),
            _response(json_data={"items": [sample_tidal_track]}),
        ]

        playlist = client.get_full_playlist("u1")

        assert playlist.title == "Mix"
        assert len(playlist.tracks) == 1
