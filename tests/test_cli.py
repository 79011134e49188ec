"""Test the command-line interface"""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from music_utils import __version__
from music_utils.cli import cli
from music_utils.core.exceptions import LidarrError, TidalError
from music_utils.matching.models import CatalogPlaylist, MissingAlbum


@pytest.fixture
def config_file(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "data:\n"
        f"  directory: {tmp_path / 'data'}\n"
        "lidarr:\n"
        "  host: http://lidarr:8686\n"
        "  api_key: key\n",
        encoding="utf-8",
    )
    return config_path


class TestCli:
    """Test flag handling and exit codes"""

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_command_shows_help(self):
        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 0
        assert result.exception is None

    def test_missing_config(self, tmp_path):
        result = CliRunner().invoke(
            cli, ["--lidarr-wanted", "--config", str(tmp_path / "absent.yaml")]
        )

        assert result.exit_code == 1

    def test_unconfigured_section(self, config_file):
        result = CliRunner().invoke(cli, ["--to-tidal", "--save-tidal", "--config", str(config_file)])

        # No Spotify snapshots, so --to-tidal returns early; --save-tidal needs tidal
        assert result.exit_code == 1

    def test_lidarr_wanted(self, config_file, tmp_path):
        with patch("music_utils.cli.LidarrClient") as client_class:
            client_class.return_value.get_wanted_albums.return_value = [
                MissingAlbum(name="Currents", artist="Tame Impala")
            ]
            result = CliRunner().invoke(cli, ["--lidarr-wanted", "--config", str(config_file)])

        assert result.exit_code == 0
        wanted = tmp_path / "data" / "wanted" / "missing-albums.json"
        assert json.loads(wanted.read_text(encoding="utf-8")) == [
            {"name": "Currents", "artist": "Tame Impala"}
        ]

    def test_save_tidal_continues_after_failed_playlist(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "data:\n"
            f"  directory: {tmp_path / 'data'}\n"
            "tidal:\n"
            "  access_token: token\n"
            "  user_id: \"12345\"\n",
            encoding="utf-8",
        )
        tidal_dir = tmp_path / "data" / "tidal"
        tidal_dir.mkdir(parents=True)
        (tidal_dir / "playlists.txt").write_text(
            "https://tidal.com/browse/playlist/3f1e0c2a-5b7d-4c1e-9a2b-8d6f4e3c2b1a\n"
            "https://tidal.com/browse/playlist/9a8b7c6d-5e4f-4a3b-8c2d-1e0f9a8b7c6d\n",
            encoding="utf-8",
        )

        with patch("music_utils.cli.TidalClient") as client_class:
            client_class.return_value.get_full_playlist.side_effect = [
                TidalError("not found", status_code=404),
                CatalogPlaylist(id="9a8b7c6d-5e4f-4a3b-8c2d-1e0f9a8b7c6d", title="Road Trip"),
            ]
            result = CliRunner().invoke(cli, ["--save-tidal", "--config", str(config_path)])

        assert result.exit_code == 0
        assert client_class.return_value.get_full_playlist.call_count == 2
        assert (tidal_dir / "Road Trip.json").exists()

    def test_adapter_error_exit_code(self, config_file):
        with patch("music_utils.cli.LidarrClient") as client_class:
            client_class.return_value.get_wanted_albums.side_effect = LidarrError("refused")
            result = CliRunner().invoke(cli, ["--lidarr-wanted", "--config", str(config_file)])

        assert result.exit_code == 3
