"""
Configuration management for music-utils.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml.

The configuration file contains:
    - Data directory for playlist snapshots, missing-track files and logs
    - Spotify API credentials (source catalog)
    - Tidal session token and user ID (target catalog)
    - Navidrome database and playlist directory (local library)
    - Lidarr host and API key (wanted albums)

Only the data section is mandatory. Every command checks the sections it
needs through the Config.require_*() methods, so a user who only imports
playlists into Navidrome never has to fill in Spotify credentials.

Example config.yaml:
    debug: false

    data:
      directory: "/data"

    spotify:
      client_id: "your_client_id_here"
      client_secret: "your_client_secret_here"
      redirect_uri: "http://127.0.0.1:28542/callback"

    tidal:
      access_token: "your_access_token"
      user_id: "12345678"
      country_code: "US"

    navidrome:
      database: "/navidrome/navidrome.db"
      playlists_directory: "/playlists"

    lidarr:
      host: "http://lidarr:8686"
      api_key: "your_api_key"
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from music_utils.core.exceptions import ConfigError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

DEFAULT_REDIRECT_URI = "http://127.0.0.1:28542/callback"
DEFAULT_COUNTRY_CODE = "US"
DEFAULT_NAVIDROME_DATABASE = "/navidrome/navidrome.db"
DEFAULT_PLAYLISTS_DIRECTORY = "/playlists"


@dataclass(frozen=True)
class DataConfig:
    """
    Data directory configuration.

    Attributes:
        directory: Absolute path where snapshots, missing-track files and
                   logs are written. ~ is expanded.
    """
    directory: Path


@dataclass(frozen=True)
class SpotifyConfig:
    """
    Spotify API credentials.

    Attributes:
        client_id: Spotify application client ID.
        client_secret: Spotify application client secret.
        redirect_uri: OAuth redirect URI registered for the application.
    """
    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = DEFAULT_REDIRECT_URI

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


@dataclass(frozen=True)
class TidalConfig:
    """
    Tidal session configuration.

    The access token is obtained outside of music-utils; no login or
    refresh flow is performed here.

    Attributes:
        access_token: Bearer token for the Tidal API.
        user_id: Tidal user ID owning the playlists.
        country_code: Country code sent with every request.
    """
    access_token: str = ""
    user_id: str = ""
    country_code: str = DEFAULT_COUNTRY_CODE

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token and self.user_id)


@dataclass(frozen=True)
class NavidromeConfig:
    """
    Local library configuration.

    Attributes:
        database: Path to Navidrome's SQLite database (opened read-only).
        playlists_directory: Directory where .m3u8 playlists are written.
    """
    database: Path
    playlists_directory: Path


@dataclass(frozen=True)
class LidarrConfig:
    """Lidarr API location and key."""
    host: str = ""
    api_key: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.api_key)


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable.

    Attributes:
        debug: Enables DEBUG output on the console.
        data: Data directory settings.
        spotify: Spotify credentials (may be unconfigured).
        tidal: Tidal session (may be unconfigured).
        navidrome: Local library settings (always has defaults).
        lidarr: Lidarr settings (may be unconfigured).
    """
    debug: bool
    data: DataConfig
    spotify: SpotifyConfig
    tidal: TidalConfig
    navidrome: NavidromeConfig
    lidarr: LidarrConfig

    def require_spotify(self) -> SpotifyConfig:
        """
        Return the Spotify section, raising if it is not filled in.

        Raises:
            ConfigError: If client_id or client_secret is empty.
        """
        if not self.spotify.is_configured:
            raise ConfigError(
                "'spotify.client_id' and 'spotify.client_secret' are required "
                "for this command",
                details={"section": "spotify"}
            )
        return self.spotify

    def require_tidal(self) -> TidalConfig:
        """
        Return the Tidal section, raising if it is not filled in.

        Raises:
            ConfigError: If access_token or user_id is empty.
        """
        if not self.tidal.is_configured:
            raise ConfigError(
                "'tidal.access_token' and 'tidal.user_id' are required "
                "for this command",
                details={"section": "tidal"}
            )
        return self.tidal

    def require_lidarr(self) -> LidarrConfig:
        """
        Return the Lidarr section, raising if it is not filled in.

        Raises:
            ConfigError: If host or api_key is empty.
        """
        if not self.lidarr.is_configured:
            raise ConfigError(
                "'lidarr.host' and 'lidarr.api_key' are required for this command",
                details={"section": "lidarr"}
            )
        return self.lidarr


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If the config file is not found, has invalid YAML syntax,
                     is missing the data section, or contains invalid values.

    Behavior:
        1. Locate config file (explicit path or CWD/config.yaml)
        2. Read and parse YAML content
        3. Validate the mandatory data section
        4. Parse optional sections, applying defaults
        5. Return frozen Config
    """
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            details={"file_path": str(config_path)}
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in {config_path}: {e}",
            details={"file_path": str(config_path), "yaml_error": str(e)}
        ) from e
    except OSError as e:
        raise ConfigError(
            f"Cannot read configuration file {config_path}: {e}",
            details={"file_path": str(config_path)}
        ) from e

    return parse_config(raw_config)


def parse_config(raw_config: Any) -> Config:
    """
    Build a Config from an already-parsed YAML document.

    Args:
        raw_config: The object returned by yaml.safe_load().

    Returns:
        Config: Validated configuration.

    Raises:
        ConfigError: On any structural or value problem.
    """
    if not isinstance(raw_config, dict):
        raise ConfigError("Configuration root must be a mapping")

    if "data" not in raw_config:
        raise ConfigError(
            "Missing required section: 'data'",
            details={"missing_section": "data"}
        )

    debug = raw_config.get("debug", False)
    if not isinstance(debug, bool):
        raise ConfigError(
            "'debug' must be true or false",
            details={"field": "debug", "value": debug}
        )

    return Config(
        debug=debug,
        data=_parse_data_config(_section(raw_config, "data")),
        spotify=_parse_spotify_config(_section(raw_config, "spotify")),
        tidal=_parse_tidal_config(_section(raw_config, "tidal")),
        navidrome=_parse_navidrome_config(_section(raw_config, "navidrome")),
        lidarr=_parse_lidarr_config(_section(raw_config, "lidarr")),
    )


def _section(raw_config: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a section as a dict, treating a missing/null section as empty."""
    section = raw_config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(
            f"Section '{name}' must be a dictionary",
            details={"section": name}
        )
    return section


def _optional_string(section: dict[str, Any], key: str, field: str, default: str = "") -> str:
    """Read a string field, allowing it to be absent or null."""
    value = section.get(key)
    if value is None:
        return default
    if not isinstance(value, (str, int)):
        raise ConfigError(
            f"'{field}' must be a string",
            details={"field": field, "value": value}
        )
    return str(value).strip()


def _expand_path(value: str) -> Path:
    return Path(value).expanduser().resolve()


def _parse_data_config(data_section: dict[str, Any]) -> DataConfig:
    """
    Parse and validate the data section.

    Raises:
        ConfigError: If directory is missing or empty.
    """
    directory = data_section.get("directory", "")

    if not isinstance(directory, str) or not directory.strip():
        raise ConfigError(
            "'data.directory' must be a non-empty string",
            details={"field": "data.directory"}
        )

    return DataConfig(directory=_expand_path(directory.strip()))


def _parse_spotify_config(spotify_section: dict[str, Any]) -> SpotifyConfig:
    return SpotifyConfig(
        client_id=_optional_string(spotify_section, "client_id", "spotify.client_id"),
        client_secret=_optional_string(spotify_section, "client_secret", "spotify.client_secret"),
        redirect_uri=_optional_string(
            spotify_section, "redirect_uri", "spotify.redirect_uri", DEFAULT_REDIRECT_URI
        ) or DEFAULT_REDIRECT_URI,
    )


def _parse_tidal_config(tidal_section: dict[str, Any]) -> TidalConfig:
    country_code = _optional_string(
        tidal_section, "country_code", "tidal.country_code", DEFAULT_COUNTRY_CODE
    ) or DEFAULT_COUNTRY_CODE

    if len(country_code) != 2 or not country_code.isalpha():
        raise ConfigError(
            "'tidal.country_code' must be a two-letter country code",
            details={"field": "tidal.country_code", "value": country_code}
        )

    return TidalConfig(
        access_token=_optional_string(tidal_section, "access_token", "tidal.access_token"),
        user_id=_optional_string(tidal_section, "user_id", "tidal.user_id"),
        country_code=country_code.upper(),
    )


def _parse_navidrome_config(navidrome_section: dict[str, Any]) -> NavidromeConfig:
    database = _optional_string(
        navidrome_section, "database", "navidrome.database", DEFAULT_NAVIDROME_DATABASE
    ) or DEFAULT_NAVIDROME_DATABASE
    playlists_directory = _optional_string(
        navidrome_section,
        "playlists_directory",
        "navidrome.playlists_directory",
        DEFAULT_PLAYLISTS_DIRECTORY
    ) or DEFAULT_PLAYLISTS_DIRECTORY

    return NavidromeConfig(
        database=_expand_path(database),
        playlists_directory=_expand_path(playlists_directory),
    )


def _parse_lidarr_config(lidarr_section: dict[str, Any]) -> LidarrConfig:
    host = _optional_string(lidarr_section, "host", "lidarr.host")
    return LidarrConfig(
        host=host.rstrip("/"),
        api_key=_optional_string(lidarr_section, "api_key", "lidarr.api_key"),
    )
