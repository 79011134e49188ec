"""
Command-line interface for music-utils.

This module implements the CLI using Click, with rich-click for the
output colors. Every command is a flag; several flags can be combined in
one run and are executed in the order listed below.

Commands:
    music-utils --save-spotify          Save every Spotify playlist as JSON
    music-utils --to-tidal              Reconcile saved Spotify playlists into Tidal
    music-utils --save-tidal            Save the Tidal playlists listed in playlists.txt
    music-utils --import-navidrome      Write saved Tidal playlists as .m3u8 files
    music-utils --lidarr-wanted         Save Lidarr's wanted albums

Options:
    --config <path>                     Use another config file than ./config.yaml

Usage:
    # Full pipeline
    music-utils --save-spotify --to-tidal --import-navidrome

    # Only refresh the local playlists
    music-utils --save-tidal --import-navidrome

Data directory layout:
    <data>/spotify/<playlist>.json           Spotify snapshots
    <data>/tidal/<playlist>.json             Tidal snapshots
    <data>/tidal/playlists.txt               Tidal playlist URLs (--save-tidal)
    <data>/missing/<playlist>.json           Tracks not found on Tidal
    <data>/navidrome-missing/<playlist>.json Tracks not in the local library
    <data>/wanted/missing-albums.json        Albums Lidarr is waiting for
    <data>/logs/                             Log files of every run

Exit codes:
    0    success
    1    configuration error
    3    a catalog, library or Lidarr request failed
    4    any other error
    130  interrupted by the user
"""

import sys
from pathlib import Path
from typing import Optional

import rich_click as click

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = ""
click.rich_click.MAX_WIDTH = 100
click.rich_click.OPTION_GROUPS = {
    "cli": [
        {
            "name": "Commands",
            "options": [
                "--save-spotify",
                "--to-tidal",
                "--save-tidal",
                "--import-navidrome",
                "--lidarr-wanted",
            ],
        },
        {
            "name": "Options",
            "options": ["--config", "--no-progress"],
        },
        {
            "name": "Info",
            "options": ["--version", "--help"],
        },
    ],
}

from music_utils import __version__
from music_utils.core import (
    AdapterError,
    Config,
    ConfigError,
    DataStore,
    MissingTrackWriter,
    MusicUtilsError,
    SpotifyError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from music_utils.core.storage import NAVIDROME_MISSING_DIR, SPOTIFY_DIR, TIDAL_DIR
from music_utils.lidarr import LidarrClient
from music_utils.matching.models import ReconcileReport
from music_utils.navidrome import NavidromeLibrary, PlaylistImporter
from music_utils.reconcile import Reconciler
from music_utils.spotify import SpotifyClient, SpotifyFetcher
from music_utils.tidal import TidalClient
from music_utils.utils import extract_uuid

logger = get_logger(__name__)


SPOTIFY_TOKEN_CACHE = ".spotify-token-cache"


@click.command()
@click.option(
    "--save-spotify",
    is_flag=True,
    help="Save all Spotify playlists of the current user"
)
@click.option(
    "--to-tidal",
    is_flag=True,
    help="Add the tracks of the saved Spotify playlists to Tidal"
)
@click.option(
    "--save-tidal",
    is_flag=True,
    help="Save the Tidal playlists listed in tidal/playlists.txt"
)
@click.option(
    "--import-navidrome",
    is_flag=True,
    help="Write the saved Tidal playlists as .m3u8 files for Navidrome"
)
@click.option(
    "--lidarr-wanted",
    is_flag=True,
    help="Save the albums Lidarr is still missing"
)
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml)"
)
@click.option(
    "--no-progress",
    is_flag=True,
    help="Disable progress bars"
)
@click.option(
    "--version",
    is_flag=True,
    help="Show version and exit."
)
@click.pass_context
def cli(
    ctx: click.Context,
    save_spotify: bool,
    to_tidal: bool,
    save_tidal: bool,
    import_navidrome: bool,
    lidarr_wanted: bool,
    config_path: Optional[Path],
    no_progress: bool,
    version: bool
) -> None:
    """
    music-utils: keep playlists in sync across Spotify, Tidal and Navidrome.

    \b
    COMMANDS (combinable, run in this order):
        --save-spotify        Snapshot Spotify playlists to <data>/spotify/
        --to-tidal            Reconcile the snapshots into Tidal playlists
        --save-tidal          Snapshot Tidal playlists from tidal/playlists.txt
        --import-navidrome    Write Tidal snapshots as .m3u8 playlists
        --lidarr-wanted       Save Lidarr's wanted albums

    \b
    EXAMPLES:
        music-utils --save-spotify --to-tidal
        music-utils --save-tidal --import-navidrome --config ~/music.yaml
    """
    if version:
        click.echo(f"music-utils {__version__}")
        ctx.exit(0)

    commands = {
        "save_spotify": save_spotify,
        "to_tidal": to_tidal,
        "save_tidal": save_tidal,
        "import_navidrome": import_navidrome,
        "lidarr_wanted": lidarr_wanted,
    }
    if not any(commands.values()):
        click.echo(ctx.get_help())
        ctx.exit(0)

    _run(commands, config_path, show_progress=not no_progress)


def _run(commands: dict[str, bool], config_path: Path | None, show_progress: bool) -> None:
    """
    Load configuration, set up logging and run the selected commands.

    Raises:
        SystemExit: On fatal errors (with the exit code listed in the
                    module docstring).
    """
    try:
        config = load_config(config_path)

        store = DataStore(config.data.directory)
        store.initialize()
        setup_logging(config.data.directory, debug=config.debug)
        logger.info(f"music-utils {__version__} starting")

        if commands["save_spotify"]:
            _run_save_spotify(config, store)
        if commands["to_tidal"]:
            _run_to_tidal(config, store, show_progress)
        if commands["save_tidal"]:
            _run_save_tidal(config, store)
        if commands["import_navidrome"]:
            _run_import_navidrome(config, store, show_progress)
        if commands["lidarr_wanted"]:
            _run_lidarr_wanted(config, store)

        logger.info("music-utils completed successfully")

    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    except SpotifyError as e:
        click.echo(f"Spotify error: {e.message}", err=True)
        if e.is_auth_error:
            click.echo("Check the spotify section of config.yaml", err=True)
        logger.error(f"Spotify error: {e.message}", exc_info=True)
        sys.exit(3)

    except AdapterError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Adapter error: {e.message}", exc_info=True)
        sys.exit(3)

    except MusicUtilsError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(4)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(130)

    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Unexpected error")
        sys.exit(4)

    finally:
        shutdown_logging()


def _section_banner(title: str) -> None:
    logger.info("=" * 60)
    logger.info(title)
    logger.info("=" * 60)


def _tidal_client(config: Config) -> TidalClient:
    tidal = config.require_tidal()
    return TidalClient(
        access_token=tidal.access_token,
        user_id=tidal.user_id,
        country_code=tidal.country_code
    )


def _run_save_spotify(config: Config, store: DataStore) -> None:
    """Save every playlist of the current Spotify user."""
    _section_banner("Saving Spotify playlists")
    spotify = config.require_spotify()

    if not SpotifyClient.is_initialized():
        SpotifyClient.init(
            client_id=spotify.client_id,
            client_secret=spotify.client_secret,
            redirect_uri=spotify.redirect_uri,
            cache_path=config.data.directory / SPOTIFY_TOKEN_CACHE
        )

    playlists = SpotifyFetcher().save_user_playlists(store)
    logger.info(f"Saved {len(playlists)} Spotify playlists")


def _run_to_tidal(config: Config, store: DataStore, show_progress: bool) -> None:
    """
    Reconcile the saved Spotify playlists into Tidal.

    After each playlist the Tidal side is fetched again and saved to
    <data>/tidal/, so --import-navidrome sees the reconciled state.
    """
    _section_banner("Reconciling Spotify playlists into Tidal")
    sources = store.read_playlists(SPOTIFY_DIR)
    if not sources:
        logger.warning("No saved Spotify playlists, run --save-spotify first")
        return

    client = _tidal_client(config)
    try:
        reconciler = Reconciler(catalog=client, sink=MissingTrackWriter(store))
        reports = reconciler.sync_playlists(sources, show_progress=show_progress)

        for report in reports:
            if not report.target_id:
                continue
            try:
                store.write_playlist(TIDAL_DIR, client.get_full_playlist(report.target_id))
            except AdapterError as e:
                logger.error(f"Could not save Tidal playlist '{report.playlist}': {e}")
    finally:
        client.close()

    _print_reconcile_stats(reports)


def _run_save_tidal(config: Config, store: DataStore) -> None:
    """Save the Tidal playlists whose URLs are listed in tidal/playlists.txt."""
    _section_banner("Saving Tidal playlists")
    urls = store.read_tidal_playlist_urls()

    client = _tidal_client(config)
    try:
        for url in urls:
            playlist_id = extract_uuid(url)
            if not playlist_id:
                logger.warning(f"No playlist ID in '{url}', skipping")
                continue
            try:
                playlist = client.get_full_playlist(playlist_id)
            except AdapterError as e:
                logger.error(f"Could not fetch Tidal playlist {playlist_id}: {e}")
                continue
            store.write_playlist(TIDAL_DIR, playlist)
            logger.info(f"Saved playlist: {playlist.title} ({len(playlist.tracks)} tracks)")
    finally:
        client.close()


def _run_import_navidrome(config: Config, store: DataStore, show_progress: bool) -> None:
    """Write the saved Tidal playlists as .m3u8 files of local paths."""
    _section_banner("Importing Tidal playlists into Navidrome")
    playlists = store.read_playlists(TIDAL_DIR)
    if not playlists:
        logger.warning("No saved Tidal playlists, run --to-tidal or --save-tidal first")
        return

    with NavidromeLibrary(config.navidrome.database) as library:
        library.open()
        importer = PlaylistImporter(
            library=library,
            playlists_dir=config.navidrome.playlists_directory,
            sink=MissingTrackWriter(store, NAVIDROME_MISSING_DIR)
        )
        reports = importer.import_playlists(playlists, show_progress=show_progress)

    added = sum(report.added for report in reports)
    missing = sum(len(report.missing) for report in reports)
    logger.info(f"Imported {len(reports)} playlists: {added} tracks added, {missing} missing")


def _run_lidarr_wanted(config: Config, store: DataStore) -> None:
    """Save the albums Lidarr reports as wanted."""
    _section_banner("Saving Lidarr wanted albums")
    lidarr = config.require_lidarr()

    client = LidarrClient(host=lidarr.host, api_key=lidarr.api_key)
    try:
        albums = client.get_wanted_albums()
    finally:
        client.close()

    path = store.write_wanted_albums(albums)
    logger.info(f"Saved {len(albums)} wanted albums to {path}")


def _print_reconcile_stats(reports: list[ReconcileReport]) -> None:
    """Log the totals of a --to-tidal run."""
    _section_banner("RECONCILIATION SUMMARY")
    logger.info(f"Playlists:         {len(reports)}")
    logger.info(f"Linked:            {sum(r.linked for r in reports)}")
    logger.info(f"Already present:   {sum(r.already_present for r in reports)}")
    logger.info(f"Missing:           {sum(r.missing for r in reports)}")
    logger.info(f"Skipped:           {sum(r.skipped for r in reports)}")

    aborted = [r.playlist for r in reports if r.aborted]
    if aborted:
        logger.warning(f"Aborted playlists: {', '.join(aborted)}")
    failed_sinks = [r.playlist for r in reports if r.sink_failed]
    if failed_sinks:
        logger.warning(f"Missing tracks not saved for: {', '.join(failed_sinks)}")
    logger.info("=" * 60)


def main() -> None:
    """
    Entry point for the CLI.

    Called when running `music-utils` from the command line.
    """
    cli()


if __name__ == "__main__":
    main()
