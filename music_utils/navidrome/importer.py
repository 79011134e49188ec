"""
Import saved playlists into a local library as .m3u8 files.

For each playlist snapshot, the tracks are looked up in the local library
and the paths that exist are appended to <playlists_dir>/<title>.m3u8.
Navidrome picks those files up on its next scan. Tracks the library does
not have are handed to the missing-track sink under navidrome-missing/.

Importing is additive and idempotent: an existing .m3u8 file is kept,
and a path already listed in it is not written again.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from music_utils.core.exceptions import LibraryError, SinkError
from music_utils.core.logger import get_logger, log_missing_track
from music_utils.core.progress import ImportProgressBar
from music_utils.core.storage import M3U8Playlist
from music_utils.matching.models import CatalogPlaylist, MissingRecord
from music_utils.reconcile.adapters import LocalLibrary, MissingSink


logger = get_logger(__name__)


@dataclass
class ImportReport:
    """Counts for one imported playlist."""

    playlist: str
    playlist_file: Path
    added: int = 0
    already_listed: int = 0
    missing: list[MissingRecord] = field(default_factory=list)
    # Set when the .m3u8 file could not be written; the import stopped there.
    error: str | None = None

    def summary(self) -> str:
        text = (
            f"{self.playlist}: {self.added} added, {self.already_listed} already listed, "
            f"{len(self.missing)} missing"
        )
        if self.error:
            text += f" (stopped: {self.error})"
        return text


class PlaylistImporter:
    """
    Writes .m3u8 playlists for tracks found in a local library.

    Attributes:
        library: Local library used to resolve file paths.
        playlists_dir: Directory the .m3u8 files are written to.
        sink: Receives each playlist's missing tracks (optional).
    """

    def __init__(
        self,
        library: LocalLibrary,
        playlists_dir: Path,
        sink: MissingSink | None = None
    ) -> None:
        self.library = library
        self.playlists_dir = playlists_dir
        self.sink = sink

    def import_playlist(
        self,
        playlist: CatalogPlaylist,
        show_progress: bool = False
    ) -> ImportReport:
        """
        Import one playlist snapshot.

        A lookup that fails with LibraryError counts the track as missing
        and the import continues. If the .m3u8 file cannot be written, the
        error is recorded on the report and the rest of this playlist is
        skipped.
        """
        m3u8 = M3U8Playlist.for_title(self.playlists_dir, playlist.title)
        report = ImportReport(playlist=playlist.title, playlist_file=m3u8.path)
        try:
            if m3u8.create_if_absent():
                logger.debug(f"Created {m3u8.path}")
        except OSError as e:
            logger.error(f"Could not create {m3u8.path}: {e}")
            report.error = str(e)
            return report

        logger.info(f"Importing playlist '{playlist.title}' ({len(playlist.tracks)} tracks)")

        progress = (
            ImportProgressBar(total=len(playlist.tracks), description=playlist.title)
            if show_progress else None
        )
        try:
            if progress is not None:
                progress.start()

            for track in playlist.tracks:
                try:
                    path = self.library.find_track_path(
                        track.title, track.album, track.primary_artist
                    )
                except LibraryError as e:
                    logger.error(f"Library lookup failed for '{track.display_name}': {e}")
                    path = None

                if path is None:
                    report.missing.append(MissingRecord.from_track(track))
                    log_missing_track(
                        logger, playlist.title, track.title, track.primary_artist,
                        "not in library"
                    )
                    if progress is not None:
                        progress.update(found=False)
                    continue

                try:
                    appended = m3u8.append(path)
                except OSError as e:
                    logger.error(f"Could not write to {m3u8.path}: {e}")
                    report.error = str(e)
                    break
                if appended:
                    report.added += 1
                    logger.debug(f"Added {path} to {m3u8.path.name}")
                else:
                    report.already_listed += 1
                if progress is not None:
                    progress.update(found=True, skipped=not appended)
        finally:
            if progress is not None:
                progress.stop()

        self._flush_missing(report)
        return report

    def _flush_missing(self, report: ImportReport) -> None:
        if not report.missing or self.sink is None:
            return
        try:
            self.sink.record_missing(report.missing, report.playlist)
        except SinkError as e:
            logger.error(f"Could not save missing tracks for '{report.playlist}': {e}")

    def import_playlists(
        self,
        playlists: Sequence[CatalogPlaylist],
        show_progress: bool = False
    ) -> list[ImportReport]:
        """Import several playlists, one after the other."""
        reports = []
        for playlist in playlists:
            report = self.import_playlist(playlist, show_progress=show_progress)
            logger.info(report.summary())
            reports.append(report)
        return reports
