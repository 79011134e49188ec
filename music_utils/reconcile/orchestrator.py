"""
Reconciliation orchestrator.

Drives source playlists into a target catalog one track at a time:

    Start -> CheckPresent -> Lookup -> MatchIdentity -> MatchHeuristic
          -> {Linked | Missing}

- CheckPresent: the target playlist already holds the track (equivalent
  normalized title, or the same ISRC). No query, no mutation, so running
  the same sync twice never adds a track twice.
- Lookup: one free-text query "<title> <primary artist>". A failing
  catalog is logged and the track becomes Missing; the engine does not
  retry.
- Match: identity rules first, heuristic rules only when they find
  nothing. A match is added to the target playlist. If that add fails,
  the rest of the playlist is abandoned (MutationError); tracks added
  before the failure stay added.
- Missing tracks are collected per playlist and handed to the sink once
  the playlist's loop completes.

Processing is sequential: one playlist fully before the next, one track
fully before the next.

Usage:
    reconciler = Reconciler(tidal_client, sink=MissingTrackWriter(store))
    reports = reconciler.sync_playlists(spotify_playlists)
"""

from typing import Iterable, Sequence

from music_utils.core.exceptions import AdapterError, MutationError, SinkError
from music_utils.core.logger import (
    format_linked_message,
    get_logger,
    log_missing_track,
)
from music_utils.core.progress import ReconcileProgressBar
from music_utils.matching.heuristic import match_by_heuristics
from music_utils.matching.identity import isrc_exact, match_by_identity
from music_utils.matching.models import (
    CatalogPlaylist,
    CatalogTrack,
    MatchResult,
    Outcome,
    ReconcileReport,
)
from music_utils.matching.normalizer import normalize, titles_equivalent
from music_utils.reconcile.adapters import AddResult, MissingSink, TargetCatalog


logger = get_logger(__name__)


def playable_tracks(tracks: Iterable[CatalogTrack]) -> tuple[list[CatalogTrack], int]:
    """
    Drop entries the source catalog could not resolve to a real track.

    Such entries have no external_id. They are neither matched nor
    recorded as missing.

    Returns:
        Tuple of (tracks to reconcile, number of entries dropped).
    """
    playable = []
    skipped = 0
    for track in tracks:
        if not track.external_id:
            logger.debug(f"Skipping '{track.title}': no source identifier")
            skipped += 1
            continue
        playable.append(track)
    return playable, skipped


def build_query(track: CatalogTrack) -> str:
    """Search query for a track: '<title> <primary artist>'."""
    return f"{track.title} {track.primary_artist}".strip()


def find_playlist(
    source: CatalogPlaylist,
    targets: Sequence[CatalogPlaylist]
) -> CatalogPlaylist | None:
    """
    Find the target playlist paired with a source playlist.

    Playlists are paired by normalized title; ids are never shared across
    catalogs. The first title match wins.
    """
    wanted = normalize(source.title)
    for target in targets:
        if normalize(target.title) == wanted:
            return target
    return None


class Reconciler:
    """
    Mirrors source tracks into a target catalog.

    Attributes:
        catalog: Target catalog used for search and mutation.
        sink: Receives each playlist's missing tracks. Optional; when None
              missing tracks are only logged.
    """

    def __init__(self, catalog: TargetCatalog, sink: MissingSink | None = None) -> None:
        self.catalog = catalog
        self.sink = sink

    # -------------------------------------------------------------------------
    # Track level
    # -------------------------------------------------------------------------

    @staticmethod
    def is_present(track: CatalogTrack, target_tracks: Sequence[CatalogTrack]) -> bool:
        """
        Check whether the target already holds a track.

        A target track counts as the same when its normalized title equals
        the source title, or the source title without a trailing "s" (so
        tracks linked by the plural tier are recognized), or when both
        carry the same ISRC.
        """
        for existing in target_tracks:
            if titles_equivalent(track.title, existing.title):
                return True
            if isrc_exact(track.isrc, existing.isrc):
                return True
        return False

    def find_match(self, track: CatalogTrack) -> MatchResult:
        """
        Look a track up in the target catalog and pick a candidate.

        Never mutates anything. Search failures and empty results both
        produce a MISSING result.
        """
        query = build_query(track)
        try:
            response = self.catalog.search_tracks(query)
        except AdapterError as e:
            logger.error(f"Search failed for '{query}': {e}")
            return MatchResult(Outcome.MISSING, track, reason="search failed")

        if response.is_empty:
            logger.debug(f"No candidates for '{query}'")
            return MatchResult(Outcome.MISSING, track, reason="no candidates")

        match = match_by_identity(track, response.candidates)
        if match is None:
            match = match_by_heuristics(track, response)

        if match is None:
            return MatchResult(Outcome.MISSING, track, reason="no rule matched")

        logger.debug(
            f"'{track.display_name}' matched '{match.candidate.display_name}' "
            f"({match.candidate.external_id}) by {match.method.label}"
        )
        return MatchResult(Outcome.MATCHED, track, match=match)

    def _link(self, playlist_id: str, candidate: CatalogTrack) -> None:
        try:
            outcome = self.catalog.add_track_to_playlist(playlist_id, candidate.external_id)
        except AdapterError as e:
            raise MutationError(
                f"Failed to add '{candidate.display_name}' to playlist {playlist_id}: {e}",
                details={
                    "playlist_id": playlist_id,
                    "track_id": candidate.external_id,
                    "original_error": str(e),
                }
            ) from e

        if outcome is AddResult.CONFLICT:
            logger.debug(f"'{candidate.display_name}' already in playlist {playlist_id}")

    # -------------------------------------------------------------------------
    # Playlist level
    # -------------------------------------------------------------------------

    def reconcile_playlist(
        self,
        source: CatalogPlaylist,
        target: CatalogPlaylist,
        report: ReconcileReport | None = None,
        progress: ReconcileProgressBar | None = None
    ) -> ReconcileReport:
        """
        Reconcile every track of a source playlist into a target playlist.

        Args:
            source: Source playlist. Its tracks are expected to be playable
                    (see playable_tracks()).
            target: Target playlist holding its current tracks.
            report: Report to fill in. A new one is created when None; pass
                    one in to keep the partial results if this raises.
            progress: Optional progress bar updated once per track.

        Returns:
            ReconcileReport with one MatchResult per source track.

        Raises:
            MutationError: Adding a matched track failed. The report is
                           marked aborted and the missing tracks gathered so
                           far are NOT handed to the sink.
        """
        if report is None:
            report = ReconcileReport(playlist=source.title)
        report.target_id = target.id

        # Extended as tracks are linked, so duplicates within the source
        # playlist are only added once.
        target_tracks = list(target.tracks)

        for track in source.tracks:
            if self.is_present(track, target_tracks):
                result = MatchResult(Outcome.ALREADY_PRESENT, track)
            else:
                result = self.find_match(track)
                if result.match is not None:
                    try:
                        self._link(target.id, result.match.candidate)
                    except MutationError:
                        report.aborted = True
                        raise
                    target_tracks.append(result.match.candidate)
                    logger.info(format_linked_message(
                        track.primary_artist, track.title, result.match.method.label
                    ))
                else:
                    log_missing_track(
                        logger, source.title, track.title, track.primary_artist, result.reason
                    )

            report.results.append(result)
            if progress is not None:
                progress.update(result.outcome)

        self._flush_missing(report)
        return report

    def _flush_missing(self, report: ReconcileReport) -> None:
        records = report.missing_records
        if not records or self.sink is None:
            return

        try:
            self.sink.record_missing(records, report.playlist)
        except SinkError as e:
            report.sink_failed = True
            logger.error(f"Could not save missing tracks for '{report.playlist}': {e}")

    def resolve_target_playlist(
        self,
        source: CatalogPlaylist,
        targets: list[CatalogPlaylist]
    ) -> tuple[CatalogPlaylist, bool]:
        """
        Return the target playlist for a source playlist, creating it if needed.

        A created playlist is appended to targets so a later source playlist
        with the same title reuses it.

        Returns:
            Tuple of (target playlist, created).
        """
        existing = find_playlist(source, targets)
        if existing is not None:
            logger.debug(f"Playlist '{source.title}' found in target ({existing.id})")
            return existing, False

        logger.info(f"Playlist '{source.title}' not found in target, creating it")
        created = self.catalog.create_playlist(source.title, source.description)
        targets.append(created)
        return created, True

    def sync_playlist(
        self,
        source: CatalogPlaylist,
        targets: list[CatalogPlaylist],
        show_progress: bool = False
    ) -> ReconcileReport:
        """
        Resolve the target playlist for a source playlist and reconcile it.

        Errors are reported on the returned ReconcileReport rather than
        raised: an AdapterError while resolving the target, or a
        MutationError while adding, marks the report aborted.
        """
        tracks, skipped = playable_tracks(source.tracks)
        report = ReconcileReport(playlist=source.title, skipped=skipped)

        try:
            target, created = self.resolve_target_playlist(source, targets)
            if not created:
                target = target.with_tracks(self.catalog.get_playlist_tracks(target.id))
        except AdapterError as e:
            logger.error(f"Cannot prepare target playlist for '{source.title}': {e}")
            report.aborted = True
            return report

        logger.info(
            f"Reconciling '{source.title}': {len(tracks)} tracks, "
            f"{len(target.tracks)} already in target"
        )

        source = source.with_tracks(tracks)
        progress = (
            ReconcileProgressBar(total=len(tracks), description=source.title)
            if show_progress else None
        )
        try:
            if progress is not None:
                progress.start()
            self.reconcile_playlist(source, target, report=report, progress=progress)
        except MutationError as e:
            logger.error(f"Aborting playlist '{source.title}': {e}")
        finally:
            if progress is not None:
                progress.stop()

        return report

    def sync_playlists(
        self,
        sources: Sequence[CatalogPlaylist],
        show_progress: bool = False
    ) -> list[ReconcileReport]:
        """
        Reconcile several source playlists, one after the other.

        The target's playlist list is fetched once up front.

        Raises:
            AdapterError: The target's playlists could not be listed.
        """
        targets = self.catalog.get_playlists()
        logger.info(f"Found {len(targets)} playlists in target catalog")

        reports = []
        for source in sources:
            report = self.sync_playlist(source, targets, show_progress=show_progress)
            logger.info(report.summary())
            reports.append(report)
        return reports
