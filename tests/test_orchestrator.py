"""Test playlist reconciliation"""

from unittest.mock import Mock

import pytest

from conftest import FakeCatalog, RecordingSink, make_track
from music_utils.core.exceptions import MutationError, TidalError
from music_utils.matching.models import (
    CatalogPlaylist,
    MatchMethod,
    MissingRecord,
    Outcome,
    ReconcileReport,
    SearchResponse,
)
from music_utils.reconcile.orchestrator import (
    Reconciler,
    build_query,
    find_playlist,
    playable_tracks,
)


KIDS = make_track("Kids", "MGMT", album="Oracular Spectacular", external_id="sp-kids")
KIDS_TIDAL = make_track("Kids (Remastered 2018)", "MGMT", external_id="td-kids")

HEY_JUDE = make_track("Hey Jude", "The Beatles", isrc="GBAYE0601498", external_id="sp-jude")
HEY_JUDE_TIDAL = make_track("Hey Jude - Remastered 2015", "The Beatles",
                            isrc="GBAYE0601498", external_id="td-jude")

UNKNOWN = make_track("Obscure B-Side", "Nobody", album="Demo", external_id="sp-obscure")


def _source(*tracks, title="Road Trip"):
    return CatalogPlaylist(id="sp-list", title=title, tracks=tuple(tracks))


def _target(*tracks, title="Road Trip"):
    return CatalogPlaylist(id="td-list", title=title, tracks=tuple(tracks))


@pytest.fixture
def catalog():
    return FakeCatalog(responses={
        build_query(KIDS): SearchResponse(candidates=(KIDS_TIDAL,)),
        build_query(HEY_JUDE): SearchResponse(candidates=(HEY_JUDE_TIDAL,)),
    })


class TestHelpers:
    """Test module-level helpers"""

    def test_build_query(self):
        assert build_query(KIDS) == "Kids MGMT"

    def test_playable_tracks_drops_unresolved(self):
        local = make_track("Local File", "Me", external_id="")

        tracks, skipped = playable_tracks([KIDS, local, HEY_JUDE])

        assert tracks == [KIDS, HEY_JUDE]
        assert skipped == 1

    def test_find_playlist_by_normalized_title(self):
        targets = [_target(title="Other"), _target(title="road trip ")]

        assert find_playlist(_source(), targets) is targets[1]
        assert find_playlist(_source(title="Missing"), targets) is None


class TestFindMatch:
    """Test single-track lookup"""

    def test_title_artist_scenario(self, catalog):
        result = Reconciler(catalog).find_match(KIDS)

        assert result.outcome is Outcome.MATCHED
        assert result.match.candidate == KIDS_TIDAL
        assert result.match.method is MatchMethod.TITLE_ARTIST

    def test_isrc_scenario(self, catalog):
        result = Reconciler(catalog).find_match(HEY_JUDE)

        assert result.match.method is MatchMethod.ISRC_EXACT
        assert result.match.candidate == HEY_JUDE_TIDAL

    def test_identity_beats_top_hit(self):
        source = make_track("Song", "Artist", isrc="GBUM71029601")
        top = make_track("Song", "Artist", external_id="top")
        by_isrc = make_track("Song (Live)", "Artist", isrc="GBUM71029601", external_id="isrc")
        catalog = FakeCatalog(responses={
            build_query(source): SearchResponse(candidates=(by_isrc,), top_hit=top),
        })

        result = Reconciler(catalog).find_match(source)

        assert result.match.candidate == by_isrc
        assert result.match.method is MatchMethod.ISRC_EXACT

    @pytest.mark.parametrize("isrc_first", [True, False])
    def test_identity_wins_in_any_candidate_order(self, isrc_first):
        source = make_track("Song", "Artist", isrc="GBUM71029601")
        by_title = make_track("Song", "Artist", external_id="title")
        by_isrc = make_track("Song (Live)", "Artist", isrc="GBUM71029601", external_id="isrc")
        candidates = (by_isrc, by_title) if isrc_first else (by_title, by_isrc)
        catalog = FakeCatalog(responses={
            build_query(source): SearchResponse(candidates=candidates),
        })

        result = Reconciler(catalog).find_match(source)

        assert result.match.candidate == by_isrc
        assert result.match.method is MatchMethod.ISRC_EXACT

    def test_no_candidates(self, catalog):
        result = Reconciler(catalog).find_match(UNKNOWN)

        assert result.outcome is Outcome.MISSING
        assert result.reason == "no candidates"

    def test_search_failure_is_missing(self, catalog):
        catalog.fail_search.add(build_query(KIDS))

        result = Reconciler(catalog).find_match(KIDS)

        assert result.outcome is Outcome.MISSING
        assert result.reason == "search failed"


class TestReconcilePlaylist:
    """Test reconciling a whole playlist"""

    def test_links_and_records_missing(self, catalog, sink):
        report = Reconciler(catalog, sink).reconcile_playlist(
            _source(KIDS, UNKNOWN, HEY_JUDE), _target()
        )

        assert catalog.added == [("td-list", "td-kids"), ("td-list", "td-jude")]
        assert report.linked == 2
        assert report.missing == 1
        assert report.target_id == "td-list"
        assert sink.calls == [("Road Trip", [MissingRecord.from_track(UNKNOWN)])]

    def test_zero_candidates_single_record(self, catalog, sink):
        Reconciler(catalog, sink).reconcile_playlist(_source(UNKNOWN), _target())

        assert len(sink.calls) == 1
        label, records = sink.calls[0]
        assert records == [MissingRecord(name="Obscure B-Side", album="Demo", artists=("Nobody",))]

    def test_idempotent(self, catalog):
        """A second pass against the updated target adds nothing"""
        reconciler = Reconciler(catalog)
        reconciler.reconcile_playlist(_source(KIDS, HEY_JUDE), _target())
        searches = len(catalog.searches)

        report = reconciler.reconcile_playlist(
            _source(KIDS, HEY_JUDE), _target(KIDS_TIDAL, HEY_JUDE_TIDAL)
        )

        assert report.already_present == 2
        assert len(catalog.added) == 2
        assert len(catalog.searches) == searches

    def test_plural_target_does_not_hide_singular_source(self, catalog, sink):
        """A target "Kids" must not make a source "Kid" look present"""
        kid = make_track("Kid", "Someone Else", external_id="sp-kid")

        report = Reconciler(catalog, sink).reconcile_playlist(
            _source(kid), _target(KIDS_TIDAL)
        )

        assert report.results[0].outcome is Outcome.MISSING
        assert catalog.searches == [build_query(kid)]
        assert sink.calls == [("Road Trip", [MissingRecord.from_track(kid)])]

    def test_plural_link_recognized_on_rerun(self, catalog):
        kids_singular = make_track("Kid", "MGMT", external_id="td-kid")

        report = Reconciler(catalog).reconcile_playlist(_source(KIDS), _target(kids_singular))

        assert report.already_present == 1
        assert catalog.searches == []

    def test_duplicate_source_tracks_added_once(self, catalog):
        report = Reconciler(catalog).reconcile_playlist(_source(KIDS, KIDS), _target())

        assert catalog.added == [("td-list", "td-kids")]
        assert [r.outcome for r in report.results] == [Outcome.MATCHED, Outcome.ALREADY_PRESENT]

    def test_conflict_counts_as_linked(self, catalog):
        catalog.conflict_add.add("td-kids")

        report = Reconciler(catalog).reconcile_playlist(_source(KIDS), _target())

        assert report.linked == 1
        assert catalog.added == []

    def test_mutation_failure_aborts_without_flush(self, catalog, sink):
        catalog.fail_add.add("td-jude")
        report_tracks = _source(UNKNOWN, HEY_JUDE, KIDS)
        reconciler = Reconciler(catalog, sink)

        with pytest.raises(MutationError):
            reconciler.reconcile_playlist(report_tracks, _target())

        assert sink.calls == []
        assert catalog.added == []

    def test_mutation_failure_keeps_partial_report(self, catalog):
        catalog.fail_add.add("td-jude")
        report = ReconcileReport(playlist="Road Trip")

        with pytest.raises(MutationError):
            Reconciler(catalog).reconcile_playlist(
                _source(KIDS, HEY_JUDE), _target(), report=report
            )

        assert report.aborted
        assert report.linked == 1

    def test_sink_failure_keeps_links(self, catalog):
        report = Reconciler(catalog, RecordingSink(fail=True)).reconcile_playlist(
            _source(KIDS, UNKNOWN), _target()
        )

        assert report.sink_failed
        assert report.linked == 1
        assert catalog.added == [("td-list", "td-kids")]

    def test_progress_updated_per_track(self, catalog):
        progress = Mock()

        Reconciler(catalog).reconcile_playlist(
            _source(KIDS, UNKNOWN), _target(), progress=progress
        )

        assert [c.args[0] for c in progress.update.call_args_list] == [
            Outcome.MATCHED, Outcome.MISSING
        ]


class TestSync:
    """Test playlist pairing and the sync entry points"""

    def test_existing_target_used(self, catalog):
        catalog.playlists["td-list"] = _target()
        catalog.playlist_tracks["td-list"] = [KIDS_TIDAL]

        report = Reconciler(catalog).sync_playlist(_source(KIDS, HEY_JUDE), catalog.get_playlists())

        assert catalog.created == []
        assert report.already_present == 1
        assert catalog.added == [("td-list", "td-jude")]

    def test_missing_target_created_once(self, catalog):
        targets = []
        reconciler = Reconciler(catalog)

        first, created = reconciler.resolve_target_playlist(_source(), targets)
        second, created_again = reconciler.resolve_target_playlist(_source(), targets)

        assert created and not created_again
        assert first == second
        assert len(catalog.created) == 1

    def test_unresolved_tracks_skipped(self, catalog):
        local = make_track("Local File", "Me", external_id="")

        report = Reconciler(catalog).sync_playlist(_source(KIDS, local), [])

        assert report.skipped == 1
        assert len(report.results) == 1

    def test_mutation_error_reported(self, catalog):
        catalog.fail_add.add("td-kids")

        report = Reconciler(catalog).sync_playlist(_source(KIDS), [])

        assert report.aborted

    def test_target_failure_reported(self, catalog):
        catalog.create_playlist = Mock(side_effect=TidalError("down", status_code=503))

        report = Reconciler(catalog).sync_playlist(_source(KIDS), [])

        assert report.aborted
        assert catalog.added == []

    def test_sync_playlists_lists_targets_once(self, catalog):
        catalog.get_playlists = Mock(return_value=[])

        reports = Reconciler(catalog).sync_playlists([_source(KIDS), _source(HEY_JUDE, title="Mix")])

        assert catalog.get_playlists.call_count == 1
        assert [r.playlist for r in reports] == ["Road Trip", "Mix"]
