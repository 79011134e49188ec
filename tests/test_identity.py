"""Test ISRC matching"""

from conftest import make_track
from music_utils.matching.identity import isrc_exact, isrc_partial, match_by_identity
from music_utils.matching.models import MatchMethod


class TestIsrcComparison:
    """Test the two ISRC predicates"""

    def test_exact_is_case_insensitive(self):
        assert isrc_exact("gbum71029601", "GBUM71029601")

    def test_exact_never_matches_empty(self):
        assert not isrc_exact("", "")

    def test_partial_compares_prefix(self):
        assert isrc_partial("GBUM71029601", "GBUM71099999")
        assert not isrc_partial("GBUM71029601", "USUM71029601")

    def test_partial_needs_four_characters(self):
        assert not isrc_partial("GBU", "GBU")
        assert not isrc_partial("", "GBUM71029601")


class TestMatchByIdentity:
    """Test candidate selection by ISRC"""

    def test_exact_match(self):
        source = make_track("Hey Jude", "The Beatles", isrc="GBAYE0601498")
        candidate = make_track("Hey Jude - Remastered 2015", "The Beatles",
                               isrc="GBAYE0601498", external_id="t1")

        match = match_by_identity(source, [candidate])

        assert match.candidate == candidate
        assert match.method is MatchMethod.ISRC_EXACT

    def test_partial_match(self):
        source = make_track("Song", "Artist", isrc="GBUM71029601")
        candidate = make_track("Song", "Artist", isrc="GBUM71100000", external_id="t1")

        match = match_by_identity(source, [candidate])

        assert match.method is MatchMethod.ISRC_PARTIAL

    def test_catalog_order_wins(self):
        """A partial match earlier in the list beats an exact one later"""
        source = make_track("Song", "Artist", isrc="GBUM71029601")
        partial = make_track("Song", "Artist", isrc="GBUM79999999", external_id="t1")
        exact = make_track("Song", "Artist", isrc="GBUM71029601", external_id="t2")

        match = match_by_identity(source, [partial, exact])

        assert match.candidate == partial
        assert match.method is MatchMethod.ISRC_PARTIAL

    def test_source_without_isrc(self):
        source = make_track("Song", "Artist")
        candidate = make_track("Song", "Artist", isrc="GBUM71029601", external_id="t1")

        assert match_by_identity(source, [candidate]) is None

    def test_short_isrcs_do_not_match(self):
        source = make_track("Song", "Artist", isrc="GB1")
        candidate = make_track("Song", "Artist", isrc="GB2", external_id="t1")

        assert match_by_identity(source, [candidate]) is None
