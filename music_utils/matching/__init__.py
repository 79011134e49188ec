"""
Track matching for music-utils.

Decides whether a track from one catalog and a search candidate from
another are the same recording. Matching runs in two stages:

    1. Identity (identity.py): ISRC exact, then ISRC partial (first
       four characters, i.e. country + registrant code)
    2. Heuristics (heuristic.py): ordered title/artist rules, first match
       wins

normalizer.py holds the text comparisons both stages and the local
library lookups share (apostrophes, qualifiers, plural titles).

Usage:
    from music_utils.matching import match_by_identity, match_by_heuristics

    match = match_by_identity(track, response.candidates)
    if match is None:
        match = match_by_heuristics(track, response)
"""

from music_utils.matching.heuristic import HEURISTIC_RULES, HeuristicRule, match_by_heuristics
from music_utils.matching.identity import isrc_exact, isrc_partial, match_by_identity
from music_utils.matching.models import (
    CatalogPlaylist,
    CatalogTrack,
    Match,
    MatchMethod,
    MatchResult,
    MissingAlbum,
    MissingRecord,
    Outcome,
    ReconcileReport,
    SearchResponse,
)
from music_utils.matching.normalizer import normalize, same_text, title_variants

__all__ = [
    # Models
    "CatalogTrack",
    "CatalogPlaylist",
    "SearchResponse",
    "MatchMethod",
    "Match",
    "Outcome",
    "MatchResult",
    "MissingRecord",
    "MissingAlbum",
    "ReconcileReport",
    # Identity
    "isrc_exact",
    "isrc_partial",
    "match_by_identity",
    # Heuristics
    "HeuristicRule",
    "HEURISTIC_RULES",
    "match_by_heuristics",
    # Text
    "normalize",
    "same_text",
    "title_variants",
]
