"""
Identifier-based matching.

An ISRC names one specific recording, so when both catalogs carry it a
match on it outranks any comparison of titles. Catalogs populate ISRCs
inconsistently, though: some entries have none, and re-encodes of the same
recording sometimes differ only after the country+registrant prefix.

Rules, per candidate in catalog order, first success wins:
    1. Exact ISRC (case-insensitive, empty values never match)
    2. Partial ISRC: equal first 4 characters, both values at least 4 long

There is no ranking across candidates. The catalog's own order is
authoritative because later candidates are less relevant by its measure.
"""

from typing import Sequence

from music_utils.matching.models import CatalogTrack, Match, MatchMethod


ISRC_PREFIX_LENGTH = 4


def _clean(isrc: str) -> str:
    return isrc.strip().upper()


def isrc_exact(a: str, b: str) -> bool:
    """Case-insensitive equality of two non-empty ISRCs."""
    a, b = _clean(a), _clean(b)
    return bool(a) and a == b


def isrc_partial(a: str, b: str) -> bool:
    """
    Case-insensitive equality of the first four characters of two ISRCs.

    Identifiers that are empty or shorter than four characters never
    satisfy this rule.
    """
    a, b = _clean(a), _clean(b)
    if len(a) < ISRC_PREFIX_LENGTH or len(b) < ISRC_PREFIX_LENGTH:
        return False
    return a[:ISRC_PREFIX_LENGTH] == b[:ISRC_PREFIX_LENGTH]


def match_by_identity(
    source: CatalogTrack,
    candidates: Sequence[CatalogTrack]
) -> Match | None:
    """
    Find the first candidate sharing the source track's ISRC.

    Args:
        source: Track from the source catalog.
        candidates: Search results in catalog relevance order.

    Returns:
        Match with method ISRC_EXACT or ISRC_PARTIAL, or None when the
        source has no ISRC or no candidate satisfies either rule.
    """
    if not _clean(source.isrc):
        return None

    for candidate in candidates:
        if not _clean(candidate.isrc):
            continue
        if isrc_exact(source.isrc, candidate.isrc):
            return Match(candidate=candidate, method=MatchMethod.ISRC_EXACT)
        if isrc_partial(source.isrc, candidate.isrc):
            return Match(candidate=candidate, method=MatchMethod.ISRC_PARTIAL)

    return None
