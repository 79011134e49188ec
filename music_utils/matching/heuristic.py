"""
Title/artist fallback matching.

Used only when identity matching finds nothing. The rules are kept as an
explicit, ordered list of HeuristicRule objects, highest confidence first:

    1. TOP_HIT              top hit's full title and primary artist
    2. TITLE_ARTIST         qualifier-stripped title and primary artist
    3. PLURAL_TITLE_ARTIST  as 2, with the source's trailing "s" removed
    4. SECOND_ARTIST        same title, candidate's primary artist equals the
                            source's second artist (catalogs that swap
                            primary and featured artists)

Evaluation is rule-major: a rule is tried against every candidate before
the next rule is considered, and the first candidate satisfying the first
applicable rule is the match. There is no scoring.

Artist comparisons are trimmed and case-insensitive but otherwise exact.
"""

from dataclasses import dataclass
from typing import Callable, Sequence

from music_utils.matching.models import (
    CatalogTrack,
    Match,
    MatchMethod,
    SearchResponse,
)
from music_utils.matching.normalizer import (
    same_text,
    strip_plural,
    strip_qualifiers,
    unify_apostrophes,
)


Predicate = Callable[[CatalogTrack, CatalogTrack], bool]


@dataclass(frozen=True)
class HeuristicRule:
    """
    One tier of the heuristic matcher.

    Attributes:
        method: MatchMethod reported when the rule matches.
        predicate: predicate(source, candidate) -> bool.
        top_hit_only: Evaluate against the search's top hit instead of
                      every candidate.
        applies: Optional guard on the source track; when it returns False
                 the rule is skipped entirely.
    """

    method: MatchMethod
    predicate: Predicate
    top_hit_only: bool = False
    applies: Callable[[CatalogTrack], bool] | None = None

    def is_applicable(self, source: CatalogTrack) -> bool:
        return self.applies is None or self.applies(source)

    def find(
        self,
        source: CatalogTrack,
        response: SearchResponse
    ) -> CatalogTrack | None:
        """Return the first candidate this rule accepts, if any."""
        if not self.is_applicable(source):
            return None

        if self.top_hit_only:
            pool: Sequence[CatalogTrack] = (response.top_hit,) if response.top_hit else ()
        else:
            pool = response.candidates

        for candidate in pool:
            if self.predicate(source, candidate):
                return candidate
        return None


def _same_primary_artist(source: CatalogTrack, candidate: CatalogTrack) -> bool:
    return bool(source.primary_artist) and same_text(
        source.primary_artist, candidate.primary_artist
    )


def _stripped_title(value: str) -> str:
    return strip_qualifiers(value).casefold()


def top_hit_matches(source: CatalogTrack, top_hit: CatalogTrack) -> bool:
    """
    Rule 1: full titles equal (qualifiers kept, apostrophes unified) and
    primary artists equal.
    """
    return (
        same_text(unify_apostrophes(top_hit.title), unify_apostrophes(source.title))
        and _same_primary_artist(source, top_hit)
    )


def title_artist_matches(source: CatalogTrack, candidate: CatalogTrack) -> bool:
    """Rule 2: qualifier-stripped titles equal and primary artists equal."""
    return (
        _stripped_title(candidate.title) == _stripped_title(source.title)
        and _same_primary_artist(source, candidate)
    )


def plural_title_artist_matches(source: CatalogTrack, candidate: CatalogTrack) -> bool:
    """Rule 3: as rule 2 with the source title's trailing "s" removed."""
    singular = strip_plural(strip_qualifiers(source.title))
    if singular is None:
        return False
    return (
        _stripped_title(candidate.title) == singular.casefold()
        and _same_primary_artist(source, candidate)
    )


def second_artist_matches(source: CatalogTrack, candidate: CatalogTrack) -> bool:
    """
    Rule 4: titles equal and the candidate's own primary artist equals the
    source's second artist.
    """
    return (
        same_text(candidate.title, source.title)
        and bool(source.second_artist)
        and same_text(candidate.primary_artist, source.second_artist)
    )


def _ends_in_s(source: CatalogTrack) -> bool:
    return strip_plural(strip_qualifiers(source.title)) is not None


def _has_second_artist(source: CatalogTrack) -> bool:
    return bool(source.second_artist)


HEURISTIC_RULES: tuple[HeuristicRule, ...] = (
    HeuristicRule(MatchMethod.TOP_HIT, top_hit_matches, top_hit_only=True),
    HeuristicRule(MatchMethod.TITLE_ARTIST, title_artist_matches),
    HeuristicRule(
        MatchMethod.PLURAL_TITLE_ARTIST, plural_title_artist_matches, applies=_ends_in_s
    ),
    HeuristicRule(
        MatchMethod.SECOND_ARTIST, second_artist_matches, applies=_has_second_artist
    ),
)


def match_by_heuristics(
    source: CatalogTrack,
    response: SearchResponse,
    rules: Sequence[HeuristicRule] = HEURISTIC_RULES
) -> Match | None:
    """
    Run the heuristic rules in order and return the first match.

    Args:
        source: Track from the source catalog.
        response: Search response holding the top hit and candidates.
        rules: Rules to evaluate, highest confidence first.

    Returns:
        Match tagged with the winning rule's method, or None.
    """
    for rule in rules:
        candidate = rule.find(source, response)
        if candidate is not None:
            return Match(candidate=candidate, method=rule.method)
    return None
