"""
Data models shared by every catalog.

This module defines the immutable dataclasses that the reconciliation
engine works on. Each catalog collaborator (Spotify, Tidal, the local
library) converts its own API payloads into these types at its boundary,
so the matching code never sees provider-specific shapes.

Design Decisions:
    - All dataclasses are frozen (immutable); tracks and playlists are
      snapshots built once per run from external data
    - Artists are a tuple with the primary artist first
    - Optional text fields default to "" rather than None, so comparisons
      never need a None check
    - Playlists are compared across catalogs by normalized title, never by
      id, because ids are not shared between catalogs

Usage:
    from music_utils.matching.models import CatalogTrack, CatalogPlaylist

    track = CatalogTrack(title="Kids", artists=("MGMT",), isrc="USSM10703946")
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class CatalogTrack:
    """
    Immutable representation of a track in any catalog.

    Attributes:
        title: Track title as the catalog displays it.
               Example: "Kids (Remastered 2018)"

        artists: All artist names, primary artist first.
                 Example: ("Calvin Harris", "Dua Lipa")

        album: Album name, empty when the catalog does not provide one.

        isrc: International Standard Recording Code, uppercased.
              May be empty or malformed; matching rules treat such values
              as "does not apply".
              Example: "GBUM71029601"

        external_id: The catalog's own identifier for the track (Spotify
                     track ID, Tidal track ID). Empty when the catalog could
                     not resolve the entry to a real track.
    """

    title: str
    artists: tuple[str, ...] = field(default_factory=tuple)
    album: str = ""
    isrc: str = ""
    external_id: str = ""

    @property
    def primary_artist(self) -> str:
        """First listed artist, or "" when the track has none."""
        return self.artists[0] if self.artists else ""

    @property
    def second_artist(self) -> str:
        """Second listed artist, or "" when there is only one."""
        return self.artists[1] if len(self.artists) > 1 else ""

    @property
    def display_name(self) -> str:
        """'Artist - Title' string for log messages."""
        if self.primary_artist:
            return f"{self.primary_artist} - {self.title}"
        return self.title

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict for snapshot files."""
        return {
            "title": self.title,
            "artists": list(self.artists),
            "album": self.album,
            "isrc": self.isrc,
            "id": self.external_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CatalogTrack":
        """
        Create a CatalogTrack from a dict produced by to_dict().

        Missing keys fall back to the field defaults so older snapshots
        still load.
        """
        return cls(
            title=data.get("title", ""),
            artists=tuple(data.get("artists") or ()),
            album=data.get("album") or "",
            isrc=(data.get("isrc") or "").upper(),
            external_id=data.get("id") or "",
        )


@dataclass(frozen=True)
class CatalogPlaylist:
    """
    Immutable representation of a playlist in any catalog.

    Attributes:
        id: The catalog's playlist identifier.
        title: Playlist name. Used to pair playlists across catalogs.
        description: Playlist description, may be empty.
        tracks: Tracks in playlist order.
    """

    id: str
    title: str
    description: str = ""
    tracks: tuple[CatalogTrack, ...] = field(default_factory=tuple)

    def with_tracks(self, tracks: "list[CatalogTrack] | tuple[CatalogTrack, ...]") -> "CatalogPlaylist":
        """Return a copy of this playlist holding the given tracks."""
        return replace(self, tracks=tuple(tracks))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "tracks": [track.to_dict() for track in self.tracks],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CatalogPlaylist":
        return cls(
            id=data.get("id", ""),
            title=data.get("title", ""),
            description=data.get("description") or "",
            tracks=tuple(CatalogTrack.from_dict(t) for t in data.get("tracks") or ()),
        )


@dataclass(frozen=True)
class SearchResponse:
    """
    Result of a free-text catalog search.

    Attributes:
        candidates: Tracks in the catalog's own relevance order.
        top_hit: The catalog's designated best result. When the catalog
                 does not designate one, the rank-0 candidate stands in.
    """

    candidates: tuple[CatalogTrack, ...] = field(default_factory=tuple)
    top_hit: CatalogTrack | None = None

    def __post_init__(self) -> None:
        if self.top_hit is None and self.candidates:
            object.__setattr__(self, "top_hit", self.candidates[0])

    @property
    def is_empty(self) -> bool:
        return not self.candidates and self.top_hit is None


class MatchMethod(Enum):
    """
    How a candidate was linked to a source track.

    Members are declared in priority order: the two identity methods come
    first, then the heuristic tiers 1 to 4.
    """

    ISRC_EXACT = "isrc_exact"
    ISRC_PARTIAL = "isrc_partial"
    TOP_HIT = "top_hit"
    TITLE_ARTIST = "title_artist"
    PLURAL_TITLE_ARTIST = "plural_title_artist"
    SECOND_ARTIST = "second_artist"

    @property
    def is_identity(self) -> bool:
        """True for the ISRC-based methods."""
        return self in (MatchMethod.ISRC_EXACT, MatchMethod.ISRC_PARTIAL)

    @property
    def tier(self) -> int | None:
        """Heuristic tier (1-4), or None for identity methods."""
        if self.is_identity:
            return None
        return _HEURISTIC_TIERS[self]

    @property
    def label(self) -> str:
        """Short name for log lines, e.g. "tier 2 title_artist"."""
        if self.tier is None:
            return self.value
        return f"tier {self.tier} {self.value}"


_HEURISTIC_TIERS = {
    MatchMethod.TOP_HIT: 1,
    MatchMethod.TITLE_ARTIST: 2,
    MatchMethod.PLURAL_TITLE_ARTIST: 3,
    MatchMethod.SECOND_ARTIST: 4,
}


@dataclass(frozen=True)
class Match:
    """A candidate selected for a source track and the method that selected it."""

    candidate: CatalogTrack
    method: MatchMethod


class Outcome(Enum):
    """Terminal state of one source track in a reconciliation pass."""

    MATCHED = "matched"
    ALREADY_PRESENT = "already_present"
    MISSING = "missing"


@dataclass(frozen=True)
class MatchResult:
    """
    Outcome of reconciling one source track.

    Exactly one MatchResult is produced per source track per pass.

    Attributes:
        outcome: MATCHED, ALREADY_PRESENT or MISSING.
        track: The source track.
        match: The selected candidate when outcome is MATCHED.
        reason: Short explanation when outcome is MISSING
                (e.g. "no candidates", "search failed").
    """

    outcome: Outcome
    track: CatalogTrack
    match: Match | None = None
    reason: str = ""

    @property
    def is_missing(self) -> bool:
        return self.outcome is Outcome.MISSING


@dataclass(frozen=True)
class MissingRecord:
    """
    Slim projection of a track kept in review files.

    Never read back by the engine.
    """

    name: str
    album: str
    artists: tuple[str, ...]

    @classmethod
    def from_track(cls, track: CatalogTrack) -> "MissingRecord":
        return cls(name=track.title, album=track.album, artists=track.artists)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "album": self.album, "artists": list(self.artists)}


@dataclass(frozen=True)
class MissingAlbum:
    """An album Lidarr reports as wanted."""

    name: str
    artist: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "artist": self.artist}


@dataclass
class ReconcileReport:
    """
    Summary of reconciling one source playlist.

    Unlike the other models this one is built up while the playlist is
    processed, so it is not frozen.

    Attributes:
        playlist: Title of the source playlist.
        target_id: Id of the target playlist tracks were added to.
        results: One MatchResult per processed source track.
        skipped: Source entries dropped at the boundary (no identifier).
        aborted: True when an add failed and the playlist was abandoned.
        sink_failed: True when missing records could not be persisted.
    """

    playlist: str
    target_id: str = ""
    results: list[MatchResult] = field(default_factory=list)
    skipped: int = 0
    aborted: bool = False
    sink_failed: bool = False

    def _count(self, outcome: Outcome) -> int:
        return sum(1 for result in self.results if result.outcome is outcome)

    @property
    def linked(self) -> int:
        return self._count(Outcome.MATCHED)

    @property
    def already_present(self) -> int:
        return self._count(Outcome.ALREADY_PRESENT)

    @property
    def missing(self) -> int:
        return self._count(Outcome.MISSING)

    @property
    def missing_records(self) -> list[MissingRecord]:
        return [
            MissingRecord.from_track(result.track)
            for result in self.results
            if result.is_missing
        ]

    def summary(self) -> str:
        status = " (aborted)" if self.aborted else ""
        return (
            f"{self.playlist}{status}: {self.linked} linked, "
            f"{self.already_present} already present, {self.missing} missing"
        )
