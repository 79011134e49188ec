"""
Conversion of Tidal API payloads into catalog models.

Tidal v1 responses used here:
    Track:      {"id": 123, "title": "...", "isrc": "...",
                 "artists": [{"name": "..."}], "album": {"title": "..."}}
    Playlist:   {"uuid": "...", "title": "...", "description": "..."}
    Search:     {"tracks": {"items": [Track, ...]},
                 "topHit": {"type": "TRACKS", "value": Track}}
    Paging:     {"totalNumberOfItems": N, "items": [...]}

Track ids are integers in the API; they are kept as strings in
CatalogTrack.external_id like every other catalog's ids.
"""

from typing import Any

from music_utils.matching.models import CatalogPlaylist, CatalogTrack, SearchResponse


def track_from_tidal(data: dict[str, Any]) -> CatalogTrack:
    """Convert a Tidal track object into a CatalogTrack."""
    artists = tuple(
        artist["name"] for artist in data.get("artists") or () if artist and artist.get("name")
    )
    if not artists and (data.get("artist") or {}).get("name"):
        artists = (data["artist"]["name"],)

    track_id = data.get("id")
    return CatalogTrack(
        title=(data.get("title") or "").strip(),
        artists=artists,
        album=(data.get("album") or {}).get("title") or "",
        isrc=(data.get("isrc") or "").strip().upper(),
        external_id=str(track_id) if track_id is not None else "",
    )


def playlist_from_tidal(
    data: dict[str, Any],
    tracks: "list[CatalogTrack] | tuple[CatalogTrack, ...]" = ()
) -> CatalogPlaylist:
    """Convert a Tidal playlist object into a CatalogPlaylist."""
    return CatalogPlaylist(
        id=data.get("uuid") or "",
        title=(data.get("title") or "").strip(),
        description=data.get("description") or "",
        tracks=tuple(tracks),
    )


def tracks_from_page(data: dict[str, Any]) -> list[CatalogTrack]:
    """
    Convert a paging object of tracks.

    Playlist pages may contain videos; only items that look like tracks
    (have an id and a title) are kept.
    """
    tracks = []
    for item in data.get("items") or ():
        # Playlist item pages wrap each entry as {"item": {...}, "type": "track"}
        if "item" in item and isinstance(item["item"], dict):
            if item.get("type", "track") != "track":
                continue
            item = item["item"]
        if item.get("id") is None or not item.get("title"):
            continue
        tracks.append(track_from_tidal(item))
    return tracks


def search_response_from_tidal(data: dict[str, Any]) -> SearchResponse:
    """
    Convert a search response.

    The top hit is only used when it is a track; otherwise the rank-0
    candidate stands in for it.
    """
    candidates = tuple(tracks_from_page(data.get("tracks") or {}))

    top_hit = None
    top_hit_data = data.get("topHit") or {}
    value = top_hit_data.get("value")
    if top_hit_data.get("type", "TRACKS") == "TRACKS" and isinstance(value, dict) and value.get("title"):
        top_hit = track_from_tidal(value)

    return SearchResponse(candidates=candidates, top_hit=top_hit)
