"""
Navidrome module for music-utils: local library lookups and .m3u8 imports.

Usage:
    from music_utils.navidrome import NavidromeLibrary, PlaylistImporter

    with NavidromeLibrary(config.navidrome.database) as library:
        importer = PlaylistImporter(library, config.navidrome.playlists_directory)
        importer.import_playlists(playlists)
"""

from music_utils.navidrome.importer import ImportReport, PlaylistImporter
from music_utils.navidrome.library import NavidromeLibrary

__all__ = [
    "ImportReport",
    "NavidromeLibrary",
    "PlaylistImporter",
]
