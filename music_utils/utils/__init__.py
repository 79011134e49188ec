"""
Utility functions for music-utils.

This module provides common helpers used across the application:
    - Filename sanitization (using yt-dlp's sanitize_filename)
    - Directory creation
    - Extracting playlist UUIDs from Tidal URLs

Usage:
    from music_utils.utils import sanitize_filename, ensure_directory, extract_uuid
"""

import re
from pathlib import Path

from yt_dlp.utils import sanitize_filename as yt_dlp_sanitize


_UUID_PATTERN = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)


def sanitize_filename(name: str, restricted: bool = False) -> str:
    """
    Sanitize a playlist title for use as a file name.

    Uses yt-dlp's sanitize_filename so snapshot, review and .m3u8 files are
    all named the same way.

    Args:
        name: The string to sanitize (usually a playlist title).
        restricted: If True, use more aggressive sanitization that
                    removes all special characters. Default False.

    Returns:
        Sanitized string safe for use in file names. "Untitled" when
        nothing usable is left.

    Examples:
        sanitize_filename("AC/DC Favourites")  # "AC⧸DC Favourites"
        sanitize_filename("What?!")            # "What？!"
    """
    return yt_dlp_sanitize(name, restricted=restricted).strip() or "Untitled"


def ensure_directory(path: Path) -> Path:
    """
    Ensure a directory exists, creating it and its parents if necessary.

    Args:
        path: Path to the directory.

    Returns:
        The same path (for chaining).

    Raises:
        OSError: If the directory cannot be created.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def extract_uuid(url: str) -> str:
    """
    Extract the first UUID in a string.

    Tidal playlist URLs carry the playlist UUID as a path segment.

    Returns:
        The UUID, or "" when the string contains none.

    Examples:
        extract_uuid("https://tidal.com/browse/playlist/3f1e0c2a-5b7d-4c1e-9a2b-8d6f4e3c2b1a")
        # Returns: "3f1e0c2a-5b7d-4c1e-9a2b-8d6f4e3c2b1a"
    """
    match = _UUID_PATTERN.search(url)
    return match.group(0) if match else ""


__all__ = [
    "sanitize_filename",
    "ensure_directory",
    "extract_uuid",
]
