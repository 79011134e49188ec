"""Lidarr module for music-utils: wanted (missing) albums."""

from music_utils.lidarr.client import LidarrClient

__all__ = ["LidarrClient"]
