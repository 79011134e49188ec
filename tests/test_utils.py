# tests/test_utils.py
"""Test utilities and logging helpers"""

import logging

from music_utils.core.logger import (
    MISSING_TRACKS_PREFIX,
    get_logger,
    log_missing_track,
    setup_logging,
    shutdown_logging,
)
from music_utils.utils import ensure_directory, extract_uuid, sanitize_filename


class TestHelpers:
    """Test helper functions"""

    def test_sanitize_filename(self):
        """Test filename sanitization"""
        assert "/" not in sanitize_filename("AC/DC Favourites")
        assert sanitize_filename("Road Trip") == "Road Trip"
        assert sanitize_filename("") == "Untitled"

    def test_extract_uuid(self):
        url = "https://tidal.com/browse/playlist/3f1e0c2a-5b7d-4c1e-9a2b-8d6f4e3c2b1a?u"
        assert extract_uuid(url) == "3f1e0c2a-5b7d-4c1e-9a2b-8d6f4e3c2b1a"
        assert extract_uuid("https://tidal.com/browse/playlist/") == ""

    def test_ensure_directory(self, tmp_path):
        path = ensure_directory(tmp_path / "a" / "b")
        assert path.is_dir()


class TestLogging:
    """Test the log files written by setup_logging"""

    def test_missing_tracks_report(self, tmp_path):
        setup_logging(tmp_path)
        try:
            logger = get_logger("music_utils.test")
            log_missing_track(logger, "Road Trip", "Kids", "MGMT", "no candidates")
            log_missing_track(logger, "Road Trip", "Lover", "Taylor Swift")
            log_missing_track(logger, "Mix", "Hey Jude", "The Beatles", "search failed")
        finally:
            shutdown_logging()

        report = next((tmp_path / "logs").glob(f"{MISSING_TRACKS_PREFIX}_*.log"))
        assert report.read_text(encoding="utf-8").splitlines() == [
            "[Road Trip]",
            "MGMT - Kids (no candidates)",
            "Taylor Swift - Lover",
            "",
            "[Mix]",
            "The Beatles - Hey Jude (search failed)",
        ]

    def test_errors_log_only_has_errors(self, tmp_path):
        setup_logging(tmp_path)
        try:
            logger = get_logger("music_utils.test")
            logger.info("starting")
            logger.error("search failed")
        finally:
            shutdown_logging()

        errors = next((tmp_path / "logs").glob("log_errors_*.log")).read_text(encoding="utf-8")
        assert "search failed" in errors
        assert "starting" not in errors
        assert logging.getLogger().handlers == []
