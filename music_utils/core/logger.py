"""
Logging configuration for music-utils.

This module sets up the logging system with multiple outputs:
    - Console: Real-time progress with tqdm-compatible formatting
    - log_full.log: Complete log of all events (DEBUG and above)
    - log_errors.log: Only ERROR and CRITICAL level messages
    - missing_tracks.log: Tracks that could not be matched, grouped by
      the playlist they came from

The logging system follows the principle: everything to screen is also saved
to file, then filtered into specialized files.

Log File Locations:
    All log files are created in <data directory>/logs. Every run gets its
    own timestamped set of files.

Usage:
    from music_utils.core.logger import setup_logging, get_logger

    setup_logging(data_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Syncing playlist")
    log_missing_track(logger, "Chill Mix", "Kids", "MGMT", "no candidates")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Log file prefixes (a timestamp is appended per run)
LOG_FULL_PREFIX = "log_full"
LOG_ERRORS_PREFIX = "log_errors"
MISSING_TRACKS_PREFIX = "missing_tracks"

# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that colors the level name on console output.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        colored_levelname = f"{color}{record.levelname}{Colors.RESET}"
        return f"{colored_levelname}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking progress bars.

    Progress bars redraw in place using carriage returns. Writing through
    tqdm.write() makes messages appear above any active bar instead of
    tearing it.

    Attributes:
        stream: The output stream (defaults to sys.stderr).
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class MissingTrackHandler(logging.Handler):
    """
    Handler that captures unmatched tracks for the missing-tracks report.

    This handler listens for log records that carry missing-track
    information and writes them to missing_tracks.log in a simple,
    human-readable format, one block per playlist:

        [Chill Mix]
        MGMT - Kids (no candidates)
        Taylor Swift - Lover (Deluxe) (no rule matched)

        [Road Trip]
        ...

    The handler looks for specific extra fields in log records:
        - 'missing_track_playlist': Label of the playlist being processed
        - 'missing_track_name': The title of the track
        - 'missing_track_artist': The primary artist
        - 'missing_track_reason': Why the track is missing (optional)

    Only records containing 'missing_track_name' are written to the report.

    Attributes:
        report_path: Path to the missing_tracks.log file.
        report_file: Open file handle (opened by open()).

    Usage:
        logger.warning(
            "Missing: MGMT - Kids",
            extra={
                'missing_track_playlist': 'Chill Mix',
                'missing_track_name': 'Kids',
                'missing_track_artist': 'MGMT',
                'missing_track_reason': 'no candidates',
            }
        )
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None
        self._current_playlist: str | None = None

    def open(self) -> None:
        """
        Open the report file for writing.

        Called by setup_logging() after the handler is created.
        """
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        """
        Write missing-track info to the report if present in the record.

        A playlist header is written whenever the playlist label changes
        from the previous record.
        """
        if not hasattr(record, "missing_track_name"):
            return

        if self.report_file is None:
            return

        try:
            playlist = getattr(record, "missing_track_playlist", "")
            name = getattr(record, "missing_track_name", "Unknown")
            artist = getattr(record, "missing_track_artist", "") or "Unknown"
            reason = getattr(record, "missing_track_reason", "")

            if playlist != self._current_playlist:
                if self._current_playlist is not None:
                    self.report_file.write("\n")
                self.report_file.write(f"[{playlist}]\n")
                self._current_playlist = playlist

            line = f"{artist} - {name}"
            if reason:
                line += f" ({reason})"
            self.report_file.write(f"{line}\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """
        Close the report file handle.

        Safe to call multiple times.
        """
        if self.report_file is not None:
            self.report_file.close()
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """Filter that only allows ERROR and CRITICAL level records."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(data_dir: Path, debug: bool = False) -> None:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded but before any other operations.

    Args:
        data_dir: Data directory from config.yaml. Logs are stored in a
                  'logs' subdirectory.
        debug: Show DEBUG messages on the console as well.

    Behavior:
        1. Create data_dir/logs if it doesn't exist
        2. Generate timestamp for this run's log files
        3. Configure root logger level to DEBUG
        4. Console handler (TqdmLoggingHandler), INFO or DEBUG
        5. Full log file handler, DEBUG
        6. Error log file handler, filtered to ERROR+
        7. Missing-tracks report handler
    """
    logs_dir = data_dir / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    # Console handler (tqdm-compatible) with colors
    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    full_log_path = logs_dir / f"{LOG_FULL_PREFIX}_{timestamp}.log"
    full_handler = logging.FileHandler(full_log_path, mode="w", encoding="utf-8")
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    error_log_path = logs_dir / f"{LOG_ERRORS_PREFIX}_{timestamp}.log"
    error_handler = logging.FileHandler(error_log_path, mode="w", encoding="utf-8")
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    missing_path = logs_dir / f"{MISSING_TRACKS_PREFIX}_{timestamp}.log"
    missing_handler = MissingTrackHandler(missing_path)
    missing_handler.open()
    root_logger.addHandler(missing_handler)

    # Third-party HTTP chatter stays out of the console
    for noisy in ("urllib3", "spotipy"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.

    Returns:
        logging.Logger: A logger instance configured by setup_logging().

    Note:
        Loggers obtained before setup_logging() is called will have no
        handlers and will not produce output.
    """
    return logging.getLogger(name)


def format_linked_message(artist: str, name: str, method: str) -> str:
    """Format a 'Linked' message with colors."""
    return (
        f"{Colors.GREEN}Linked{Colors.RESET}: "
        f"{artist} - {name} "
        f"{Colors.CYAN}[{method}]{Colors.RESET}"
    )


def format_missing_message(artist: str, name: str, reason: str) -> str:
    """Format a 'Missing' message with colors."""
    return (
        f"{Colors.RED}Missing{Colors.RESET}: "
        f"{artist} - {name} "
        f"({reason})"
    )


def log_missing_track(
    logger: logging.Logger,
    playlist: str,
    track_name: str,
    artist: str,
    reason: str = ""
) -> None:
    """
    Log a track that could not be matched in the target catalog.

    This is a convenience function that logs with the correct extra fields
    for the MissingTrackHandler to pick up.

    Args:
        logger: The logger to use for the message.
        playlist: Label of the playlist the track belongs to.
        track_name: The title of the track.
        artist: The primary artist.
        reason: Short description of why the track is missing.

    Example:
        log_missing_track(logger, "Chill Mix", "Kids", "MGMT", "no candidates")

        # missing_tracks.log:
        # [Chill Mix]
        # MGMT - Kids (no candidates)
    """
    logger.warning(
        format_missing_message(artist, track_name, reason or "not found"),
        extra={
            "missing_track_playlist": playlist,
            "missing_track_name": track_name,
            "missing_track_artist": artist,
            "missing_track_reason": reason,
        }
    )


def shutdown_logging() -> None:
    """
    Flush, close and remove every handler on the root logger.

    Typically called in a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except (OSError, ValueError):
            pass
        root_logger.removeHandler(handler)
