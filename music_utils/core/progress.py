"""
Progress bar handling for music-utils using the Rich library.

Two long-running phases get a progress bar:
    - Reconciling a source playlist against the target: ReconcileProgressBar
    - Importing a playlist snapshot into the local library: ImportProgressBar

Usage:
    from music_utils.core.progress import ReconcileProgressBar

    with ReconcileProgressBar(total=len(tracks), description=playlist.title) as progress:
        for track in tracks:
            result = reconcile(track)
            progress.update(result.outcome)
"""

from abc import ABC, abstractmethod
from typing import Optional

from rich import get_console
from rich.console import JustifyMethod, OverflowMethod
from rich.highlighter import Highlighter
from rich.progress import (
    BarColumn,
    Progress,
    ProgressColumn,
    Task,
    TaskID,
)
from rich.style import StyleType
from rich.text import Text
from rich.theme import Theme

from music_utils.matching.models import Outcome


PROGRESS_THEME = Theme({
    "bar.back": "grey23",
    "bar.complete": "rgb(165,66,129)",
    "bar.finished": "rgb(114,156,31)",
    "bar.pulse": "rgb(165,66,129)",
    "progress.percentage": "white",
})


class SizedTextColumn(ProgressColumn):
    """
    Text column truncated with an ellipsis past a fixed width.

    Playlist titles vary wildly in length; a fixed width keeps the bars
    aligned when several playlists are processed in a row.
    """

    def __init__(
        self,
        text_format: str,
        style: StyleType = "none",
        justify: JustifyMethod = "left",
        markup: bool = True,
        highlighter: Optional[Highlighter] = None,
        overflow: Optional[OverflowMethod] = None,
        width: int = 20,
    ) -> None:
        self.text_format = text_format
        self.justify: JustifyMethod = justify
        self.style = style
        self.markup = markup
        self.highlighter = highlighter
        self.overflow: Optional[OverflowMethod] = overflow
        self.width = width
        super().__init__()

    def render(self, task: Task) -> Text:
        """Render the column."""
        _text = self.text_format.format(task=task)
        if self.markup:
            text = Text.from_markup(_text, style=self.style, justify=self.justify)
        else:
            text = Text(_text, style=self.style, justify=self.justify)
        if self.highlighter:
            self.highlighter.highlight(text)

        text.truncate(max_width=self.width, overflow=self.overflow, pad=True)
        return text


class BaseProgressBar(ABC):
    """
    Abstract base class for all progress bars.

    Provides:
    - Rich Progress instance with the shared theme
    - Context manager support (__enter__/__exit__)
    - Manual start/stop control

    Subclasses must implement:
    - _get_status_text(): Return formatted status string
    - update(): Record one processed item
    """

    def __init__(
        self,
        total: int,
        description: str,
        status_width: int = 35
    ):
        """
        Initialize the progress bar.

        Args:
            total: Total number of items to process.
            description: Text shown on the left (usually the playlist title).
            status_width: Width of the status column.
        """
        self.total = total
        self.description = description
        self.completed = 0

        self.console = get_console()
        self.console.push_theme(PROGRESS_THEME)

        self.progress = Progress(
            SizedTextColumn(
                "[white]{task.description}",
                overflow="ellipsis",
                width=20,
            ),
            SizedTextColumn(
                "{task.fields[status]}",
                width=status_width,
                style="white",
            ),
            BarColumn(bar_width=40, finished_style="green"),
            "[progress.percentage]{task.percentage:>3.0f}%",
            console=self.console,
            transient=False,
            refresh_per_second=10,
        )

        self.task_id: Optional[TaskID] = None
        self._started = False

    def __enter__(self) -> "BaseProgressBar":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def start(self) -> None:
        """Start the progress bar (can be called manually)."""
        if not self._started:
            self.progress.start()
            self.task_id = self.progress.add_task(
                description=self.description,
                total=self.total,
                status=self._get_status_text(),
            )
            self._started = True

    def stop(self) -> None:
        """Stop the progress bar and restore the console theme."""
        if self._started:
            self.progress.stop()
            self.console.pop_theme()
            self._started = False

    def _update_progress(self) -> None:
        if self.task_id is not None:
            self.progress.update(
                self.task_id,
                completed=self.completed,
                status=self._get_status_text(),
            )

    @abstractmethod
    def _get_status_text(self) -> str:
        """Return the status text with Rich markup."""
        pass

    @abstractmethod
    def update(self, *args, **kwargs) -> None:
        """Record one processed item. Signature varies by phase."""
        pass


class ReconcileProgressBar(BaseProgressBar):
    """
    Progress bar for reconciling one playlist against the target catalog.

    Displays:
    - Playlist title
    - Status: ✓ linked, = already present, ✗ missing
    - Bar and percentage

    Example:
        Chill Mix           ✓ 12  = 30  ✗ 2        ━━━━━━━━━━━━━━━━━  47%
    """

    def __init__(self, total: int, description: str = "Reconciling"):
        super().__init__(total=total, description=description)
        self.linked = 0
        self.present = 0
        self.missing = 0

    def _get_status_text(self) -> str:
        return "  ".join([
            f"[green]✓ {self.linked}[/green]",
            f"[cyan]= {self.present}[/cyan]",
            f"[red]✗ {self.missing}[/red]",
        ])

    def update(self, outcome: Outcome) -> None:
        """
        Record the outcome of one source track.

        Args:
            outcome: The track's MatchResult outcome.
        """
        self.completed += 1
        if outcome is Outcome.MATCHED:
            self.linked += 1
        elif outcome is Outcome.ALREADY_PRESENT:
            self.present += 1
        else:
            self.missing += 1

        self._update_progress()


class ImportProgressBar(BaseProgressBar):
    """
    Progress bar for importing a playlist snapshot into the local library.

    Example:
        Road Trip           ✓ 40  ⊘ 5  ✗ 3         ━━━━━━━━━━━━━━━━━ 100%
    """

    def __init__(self, total: int, description: str = "Importing"):
        super().__init__(total=total, description=description)
        self.added = 0
        self.skipped = 0
        self.not_found = 0

    def _get_status_text(self) -> str:
        parts = [
            f"[green]✓ {self.added}[/green]",
        ]
        if self.skipped > 0:
            parts.append(f"[yellow]⊘ {self.skipped}[/yellow]")
        parts.append(f"[red]✗ {self.not_found}[/red]")
        return "  ".join(parts)

    def update(self, found: bool, skipped: bool = False) -> None:
        """
        Record one looked-up track.

        Args:
            found: Whether the local library has the track.
            skipped: Whether the path was already in the playlist file.
        """
        self.completed += 1
        if not found:
            self.not_found += 1
        elif skipped:
            self.skipped += 1
        else:
            self.added += 1

        self._update_progress()


__all__ = [
    "PROGRESS_THEME",
    "SizedTextColumn",
    "BaseProgressBar",
    "ReconcileProgressBar",
    "ImportProgressBar",
]
