"""Rich-based progress reporter for terminal output."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


if TYPE_CHECKING:
    from types import TracebackType

    from rich.console import Console

    from klangreise.core.ports import ProgressCallback


class RichProgressReporter:
    """Progress reporter using Rich for terminal display.

    Shows one bar per task counting completed steps (core assets fetched,
    files uploaded).

    Example:
        with RichProgressReporter() as reporter:
            controller.install(progress=reporter).result()
    """

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the progress display."""
        self._progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
        )
        self._tasks: dict[str, TaskID] = {}
        self._started = False

    def __enter__(self) -> RichProgressReporter:
        """Start the progress display."""
        self._progress.start()
        self._started = True
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Stop the progress display."""
        self._progress.stop()
        self._started = False

    def start_task(self, name: str, total: int) -> ProgressCallback:
        """Start tracking a task.

        Args:
            name: Human-readable name for the task.
            total: Total number of steps.

        Returns:
            A callback to update progress.
        """
        # Auto-start if not in context manager
        if not self._started:
            self._progress.start()
            self._started = True

        task_id = self._progress.add_task(name, total=total)
        self._tasks[name] = task_id

        def callback(completed: int, total: int) -> None:
            self._progress.update(task_id, completed=completed, total=total)

        return callback

    def finish_task(self, name: str) -> None:
        """Mark a task as complete.

        Args:
            name: The task name.
        """
        task_id = self._tasks.pop(name, None)
        if task_id is not None:
            self._progress.stop_task(task_id)
