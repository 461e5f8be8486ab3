"""progress indication for long-running registry fetches."""

import sys
from contextlib import contextmanager
from typing import Optional
from rich.console import Console
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
)


class ProgressManager:
    """brackets blocking operations with a spinner on interactive terminals."""

    def __init__(self, console: Optional[Console] = None):
        """
        initialize progress manager.

        args:
            console: optional rich console instance. if not provided, creates one on stderr.
        """
        self.console = console or Console(stderr=True)
        self._enabled = self._should_show_progress()

    def _should_show_progress(self) -> bool:
        """
        check if we should show progress indicators.

        returns false in non-interactive environments (ci/cd, piped output).
        """
        return sys.stdout.isatty() and not sys.stdout.closed

    def print(self, *args, **kwargs):
        """print through managed console to avoid interference with the spinner."""
        self.console.print(*args, **kwargs)

    @contextmanager
    def spinner(self, description: str, transient: bool = True):
        """
        show an indeterminate spinner for the duration of the block.

        args:
            description: text to display next to spinner
            transient: if true, spinner disappears when done

        yields:
            task id for the spinner, or None when progress is disabled
        """
        if not self._enabled:
            yield None
            return

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self.console,
            transient=transient,
        ) as progress:
            task_id = progress.add_task(description, total=None)
            yield task_id


class NullProgress(ProgressManager):
    """a progress manager that never draws anything."""

    def __init__(self):
        super().__init__(Console(quiet=True))
        self._enabled = False
