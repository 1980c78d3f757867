"""Progress tracking context for photoreorg runs."""

from pathlib import Path
from typing import Optional

from rich.progress import Progress, TaskID


class ProgressContext:
    """Optional rich progress bar passed through the run driver."""

    def __init__(self, progress: Optional[Progress] = None, task: Optional[TaskID] = None):
        self.progress = progress
        self.task = task

    @property
    def is_active(self) -> bool:
        return self.progress is not None and self.task is not None

    def show_file(self, file_path: Path) -> None:
        """Show the file currently being placed."""
        if self.is_active:
            self.progress.update(self.task, description=f"Placing {file_path.name}")

    def advance(self, steps: int = 1) -> None:
        if self.is_active:
            self.progress.advance(self.task, steps)
