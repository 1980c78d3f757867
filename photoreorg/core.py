"""
Core run driver: discover source files, resolve dates, place copies.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .cancellation import CancellationToken
from .constants import PROGRAM, get_console, get_logger
from .errors import PlacementError
from .history import HistoryManager
from .metadata import read_metadata
from .placement import Placement, PlacementEngine
from .progress import ProgressContext
from .resolver import resolve
from .stats import StatsManager


def configure_logging(console: Console, verbose: bool) -> logging.Logger:
    """Attach a rich console handler to the program logger, replacing any earlier one."""
    logger = get_logger()
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    console_handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
    console_handler.setLevel(logging.INFO if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    # Allow all messages to reach the handlers
    logger.setLevel(logging.DEBUG)
    return logger


class PhotoReorganizer:
    """Copies matching photos from source into a date-partitioned destination."""

    def __init__(self, source: Path, dest: Path, pattern: str,
                 root_dir: Optional[Path] = None, dry_run: bool = False,
                 verbose: bool = False):
        self.source = source
        self.dest = dest
        self.pattern = re.compile(pattern, re.IGNORECASE)
        self.dry_run = dry_run
        self.verbose = verbose
        self.root_dir = root_dir or Path.home() / f".{PROGRAM}"
        self.stats_manager = StatsManager()

        self.console = get_console()
        self.logger = configure_logging(self.console, verbose)

        self.history_manager = HistoryManager(dest_path=dest, root_dir=self.root_dir,
                                              dry_run=dry_run)
        self.history_manager.setup_run_logger(self.logger)

        self.engine = PlacementEngine(dry_run=dry_run, verbose=verbose)

        self.logger.info(f"Starting run: {self.source} -> {self.dest}")
        self.logger.debug(f"Pattern: {self.pattern.pattern}")
        self.logger.debug(f"Mode: {'DRY RUN' if self.dry_run else 'COPY'}")

    def find_source_files(self) -> List[Path]:
        """Find all files under source whose path matches the pattern."""
        return sorted(
            file_path for file_path in self.source.rglob("*")
            if file_path.is_file() and not file_path.is_symlink()
            and self.pattern.search(str(file_path))
        )

    def process_file(self, file_path: Path) -> Placement:
        """Resolve the date of one file and place it in the destination tree."""
        bag = read_metadata(file_path)
        result = resolve(bag)
        self.stats_manager.record_resolution(result)
        self.logger.debug(f"{file_path}: {result or 'unknown date'}")

        placement = self.engine.place(file_path, result, self.dest)
        self.stats_manager.record_placement(placement)
        return placement

    def process_files(self, files: List[Path], progress_ctx: Optional[ProgressContext] = None,
                      token: Optional[CancellationToken] = None) -> None:
        """Process files one at a time, continuing past per-file failures."""
        progress_ctx = progress_ctx or ProgressContext()
        self.logger.info(f"Starting to process {len(files)} files")

        last_file = None
        for file_path in files:
            if token is not None and token.cancelled:
                break

            progress_ctx.show_file(file_path)
            try:
                self.process_file(file_path)
            except PlacementError as e:
                self.logger.error(str(e))
                self.stats_manager.increment_failed()

            last_file = file_path
            progress_ctx.advance()

        if token is not None and token.cancelled:
            token.cleanup(last_file)

    def summary_line(self) -> str:
        """One-line report of how many files were copied and where."""
        if self.dry_run:
            return f"{self.stats_manager.get_planned()} files would be copied to {self.dest} (dry run)."
        return f"{self.stats_manager.get_copied_total()} files were copied to {self.dest}."

    def close(self) -> None:
        """Release the run log file handler."""
        self.history_manager.close_run_logger(self.logger)

    def print_summary(self) -> None:
        """Print processing summary."""
        table = Table(title="Processing Summary")
        table.add_column("Category", style="cyan")
        table.add_column("Count", style="green")

        if self.dry_run:
            table.add_row("Would Copy", str(self.stats_manager.get_planned()))
        else:
            table.add_row("Copied", str(self.stats_manager.get_copied()))
            table.add_row("Renamed Copies", str(self.stats_manager.get_renamed()))
        table.add_row("Identical Skipped", str(self.stats_manager.get_skipped()))
        table.add_row("Uncertain Dates", str(self.stats_manager.get_uncertain()))
        table.add_row("Unknown Dates", str(self.stats_manager.get_unknown()))
        table.add_row("Failed", str(self.stats_manager.get_failed()))

        self.console.print(table)
        self.console.print(escape(self.summary_line()))
