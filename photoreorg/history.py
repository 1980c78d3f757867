"""
Run history: per-run log files and the global run audit log.
"""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .stats import StatsManager


class HistoryManager:
    """Manages per-run log files and the runs.log audit trail."""

    def __init__(self, dest_path: Path, root_dir: Path, dry_run: bool = False):
        self.dest_path = dest_path
        self.root_dir = root_dir
        self.dry_run = dry_run
        self.logs_dir = self.root_dir / "logs"
        self.runs_audit_log = self.root_dir / "runs.log"
        self.run_log = self._next_run_log()
        self._file_handler: Optional[logging.Handler] = None

    def _next_run_log(self) -> Path:
        """Pick a log file name for this run, adding a counter on collision."""
        timestamp = datetime.now().strftime("%Y-%m-%d")
        base_name = f"{timestamp}+{self._sanitize_dest_name(self.dest_path)}"
        run_log = self.logs_dir / f"{base_name}.log"
        counter = 1
        while run_log.exists():
            run_log = self.logs_dir / f"{base_name}-{counter:02d}.log"
            counter += 1
        return run_log

    def _sanitize_dest_name(self, dest_path: Path) -> str:
        """Convert destination path to safe file name."""
        name = dest_path.name
        sanitized = re.sub(r'[^\w\-_]', '-', name)
        sanitized = re.sub(r'-+', '-', sanitized)
        return sanitized.strip('-') or "root"

    def setup_run_logger(self, logger: logging.Logger) -> None:
        """Attach a DEBUG file handler writing this run's log."""
        if self.dry_run:
            return

        self.logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(self.run_log, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(name)s] %(levelname)s: %(message)s'
        ))
        logger.addHandler(file_handler)
        self._file_handler = file_handler

    def close_run_logger(self, logger: logging.Logger) -> None:
        """Detach and close the run log handler."""
        if self._file_handler is not None:
            logger.removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None

    def log_run_summary(self, source: Path, dest: Path, stats_manager: "StatsManager",
                        status: str) -> None:
        """Append a one-line summary of the run to runs.log."""
        if self.dry_run:
            return

        self.root_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        summary = (
            f"{timestamp} | {status} | "
            f"Source: {source} | Dest: {dest} | "
            f"Copied: {stats_manager.get_copied_total()} "
            f"({stats_manager.get_renamed()} renamed) | "
            f"Skipped: {stats_manager.get_skipped()} | "
            f"Uncertain: {stats_manager.get_uncertain()} | "
            f"Unknown: {stats_manager.get_unknown()} | "
            f"Failed: {stats_manager.get_failed()} | Log: {self.run_log.name}\n"
        )

        with open(self.runs_audit_log, 'a', encoding='utf-8') as f:
            f.write(summary)
