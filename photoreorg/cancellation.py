"""
Cooperative cancellation for termination signals.

Signals only mark a token; the run driver checks it between files, so a copy
in progress is never interrupted halfway by the handler itself.
"""

import os
import signal
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .constants import get_logger


TRAPPED_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGHUP", "SIGQUIT", "SIGTERM")
    if hasattr(signal, name)
)


class CancellationToken:
    """Set once a stop has been requested."""

    def __init__(self, workdir: Optional[Path] = None):
        self.workdir = workdir or Path.cwd()
        self.reason: Optional[str] = None
        self.signal_number: Optional[int] = None
        self._cleaned_up = False

    @property
    def cancelled(self) -> bool:
        return self.reason is not None

    def cancel(self, reason: str, signal_number: Optional[int] = None) -> None:
        if self.reason is None:
            self.reason = reason
            self.signal_number = signal_number

    def cleanup(self, current_file: Optional[Path] = None) -> None:
        """Return to the starting working directory and report where the run stopped."""
        if self._cleaned_up:
            return
        self._cleaned_up = True

        logger = get_logger()
        logger.warning(f"Stopping: {self.reason} (signal number: {self.signal_number})")
        if current_file is not None:
            logger.warning(f"Last file processed: {current_file}")

        try:
            os.chdir(self.workdir)
        except OSError as e:
            logger.error(f"Could not return to {self.workdir}: {e}")


@contextmanager
def install_signal_handlers(token: CancellationToken) -> Iterator[CancellationToken]:
    """Trap SIGHUP, SIGQUIT and SIGTERM for the duration of the block."""
    def handler(signum, frame):
        token.cancel(f"received {signal.Signals(signum).name}", signum)

    previous = {}
    try:
        for signum in TRAPPED_SIGNALS:
            previous[signum] = signal.signal(signum, handler)
    except ValueError:
        # Not in the main thread; run without trapping
        get_logger().debug("Signal handlers not installed outside the main thread")

    try:
        yield token
    finally:
        for signum, old in previous.items():
            signal.signal(signum, old)
