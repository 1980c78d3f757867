"""Exceptions raised by photoreorg."""

from pathlib import Path


class PhotoReorgError(Exception):
    """Base exception for photoreorg."""


class ConfigurationError(PhotoReorgError):
    """Raised when arguments or directories are unusable for a run."""


class PlacementError(PhotoReorgError):
    """Raised when a file cannot be placed in the destination tree."""

    def __init__(self, source: Path, target: Path, cause: OSError):
        super().__init__(f"Failed to copy {source} -> {target}: {cause}")
        self.source = source
        self.target = target
        self.cause = cause
