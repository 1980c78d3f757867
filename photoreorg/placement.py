"""
Destination placement and collision handling for dated photo files.
"""

import hashlib
import random
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .constants import SUFFIX_LENGTH, UNKNOWN_DATE_DIR, get_logger
from .errors import PlacementError
from .resolver import DateResult


class CopyDecision(Enum):
    """What the engine did (or would do) with one source file."""
    CREATE = "create"
    SKIP_IDENTICAL = "skip_identical"
    CREATE_RENAMED = "create_renamed"


@dataclass
class Placement:
    """Outcome of placing one file."""
    decision: CopyDecision
    source: Path
    target: Path
    performed: bool = False

    @property
    def is_copy(self) -> bool:
        return self.decision is not CopyDecision.SKIP_IDENTICAL


def destination_dir(dst_root: Path, result: Optional[DateResult]) -> Path:
    """Return dst_root/YYYY/MM/DD, dst_root/YYYY_/MM/DD or the unknown bucket."""
    if result is None:
        return dst_root / UNKNOWN_DATE_DIR
    return dst_root.joinpath(*result.as_path_parts())


def files_identical(file1: Path, file2: Path, chunk_size: int = 65536) -> bool:
    """Byte-exact comparison of two files."""
    if file1.stat().st_size != file2.stat().st_size:
        return False

    with open(file1, 'rb') as f1, open(file2, 'rb') as f2:
        while True:
            chunk1 = f1.read(chunk_size)
            chunk2 = f2.read(chunk_size)
            if chunk1 != chunk2:
                return False
            if not chunk1:
                return True


def random_suffix(length: int = SUFFIX_LENGTH) -> str:
    """Hex prefix of the MD5 digest of a random number."""
    seed = str(random.getrandbits(64)).encode()
    return hashlib.md5(seed).hexdigest()[:length]


def renamed_path(path: Path) -> Path:
    """Insert a random suffix before the extension, e.g. IMG_1.jpg -> IMG_1_<hex>.jpg."""
    while True:
        candidate = path.with_name(f"{path.stem}_{random_suffix()}{path.suffix}")
        if not candidate.exists():
            return candidate


class PlacementEngine:
    """Decides whether to copy, skip, or copy-under-a-new-name, and does it."""

    def __init__(self, dry_run: bool = False, verbose: bool = False):
        self.dry_run = dry_run
        self.verbose = verbose
        self.logger = get_logger()

    def _report(self, message: str) -> None:
        """Verbose-only messages still reach the run log at debug level."""
        if self.verbose:
            self.logger.info(message)
        else:
            self.logger.debug(message)

    def ensure_directory(self, directory: Path) -> None:
        """Create directory and parents if needed, with dry-run support."""
        if not self.dry_run:
            directory.mkdir(parents=True, exist_ok=True)

    def copy_file(self, source: Path, target: Path) -> bool:
        """Copy source to target; returns False when nothing was written (dry run)."""
        if self.dry_run:
            self._report(f"[dry run] cp {source} {target}")
            return False

        shutil.copy2(str(source), str(target))
        self._report(f"'{source}' -> '{target}'")
        return True

    def place(self, source: Path, result: Optional[DateResult], dst_root: Path) -> Placement:
        """Place one source file under dst_root according to its resolved date."""
        dest_dir = destination_dir(dst_root, result)
        target = dest_dir / source.name

        try:
            self.ensure_directory(dest_dir)

            if not target.exists():
                performed = self.copy_file(source, target)
                return Placement(CopyDecision.CREATE, source, target, performed)

            if files_identical(source, target):
                self.logger.debug(f"Skipping identical file: {source} == {target}")
                return Placement(CopyDecision.SKIP_IDENTICAL, source, target)

            renamed = renamed_path(target)
            self._report(f"Collision name avoided on {source.name}, copied as {renamed}")
            performed = self.copy_file(source, renamed)
            return Placement(CopyDecision.CREATE_RENAMED, source, renamed, performed)

        except OSError as e:
            raise PlacementError(source, target, e) from e
