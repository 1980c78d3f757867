"""Read date-like fields from embedded metadata and filesystem timestamps."""

import json
import os
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from .constants import (EXIFTOOL_DATE_FORMAT, EXIFTOOL_TAGS, STAT_DATE_FORMAT,
                        exiftool_available, get_logger)


logger = get_logger()


@dataclass
class MetadataBag:
    """Unordered date fields for one file.

    ``extraction_ok`` is True when exiftool read the file; the fields then carry
    exiftool tag names. Otherwise they hold the filesystem ``Birth``, ``Modify``
    and ``Change`` timestamps.
    """
    fields: Dict[str, str] = field(default_factory=dict)
    extraction_ok: bool = False


def run_exiftool(file_path: Path) -> Optional[Dict[str, str]]:
    """Return the requested exiftool date tags, or None if extraction failed."""
    if not exiftool_available:
        return None

    try:
        result = subprocess.run([
            "exiftool",
            "-q",
            "-json",
            "-d", EXIFTOOL_DATE_FORMAT,
            *[f"-{tag}" for tag in EXIFTOOL_TAGS],
            str(file_path)],
            capture_output=True, text=True, check=True
        )
    except subprocess.CalledProcessError as e:
        logger.debug(f"exiftool failed for {file_path}: {e}")
        return None
    except OSError as e:
        logger.debug(f"Could not run exiftool for {file_path}: {e}")
        return None
    except UnicodeDecodeError as e:
        logger.debug(f"exiftool output for {file_path} is not valid UTF-8: {e}")
        return None

    try:
        records = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        logger.debug(f"Failed to parse exiftool JSON output for {file_path}: {e}")
        return None

    if not records or "Error" in records[0]:
        return None

    return {
        tag: str(value) for tag, value in records[0].items()
        if tag != "SourceFile" and value not in (None, "")
    }


def birth_time(st: os.stat_result) -> Optional[float]:
    """Filesystem birth time, where the platform reports one."""
    return getattr(st, "st_birthtime", None)


def filesystem_timestamps(file_path: Path) -> Dict[str, str]:
    """Return Birth/Modify/Change dates from ``os.stat`` as YYYY-MM-DD strings."""
    try:
        st = file_path.stat()
    except OSError as e:
        logger.debug(f"Could not stat {file_path}: {e}")
        return {}

    stamps = {
        "Birth": birth_time(st),
        "Modify": st.st_mtime,
        "Change": st.st_ctime,
    }
    return {
        name: datetime.fromtimestamp(value).strftime(STAT_DATE_FORMAT)
        for name, value in stamps.items() if value is not None
    }


def read_metadata(file_path: Path) -> MetadataBag:
    """Collect date fields for a file, falling back to filesystem timestamps."""
    tags = run_exiftool(file_path)
    if tags is not None:
        return MetadataBag(fields=tags, extraction_ok=True)

    logger.debug(f"No embedded metadata for {file_path}, using filesystem timestamps")
    return MetadataBag(fields=filesystem_timestamps(file_path), extraction_ok=False)
