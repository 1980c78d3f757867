"""
Program constants, tag lists, and shared logger/console accessors.
"""

import logging
import shutil
from typing import Optional

from rich.console import Console


PROGRAM = "photoreorg"

# Embedded date tags requested from exiftool, in priority order
CAPTURE_TAGS = ("CreateDate",)
GPS_TAGS = ("GPSDateStamp", "GPSDateTime")
MODIFY_TAGS = ("ModifyDate", "FileModifyDate")
EXIFTOOL_TAGS = CAPTURE_TAGS + GPS_TAGS + MODIFY_TAGS
EXIFTOOL_DATE_FORMAT = "%Y:%m:%d"

# Filesystem timestamps used when exiftool cannot read the file
STAT_FIELDS = ("Birth", "Modify", "Change")
STAT_DATE_FORMAT = "%Y-%m-%d"

# Destination bucket for files without any usable date
UNKNOWN_DATE_DIR = "unknown_date"

# Marker appended to the year segment of uncertain dates
UNCERTAIN_YEAR_MARKER = "_"

# Length of the hex suffix inserted into renamed collision copies
SUFFIX_LENGTH = 20

# Files selected when no pattern is given or saved
DEFAULT_PATTERN = r"\.jpg$|\.jpeg$|\.tiff$|\.tif$"

_console: Optional[Console] = None


def get_logger() -> logging.Logger:
    """Return the shared program logger."""
    return logging.getLogger(PROGRAM)


def get_console() -> Console:
    """Return the shared rich console, created on first use."""
    global _console
    if _console is None:
        _console = Console(soft_wrap=True, highlight=False)
    return _console


def check_tool_availability(cmd: str) -> bool:
    """Check whether an external command is on the PATH."""
    return shutil.which(cmd) is not None


exiftool_available = check_tool_availability("exiftool")
