"""
Resolve a calendar date from a bag of metadata fields.

Embedded capture fields (``CreateDate`` and any ``GPS*`` tag) give a certain
date. Modification-style fields, and every filesystem timestamp including the
birth time, give an uncertain one. When nothing usable is found the result is
``None``, which callers route to the unknown-date bucket.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Iterator, List, Optional, Tuple

from .constants import (CAPTURE_TAGS, GPS_TAGS, MODIFY_TAGS, STAT_FIELDS,
                        UNCERTAIN_YEAR_MARKER)
from .metadata import MetadataBag


DATE_PATTERN = re.compile(r'^\s*(\d{4})[:/-](\d{1,2})[:/-](\d{1,2})')


@dataclass(frozen=True)
class DateResult:
    """A fully populated calendar date and whether its source is trustworthy."""
    year: int
    month: int
    day: int
    certain: bool

    def as_path_parts(self) -> Tuple[str, str, str]:
        """Year, month and day segments; the year carries ``_`` when uncertain."""
        year = f"{self.year:04d}"
        if not self.certain:
            year += UNCERTAIN_YEAR_MARKER
        return year, f"{self.month:02d}", f"{self.day:02d}"

    def __str__(self) -> str:
        return "/".join(self.as_path_parts())


def parse_date_value(raw: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """Parse the leading YYYY:MM:DD (or YYYY-MM-DD, YYYY/MM/DD) of a value."""
    if not raw:
        return None

    match = DATE_PATTERN.match(str(raw))
    if not match:
        return None

    year, month, day = (int(part) for part in match.groups())
    try:
        date(year, month, day)
    except ValueError:
        # Placeholders such as 0000:00:00 00:00:00
        return None
    return year, month, day


def _gps_fields(bag: MetadataBag) -> List[str]:
    """GPS tags, known ones first, then any other GPS* tag by name."""
    extra = sorted(name for name in bag.fields
                   if name.startswith("GPS") and name not in GPS_TAGS)
    return list(GPS_TAGS) + extra


def _candidates(bag: MetadataBag) -> Iterator[Tuple[str, bool]]:
    """Yield (field name, certain) in priority order."""
    if bag.extraction_ok:
        for name in CAPTURE_TAGS:
            yield name, True
        for name in _gps_fields(bag):
            yield name, True
        for name in MODIFY_TAGS:
            yield name, False
    else:
        for name in STAT_FIELDS:
            yield name, False


def resolve(bag: MetadataBag) -> Optional[DateResult]:
    """Return the date of the highest-priority usable field, or None."""
    for name, certain in _candidates(bag):
        parsed = parse_date_value(bag.fields.get(name))
        if parsed is None:
            continue
        year, month, day = parsed
        return DateResult(year=year, month=month, day=day, certain=certain)

    return None
