"""
Statistics tracking for a reorganization run.
"""

from typing import Dict, Optional

from .placement import CopyDecision, Placement
from .resolver import DateResult


class StatsManager:
    """Accumulates per-file outcomes over one run."""

    def __init__(self):
        self._stats = {
            'copied': 0,
            'renamed': 0,
            'planned': 0,
            'skipped': 0,
            'failed': 0,
            'uncertain': 0,
            'unknown': 0,
        }

    def record_resolution(self, result: Optional[DateResult]) -> None:
        """Count dates that fell back to an uncertain source or to the unknown bucket."""
        if result is None:
            self._stats['unknown'] += 1
        elif not result.certain:
            self._stats['uncertain'] += 1

    def record_placement(self, placement: Placement) -> None:
        """Record the outcome of one placement."""
        if not placement.is_copy:
            self._stats['skipped'] += 1
        elif not placement.performed:
            self._stats['planned'] += 1
        elif placement.decision is CopyDecision.CREATE_RENAMED:
            self._stats['renamed'] += 1
        else:
            self._stats['copied'] += 1

    def increment_failed(self) -> None:
        """Increment failure count when a file could not be placed."""
        self._stats['failed'] += 1

    def get_stats(self) -> Dict[str, int]:
        """Get a copy of current statistics."""
        return self._stats.copy()

    def get_copied_total(self) -> int:
        """Files actually written; renamed copies count like direct copies."""
        return self._stats['copied'] + self._stats['renamed']

    def has_errors(self) -> bool:
        return self._stats['failed'] > 0

    def get_copied(self) -> int:
        return self._stats['copied']

    def get_renamed(self) -> int:
        return self._stats['renamed']

    def get_planned(self) -> int:
        return self._stats['planned']

    def get_skipped(self) -> int:
        return self._stats['skipped']

    def get_failed(self) -> int:
        return self._stats['failed']

    def get_uncertain(self) -> int:
        return self._stats['uncertain']

    def get_unknown(self) -> int:
        return self._stats['unknown']
