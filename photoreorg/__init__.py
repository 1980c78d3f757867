"""
photoreorg - Copy photos into a year/month/day tree by capture date.

Dates come from embedded metadata when available. Dates that can only be
inferred from modification or filesystem timestamps are kept apart under an
underscore-tagged year, and files without any date go to ``unknown_date``.

MIT License.
"""

__version__ = "1.0.0"


# Public API
from .cli import main
from .config import Config
from .core import PhotoReorganizer
from .metadata import MetadataBag, read_metadata
from .placement import CopyDecision, Placement, PlacementEngine
from .resolver import DateResult, resolve

__all__ = [ "main", "Config", "PhotoReorganizer", "MetadataBag", "read_metadata",
            "CopyDecision", "Placement", "PlacementEngine", "DateResult", "resolve" ]
