"""Shared types, errors and helpers"""

from .errors import BraveAPIError, ConfigurationError, PositionalMismatchError
from .types import (
    MAX_IDS_PER_REQUEST,
    DayHours,
    MergedPoiView,
    OpeningHours,
    PoiDescription,
    PoiRecord,
    SearchQuery,
)
from .utils import chunk_ids, setup_logging, zip_by_position
from .version import __version__

__all__ = [
    "BraveAPIError",
    "ConfigurationError",
    "PositionalMismatchError",
    "MAX_IDS_PER_REQUEST",
    "DayHours",
    "MergedPoiView",
    "OpeningHours",
    "PoiDescription",
    "PoiRecord",
    "SearchQuery",
    "chunk_ids",
    "setup_logging",
    "zip_by_position",
    "__version__",
]
