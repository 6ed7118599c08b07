"""Brave Search MCP - Brave web, image, news, video and local search over the Model Context Protocol"""

from .configuration.settings import BraveSearchConfig, load_config
from .shared.types import MergedPoiView, PoiDescription, PoiRecord, SearchQuery
from .shared.version import __version__

__all__ = [
    "BraveSearchConfig",
    "load_config",
    "MergedPoiView",
    "PoiDescription",
    "PoiRecord",
    "SearchQuery",
    "__version__",
]
