"""Brave Search tools: API client, formatters, local search and image registry"""

from .brave_search import BraveSearchClient
from .image_cache import CachedImage, ImageRegistry
from .local_search import LocalSearchAggregator
from .search_tools import TOOL_TABLE, BraveSearchTools, ToolSpec

__all__ = [
    "BraveSearchClient",
    "CachedImage",
    "ImageRegistry",
    "LocalSearchAggregator",
    "TOOL_TABLE",
    "BraveSearchTools",
    "ToolSpec",
]
