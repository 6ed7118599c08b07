"""MCP tool handlers for the Brave Search server."""

import base64
import logging
from dataclasses import dataclass
from typing import Annotated, Any, Awaitable, Callable, Dict, Literal, Optional

from fastmcp import Context
from fastmcp.exceptions import ToolError
from fastmcp.tools.tool import ToolResult
from mcp.types import ImageContent, TextContent
from pydantic import Field

from ..configuration.settings import BraveSearchConfig
from ..shared.errors import BraveAPIError
from ..shared.types import MAX_RESULT_COUNT, MIN_RESULT_COUNT
from ..shared.utils import log_to_client
from .brave_search import BraveSearchClient
from .formatting import format_news_results, format_video_results, format_web_results
from .image_cache import ImageRegistry
from .local_search import LocalSearchAggregator

logger = logging.getLogger(__name__)

FRESHNESS_DESCRIPTION = """Filters search results by when they were discovered.
The following values are supported:
- pd: Discovered within the last 24 hours.
- pw: Discovered within the last 7 Days.
- pm: Discovered within the last 31 Days.
- py: Discovered within the last 365 Days"""

Count = Annotated[
    int,
    Field(
        ge=MIN_RESULT_COUNT,
        le=MAX_RESULT_COUNT,
        description=f"The number of results to return, minimum {MIN_RESULT_COUNT}, maximum {MAX_RESULT_COUNT}",
    ),
]
Freshness = Annotated[
    Optional[Literal["pd", "pw", "pm", "py"]],
    Field(description=FRESHNESS_DESCRIPTION),
]

WEB_SEARCH_DESCRIPTION = (
    "Performs a web search using the Brave Search API, ideal for general queries and online content. "
    "Use this for broad information gathering, recent events, or when you need diverse web sources. "
    f"Maximum {MAX_RESULT_COUNT} results per request."
)

IMAGE_SEARCH_DESCRIPTION = (
    "Searches for images using the Brave Search API and returns them as image content. "
    "Downloaded images are also available as brave-image:// resources. "
    "Maximum 3 images per request."
)

NEWS_SEARCH_DESCRIPTION = (
    "Searches for news articles using the Brave Search API. "
    "Use this for recent events, trending topics, or specific news stories. "
    "Returns a list of articles with titles, URLs, and descriptions. "
    f"Maximum {MAX_RESULT_COUNT} results per request."
)

VIDEO_SEARCH_DESCRIPTION = (
    "Searches for videos using the Brave Search API. "
    "Use this for video content, tutorials, or any media-related queries. "
    "Returns a list of videos with titles, URLs, and descriptions. "
    f"Maximum {MAX_RESULT_COUNT} results per request."
)

LOCAL_SEARCH_DESCRIPTION = """Searches for local businesses and places using Brave's Local Search API.
Best for queries related to physical locations, businesses, restaurants, services, etc.
Returns detailed information including:
- Business names and addresses
- Ratings and review counts
- Phone numbers and opening hours
Use this when the query implies 'near me' or mentions specific locations.
Automatically falls back to web search if no local results are found."""


@dataclass(frozen=True)
class ToolSpec:
    """One MCP tool: wire name, description and the BraveSearchTools method serving it."""

    name: str
    description: str
    handler: str


TOOL_TABLE = (
    ToolSpec("brave_web_search", WEB_SEARCH_DESCRIPTION, "web_search"),
    ToolSpec("brave_image_search", IMAGE_SEARCH_DESCRIPTION, "image_search"),
    ToolSpec("brave_news_search", NEWS_SEARCH_DESCRIPTION, "news_search"),
    ToolSpec("brave_video_search", VIDEO_SEARCH_DESCRIPTION, "video_search"),
    ToolSpec("brave_local_search", LOCAL_SEARCH_DESCRIPTION, "local_search"),
)


async def _tool_error(tool_name: str, exc: Exception, ctx: Optional[Context] = None) -> ToolError:
    await log_to_client(logger, "error", f"{tool_name} failed: {exc}", ctx)
    return ToolError(f"Error in {tool_name}: {exc}")


class BraveSearchTools:
    """Handlers behind every entry of TOOL_TABLE.

    Handlers turn API failures into ``ToolError`` so FastMCP answers with an
    error result instead of failing the request. FastMCP injects the request
    ``Context`` into each handler; log messages are mirrored to the client
    through it.
    """

    def __init__(
        self,
        client: BraveSearchClient,
        images: Optional[ImageRegistry] = None,
        local_id_policy: str = "chunk_all",
    ) -> None:
        self.client = client
        self.images = images if images is not None else ImageRegistry()
        self.local = LocalSearchAggregator(
            client, self._web_search_text, id_policy=local_id_policy
        )

    @classmethod
    def from_config(cls, config: BraveSearchConfig, **client_kwargs: Any) -> "BraveSearchTools":
        return cls(
            BraveSearchClient.from_config(config, **client_kwargs),
            images=ImageRegistry(config.image_cache_size),
            local_id_policy=config.local_id_policy,
        )

    def handlers(self) -> Dict[str, Callable[..., Awaitable[Any]]]:
        """Tool name -> bound handler, in TOOL_TABLE order."""
        return {spec.name: getattr(self, spec.handler) for spec in TOOL_TABLE}

    async def _web_search_text(
        self,
        query: str,
        count: int = 10,
        offset: int = 0,
        freshness: Optional[str] = None,
        ctx: Optional[Context] = None,
    ) -> str:
        data = await self.client.web_search(query, count=count, offset=offset, freshness=freshness)
        if not (data.get("web") or {}).get("results"):
            await log_to_client(logger, "info", f'No results found for "{query}"', ctx)
        return format_web_results(query, data)

    async def web_search(
        self,
        query: Annotated[str, Field(min_length=1, description="The term to search the internet for")],
        count: Count = 10,
        offset: Annotated[int, Field(ge=0, le=9, description="The offset for pagination, minimum 0")] = 0,
        freshness: Freshness = None,
        ctx: Optional[Context] = None,
    ) -> str:
        try:
            return await self._web_search_text(query, count, offset, freshness, ctx)
        except BraveAPIError as exc:
            raise await _tool_error("brave_web_search", exc, ctx) from exc

    async def news_search(
        self,
        query: Annotated[
            str,
            Field(
                min_length=1,
                description="The term to search the internet for news articles, trending topics, or recent events",
            ),
        ],
        count: Count = 10,
        freshness: Freshness = None,
        ctx: Optional[Context] = None,
    ) -> str:
        try:
            data = await self.client.news_search(query, count=count, freshness=freshness)
        except BraveAPIError as exc:
            raise await _tool_error("brave_news_search", exc, ctx) from exc
        if not data.get("results"):
            await log_to_client(logger, "info", f'No news results found for "{query}"', ctx)
        return format_news_results(query, data)

    async def video_search(
        self,
        query: Annotated[str, Field(min_length=1, description="The term to search the internet for videos of")],
        count: Count = 10,
        ctx: Optional[Context] = None,
    ) -> str:
        try:
            data = await self.client.video_search(query, count=count)
        except BraveAPIError as exc:
            raise await _tool_error("brave_video_search", exc, ctx) from exc
        if not data.get("results"):
            await log_to_client(logger, "info", f'No video results found for "{query}"', ctx)
        return format_video_results(query, data)

    async def local_search(
        self,
        query: Annotated[
            str, Field(min_length=1, description="Local search query (e.g. 'pizza near Central Park')")
        ],
        count: Count = 10,
        ctx: Optional[Context] = None,
    ) -> str:
        try:
            return await self.local.search(query, count, ctx)
        except BraveAPIError as exc:
            raise await _tool_error("brave_local_search", exc, ctx) from exc

    async def image_search(
        self,
        searchTerm: Annotated[
            str, Field(min_length=1, description="The term to search the internet for images of")
        ],
        count: Annotated[int, Field(ge=1, le=3, description="The number of images to search for")] = 1,
        ctx: Optional[Context] = None,
    ) -> ToolResult:
        """Download up to ``count`` images, cache them by title and return them inline.

        When anything was cached, connected clients get a resource list changed
        notification so the new ``brave-image://`` entries show up.
        """
        try:
            data = await self.client.image_search(searchTerm, count=count)
        except BraveAPIError as exc:
            raise await _tool_error("brave_image_search", exc, ctx) from exc

        content: list = []
        for result in (data.get("results") or [])[:count]:
            url = (result.get("properties") or {}).get("url")
            if not url:
                continue
            title = result.get("title") or url
            try:
                image_bytes, mime_type = await self.client.fetch_image(url)
            except BraveAPIError as exc:
                await log_to_client(logger, "warning", f"Skipping image {url}: {exc}", ctx)
                continue
            self.images.put(title, image_bytes, mime_type)
            content.append(
                ImageContent(
                    type="image",
                    data=base64.b64encode(image_bytes).decode("ascii"),
                    mimeType=mime_type,
                )
            )

        await log_to_client(logger, "info", f'Found {len(content)} images for "{searchTerm}"', ctx)
        if not content:
            text = f'No image results found for "{searchTerm}"'
            return ToolResult(content=[TextContent(type="text", text=text)])
        if ctx is not None:
            await ctx.session.send_resource_list_changed()
        return ToolResult(content=content)
