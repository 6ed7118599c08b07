"""Brave Search MCP Server - FastMCP server for Brave web, image, news, video and local search."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote, unquote

from fastmcp import FastMCP
from fastmcp.exceptions import ResourceError
from fastmcp.resources import FunctionResource
from fastmcp.server.middleware import Middleware, MiddlewareContext
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from ..configuration.settings import BraveSearchConfig, load_config
from ..shared.errors import ConfigurationError
from ..shared.utils import setup_logging
from ..tools.image_cache import CachedImage, ImageRegistry
from ..tools.search_tools import TOOL_TABLE, BraveSearchTools

logger = logging.getLogger(__name__)

SERVER_NAME = "Brave Search MCP Server"
SERVER_INSTRUCTIONS = (
    "A server that provides tools for searching the web, images, news, videos, "
    "and local businesses using the Brave Search API."
)
IMAGE_URI_PREFIX = "brave-image://"
IMAGE_INDEX_URI = f"{IMAGE_URI_PREFIX}cache/index"
DEFAULT_PORT = 3033


def image_uri(title: str) -> str:
    return IMAGE_URI_PREFIX + quote(title, safe="")


def read_cached_image(images: ImageRegistry, title: str) -> bytes:
    image = images.get(title) or images.get(unquote(title))
    if image is None:
        raise ResourceError(f"Resource not found: {IMAGE_URI_PREFIX}{title}")
    return image.data


class ImageResourceListing(Middleware):
    """Adds one ``brave-image://<title>`` entry per cached image to resources/list.

    Entries are built from the registry on every listing, so evicted images
    drop out on their own. Reads still go through the ``brave-image://{title}``
    template.
    """

    def __init__(self, images: ImageRegistry):
        self.images = images

    def _resource(self, image: CachedImage) -> FunctionResource:
        def read() -> bytes:
            return read_cached_image(self.images, image.title)

        return FunctionResource.from_function(
            read,
            uri=image_uri(image.title),
            name=image.title,
            description=f"Image downloaded by brave_image_search: {image.title}",
            mime_type=image.mime_type,
        )

    async def on_list_resources(self, context: MiddlewareContext, call_next):
        resources = await call_next(context)
        return [*resources, *(self._resource(image) for image in self.images.entries())]


def create_server(
    config: Optional[BraveSearchConfig] = None,
    tools: Optional[BraveSearchTools] = None,
) -> FastMCP:
    """
    Build the FastMCP server with every tool of TOOL_TABLE registered.

    Args:
        config: Server settings, loaded from YAML and environment if omitted.
        tools: Prebuilt handlers, built from ``config`` if omitted.

    Returns:
        The configured FastMCP server.
    """
    if tools is None:
        tools = BraveSearchTools.from_config(config or load_config())

    mcp = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)

    handlers = tools.handlers()
    for spec in TOOL_TABLE:
        mcp.tool(handlers[spec.name], name=spec.name, description=spec.description)

    @mcp.resource(
        IMAGE_INDEX_URI,
        name="brave_image_index",
        description="Titles of the images cached by brave_image_search",
        mime_type="application/json",
    )
    def image_index() -> str:
        return json.dumps(tools.images.titles())

    @mcp.resource(
        IMAGE_URI_PREFIX + "{title}",
        name="brave_image",
        description="An image downloaded by brave_image_search, looked up by title",
        mime_type="image/png",
    )
    def cached_image(title: str) -> bytes:
        return read_cached_image(tools.images, title)

    mcp.add_middleware(ImageResourceListing(tools.images))

    @mcp.custom_route("/health", methods=["GET"])
    async def health(request: Request) -> PlainTextResponse:
        return PlainTextResponse("OK")

    logger.info(f"Registered tools: {', '.join(spec.name for spec in TOOL_TABLE)}")
    return mcp


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="brave-search-mcp",
        description="Expose Brave Search over the Model Context Protocol.",
    )
    parser.add_argument(
        "--transport",
        choices=("stdio", "sse"),
        default="stdio",
        help="MCP transport (default: stdio)",
    )
    parser.add_argument(
        "--useSSE",
        dest="use_sse",
        action="store_true",
        help="Deprecated alias for --transport sse",
    )
    parser.add_argument("--host", default="127.0.0.1", help="SSE bind address")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help=f"SSE port (default: {DEFAULT_PORT})")
    parser.add_argument("--config", type=Path, default=None, help="Path to brave_search.yaml")
    parser.add_argument("--log-level", default=None, help="Overrides LOG_LEVEL and the config file")
    args = parser.parse_args(argv)
    if args.use_sse:
        args.transport = "sse"
    return args


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as exc:
        setup_logging(args.log_level or "INFO")
        logger.error(f"Error: {exc}")
        return 1

    setup_logging(args.log_level or config.log_level)
    mcp = create_server(config)

    if args.transport == "sse":
        logger.info(f"Server is running with SSE transport on {args.host}:{args.port}")
        mcp.run(transport="sse", host=args.host, port=args.port)
    else:
        logger.info("Server is running with Stdio transport")
        mcp.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
