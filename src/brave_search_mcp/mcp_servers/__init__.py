"""MCP servers - FastMCP entry points"""

from .brave_mcp_server import create_server, main

__all__ = [
    "create_server",
    "main",
]
