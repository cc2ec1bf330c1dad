"""MCP server for roadtrip-routing.

Registers all tools and runs via stdio transport.
"""

import logging
import sys

from mcp.server.fastmcp import FastMCP

from .config import get_settings
from .tools.route import register_route_tools
from .tools.export import register_export_tools
from .tools.status import register_status_tools

mcp = FastMCP(
    "roadtrip-routing",
    instructions="Compute road-trip driving distances and export routes as GPX files",
)

# Register all tool groups
register_route_tools(mcp)
register_export_tools(mcp)
register_status_tools(mcp)


def main():
    # stdout carries the MCP transport
    logging.basicConfig(level=get_settings().log_level, stream=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
