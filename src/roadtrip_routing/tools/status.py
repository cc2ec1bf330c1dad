"""Status tool: get_status."""

import json
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..state import state


def register_status_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def get_status() -> str:
        """Return a summary of the routes in this session.

        Shows each route's endpoints, waypoint count, motorway preference and
        the stored distance/duration (null until calculate_distance succeeds).
        """
        return json.dumps(state.summary(), indent=2)
