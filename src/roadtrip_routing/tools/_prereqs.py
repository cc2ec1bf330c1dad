"""Prerequisite checking helpers for MCP tools."""


def require_route(state, route_id: int):
    """Return the route record or raise ValueError with a descriptive message.

    Usage in a tool:
        try:
            record = require_route(state, route_id)
        except ValueError as e:
            return f"Error: {e}"
    """
    record = state.routes.get(route_id)
    if record is None:
        raise ValueError(
            f"No route with id {route_id}. Create one with plan_route first."
        )
    return record
