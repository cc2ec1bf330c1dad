"""Route tools: plan_route, add_waypoint, remove_waypoint, calculate_distance."""

import logging

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import ValidationError

from ..config import get_settings
from ..core.calculator import RouteDistanceCalculator
from ..core.geo import format_duration
from ..core.records import apply_computed_route, clear_computed_route, route_spec_from_record
from ..errors import GeocodingFailure, RoutingFailure
from ..state import state, WaypointRecord
from ._prereqs import require_route

logger = logging.getLogger(__name__)


def build_calculator() -> RouteDistanceCalculator:
    return RouteDistanceCalculator.from_settings(get_settings())


def register_route_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def plan_route(
        starting_location: str,
        destination: str,
        scheduled_at: str | None = None,
        avoid_motorways: bool = False,
        trip_name: str | None = None,
    ) -> str:
        """Create a route between two place names.

        **Next:** Optionally add_waypoint, then calculate_distance or export_gpx.

        Args:
            starting_location: Where the drive starts (e.g. "San Francisco, CA").
            destination: Where the drive ends (e.g. "Los Angeles, CA").
            scheduled_at: Departure time, ISO 8601 (e.g. "2026-06-01T09:00:00Z").
                Used for GPX timestamps.
            avoid_motorways: Route around motorways/highways.
            trip_name: Name of the road trip this route belongs to.
        """
        try:
            record = state.add_route(
                starting_location=starting_location,
                destination=destination,
                scheduled_at=scheduled_at,
                avoid_motorways=avoid_motorways,
                trip_name=trip_name,
            )
        except ValidationError as e:
            return f"Error: Invalid route: {e.errors()[0]['msg']}"

        preference = " avoiding motorways" if record.avoid_motorways else ""
        return (
            f"Route {record.id} created: {record.starting_location} to "
            f"{record.destination}{preference}."
        )

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def add_waypoint(
        route_id: int,
        lat: float,
        lon: float,
        position: int | None = None,
        name: str | None = None,
    ) -> str:
        """Add an intermediate stop to a route.

        Stops are visited in position order. Inserting at an existing position
        shifts later stops back by one. Clears any stored distance.

        Args:
            route_id: Route to modify.
            lat: Stop latitude (degrees).
            lon: Stop longitude (degrees).
            position: 1-based position along the route. Default: after the last stop.
            name: Optional label; defaults to "Waypoint {position}" in GPX exports.
        """
        try:
            record = require_route(state, route_id)
        except ValueError as e:
            return f"Error: {e}"

        next_position = record.next_position()
        if position is None:
            position = next_position
        if position < 1 or position > next_position:
            return f"Error: Position must be between 1 and {next_position}, got {position}."

        try:
            waypoint = WaypointRecord(latitude=lat, longitude=lon, position=position, name=name)
        except ValidationError as e:
            return f"Error: Invalid waypoint: {e.errors()[0]['msg']}"

        for wp in sorted(record.waypoints, key=lambda w: w.position, reverse=True):
            if wp.position >= position:
                wp.position += 1
        record.waypoints.append(waypoint)
        clear_computed_route(record)

        return f"Waypoint added to route {route_id} at position {position} ({len(record.waypoints)} total)."

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True))
    def remove_waypoint(route_id: int, position: int) -> str:
        """Remove the stop at a position; later stops move up by one.

        Args:
            route_id: Route to modify.
            position: 1-based position of the stop to remove.
        """
        try:
            record = require_route(state, route_id)
        except ValueError as e:
            return f"Error: {e}"

        remaining = [wp for wp in record.waypoints if wp.position != position]
        if len(remaining) == len(record.waypoints):
            return f"Error: Route {route_id} has no waypoint at position {position}."
        for wp in remaining:
            if wp.position > position:
                wp.position -= 1
        record.waypoints = remaining
        clear_computed_route(record)
        return f"Waypoint {position} removed from route {route_id} ({len(remaining)} left)."

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False, openWorldHint=True))
    async def calculate_distance(route_id: int) -> str:
        """Compute driving distance and duration for a route and store them on it.

        Geocodes both endpoints, then routes through OSRM, or through
        OpenRouteService when the route avoids motorways.

        Args:
            route_id: Route to compute.
        """
        try:
            record = require_route(state, route_id)
        except ValueError as e:
            return f"Error: {e}"

        spec = route_spec_from_record(record)
        try:
            computed = await build_calculator().compute(spec)
        except (GeocodingFailure, RoutingFailure) as e:
            logger.warning("Distance unavailable for route %s: %s", route_id, e)
            clear_computed_route(record)
            return f"Distance unavailable for route {route_id}: {e}"

        apply_computed_route(record, computed)
        return (
            f"Route {route_id}: {record.distance_in_km} km, "
            f"{format_duration(record.duration_hours)} "
            f"via {computed.provider.value} routing ({len(computed.geometry)} points)."
        )
