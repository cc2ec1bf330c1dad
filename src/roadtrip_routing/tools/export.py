"""Export tools: export_gpx."""

import logging
import os
import re
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from ..config import get_settings
from ..core.geo import straight_line_estimate
from ..core.gpx import GpxDocumentBuilder
from ..core.records import apply_computed_route, route_metadata, route_spec_from_record
from ..errors import GeocodingFailure, GpxEncodingFailure, RoutingFailure
from ..state import state
from ._prereqs import require_route
from .route import build_calculator

logger = logging.getLogger(__name__)


def _validate_output_path(output_path: str) -> None:
    """Raise ValueError if output_path resolves outside the user's home directory."""
    resolved = Path(output_path).resolve()
    home = Path.home().resolve()
    try:
        resolved.relative_to(home)
    except ValueError:
        raise ValueError(
            f"Output path {output_path!r} is outside the home directory. "
            "Use a path within your home directory."
        )


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-") or "place"


def default_filename(record) -> str:
    return f"route_{record.id}_{_slug(record.starting_location)}_to_{_slug(record.destination)}.gpx"


def _default_path(record) -> Path:
    return Path.home() / "roadtrip-exports" / default_filename(record)


def register_export_tools(mcp: FastMCP):

    @mcp.tool()
    async def export_gpx(
        route_id: int,
        output_path: str | None = None,
        allow_direct: bool = False,
    ) -> str:
        """Export a route as a GPX 1.1 file with the driving track.

        Routes without waypoints get one track segment; routes with waypoints
        get one segment per leg and a GPX waypoint per stop.

        Args:
            route_id: Route to export.
            output_path: Where to save the .gpx file (absolute path).
                Default: ~/roadtrip-exports/route_<id>_<start>_to_<destination>.gpx
            allow_direct: If routing fails, write a straight two-point route
                instead of returning an error.
        """
        try:
            record = require_route(state, route_id)
        except ValueError as e:
            return f"Error: {e}"

        path = Path(output_path) if output_path else _default_path(record)
        try:
            _validate_output_path(str(path))
        except ValueError as e:
            return f"Error: {e}"

        spec = route_spec_from_record(record)
        calculator = build_calculator()
        builder = GpxDocumentBuilder(creator=get_settings().gpx_creator)

        try:
            computed = await calculator.compute(spec)
        except GeocodingFailure as e:
            return f"Error: {e}"
        except RoutingFailure as e:
            if not allow_direct:
                return f"Error: {e}. Pass allow_direct=True to export a straight-line route instead."
            logger.warning("Routing failed for route %s, exporting direct route: %s", route_id, e)
            computed = None

        try:
            if computed is None:
                start, end = await calculator.resolve_endpoints(spec.start, spec.end)
                distance_m, duration_s = straight_line_estimate(start, end)
                metadata = route_metadata(record, trip_name=record.trip_name).model_copy(
                    update={"distance_m": distance_m, "duration_s": duration_s}
                )
                document = builder.build_direct(metadata, start, end)
            else:
                apply_computed_route(record, computed)
                metadata = route_metadata(record, computed, trip_name=record.trip_name)
                if spec.waypoints:
                    document = builder.build_waypointed(metadata, spec.waypoints, computed.legs())
                else:
                    document = builder.build_simple(metadata, computed.geometry)
            xml = builder.to_xml(document)
        except GeocodingFailure as e:
            return f"Error: {e}"
        except GpxEncodingFailure as e:
            logger.error("GPX export refused for route %s: %s", route_id, e)
            return f"Error: GPX export refused: {e}"

        os.makedirs(path.parent, exist_ok=True)
        path.write_text(xml, encoding="utf-8")

        if computed is None:
            km = metadata.distance_m / 1000.0
            return f"Direct route GPX exported to {path} (straight line, ~{km:.1f} km)"
        points = len(computed.geometry)
        segments = len(document.tracks[0].segments)
        return f"GPX exported to {path} ({points} track points, {segments} segment(s), {record.distance_in_km} km)"
