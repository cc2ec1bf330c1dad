"""GPX 1.1 building, serialization and parsing."""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Sequence, Union

import gpxpy
import gpxpy.gpx
from pydantic import ValidationError

from roadtrip_routing.errors import GpxEncodingFailure
from roadtrip_routing.models import (
    Coordinate,
    GpxDocument,
    GpxMetadata,
    GpxRoute,
    GpxSegment,
    GpxTrack,
    GpxTrackPoint,
    GpxWaypoint,
    RouteMetadata,
    Waypoint,
)
from .geo import format_duration

logger = logging.getLogger(__name__)

GPX_NS = "http://www.topografix.com/GPX/1/1"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
GPX_SCHEMA_LOCATION = f"{GPX_NS} {GPX_NS}/gpx.xsd"
COORD_DECIMALS = 6

# A geometry point: a Coordinate, or a raw (lat, lon) / (lat, lon, elevation) tuple.
PointLike = Union[Coordinate, Sequence[float]]


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _track_point(point: PointLike, time: Optional[datetime] = None) -> GpxTrackPoint:
    if isinstance(point, Coordinate):
        lat, lon, elevation = point.lat, point.lon, None
    else:
        lat, lon = point[0], point[1]
        elevation = point[2] if len(point) > 2 else None
    # range-check before rounding
    raw = Coordinate(lat=float(lat), lon=float(lon))
    return GpxTrackPoint(
        lat=round(raw.lat, COORD_DECIMALS),
        lon=round(raw.lon, COORD_DECIMALS),
        elevation=elevation,
        time=time,
    )


class GpxDocumentBuilder:
    """Builds GPX documents for computed routes.

    Building is pure: documents are assembled and validated as models first,
    and XML is only produced from a fully valid document.
    """

    def __init__(
        self,
        creator: str = "Road Trip Planner",
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.creator = creator
        self.clock = clock

    # --- naming -------------------------------------------------------------

    @staticmethod
    def route_name(metadata: RouteMetadata) -> str:
        return f"Route: {metadata.starting_location} to {metadata.destination}"

    @staticmethod
    def route_description(metadata: RouteMetadata) -> str:
        parts = [f"Road trip route from {metadata.starting_location} to {metadata.destination}"]
        if metadata.distance_m is not None:
            parts.append(f"Distance: {round(metadata.distance_m / 1000.0, 1)} km")
        if metadata.duration_s is not None:
            parts.append(f"Duration: {format_duration(metadata.duration_s / 3600.0)}")
        if metadata.departure_time is not None:
            parts.append(f"Scheduled: {metadata.departure_time.strftime('%B %d, %Y at %H:%M')}")
        if metadata.trip_name:
            parts.append(f"Trip: {metadata.trip_name}")
        return " | ".join(parts)

    def _metadata(self, metadata: RouteMetadata) -> GpxMetadata:
        return GpxMetadata(
            name=self.route_name(metadata),
            description=self.route_description(metadata),
            time=_utc(self.clock()),
            keywords=(
                "road trip, driving route, navigation, "
                f"{metadata.starting_location}, {metadata.destination}"
            ),
        )

    # --- timing -------------------------------------------------------------

    @staticmethod
    def _times(metadata: RouteMetadata, count: int) -> list[Optional[datetime]]:
        """Interpolate one timestamp per point between departure and arrival."""
        departure = _utc(metadata.departure_time)
        if departure is None or metadata.duration_s is None or count < 2:
            return [None] * count
        step = metadata.duration_s / (count - 1)
        return [departure + timedelta(seconds=step * i) for i in range(count)]

    @staticmethod
    def _arrival(metadata: RouteMetadata) -> Optional[datetime]:
        departure = _utc(metadata.departure_time)
        if departure is None or metadata.duration_s is None:
            return None
        return departure + timedelta(seconds=metadata.duration_s)

    def _endpoint_waypoints(
        self, metadata: RouteMetadata, first: GpxTrackPoint, last: GpxTrackPoint,
    ) -> tuple[GpxWaypoint, GpxWaypoint]:
        start = GpxWaypoint(
            name=f"Start: {metadata.starting_location}",
            lat=first.lat,
            lon=first.lon,
            time=_utc(metadata.departure_time),
            description="Starting point of the route",
            symbol="Flag, Green",
            type="Route Start",
        )
        end = GpxWaypoint(
            name=f"Destination: {metadata.destination}",
            lat=last.lat,
            lon=last.lon,
            time=self._arrival(metadata),
            description="End point of the route",
            symbol="Flag, Red",
            type="Route End",
        )
        return start, end

    def _track(self, metadata: RouteMetadata, segments: list[GpxSegment]) -> GpxTrack:
        return GpxTrack(
            name=f"Route: {metadata.starting_location} → {metadata.destination}",
            description=self.route_description(metadata),
            type="Driving",
            segments=segments,
        )

    # --- build modes --------------------------------------------------------

    def build_simple(self, metadata: RouteMetadata, geometry: Sequence[PointLike]) -> GpxDocument:
        """One track with a single segment holding every geometry point in order."""
        try:
            times = self._times(metadata, len(geometry))
            points = [_track_point(p, t) for p, t in zip(geometry, times)]
            segment = GpxSegment(points=points)
            start, end = self._endpoint_waypoints(metadata, points[0], points[-1])
            return GpxDocument(
                creator=self.creator,
                metadata=self._metadata(metadata),
                waypoints=[start, end],
                tracks=[self._track(metadata, [segment])],
            )
        except (ValidationError, IndexError, TypeError, ValueError) as exc:
            raise GpxEncodingFailure(f"Cannot build GPX for {self.route_name(metadata)!r}: {exc}") from exc

    def build_waypointed(
        self,
        metadata: RouteMetadata,
        waypoints: Sequence[Waypoint],
        legs: Sequence[Sequence[PointLike]],
    ) -> GpxDocument:
        """One track with a segment per leg, plus start, user and end waypoints."""
        ordered = sorted(waypoints, key=lambda wp: wp.position)
        if len(legs) != len(ordered) + 1:
            raise GpxEncodingFailure(
                f"{len(ordered)} waypoints need {len(ordered) + 1} legs, got {len(legs)}"
            )
        try:
            times = self._times(metadata, sum(len(leg) for leg in legs))
            segments = []
            offset = 0
            for leg in legs:
                points = [_track_point(p, times[offset + i]) for i, p in enumerate(leg)]
                segments.append(GpxSegment(points=points))
                offset += len(leg)

            start, end = self._endpoint_waypoints(
                metadata, segments[0].points[0], segments[-1].points[-1]
            )
            user_waypoints = [
                GpxWaypoint(
                    name=wp.display_name,
                    lat=round(wp.lat, COORD_DECIMALS),
                    lon=round(wp.lon, COORD_DECIMALS),
                    description=f"Stop {wp.position} of {len(ordered)}",
                    symbol="Waypoint",
                    type="Route Waypoint",
                )
                for wp in ordered
            ]
            return GpxDocument(
                creator=self.creator,
                metadata=self._metadata(metadata),
                waypoints=[start, *user_waypoints, end],
                tracks=[self._track(metadata, segments)],
            )
        except (ValidationError, IndexError, TypeError, ValueError) as exc:
            raise GpxEncodingFailure(f"Cannot build GPX for {self.route_name(metadata)!r}: {exc}") from exc

    def build_direct(self, metadata: RouteMetadata, start: PointLike, end: PointLike) -> GpxDocument:
        """Straight two-point route for when detailed routing is unavailable."""
        try:
            a, b = _track_point(start), _track_point(end)
            start_wpt, end_wpt = self._endpoint_waypoints(metadata, a, b)
            route = GpxRoute(
                name=f"Direct route: {metadata.starting_location} → {metadata.destination}",
                description="Direct waypoint route (detailed routing unavailable)",
                points=[
                    GpxWaypoint(name=metadata.starting_location, lat=a.lat, lon=a.lon),
                    GpxWaypoint(name=metadata.destination, lat=b.lat, lon=b.lon),
                ],
            )
            return GpxDocument(
                creator=self.creator,
                metadata=self._metadata(metadata),
                waypoints=[start_wpt, end_wpt],
                routes=[route],
            )
        except (ValidationError, IndexError, TypeError, ValueError) as exc:
            raise GpxEncodingFailure(f"Cannot build GPX for {self.route_name(metadata)!r}: {exc}") from exc

    # --- serialization ------------------------------------------------------

    def to_xml(self, document: GpxDocument) -> str:
        """Serialize a validated document; refuse output that fails validation."""
        xml = to_gpxpy(document).to_xml(version="1.1")
        errors = validate_gpx_xml(xml)
        if errors:
            logger.error("Refusing to emit invalid GPX %r: %s", document.metadata.name, errors)
            raise GpxEncodingFailure("; ".join(errors))
        return xml


def to_gpxpy(document: GpxDocument) -> gpxpy.gpx.GPX:
    gpx = gpxpy.gpx.GPX()
    gpx.creator = document.creator
    gpx.name = document.metadata.name
    gpx.description = document.metadata.description or None
    gpx.time = document.metadata.time
    gpx.keywords = document.metadata.keywords or None

    for wp in document.waypoints:
        gpx.waypoints.append(_gpxpy_waypoint(gpxpy.gpx.GPXWaypoint, wp))

    for rte in document.routes:
        route = gpxpy.gpx.GPXRoute(name=rte.name, description=rte.description or None)
        for wp in rte.points:
            route.points.append(_gpxpy_waypoint(gpxpy.gpx.GPXRoutePoint, wp))
        gpx.routes.append(route)

    for trk in document.tracks:
        track = gpxpy.gpx.GPXTrack(name=trk.name, description=trk.description or None)
        track.type = trk.type
        for seg in trk.segments:
            segment = gpxpy.gpx.GPXTrackSegment()
            for p in seg.points:
                segment.points.append(gpxpy.gpx.GPXTrackPoint(
                    latitude=p.lat,
                    longitude=p.lon,
                    elevation=p.elevation,
                    time=p.time,
                ))
            track.segments.append(segment)
        gpx.tracks.append(track)

    gpx.refresh_bounds()
    return gpx


def _gpxpy_waypoint(cls, wp: GpxWaypoint):
    return cls(
        latitude=wp.lat,
        longitude=wp.lon,
        elevation=wp.elevation,
        time=wp.time,
        name=wp.name,
        description=wp.description or None,
        symbol=wp.symbol,
        type=wp.type,
    )


def parse_gpx(content: str) -> GpxDocument:
    """Parse GPX text back into a GpxDocument."""
    gpx = gpxpy.parse(content)

    def waypoint(wp) -> GpxWaypoint:
        return GpxWaypoint(
            name=wp.name or "Unnamed",
            lat=wp.latitude,
            lon=wp.longitude,
            elevation=wp.elevation,
            time=wp.time,
            description=wp.description or "",
            symbol=wp.symbol,
            type=wp.type,
        )

    tracks = []
    for track in gpx.tracks:
        segments = [
            GpxSegment(points=[
                GpxTrackPoint(lat=p.latitude, lon=p.longitude, elevation=p.elevation, time=p.time)
                for p in segment.points
            ])
            for segment in track.segments
            if len(segment.points) >= 2
        ]
        if segments:
            tracks.append(GpxTrack(
                name=track.name or "Unnamed Track",
                description=track.description or "",
                type=track.type,
                segments=segments,
            ))

    routes = [
        GpxRoute(
            name=route.name or "Unnamed Route",
            description=route.description or "",
            points=[waypoint(p) for p in route.points],
        )
        for route in gpx.routes
        if len(route.points) >= 2
    ]

    return GpxDocument(
        creator=gpx.creator or "unknown",
        metadata=GpxMetadata(
            name=gpx.name or "Unnamed",
            description=gpx.description or "",
            time=gpx.time,
            keywords=gpx.keywords or "",
        ),
        waypoints=[waypoint(wp) for wp in gpx.waypoints],
        tracks=tracks,
        routes=routes,
    )


def _check_point(el: ET.Element, label: str, errors: list[str]) -> None:
    try:
        lat = float(el.get("lat", ""))
        lon = float(el.get("lon", ""))
    except ValueError:
        errors.append(f"{label} is missing lat/lon")
        return
    if not -90 <= lat <= 90:
        errors.append(f"{label} latitude out of range: {lat}")
    if not -180 <= lon <= 180:
        errors.append(f"{label} longitude out of range: {lon}")
    ele = el.find(f"{{{GPX_NS}}}ele")
    if ele is None or not ele.text:
        return
    try:
        elevation = float(ele.text)
    except ValueError:
        errors.append(f"{label} elevation is not a number: {ele.text!r}")
        return
    if not -500 <= elevation <= 9000:
        errors.append(f"{label} elevation out of range: {ele.text}")


def validate_gpx_xml(content: str) -> list[str]:
    """Check a GPX string against the 1.1 structure; an empty list means valid."""
    try:
        root = ET.fromstring(content.encode("utf-8"))
    except ET.ParseError as exc:
        return [f"XML parsing error: {exc}"]

    errors = []
    if root.tag != f"{{{GPX_NS}}}gpx":
        errors.append(f"Root element must be gpx in the {GPX_NS} namespace, got {root.tag}")
    if root.get("version") != "1.1":
        errors.append(f"GPX version must be 1.1, got {root.get('version')!r}")
    if not root.get("creator"):
        errors.append("GPX root is missing the creator attribute")
    if GPX_NS not in (root.get(f"{{{XSI_NS}}}schemaLocation") or ""):
        errors.append("GPX root is missing the 1.1 schemaLocation")

    name = root.find(f"{{{GPX_NS}}}metadata/{{{GPX_NS}}}name")
    if name is None or not (name.text or "").strip():
        errors.append("Metadata name is missing or empty")

    tracks = root.findall(f"{{{GPX_NS}}}trk")
    routes = root.findall(f"{{{GPX_NS}}}rte")
    if not tracks and not routes:
        errors.append("GPX must contain at least one track or route")

    for i, wpt in enumerate(root.findall(f"{{{GPX_NS}}}wpt"), 1):
        _check_point(wpt, f"Waypoint {i}", errors)
    for t, trk in enumerate(tracks, 1):
        for s, seg in enumerate(trk.findall(f"{{{GPX_NS}}}trkseg"), 1):
            points = seg.findall(f"{{{GPX_NS}}}trkpt")
            if len(points) < 2:
                errors.append(f"Track {t} segment {s} has {len(points)} point(s), need 2")
            for p, trkpt in enumerate(points, 1):
                _check_point(trkpt, f"Track {t} segment {s} point {p}", errors)
    for r, rte in enumerate(routes, 1):
        for p, rtept in enumerate(rte.findall(f"{{{GPX_NS}}}rtept"), 1):
            _check_point(rtept, f"Route {r} point {p}", errors)
    return errors
