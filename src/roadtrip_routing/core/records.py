"""Bridges between the application's route records and the pipeline models.

The records themselves (trips, routes, waypoints) belong to the surrounding
application. Anything with the attributes below can be passed in.
"""

from datetime import datetime
from typing import Optional, Protocol, Sequence

from roadtrip_routing.models import RouteMetadata, RouteSpec, Waypoint
from .models import ComputedRoute


class WaypointRecord(Protocol):
    latitude: float
    longitude: float
    position: int
    name: Optional[str]


class RouteRecord(Protocol):
    starting_location: str
    destination: str
    avoid_motorways: bool
    scheduled_at: Optional[datetime]
    distance_in_km: Optional[float]
    duration_hours: Optional[float]

    @property
    def waypoints(self) -> Sequence[WaypointRecord]:
        ...


def route_spec_from_record(record: RouteRecord) -> RouteSpec:
    """Build a fresh RouteSpec from a route record (raises ValidationError on bad input)."""
    return RouteSpec(
        start=record.starting_location,
        end=record.destination,
        waypoints=[
            Waypoint(lat=wp.latitude, lon=wp.longitude, position=wp.position, name=wp.name)
            for wp in record.waypoints
        ],
        avoid_motorways=bool(record.avoid_motorways),
    )


def route_metadata(
    record: RouteRecord,
    computed: Optional[ComputedRoute] = None,
    trip_name: Optional[str] = None,
) -> RouteMetadata:
    return RouteMetadata(
        starting_location=record.starting_location,
        destination=record.destination,
        departure_time=record.scheduled_at,
        distance_m=computed.distance_m if computed else None,
        duration_s=computed.duration_s if computed else None,
        trip_name=trip_name,
    )


def apply_computed_route(record: RouteRecord, computed: ComputedRoute) -> None:
    """Store rounded distance (km) and duration (hours) on the record."""
    record.distance_in_km = computed.distance_km
    record.duration_hours = computed.duration_hours


def clear_computed_route(record: RouteRecord) -> None:
    record.distance_in_km = None
    record.duration_hours = None
