"""Tests for record <-> pipeline model bridging."""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from roadtrip_routing.core.models import ComputedRoute
from roadtrip_routing.models import Coordinate, ProviderKind
from roadtrip_routing.state import RouteRecord, WaypointRecord


def _record(**overrides):
    fields = dict(id=1, starting_location="Denver, CO", destination="Moab, UT")
    fields.update(overrides)
    return RouteRecord(**fields)


def _computed():
    a, b = Coordinate(lat=39.74, lon=-104.99), Coordinate(lat=38.57, lon=-109.55)
    return ComputedRoute(
        distance_m=571_449.0,
        duration_s=19_230.0,
        geometry=[a, b],
        provider=ProviderKind.DEFAULT,
        stops=[a, b],
        stop_indices=[0, 1],
    )


def test_route_spec_from_record():
    from roadtrip_routing.core.records import route_spec_from_record
    record = _record(avoid_motorways=True, waypoints=[
        WaypointRecord(latitude=39.06, longitude=-108.55, position=1, name="Grand Junction"),
    ])
    spec = route_spec_from_record(record)
    assert spec.start == "Denver, CO"
    assert spec.end == "Moab, UT"
    assert spec.avoid_motorways is True
    assert spec.waypoints[0].lat == 39.06
    assert spec.waypoints[0].display_name == "Grand Junction"


def test_route_spec_from_record_rejects_gapped_positions():
    from roadtrip_routing.core.records import route_spec_from_record
    record = _record(waypoints=[WaypointRecord(latitude=1.0, longitude=1.0, position=3)])
    with pytest.raises(ValidationError):
        route_spec_from_record(record)


def test_route_metadata_with_computed_route():
    from roadtrip_routing.core.records import route_metadata
    departure = datetime(2026, 7, 4, 8, 0, tzinfo=timezone.utc)
    meta = route_metadata(_record(scheduled_at=departure), _computed(), trip_name="Canyons")
    assert meta.departure_time == departure
    assert meta.distance_m == 571_449.0
    assert meta.duration_s == 19_230.0
    assert meta.trip_name == "Canyons"


def test_route_metadata_without_computed_route():
    from roadtrip_routing.core.records import route_metadata
    meta = route_metadata(_record())
    assert meta.distance_m is None
    assert meta.duration_s is None


def test_apply_and_clear_computed_route():
    from roadtrip_routing.core.records import apply_computed_route, clear_computed_route
    record = _record()
    apply_computed_route(record, _computed())
    assert record.distance_in_km == 571.4
    assert record.duration_hours == 5.34

    clear_computed_route(record)
    assert record.distance_in_km is None
    assert record.duration_hours is None
