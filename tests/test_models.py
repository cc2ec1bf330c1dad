"""Tests for domain Pydantic models."""
import pytest
from pydantic import ValidationError


class TestCoordinate:
    def test_valid_coordinate(self):
        from roadtrip_routing.models import Coordinate
        c = Coordinate(lat=37.7749, lon=-122.4194)
        assert c.lat == 37.7749
        assert c.lon == -122.4194

    def test_lat_out_of_range(self):
        from roadtrip_routing.models import Coordinate
        with pytest.raises(ValidationError):
            Coordinate(lat=91.0, lon=0.0)

    def test_lat_negative_out_of_range(self):
        from roadtrip_routing.models import Coordinate
        with pytest.raises(ValidationError):
            Coordinate(lat=-91.0, lon=0.0)

    def test_lon_out_of_range(self):
        from roadtrip_routing.models import Coordinate
        with pytest.raises(ValidationError):
            Coordinate(lat=0.0, lon=181.0)

    def test_bounds_are_inclusive(self):
        from roadtrip_routing.models import Coordinate
        assert Coordinate(lat=90.0, lon=-180.0).lat == 90.0


class TestWaypoint:
    def test_display_name_defaults_to_position(self):
        from roadtrip_routing.models import Waypoint
        wp = Waypoint(lat=36.6, lon=-121.9, position=2)
        assert wp.display_name == "Waypoint 2"

    def test_display_name_uses_name(self):
        from roadtrip_routing.models import Waypoint
        wp = Waypoint(lat=36.6, lon=-121.9, position=1, name="Monterey")
        assert wp.display_name == "Monterey"

    def test_position_must_be_positive(self):
        from roadtrip_routing.models import Waypoint
        with pytest.raises(ValidationError):
            Waypoint(lat=0.0, lon=0.0, position=0)

    def test_coordinate(self):
        from roadtrip_routing.models import Coordinate, Waypoint
        wp = Waypoint(lat=36.6, lon=-121.9, position=1)
        assert wp.coordinate == Coordinate(lat=36.6, lon=-121.9)


class TestRouteSpec:
    def test_defaults(self):
        from roadtrip_routing.models import ProviderKind, RouteSpec
        spec = RouteSpec(start="San Francisco, CA", end="Los Angeles, CA")
        assert spec.waypoints == []
        assert spec.avoid_motorways is False
        assert spec.provider_kind == ProviderKind.DEFAULT

    def test_avoid_motorways_selects_restricted(self):
        from roadtrip_routing.models import ProviderKind, RouteSpec
        spec = RouteSpec(start="A", end="B", avoid_motorways=True)
        assert spec.provider_kind == ProviderKind.RESTRICTED

    def test_empty_start_rejected(self):
        from roadtrip_routing.models import RouteSpec
        with pytest.raises(ValidationError):
            RouteSpec(start="", end="B")

    def test_blank_end_rejected(self):
        from roadtrip_routing.models import RouteSpec
        with pytest.raises(ValidationError):
            RouteSpec(start="A", end="   ")

    def test_duplicate_positions_rejected(self):
        from roadtrip_routing.models import RouteSpec, Waypoint
        with pytest.raises(ValidationError):
            RouteSpec(start="A", end="B", waypoints=[
                Waypoint(lat=1.0, lon=1.0, position=1),
                Waypoint(lat=2.0, lon=2.0, position=1),
            ])

    def test_positions_must_be_dense(self):
        from roadtrip_routing.models import RouteSpec, Waypoint
        with pytest.raises(ValidationError):
            RouteSpec(start="A", end="B", waypoints=[
                Waypoint(lat=1.0, lon=1.0, position=1),
                Waypoint(lat=2.0, lon=2.0, position=3),
            ])

    def test_ordered_waypoints_sorts_by_position(self):
        from roadtrip_routing.models import RouteSpec, Waypoint
        spec = RouteSpec(start="A", end="B", waypoints=[
            Waypoint(lat=2.0, lon=2.0, position=2, name="second"),
            Waypoint(lat=1.0, lon=1.0, position=1, name="first"),
        ])
        assert [wp.name for wp in spec.ordered_waypoints] == ["first", "second"]


class TestGpxModels:
    def test_track_point_elevation_range(self):
        from roadtrip_routing.models import GpxTrackPoint
        assert GpxTrackPoint(lat=0.0, lon=0.0, elevation=9000.0).elevation == 9000.0
        with pytest.raises(ValidationError):
            GpxTrackPoint(lat=0.0, lon=0.0, elevation=9001.0)
        with pytest.raises(ValidationError):
            GpxTrackPoint(lat=0.0, lon=0.0, elevation=-501.0)

    def test_segment_needs_two_points(self):
        from roadtrip_routing.models import GpxSegment, GpxTrackPoint
        with pytest.raises(ValidationError):
            GpxSegment(points=[GpxTrackPoint(lat=0.0, lon=0.0)])

    def test_track_points_flatten_segments(self):
        from roadtrip_routing.models import GpxSegment, GpxTrack, GpxTrackPoint
        seg = GpxSegment(points=[GpxTrackPoint(lat=0.0, lon=0.0), GpxTrackPoint(lat=1.0, lon=1.0)])
        track = GpxTrack(name="T", segments=[seg, seg])
        assert len(track.points) == 4

    def test_waypoint_name_required(self):
        from roadtrip_routing.models import GpxWaypoint
        with pytest.raises(ValidationError):
            GpxWaypoint(name="", lat=0.0, lon=0.0)

    def test_document_needs_track_or_route(self):
        from roadtrip_routing.models import GpxDocument, GpxMetadata
        with pytest.raises(ValidationError):
            GpxDocument(creator="x", metadata=GpxMetadata(name="Route"))
