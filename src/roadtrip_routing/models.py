"""Pydantic domain models for route inputs and GPX documents."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class ProviderKind(str, Enum):
    DEFAULT = "default"
    RESTRICTED = "restricted"


class Coordinate(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


class Waypoint(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    position: int = Field(ge=1)
    name: Optional[str] = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lon=self.lon)

    @property
    def display_name(self) -> str:
        return self.name or f"Waypoint {self.position}"


class RouteSpec(BaseModel):
    """Input to one distance computation: endpoints, stops and routing preference."""

    start: str = Field(min_length=1)
    end: str = Field(min_length=1)
    waypoints: list[Waypoint] = Field(default_factory=list)
    avoid_motorways: bool = False

    @field_validator("start", "end")
    @classmethod
    def location_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Location text must not be blank")
        return v

    @model_validator(mode="after")
    def positions_must_be_dense(self) -> "RouteSpec":
        positions = sorted(wp.position for wp in self.waypoints)
        if len(set(positions)) != len(positions):
            raise ValueError(f"Waypoint positions must be unique, got {positions}")
        if positions != list(range(1, len(positions) + 1)):
            raise ValueError(f"Waypoint positions must run 1..{len(positions)}, got {positions}")
        return self

    @property
    def ordered_waypoints(self) -> list[Waypoint]:
        return sorted(self.waypoints, key=lambda wp: wp.position)

    @property
    def provider_kind(self) -> ProviderKind:
        return ProviderKind.RESTRICTED if self.avoid_motorways else ProviderKind.DEFAULT


class RouteMetadata(BaseModel):
    """Descriptive data about a route used when exporting it."""

    starting_location: str = Field(min_length=1)
    destination: str = Field(min_length=1)
    departure_time: Optional[datetime] = None
    distance_m: Optional[float] = Field(default=None, ge=0)
    duration_s: Optional[float] = Field(default=None, ge=0)
    trip_name: Optional[str] = None


class GpxTrackPoint(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    elevation: Optional[float] = Field(default=None, ge=-500, le=9000)
    time: Optional[datetime] = None


class GpxWaypoint(BaseModel):
    name: str = Field(min_length=1)
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    elevation: Optional[float] = Field(default=None, ge=-500, le=9000)
    time: Optional[datetime] = None
    description: str = ""
    symbol: Optional[str] = None
    type: Optional[str] = None


class GpxSegment(BaseModel):
    points: list[GpxTrackPoint] = Field(min_length=2)


class GpxTrack(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    type: Optional[str] = None
    segments: list[GpxSegment] = Field(min_length=1)

    @property
    def points(self) -> list[GpxTrackPoint]:
        return [p for seg in self.segments for p in seg.points]


class GpxRoute(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    points: list[GpxWaypoint] = Field(min_length=2)


class GpxMetadata(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    time: Optional[datetime] = None
    keywords: str = ""


class GpxDocument(BaseModel):
    creator: str = Field(min_length=1)
    metadata: GpxMetadata
    waypoints: list[GpxWaypoint] = []
    tracks: list[GpxTrack] = []
    routes: list[GpxRoute] = []

    @model_validator(mode="after")
    def must_have_track_or_route(self) -> "GpxDocument":
        if not self.tracks and not self.routes:
            raise ValueError("GPX document needs at least one track or route")
        return self
