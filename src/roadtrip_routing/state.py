"""Session state for the roadtrip-routing MCP server.

Holds the route records the server's tools operate on. The records stand in
for the application's own Route/Waypoint rows: they receive the computed
distance and duration but are never cached pipeline results.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class WaypointRecord(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    position: int = Field(ge=1)
    name: Optional[str] = None


class RouteRecord(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    id: int = Field(gt=0)
    starting_location: str = Field(min_length=1, max_length=200)
    destination: str = Field(min_length=1, max_length=200)
    scheduled_at: Optional[datetime] = None
    avoid_motorways: bool = False
    trip_name: Optional[str] = None
    waypoints: list[WaypointRecord] = []
    distance_in_km: Optional[float] = Field(default=None, ge=0)
    duration_hours: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_unique_positions(self) -> "RouteRecord":
        positions = [wp.position for wp in self.waypoints]
        if len(set(positions)) != len(positions):
            raise ValueError(f"Waypoint positions must be unique within a route, got {positions}")
        return self

    @property
    def ordered_waypoints(self) -> list[WaypointRecord]:
        return sorted(self.waypoints, key=lambda wp: wp.position)

    def next_position(self) -> int:
        return max((wp.position for wp in self.waypoints), default=0) + 1


class SessionState(BaseModel):
    routes: dict[int, RouteRecord] = {}

    def add_route(self, **fields) -> RouteRecord:
        route_id = max(self.routes, default=0) + 1
        record = RouteRecord(id=route_id, **fields)
        self.routes[route_id] = record
        return record

    def summary(self) -> dict:
        return {
            "routes": [
                {
                    "id": r.id,
                    "starting_location": r.starting_location,
                    "destination": r.destination,
                    "scheduled_at": r.scheduled_at.isoformat() if r.scheduled_at else None,
                    "avoid_motorways": r.avoid_motorways,
                    "waypoints": len(r.waypoints),
                    "distance_km": r.distance_in_km,
                    "duration_hours": r.duration_hours,
                }
                for r in self.routes.values()
            ],
        }


# Global session state, one per MCP server process
state = SessionState()
