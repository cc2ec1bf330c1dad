"""Pydantic return models for core computation functions."""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from roadtrip_routing.models import Coordinate, ProviderKind


class RoutingResult(BaseModel):
    """Return type of RoutingProvider.route, already latitude-first."""
    distance_m: float = Field(ge=0)
    duration_s: float = Field(ge=0)
    geometry: list[Coordinate] = Field(min_length=2)
    stop_indices: Optional[list[int]] = None


class ComputedRoute(BaseModel):
    """Return type for RouteDistanceCalculator.compute."""
    distance_m: float = Field(ge=0)
    duration_s: float = Field(ge=0)
    geometry: list[Coordinate] = Field(min_length=2)
    provider: ProviderKind
    stops: list[Coordinate] = Field(min_length=2)
    stop_indices: list[int] = Field(min_length=2)

    @model_validator(mode="after")
    def stop_indices_must_span_geometry(self) -> "ComputedRoute":
        if len(self.stop_indices) != len(self.stops):
            raise ValueError(
                f"Got {len(self.stop_indices)} stop indices for {len(self.stops)} stops"
            )
        last = len(self.geometry) - 1
        if self.stop_indices[0] != 0 or self.stop_indices[-1] != last:
            raise ValueError(f"Stop indices must start at 0 and end at {last}")
        for a, b in zip(self.stop_indices, self.stop_indices[1:]):
            if b < a:
                raise ValueError(f"Stop indices must be non-decreasing, got {self.stop_indices}")
        return self

    @property
    def distance_km(self) -> float:
        return round(self.distance_m / 1000.0, 1)

    @property
    def duration_hours(self) -> float:
        return round(self.duration_s / 3600.0, 2)

    def legs(self) -> list[list[Coordinate]]:
        """Geometry of each leg between consecutive stops, endpoints included."""
        legs = []
        for a, b in zip(self.stop_indices, self.stop_indices[1:]):
            leg = self.geometry[a:b + 1]
            if len(leg) < 2:
                leg = [self.geometry[a], self.geometry[b]]
            legs.append(leg)
        return legs
