"""Failure types raised by the route pipeline."""

from typing import Optional

from .models import ProviderKind


class RoutePipelineError(Exception):
    """Base class for every failure the pipeline surfaces to its caller."""


class GeocodingFailure(RoutePipelineError):
    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"Could not geocode {location!r}: {reason}")


class RoutingFailure(RoutePipelineError):
    def __init__(self, reason: str, provider: Optional[ProviderKind] = None):
        self.provider = provider
        self.reason = reason
        label = provider.value if provider else "routing"
        super().__init__(f"{label} provider failed: {reason}")


class GpxEncodingFailure(RoutePipelineError):
    """Computed data violates the GPX format contract; no document is produced."""
