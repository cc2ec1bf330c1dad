"""Route distance computation: geocode endpoints, pick a provider, route."""

import asyncio
import logging
from typing import Optional

from pydantic import ValidationError

from roadtrip_routing.config import Settings
from roadtrip_routing.errors import RoutingFailure
from roadtrip_routing.models import Coordinate, ProviderKind, RouteSpec
from .geo import locate_stops
from .geocoding import GeocodingClient
from .models import ComputedRoute, RoutingResult
from .routing import DefaultRoutingProvider, RestrictedRoutingProvider, RoutingProvider

logger = logging.getLogger(__name__)


def _usable_stop_indices(result: RoutingResult, stop_count: int) -> Optional[list[int]]:
    indices = result.stop_indices
    if not indices or len(indices) != stop_count:
        return None
    if indices[0] != 0 or indices[-1] != len(result.geometry) - 1:
        return None
    if any(b < a for a, b in zip(indices, indices[1:])):
        return None
    return list(indices)


class RouteDistanceCalculator:
    """Computes distance, duration and path geometry for a RouteSpec.

    ``avoid_motorways`` selects the restricted provider, otherwise the default
    one. Exactly one provider is called per computation and its failures
    propagate as-is; the other provider is never tried.
    """

    def __init__(
        self,
        geocoder: GeocodingClient,
        default_provider: RoutingProvider,
        restricted_provider: RoutingProvider,
    ):
        self.geocoder = geocoder
        self.providers: dict[ProviderKind, RoutingProvider] = {
            ProviderKind.DEFAULT: default_provider,
            ProviderKind.RESTRICTED: restricted_provider,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "RouteDistanceCalculator":
        return cls(
            geocoder=GeocodingClient(settings.geocoder),
            default_provider=DefaultRoutingProvider(settings.osrm),
            restricted_provider=RestrictedRoutingProvider(settings.ors),
        )

    def select_provider(self, avoid_motorways: bool) -> RoutingProvider:
        kind = ProviderKind.RESTRICTED if avoid_motorways else ProviderKind.DEFAULT
        return self.providers[kind]

    async def resolve_endpoints(self, start: str, end: str) -> tuple[Coordinate, Coordinate]:
        """Geocode both endpoints concurrently; the first failure cancels the other."""
        if start == end:
            coord = await self.geocoder.resolve(start)
            return coord, coord

        tasks = [
            asyncio.create_task(self.geocoder.resolve(start)),
            asyncio.create_task(self.geocoder.resolve(end)),
        ]
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            unfinished = [task for task in tasks if not task.done()]
            for task in unfinished:
                task.cancel()
            await asyncio.gather(*unfinished, return_exceptions=True)

        failed = [t for t in tasks if t in done and t.exception() is not None]
        if failed:
            raise failed[0].exception()
        return tasks[0].result(), tasks[1].result()

    async def compute(self, spec: RouteSpec) -> ComputedRoute:
        start, end = await self.resolve_endpoints(spec.start, spec.end)
        stops = [start] + [wp.coordinate for wp in spec.ordered_waypoints] + [end]

        provider = self.select_provider(spec.avoid_motorways)
        logger.info(
            "Routing %r -> %r via %s provider (%d stops)",
            spec.start, spec.end, provider.kind.value, len(stops),
        )
        result = await provider.route(stops)

        indices = _usable_stop_indices(result, len(stops))
        if indices is None:
            indices = locate_stops(result.geometry, stops)

        try:
            computed = ComputedRoute(
                distance_m=result.distance_m,
                duration_s=result.duration_s,
                geometry=result.geometry,
                provider=provider.kind,
                stops=stops,
                stop_indices=indices,
            )
        except ValidationError as exc:
            raise RoutingFailure(f"inconsistent route result: {exc}", provider=provider.kind) from exc

        logger.info(
            "Computed %r -> %r: %.0f m, %.0f s, %d points",
            spec.start, spec.end, computed.distance_m, computed.duration_s, len(computed.geometry),
        )
        return computed


async def compute_route(spec: RouteSpec, settings: Settings) -> ComputedRoute:
    """Build a calculator from settings and compute one route."""
    return await RouteDistanceCalculator.from_settings(settings).compute(spec)
