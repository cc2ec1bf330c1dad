"""Driving-route providers: OSRM and OpenRouteService.

Both return a RoutingResult with latitude-first geometry. Providers answer
with ``[lon, lat]`` pairs; the swap happens here and nowhere else.
"""

import logging
from typing import Any, Optional, Protocol, Sequence

import httpx

from roadtrip_routing.config import OrsConfig, OsrmConfig, USER_AGENT
from roadtrip_routing.errors import RoutingFailure
from roadtrip_routing.models import Coordinate, ProviderKind
from .http import send
from .models import RoutingResult

logger = logging.getLogger(__name__)


class RoutingProvider(Protocol):
    kind: ProviderKind

    async def route(self, points: Sequence[Coordinate]) -> RoutingResult:
        ...


def _lonlat_to_coordinates(pairs: Any) -> list[Coordinate]:
    """Convert GeoJSON ``[lon, lat(, ele)]`` pairs to Coordinates."""
    return [Coordinate(lat=float(pair[1]), lon=float(pair[0])) for pair in pairs]


def _check_points(points: Sequence[Coordinate], kind: ProviderKind) -> None:
    if len(points) < 2:
        raise RoutingFailure(
            f"At least two coordinates are required, got {len(points)}", provider=kind
        )


async def _fetch_json(
    kind: ProviderKind, method: str, url: str, *,
    client: Optional[httpx.AsyncClient], timeout: float, headers: dict[str, str], **kwargs,
) -> Any:
    try:
        response = await send(
            method, url, client=client, timeout=timeout, headers=headers, **kwargs
        )
        return response.json()
    except httpx.TimeoutException as exc:
        logger.warning("%s routing request timed out: %s", kind.value, exc)
        raise RoutingFailure("request timed out", provider=kind) from exc
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        detail = exc.response.text[:200]
        logger.warning("%s routing returned HTTP %s: %s", kind.value, status, detail)
        raise RoutingFailure(f"HTTP {status}: {detail}", provider=kind) from exc
    except httpx.HTTPError as exc:
        logger.warning("%s routing request failed: %s", kind.value, exc)
        raise RoutingFailure(f"request failed: {exc}", provider=kind) from exc
    except ValueError as exc:
        raise RoutingFailure("malformed response", provider=kind) from exc


class DefaultRoutingProvider:
    """Fastest drivable path from an OSRM ``/route`` service."""

    kind = ProviderKind.DEFAULT

    def __init__(
        self,
        config: Optional[OsrmConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or OsrmConfig()
        self._client = client

    def format_coordinates(self, points: Sequence[Coordinate]) -> str:
        """OSRM path segment: ``lon,lat;lon,lat;...``."""
        return ";".join(f"{p.lon},{p.lat}" for p in points)

    async def route(self, points: Sequence[Coordinate]) -> RoutingResult:
        _check_points(points, self.kind)
        url = (
            f"{self.config.base_url.rstrip('/')}/route/v1/"
            f"{self.config.profile}/{self.format_coordinates(points)}"
        )
        data = await _fetch_json(
            self.kind, "GET", url,
            client=self._client,
            timeout=self.config.timeout_s,
            headers={"User-Agent": USER_AGENT},
            params={"overview": "full", "geometries": "geojson"},
        )

        if not isinstance(data, dict):
            raise RoutingFailure("malformed response", provider=self.kind)
        if data.get("code") != "Ok":
            message = data.get("message") or data.get("code") or "unknown error"
            logger.warning("OSRM returned no route: %s", message)
            raise RoutingFailure(f"no route found ({message})", provider=self.kind)
        routes = data.get("routes") or []
        if not isinstance(routes, list):
            raise RoutingFailure("unparseable route: routes is not a list", provider=self.kind)
        if not routes:
            raise RoutingFailure("no route found", provider=self.kind)

        route = routes[0]
        try:
            return RoutingResult(
                distance_m=float(route["distance"]),
                duration_s=float(route["duration"]),
                geometry=_lonlat_to_coordinates(route["geometry"]["coordinates"]),
            )
        except (KeyError, TypeError, IndexError, ValueError) as exc:
            # ValidationError is a ValueError: short or out-of-range geometry lands here
            raise RoutingFailure(f"unparseable route: {exc}", provider=self.kind) from exc


class RestrictedRoutingProvider:
    """Driving route from OpenRouteService that avoids the configured road classes."""

    kind = ProviderKind.RESTRICTED

    def __init__(
        self,
        config: Optional[OrsConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or OrsConfig()
        self._client = client

    def build_request(self, points: Sequence[Coordinate]) -> dict:
        return {
            "coordinates": [[p.lon, p.lat] for p in points],
            "options": {"avoid_features": list(self.config.avoid_features)},
        }

    async def route(self, points: Sequence[Coordinate]) -> RoutingResult:
        _check_points(points, self.kind)
        url = f"{self.config.base_url.rstrip('/')}/v2/directions/{self.config.profile}/geojson"
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/json, application/geo+json",
        }
        if self.config.api_key:
            headers["Authorization"] = self.config.api_key

        data = await _fetch_json(
            self.kind, "POST", url,
            client=self._client,
            timeout=self.config.timeout_s,
            headers=headers,
            json=self.build_request(points),
        )

        if not isinstance(data, dict):
            raise RoutingFailure("malformed response", provider=self.kind)
        features = data.get("features") or []
        if not isinstance(features, list):
            raise RoutingFailure("unparseable route: features is not a list", provider=self.kind)
        if not features:
            error = data.get("error")
            logger.warning("OpenRouteService returned no route: %s", error)
            raise RoutingFailure(f"no route found ({error or 'empty result'})", provider=self.kind)

        feature = features[0]
        try:
            properties = feature.get("properties") or {}
            # ORS omits zero-valued summary fields
            summary = properties.get("summary") or {}
            way_points = properties.get("way_points")
            return RoutingResult(
                distance_m=float(summary.get("distance", 0.0)),
                duration_s=float(summary.get("duration", 0.0)),
                geometry=_lonlat_to_coordinates(feature["geometry"]["coordinates"]),
                stop_indices=[int(i) for i in way_points] if way_points else None,
            )
        except (AttributeError, KeyError, TypeError, IndexError, ValueError) as exc:
            raise RoutingFailure(f"unparseable route: {exc}", provider=self.kind) from exc
