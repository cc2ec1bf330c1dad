from .calculator import RouteDistanceCalculator, compute_route
from .geocoding import GeocodingClient
from .gpx import GpxDocumentBuilder, parse_gpx, validate_gpx_xml
from .models import ComputedRoute, RoutingResult
from .routing import DefaultRoutingProvider, RestrictedRoutingProvider, RoutingProvider

__all__ = [
    "ComputedRoute",
    "DefaultRoutingProvider",
    "GeocodingClient",
    "GpxDocumentBuilder",
    "RestrictedRoutingProvider",
    "RouteDistanceCalculator",
    "RoutingProvider",
    "RoutingResult",
    "compute_route",
    "parse_gpx",
    "validate_gpx_xml",
]
