"""Place-name geocoding via the Nominatim search API."""

import logging
from typing import Optional

import httpx

from roadtrip_routing.config import GeocoderConfig
from roadtrip_routing.errors import GeocodingFailure
from roadtrip_routing.models import Coordinate
from .http import send

logger = logging.getLogger(__name__)


class GeocodingClient:
    """Resolves free-text locations to coordinates.

    One request per call and no retries; retrying is up to the caller.
    """

    def __init__(
        self,
        config: Optional[GeocoderConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or GeocoderConfig()
        self._client = client

    async def resolve(self, location_text: str) -> Coordinate:
        if not location_text or not location_text.strip():
            raise GeocodingFailure(location_text, "location text is empty")

        url = f"{self.config.base_url.rstrip('/')}/search"
        try:
            response = await send(
                "GET",
                url,
                client=self._client,
                timeout=self.config.timeout_s,
                headers={"User-Agent": self.config.user_agent},
                params={"q": location_text, "format": "json", "limit": 1},
            )
            results = response.json()
        except httpx.TimeoutException as exc:
            logger.warning("Geocoding %r timed out: %s", location_text, exc)
            raise GeocodingFailure(location_text, "request timed out") from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("Geocoder returned HTTP %s for %r", status, location_text)
            raise GeocodingFailure(location_text, f"geocoder returned HTTP {status}") from exc
        except httpx.HTTPError as exc:
            logger.warning("Geocoding %r failed: %s", location_text, exc)
            raise GeocodingFailure(location_text, f"request failed: {exc}") from exc
        except ValueError as exc:
            logger.warning("Geocoder sent malformed JSON for %r", location_text)
            raise GeocodingFailure(location_text, "malformed response") from exc

        if not isinstance(results, list):
            logger.warning("Geocoder sent a non-list response for %r", location_text)
            raise GeocodingFailure(location_text, "malformed response")
        if not results:
            logger.warning("No geocoding results for %r", location_text)
            raise GeocodingFailure(location_text, "no results")

        first = results[0]
        try:
            # Nominatim encodes lat/lon as decimal strings
            coord = Coordinate(lat=float(first["lat"]), lon=float(first["lon"]))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Geocoder result for %r has unusable coordinates: %s", location_text, exc)
            raise GeocodingFailure(location_text, "malformed result coordinates") from exc

        logger.debug("Geocoded %r to (%.6f, %.6f)", location_text, coord.lat, coord.lon)
        return coord
