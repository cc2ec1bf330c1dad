"""Tests for the Nominatim geocoding client."""
import logging
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from roadtrip_routing.config import GeocoderConfig


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_geocoding_module_has_logger():
    import roadtrip_routing.core.geocoding as geocoding_mod
    assert hasattr(geocoding_mod, "logger")


@pytest.mark.anyio
async def test_resolve_returns_first_result():
    from roadtrip_routing.core.geocoding import GeocodingClient
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        seen["user_agent"] = request.headers.get("user-agent")
        return httpx.Response(200, json=[
            {"lat": "37.7749295", "lon": "-122.4194155", "display_name": "San Francisco"},
            {"lat": "0", "lon": "0"},
        ])

    async with _client(handler) as http:
        coord = await GeocodingClient(GeocoderConfig(), client=http).resolve("San Francisco, CA")

    assert coord.lat == pytest.approx(37.7749295)
    assert coord.lon == pytest.approx(-122.4194155)
    assert seen["url"].path == "/search"
    assert seen["url"].params["q"] == "San Francisco, CA"
    assert seen["url"].params["format"] == "json"
    assert seen["url"].params["limit"] == "1"
    assert seen["user_agent"] == GeocoderConfig().user_agent


@pytest.mark.anyio
async def test_resolve_uses_configured_base_url():
    from roadtrip_routing.core.geocoding import GeocodingClient
    seen = {}

    def handler(request):
        seen["host"] = request.url.host
        return httpx.Response(200, json=[{"lat": "1.5", "lon": "2.5"}])

    config = GeocoderConfig(base_url="https://geocoder.example.test/")
    async with _client(handler) as http:
        await GeocodingClient(config, client=http).resolve("Somewhere")
    assert seen["host"] == "geocoder.example.test"


@pytest.mark.anyio
async def test_zero_results_is_failure(caplog):
    from roadtrip_routing.core.geocoding import GeocodingClient
    from roadtrip_routing.errors import GeocodingFailure

    with caplog.at_level(logging.WARNING, logger="roadtrip_routing.core.geocoding"):
        async with _client(lambda request: httpx.Response(200, json=[])) as http:
            with pytest.raises(GeocodingFailure) as exc_info:
                await GeocodingClient(client=http).resolve("Atlantis")

    assert exc_info.value.location == "Atlantis"
    assert "no results" in str(exc_info.value)
    assert any(r.name == "roadtrip_routing.core.geocoding" for r in caplog.records)


@pytest.mark.anyio
async def test_http_error_status_logs_status(caplog):
    from roadtrip_routing.core.geocoding import GeocodingClient
    from roadtrip_routing.errors import GeocodingFailure

    with caplog.at_level(logging.WARNING, logger="roadtrip_routing.core.geocoding"):
        async with _client(lambda request: httpx.Response(503)) as http:
            with pytest.raises(GeocodingFailure, match="503"):
                await GeocodingClient(client=http).resolve("Paris")

    assert any(
        r.levelno == logging.WARNING and "503" in r.message
        for r in caplog.records
    )


@pytest.mark.anyio
async def test_timeout_is_failure():
    from roadtrip_routing.core.geocoding import GeocodingClient
    from roadtrip_routing.errors import GeocodingFailure

    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    async with _client(handler) as http:
        with pytest.raises(GeocodingFailure, match="timed out") as exc_info:
            await GeocodingClient(client=http).resolve("Paris")
    assert isinstance(exc_info.value.__cause__, httpx.TimeoutException)


@pytest.mark.anyio
async def test_malformed_json_is_failure():
    from roadtrip_routing.core.geocoding import GeocodingClient
    from roadtrip_routing.errors import GeocodingFailure

    async with _client(lambda request: httpx.Response(200, text="<html>")) as http:
        with pytest.raises(GeocodingFailure, match="malformed"):
            await GeocodingClient(client=http).resolve("Paris")


@pytest.mark.anyio
async def test_result_without_coordinates_is_failure():
    from roadtrip_routing.core.geocoding import GeocodingClient
    from roadtrip_routing.errors import GeocodingFailure

    async with _client(lambda request: httpx.Response(200, json=[{"lat": "abc"}])) as http:
        with pytest.raises(GeocodingFailure, match="malformed result"):
            await GeocodingClient(client=http).resolve("Paris")


@pytest.mark.anyio
async def test_blank_location_makes_no_request():
    from roadtrip_routing.core.geocoding import GeocodingClient
    from roadtrip_routing.errors import GeocodingFailure

    handler = MagicMock()
    async with _client(handler) as http:
        with pytest.raises(GeocodingFailure, match="empty"):
            await GeocodingClient(client=http).resolve("   ")
    handler.assert_not_called()


@pytest.mark.anyio
async def test_without_injected_client_opens_own_client():
    from roadtrip_routing.core.geocoding import GeocodingClient

    mock_resp = MagicMock()
    mock_resp.raise_for_status = MagicMock()
    mock_resp.json = MagicMock(return_value=[{"lat": "48.8566", "lon": "2.3522"}])

    with patch("httpx.AsyncClient") as mock_client_cls:
        mock_client = AsyncMock()
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        mock_client.request = AsyncMock(return_value=mock_resp)
        mock_client_cls.return_value = mock_client

        coord = await GeocodingClient(GeocoderConfig(timeout_s=3.0)).resolve("Paris")

    assert coord.lat == pytest.approx(48.8566)
    _, kwargs = mock_client_cls.call_args
    assert kwargs["timeout"] == 3.0
    assert "User-Agent" in kwargs["headers"]


@pytest.mark.anyio
@pytest.mark.parametrize("body,reason", [
    ({"lat": "1", "lon": "2"}, "malformed response"),
    ([{"lat": "abc", "lon": "2"}], "malformed result coordinates"),
    ([{"lat": "95.0", "lon": "2"}], "malformed result coordinates"),
])
async def test_malformed_payloads_log_warning(caplog, body, reason):
    from roadtrip_routing.core.geocoding import GeocodingClient
    from roadtrip_routing.errors import GeocodingFailure

    with caplog.at_level(logging.WARNING, logger="roadtrip_routing.core.geocoding"):
        async with _client(lambda request: httpx.Response(200, json=body)) as http:
            with pytest.raises(GeocodingFailure, match=reason):
                await GeocodingClient(client=http).resolve("Paris")

    assert any(
        r.name == "roadtrip_routing.core.geocoding" and r.levelno == logging.WARNING
        and "Paris" in r.message
        for r in caplog.records
    )
