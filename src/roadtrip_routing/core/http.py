"""Shared outbound HTTP helper for the geocoding and routing clients."""

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


async def send(
    method: str,
    url: str,
    *,
    client: Optional[httpx.AsyncClient],
    timeout: float,
    headers: dict[str, str],
    **kwargs,
) -> httpx.Response:
    """Send one request and raise for non-2xx status.

    Uses the injected client when given, otherwise opens a short-lived one.
    httpx exceptions propagate to the caller.
    """
    logger.debug("%s %s", method, url)
    if client is not None:
        response = await client.request(method, url, headers=headers, timeout=timeout, **kwargs)
    else:
        async with httpx.AsyncClient(timeout=timeout, headers=headers) as own_client:
            response = await own_client.request(method, url, **kwargs)
    response.raise_for_status()
    return response
