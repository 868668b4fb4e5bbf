"""Load listings, brokers and lease spaces from the proxy and join them.

A failed request is logged and treated as an empty collection, so callers
always get a (possibly empty) table instead of an exception.
"""

import asyncio
import logging
from typing import Any, Optional

import httpx

from ..models.listing import DerivedListingView
from .builder import build_views

logger = logging.getLogger(__name__)


async def _get_collection(client: httpx.AsyncClient, path: str, key: str) -> list[dict[str, Any]]:
    """GET a proxy endpoint and return the list under `key`."""
    try:
        response = await client.get(path)
        response.raise_for_status()
        payload = response.json()
    except httpx.HTTPStatusError as e:
        logger.error(f"Proxy error on {path}: {e.response.status_code} {e.response.text[:200]}")
        return []
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Failed to load {path}: {e}")
        return []

    if isinstance(payload, dict):
        records = payload.get(key)
    else:
        records = payload
    return records if isinstance(records, list) else []


async def fetch_table_data(
    proxy_url: str,
    timeout: float = 60.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> tuple[list[dict[str, Any]], list[dict[str, Any]], list[dict[str, Any]]]:
    """Fetch listings, brokers and lease spaces concurrently.

    Returns:
        (listings, brokers, lease_spaces) as raw dicts
    """
    async with httpx.AsyncClient(base_url=proxy_url, timeout=timeout, transport=transport) as client:
        listings, brokers, spaces = await asyncio.gather(
            _get_collection(client, "/api/listings", "properties"),
            _get_collection(client, "/api/brokers", "brokers"),
            _get_collection(client, "/api/lease_spaces", "lease_spaces"),
        )
    logger.info(
        f"Loaded {len(listings)} listings, {len(brokers)} brokers, "
        f"{len(spaces)} lease spaces from {proxy_url}"
    )
    return listings, brokers, spaces


async def load_views(
    proxy_url: str,
    timeout: float = 60.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[DerivedListingView]:
    """Fetch all three collections, then build the joined views."""
    listings, brokers, spaces = await fetch_table_data(proxy_url, timeout, transport)
    return build_views(listings, brokers, spaces)


async def trigger_refresh(
    proxy_url: str,
    timeout: float = 300.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Optional[int]:
    """Ask the proxy to refresh its cache.

    Returns:
        The refreshed listing count, or None if the request failed
    """
    async with httpx.AsyncClient(base_url=proxy_url, timeout=timeout, transport=transport) as client:
        try:
            response = await client.post("/api/refresh")
            response.raise_for_status()
            return int(response.json().get("count", 0))
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Refresh request failed: {e}")
            return None
