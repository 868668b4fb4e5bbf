"""Broker and lease space pass-through endpoints.

Brokers are cached for the life of the process once fetched; lease spaces
are cached with a time-to-live.
"""

import logging

from fastapi import APIRouter, HTTPException, Request

from listingproxy.collectors import UpstreamError
from listingproxy.views.builder import index_brokers

router = APIRouter()
logger = logging.getLogger(__name__)

BROKERS_KEY = "brokers"
# Validated brokers keyed by str(id), built once alongside the raw list
BROKER_INDEX_KEY = "broker_index"
LEASE_SPACES_KEY = "lease_spaces"


@router.get("/brokers")
async def get_brokers(request: Request) -> dict:
    """Return all brokers, fetching them on first use."""
    cache = request.app.state.reference_cache
    cached = cache.get(BROKERS_KEY)
    if cached:
        return {"brokers": cached}

    client = request.app.state.upstream_client
    try:
        brokers = await client.fetch_brokers()
    except UpstreamError as e:
        logger.error(f"Error fetching brokers: {e}")
        raise HTTPException(status_code=502, detail="Failed to fetch brokers")

    if brokers:
        cache.set(BROKERS_KEY, brokers)
        cache.set(BROKER_INDEX_KEY, index_brokers(brokers))
    return {"brokers": brokers}


@router.get("/lease_spaces")
async def get_lease_spaces(request: Request) -> dict:
    """Return all lease spaces, cached for the configured TTL."""
    cache = request.app.state.reference_cache
    cached = cache.get(LEASE_SPACES_KEY)
    if cached is not None:
        return cached

    client = request.app.state.upstream_client
    try:
        spaces = await client.fetch_lease_spaces()
    except UpstreamError as e:
        logger.error(f"Error fetching lease spaces: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to fetch lease spaces: {e.message}")

    payload = {"lease_spaces": spaces, "count": len(spaces)}
    cache.set(LEASE_SPACES_KEY, payload, ttl=request.app.state.settings.lease_spaces_ttl_seconds)
    return payload
