"""Listing search and cache refresh endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Request

from listingproxy.search import query_listings

from .reference import BROKER_INDEX_KEY

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/listings")
async def get_listings(
    request: Request,
    search: Optional[str] = Query(default=None, description="Free text over address, title and brokers"),
    type_id: Optional[str] = Query(default=None, alias="type", description="Property type id"),
) -> dict:
    """Serve listings from the cached snapshot.

    Never calls upstream. `properties` is always a list, empty when nothing
    has been loaded.
    """
    worker = request.app.state.refresh_worker
    snapshot = worker.snapshot

    broker_index = request.app.state.reference_cache.get(BROKER_INDEX_KEY)

    results = query_listings(snapshot, search=search, type_id=type_id, brokers=broker_index)
    return {
        "properties": [l.model_dump(mode="json", exclude_unset=True) for l in results],
        "last_updated": snapshot.last_updated.isoformat() if snapshot.last_updated else None,
        "count": len(results),
    }


@router.post("/refresh")
async def refresh_listings(request: Request) -> dict:
    """Refresh the listings cache now and report the resulting count.

    Waits behind a refresh that is already running.
    """
    worker = request.app.state.refresh_worker
    if worker.is_refreshing:
        logger.info("Refresh already in progress; queuing manual refresh")
    snapshot = await worker.refresh()
    return {"refreshed": True, "count": snapshot.count}


@router.get("/refresh/status")
async def refresh_status(request: Request) -> dict:
    """Return the refresh worker's current status."""
    return request.app.state.refresh_worker.get_status()
