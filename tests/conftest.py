"""Pytest fixtures and test utilities."""

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import httpx
import pytest

from listingproxy.collectors import BuildoutClient
from listingproxy.models.listing import CacheSnapshot, Listing
from listingproxy.storage import SnapshotStore

BASE_URL = "https://api.example.com/api/v1/test-key"


def paginated_handler(
    collections: dict[str, list[dict[str, Any]]],
    calls: list[httpx.Request] | None = None,
) -> Callable[[httpx.Request], httpx.Response]:
    """Mock upstream that serves `collections` with limit/offset paging."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        resource = request.url.path.rsplit("/", 1)[-1].removesuffix(".json")
        if resource not in collections:
            return httpx.Response(404, json={"error": "not found"})
        limit = int(request.url.params.get("limit", 1000))
        offset = int(request.url.params.get("offset", 0))
        page = collections[resource][offset:offset + limit]
        return httpx.Response(200, json={resource: page, "count": len(collections[resource])})

    return handler


def failing_handler(status_code: int = 500) -> Callable[[httpx.Request], httpx.Response]:
    """Mock upstream that answers every request with an error status."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"error": "upstream down"})

    return handler


def make_client(handler: Callable[[httpx.Request], httpx.Response], page_size: int = 1000) -> BuildoutClient:
    return BuildoutClient(BASE_URL, page_size=page_size, transport=httpx.MockTransport(handler))


@pytest.fixture
def warehouse_listing() -> dict:
    """Industrial listing for lease."""
    return {
        "id": 101,
        "address": "12 Dock Road",
        "city": "Stockton",
        "state": "CA",
        "zip": "95206",
        "property_type_id": 3,
        "property_subtype_id": 302,
        "lease": True,
        "sale": False,
        "lease_listing_web_title": "Warehouse with 8 Dock Doors",
        "lease_description": "Clear height 32 feet.",
        "building_size_sf": 40000,
        "lease_listing_url": "https://example.com/listings/101",
        "lease_pdf_url": "https://example.com/brochures/101-lease.pdf",
        "photos": [{"url": "https://example.com/photos/101.jpg"}],
        "broker_id": 1,
        "second_broker_id": 2,
        "draft": False,
    }


@pytest.fixture
def office_listing() -> dict:
    """Office building for sale."""
    return {
        "id": 102,
        "address": "500 Market Street",
        "city": "San Francisco",
        "state": "CA",
        "zip": "94105",
        "property_type_id": 1,
        "property_subtype_id": 101,
        "lease": False,
        "sale": True,
        "sale_listing_web_title": "Class A Office Tower",
        "sale_description": "Fully leased investment opportunity.",
        "building_size_sf": 120000,
        "sale_listing_url": "https://example.com/listings/102",
        "sale_pdf_url": "https://example.com/brochures/102-sale.pdf",
        "broker_id": 2,
    }


@pytest.fixture
def flex_listing() -> dict:
    """Industrial flex space for sale and lease, no warehouse in the copy."""
    return {
        "id": 103,
        "address": "77 Industrial Way",
        "city": "Fresno",
        "state": "CA",
        "zip": "93706",
        "property_type_id": 3,
        "property_subtype_id": 303,
        "lease": True,
        "sale": True,
        "lease_listing_web_title": "Flex Building Near Highway 99",
        "building_size_sf": 15000,
        "sale_pdf_url": "https://example.com/brochures/103-sale.pdf",
        "you_tube_url": "https://youtube.com/watch?v=flex",
        "broker_id": 99,
    }


@pytest.fixture
def retail_warehouse_listing() -> dict:
    """Retail listing whose title mentions a warehouse."""
    return {
        "id": 104,
        "address": "9 Outlet Blvd",
        "city": "Modesto",
        "state": "CA",
        "zip": "95354",
        "property_type_id": 2,
        "sale": True,
        "sale_listing_web_title": "Warehouse Club Retail Pad",
    }


@pytest.fixture
def raw_listings(warehouse_listing, office_listing, flex_listing, retail_warehouse_listing) -> list[dict]:
    return [warehouse_listing, office_listing, flex_listing, retail_warehouse_listing]


@pytest.fixture
def raw_brokers() -> list[dict]:
    return [
        {"id": 1, "first_name": "Dana", "last_name": "O\"Brien", "email": "dana@example.com"},
        {"id": 2, "first_name": "Luis", "last_name": "Ortega", "email": "luis@example.com"},
    ]


@pytest.fixture
def raw_lease_spaces() -> list[dict]:
    return [
        {"id": 1, "property_id": 101, "size_sf": 500},
        {"id": 2, "property_id": 101, "size_sf": 250},
        {"id": 3, "property_id": 103, "size_sf": None},
        {"id": 4, "property_id": 103, "size_sf": 4000},
    ]


@pytest.fixture
def snapshot(raw_listings) -> CacheSnapshot:
    return CacheSnapshot(
        listings=tuple(Listing.model_validate(l) for l in raw_listings),
        last_updated=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def store(tmp_path) -> SnapshotStore:
    return SnapshotStore(tmp_path / "data" / "listings.json")
