"""HTTP client for the Buildout-style listings API.

The provider exposes three paginated collections under one base URL:
`properties.json`, `brokers.json` and `lease_spaces.json`. Each page is a JSON
object whose records sit under the key named after the collection.

This client does no retrying; the refresh worker owns the fallback policy.
"""

import logging
from typing import Any, Optional

import httpx

from .base import UpstreamError

logger = logging.getLogger(__name__)

PROPERTIES = "properties"
BROKERS = "brokers"
LEASE_SPACES = "lease_spaces"


class BuildoutClient:
    """Async client that reads whole collections from the listings provider.

    Example:
        async with BuildoutClient(base_url) as client:
            listings = await client.fetch_listings()
            brokers = await client.fetch_brokers()
    """

    DEFAULT_PAGE_SIZE = 1000

    def __init__(
        self,
        base_url: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Provider base URL; collection files are appended to it
            page_size: Records requested per page (default 1000)
            timeout: Request timeout in seconds (default 30.0)
            transport: Optional httpx transport, used by tests
        """
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Accept": "application/json"},
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    def resource_url(self, resource: str) -> str:
        return f"{self.base_url}/{resource}.json"

    async def _fetch_page(self, resource: str, limit: int, offset: int) -> list[dict[str, Any]]:
        """Request one page and return its records.

        Raises:
            UpstreamError: On transport failure, non-2xx status or bad JSON
        """
        client = self._get_client()
        url = self.resource_url(resource)
        logger.debug(f"Fetching {url} (limit={limit}, offset={offset})")

        try:
            response = await client.get(url, params={"limit": limit, "offset": offset})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                resource,
                f"HTTP error: {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.TimeoutException as e:
            raise UpstreamError(resource, "Request timeout") from e
        except httpx.HTTPError as e:
            raise UpstreamError(resource, f"Request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError(resource, "Response is not valid JSON") from e

        if not isinstance(payload, dict):
            raise UpstreamError(resource, "Unexpected payload shape")

        records = payload.get(resource) or []
        if not isinstance(records, list):
            raise UpstreamError(resource, f"'{resource}' is not a list")
        return records

    async def fetch_all_pages(
        self,
        resource: str,
        page_size: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Fetch every page of a collection.

        Requests pages at increasing offsets until one comes back with fewer
        than `page_size` records, then returns all records in request order.

        Args:
            resource: Collection name ("properties", "brokers", "lease_spaces")
            page_size: Records per page; defaults to the client's page size

        Returns:
            All records of the collection

        Raises:
            UpstreamError: If any page request fails
        """
        limit = page_size or self.page_size
        records: list[dict[str, Any]] = []
        offset = 0

        while True:
            page = await self._fetch_page(resource, limit, offset)
            records.extend(page)
            if len(page) < limit:
                break
            offset += limit

        logger.info(f"Fetched {len(records)} {resource} in {offset // limit + 1} page(s)")
        return records

    async def fetch_listings(self) -> list[dict[str, Any]]:
        return await self.fetch_all_pages(PROPERTIES)

    async def fetch_brokers(self) -> list[dict[str, Any]]:
        return await self.fetch_all_pages(BROKERS)

    async def fetch_lease_spaces(self) -> list[dict[str, Any]]:
        return await self.fetch_all_pages(LEASE_SPACES)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "BuildoutClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
