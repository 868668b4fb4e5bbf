"""Upstream listings provider access.

Main Components:
    - BuildoutClient: paginated reader for properties, brokers and lease spaces
    - UpstreamError: raised for any network or response failure

Example usage:
    from listingproxy.collectors import BuildoutClient

    async with BuildoutClient(config.api_base_url) as client:
        listings = await client.fetch_listings()
"""

from .base import UpstreamError
from .buildout import BROKERS, LEASE_SPACES, PROPERTIES, BuildoutClient

__all__ = [
    "BuildoutClient",
    "UpstreamError",
    "PROPERTIES",
    "BROKERS",
    "LEASE_SPACES",
]
