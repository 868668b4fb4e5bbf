"""Data models for listingproxy."""

from listingproxy.models.listing import (
    Broker,
    BrokerSummary,
    CacheSnapshot,
    DerivedListingView,
    LeaseSpace,
    Listing,
)

__all__ = [
    "Listing",
    "Broker",
    "BrokerSummary",
    "LeaseSpace",
    "CacheSnapshot",
    "DerivedListingView",
]
