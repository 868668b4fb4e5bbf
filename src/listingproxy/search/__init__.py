"""Listing search over the cached snapshot."""

from .query import broker_search_text, matches_search, matches_type, query_listings

__all__ = [
    "query_listings",
    "matches_search",
    "matches_type",
    "broker_search_text",
]
