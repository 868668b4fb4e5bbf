"""Server-side filtering of the cached listings snapshot."""

from collections.abc import Iterable, Mapping
from typing import Optional

from ..models.listing import Broker, CacheSnapshot, Listing


def broker_search_text(
    listing: Listing,
    brokers: Optional[Mapping[str, Broker]] = None,
) -> str:
    """Text searched when matching a listing against its brokers.

    Uses the broker index when the proxy has one; otherwise falls back to a
    `brokerDisplay` value carried on the listing itself.
    """
    if brokers:
        parts = []
        for broker_id in listing.broker_ids:
            broker = brokers.get(str(broker_id))
            if broker is not None:
                parts.append(broker.full_name)
                if broker.email:
                    parts.append(broker.email)
        return " ".join(parts)

    extra = listing.model_extra or {}
    return str(extra.get("brokerDisplay") or "")


def matches_type(listing: Listing, type_id: str) -> bool:
    return str(listing.property_type_id) == type_id


def matches_search(
    listing: Listing,
    needle: str,
    brokers: Optional[Mapping[str, Broker]] = None,
) -> bool:
    """Case-insensitive substring match on address, title or brokers.

    Args:
        listing: Listing to test
        needle: Lower-cased search text
        brokers: Optional broker index keyed by str(broker id)
    """
    address = listing.address_text().lower()
    title = (listing.web_title or "").lower()
    broker_text = broker_search_text(listing, brokers).lower()
    return needle in address or needle in title or needle in broker_text


def query_listings(
    snapshot: CacheSnapshot,
    search: Optional[str] = None,
    type_id: Optional[str] = None,
    brokers: Optional[Mapping[str, Broker]] = None,
) -> list[Listing]:
    """Filter the snapshot's listings.

    Both filters are optional and combine with AND. Results keep snapshot
    order. The snapshot is never modified.

    Args:
        snapshot: Current listings snapshot
        search: Free text matched against address, title and broker names
        type_id: Property type id, compared as a string
        brokers: Optional broker index used for broker name matching

    Returns:
        Matching listings
    """
    results: Iterable[Listing] = snapshot.listings

    if type_id:
        results = [l for l in results if matches_type(l, str(type_id))]

    needle = (search or "").strip().lower()
    if needle:
        results = [l for l in results if matches_search(l, needle, brokers)]

    return list(results)
