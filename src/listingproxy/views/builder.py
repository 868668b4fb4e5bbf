"""Join listings with brokers and lease spaces and derive display fields.

Everything here is a pure function of its inputs so the table, the CSV
export and the dashboard all see the same derived values:

    views = build_views(listings, brokers, lease_spaces)
"""

import html
import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Optional, Union

from pydantic import ValidationError

from ..constants import (
    DESCRIPTION_PLACEHOLDER,
    FOR_LEASE,
    FOR_SALE,
    IMAGE_PLACEHOLDER,
    PROPERTY_SUBTYPES,
    PROPERTY_TYPES,
    SIZE_PLACEHOLDER,
    TITLE_PLACEHOLDER,
    URL_PLACEHOLDER,
)
from ..models.listing import Broker, BrokerSummary, DerivedListingView, LeaseSpace, Listing

logger = logging.getLogger(__name__)

BrokerIndex = Mapping[str, Broker]
LeaseSpaceIndex = Mapping[str, list[LeaseSpace]]


def valid_models(model: type, items: Iterable[Any]) -> Iterator[Any]:
    """Yield each item as `model`, skipping records that fail validation.

    Items that are already model instances pass through unchanged.
    """
    skipped = 0
    for item in items:
        if isinstance(item, model):
            yield item
            continue
        try:
            yield model.model_validate(item)
        except ValidationError as e:
            skipped += 1
            logger.warning(f"Skipping invalid {model.__name__} record: {e.error_count()} error(s)")
    if skipped:
        logger.warning(f"Skipped {skipped} invalid {model.__name__} record(s)")


def index_brokers(brokers: Iterable[Union[Broker, dict[str, Any]]]) -> dict[str, Broker]:
    """Map str(broker id) to Broker. Invalid records are skipped."""
    return {str(broker.id): broker for broker in valid_models(Broker, brokers)}


def group_lease_spaces(
    spaces: Iterable[Union[LeaseSpace, dict[str, Any]]],
) -> dict[str, list[LeaseSpace]]:
    """Group lease spaces by str(property id), keeping input order.

    Invalid records and spaces without a property id are skipped.
    """
    grouped: dict[str, list[LeaseSpace]] = {}
    for space in valid_models(LeaseSpace, spaces):
        if space.property_id is None:
            continue
        grouped.setdefault(str(space.property_id), []).append(space)
    return grouped


def format_square_feet(value: Union[int, float]) -> str:
    """Format a square footage with thousands separators, e.g. "12,500 SF"."""
    if float(value).is_integer():
        return f"{int(value):,} SF"
    return f"{value:,} SF"


def resolve_brokers(listing: Listing, broker_index: BrokerIndex) -> list[Broker]:
    """Primary and secondary broker, skipping ids that do not resolve."""
    resolved = []
    for broker_id in listing.broker_ids:
        broker = broker_index.get(str(broker_id))
        if broker is not None:
            resolved.append(broker)
    return resolved


def broker_pill(broker: Broker) -> str:
    """Mailto anchor for one broker."""
    email = html.escape(broker.email or "", quote=True)
    name = html.escape(broker.full_name)
    return f'<a href="mailto:{email}" class="broker-pill" data-email="{email}">{name}</a>'


def total_available_sf(spaces: Iterable[LeaseSpace]) -> Union[int, float]:
    """Sum of lease space sizes; a missing size counts as zero.

    Every space is counted regardless of availability status.
    """
    return sum(space.size_sf or 0 for space in spaces)


def format_location(listing: Listing) -> str:
    return (
        f"{listing.address or ''}, {listing.city or ''}, "
        f"{listing.state or ''} {listing.zip or ''}"
    )


def format_size(available_sf: Union[int, float], building_size_sf: Optional[Union[int, float]]) -> str:
    if available_sf:
        return format_square_feet(available_sf)
    if building_size_sf:
        return format_square_feet(building_size_sf)
    return SIZE_PLACEHOLDER


def format_size_detail(
    available_sf: Union[int, float],
    building_size_sf: Optional[Union[int, float]],
) -> str:
    """Longer size line for the detail card."""
    if available_sf:
        detail = f"Available: {format_square_feet(available_sf)}"
        if building_size_sf:
            detail += f" of {format_square_feet(building_size_sf)}"
        return detail
    if building_size_sf:
        return format_square_feet(building_size_sf)
    return SIZE_PLACEHOLDER


def select_brochure(listing: Listing, listing_type: str) -> Optional[str]:
    """Sale brochure for sale listings, lease brochure otherwise.

    Combined sale & lease listings prefer the lease brochure.
    """
    if listing_type == FOR_SALE:
        return listing.sale_pdf_url or None
    if listing_type == FOR_LEASE:
        return listing.lease_pdf_url or None
    return listing.lease_pdf_url or listing.sale_pdf_url or None


def select_description(listing: Listing) -> str:
    if listing.lease and listing.lease_description:
        return listing.lease_description
    if listing.sale and listing.sale_description:
        return listing.sale_description
    return DESCRIPTION_PLACEHOLDER


def first_photo_url(listing: Listing) -> str:
    for photo in listing.photos or []:
        url = photo.get("url") if isinstance(photo, dict) else None
        if url:
            return url
    return IMAGE_PLACEHOLDER


def _lookup_label(table: Mapping[int, str], key: Any) -> str:
    try:
        return table.get(int(key), "")
    except (TypeError, ValueError):
        return ""


def build_view(
    listing: Listing,
    broker_index: BrokerIndex,
    spaces_index: LeaseSpaceIndex,
) -> DerivedListingView:
    """Derive the table view of one listing.

    Args:
        listing: Cached listing
        broker_index: Brokers keyed by str(id)
        spaces_index: Lease spaces keyed by str(property id)

    Returns:
        DerivedListingView with joined broker data, aggregated available SF
        and display fields
    """
    brokers = resolve_brokers(listing, broker_index)
    available = total_available_sf(spaces_index.get(str(listing.id), []))
    listing_type = listing.type_label
    subtype_label = _lookup_label(PROPERTY_SUBTYPES, listing.property_subtype_id)

    derived = {
        "broker_display": " ".join(broker_pill(b) for b in brokers),
        "brokers_arr": [
            BrokerSummary(id=b.id, name=b.full_name, email=b.email) for b in brokers
        ],
        "total_available_sf": available,
        "location": format_location(listing),
        "size": format_size(available, listing.building_size_sf),
        "size_detail": format_size_detail(available, listing.building_size_sf),
        "listing_type": listing_type,
        "title": listing.web_title or TITLE_PLACEHOLDER,
        "url": listing.lease_listing_url or listing.sale_listing_url or URL_PLACEHOLDER,
        "image_url": first_photo_url(listing),
        "brochure_url": select_brochure(listing, listing_type),
        "video_url": listing.you_tube_url or listing.matterport_url or None,
        "description": select_description(listing),
        "property_type_label": _lookup_label(PROPERTY_TYPES, listing.property_type_id),
        "subtype_label": subtype_label,
        "subtype_type_line": " – ".join(p for p in (subtype_label, listing_type) if p),
    }
    return DerivedListingView.model_validate({**listing.model_dump(), **derived})


def build_views(
    listings: Iterable[Union[Listing, dict[str, Any]]],
    brokers: Iterable[Union[Broker, dict[str, Any]]] = (),
    lease_spaces: Iterable[Union[LeaseSpace, dict[str, Any]]] = (),
) -> list[DerivedListingView]:
    """Join every listing with its brokers and lease spaces.

    Accepts models or raw upstream dicts for each collection. Records that
    fail validation are logged and left out of the join.
    """
    broker_index = index_brokers(brokers)
    spaces_index = group_lease_spaces(lease_spaces)
    views = [build_view(l, broker_index, spaces_index) for l in valid_models(Listing, listings)]
    logger.debug(
        f"Built {len(views)} views from {len(broker_index)} brokers "
        f"and {sum(len(s) for s in spaces_index.values())} lease spaces"
    )
    return views
