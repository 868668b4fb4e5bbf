"""Client-side filtering and sorting of derived listing views."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..models.listing import DerivedListingView


class SortKey(str, Enum):
    """Sortable table columns."""

    LOCATION = "location"
    SIZE = "size"
    BROKERS = "brokers"
    TYPE = "type"


ASCENDING = 1
DESCENDING = -1


def sort_value(view: DerivedListingView, key: SortKey) -> Any:
    """Comparison value of a view for a sort column.

    Size sorts on the numeric building size, not the aggregated available SF.
    """
    if key == SortKey.LOCATION:
        return view.address_text().lower()
    if key == SortKey.SIZE:
        return view.building_size_sf or 0
    if key == SortKey.BROKERS:
        return (view.broker_display or "").lower()
    if key == SortKey.TYPE:
        return view.listing_type.lower()
    raise ValueError(f"Unknown sort key: {key}")


def filter_views(
    views: list[DerivedListingView],
    text_query: str = "",
    type_filter: str = "",
) -> list[DerivedListingView]:
    """Apply the type filter and the text query.

    The text query is trimmed like the server-side search, then matched
    case-insensitively as a substring across address,
    city, state, zip, broker display and both web titles. The type filter
    compares the property type id as a string.
    """
    results = views
    if type_filter:
        results = [v for v in results if str(v.property_type_id) == type_filter]

    q = (text_query or "").strip().lower()
    if q:
        results = [
            v for v in results
            if any(
                q in (field or "").lower()
                for field in (
                    v.address,
                    v.city,
                    v.state,
                    v.zip,
                    v.broker_display,
                    v.lease_listing_web_title,
                    v.sale_listing_web_title,
                )
            )
        ]
    return list(results)


def sort_views(
    views: list[DerivedListingView],
    key: Optional[SortKey],
    direction: int = ASCENDING,
) -> list[DerivedListingView]:
    """Return a sorted copy. Order between equal values is not guaranteed."""
    if key is None:
        return list(views)
    key = SortKey(key)
    return sorted(views, key=lambda v: sort_value(v, key), reverse=direction == DESCENDING)


@dataclass
class FilterSortState:
    """Current table filter and sort selection.

    Example:
        state = FilterSortState()
        state.toggle_sort("location")   # ascending
        state.toggle_sort("location")   # descending
        rows = state.apply(views)
    """

    text_query: str = ""
    type_filter: str = ""
    sort_key: Optional[SortKey] = None
    sort_direction: int = ASCENDING

    def toggle_sort(self, key: SortKey | str) -> None:
        """Flip direction on the active column, or switch column ascending."""
        key = SortKey(key)
        if self.sort_key == key:
            self.sort_direction *= -1
        else:
            self.sort_key = key
            self.sort_direction = ASCENDING

    def indicator(self, key: SortKey | str) -> str:
        """Header arrow for a column: "▲", "▼" or ""."""
        if self.sort_key is None or self.sort_key != SortKey(key):
            return ""
        return "▲" if self.sort_direction == ASCENDING else "▼"

    def apply(self, views: list[DerivedListingView]) -> list[DerivedListingView]:
        """Filter then sort."""
        filtered = filter_views(views, self.text_query, self.type_filter)
        return sort_views(filtered, self.sort_key, self.sort_direction)
