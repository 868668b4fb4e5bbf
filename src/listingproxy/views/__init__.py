"""Table views over the cached listings.

Main Components:
    - build_views: join listings with brokers and lease spaces
    - FilterSortState: text/type filter and column sort selection
    - to_csv / write_csv: CSV export of the current table
    - load_views: fetch everything from a running proxy and join it
"""

from .builder import build_view, build_views, group_lease_spaces, index_brokers
from .export import EXPORT_HEADER, export_row, to_csv, write_csv
from .loader import fetch_table_data, load_views, trigger_refresh
from .table import ASCENDING, DESCENDING, FilterSortState, SortKey, filter_views, sort_views

__all__ = [
    "build_view",
    "build_views",
    "index_brokers",
    "group_lease_spaces",
    "FilterSortState",
    "SortKey",
    "ASCENDING",
    "DESCENDING",
    "filter_views",
    "sort_views",
    "EXPORT_HEADER",
    "export_row",
    "to_csv",
    "write_csv",
    "fetch_table_data",
    "load_views",
    "trigger_refresh",
]
