"""CSV export of the filtered and sorted listing table."""

import csv
import io
import logging
from pathlib import Path

from ..models.listing import DerivedListingView
from .builder import format_square_feet, format_location

logger = logging.getLogger(__name__)

EXPORT_HEADER = ["Property", "Size", "Brokers", "Type", "Available SF", "URL"]


def _plain_number(value: int | float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def export_row(view: DerivedListingView) -> list[str]:
    """One CSV row: location, size, broker names, type, available SF, URL."""
    if view.total_available_sf:
        size = format_square_feet(view.total_available_sf)
    elif view.building_size_sf:
        size = format_square_feet(view.building_size_sf)
    else:
        size = ""

    available = view.total_available_sf
    return [
        format_location(view).strip(),
        size,
        "; ".join(view.broker_names),
        view.listing_type,
        _plain_number(available) if available else "",
        view.lease_listing_url or view.sale_listing_url or "",
    ]


def to_csv(views: list[DerivedListingView]) -> str:
    """Render views as CSV text.

    The header row is written bare; every data value is double-quoted with
    embedded quotes doubled.
    """
    buffer = io.StringIO()
    buffer.write(",".join(EXPORT_HEADER))
    if views:
        buffer.write("\n")
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerows(export_row(v) for v in views)
    return buffer.getvalue().rstrip("\n")


def write_csv(views: list[DerivedListingView], path: Path) -> int:
    """Write the CSV export to a file.

    Returns:
        Number of data rows written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_csv(views), encoding="utf-8")
    logger.info(f"Exported {len(views)} listings to {path}")
    return len(views)
