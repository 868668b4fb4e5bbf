"""Listing, broker, lease space and snapshot data models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import FOR_LEASE, FOR_SALE, FOR_SALE_AND_LEASE

Number = int | float


class Listing(BaseModel):
    """Property record from the upstream listings provider.

    Only the fields the proxy and dashboard read are declared. Every other
    upstream field is kept as an extra and re-served unchanged.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    # Identification
    id: int | str = Field(..., description="Upstream property id")

    # Location
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None

    # Classification
    property_type_id: int | str | None = None
    property_subtype_id: int | str | None = None
    lease: bool | None = None
    sale: bool | None = None

    # Marketing copy
    lease_listing_web_title: str | None = None
    sale_listing_web_title: str | None = None
    lease_description: str | None = None
    sale_description: str | None = None

    # Size
    building_size_sf: Number | None = Field(default=None, description="Building size in SF")

    # Media and links
    photos: list[dict[str, Any]] | None = None
    lease_listing_url: str | None = None
    sale_listing_url: str | None = None
    lease_pdf_url: str | None = None
    sale_pdf_url: str | None = None
    you_tube_url: str | None = None
    matterport_url: str | None = None

    # Brokers
    broker_id: int | str | None = None
    second_broker_id: int | str | None = None

    @field_validator("address", "city", "state", "zip", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        """Upstream sometimes sends zip codes as numbers."""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def web_title(self) -> str | None:
        """Lease web title, falling back to the sale web title."""
        return self.lease_listing_web_title or self.sale_listing_web_title or None

    @property
    def type_label(self) -> str:
        """For Sale & Lease, For Lease, or For Sale.

        A listing with neither flag set is reported as For Sale.
        """
        if self.lease and self.sale:
            return FOR_SALE_AND_LEASE
        if self.lease:
            return FOR_LEASE
        return FOR_SALE

    @property
    def broker_ids(self) -> list[int | str]:
        return [b for b in (self.broker_id, self.second_broker_id) if b is not None]

    def address_text(self, separator: str = " ") -> str:
        """Address, city, state and zip joined with `separator`."""
        parts = (self.address, self.city, self.state, self.zip)
        return separator.join(p or "" for p in parts)


class Broker(BaseModel):
    """Broker contact record."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: int | str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class LeaseSpace(BaseModel):
    """Leasable sub-unit of a property."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: int | str | None = None
    property_id: int | str | None = None
    size_sf: Number | None = None


class BrokerSummary(BaseModel):
    """Structured broker entry attached to a derived listing view."""

    id: int | str
    name: str
    email: str | None = None


class CacheSnapshot(BaseModel):
    """Complete set of cached listings plus its freshness timestamp.

    Replaced wholesale on every refresh. `last_updated` is set only when the
    listings came from a successful fetch or from the persisted file.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    listings: tuple[Listing, ...] = ()
    last_updated: datetime | None = Field(default=None, alias="lastUpdated")

    @classmethod
    def empty(cls) -> "CacheSnapshot":
        """Well-formed snapshot with zero listings and no timestamp."""
        return cls(listings=(), last_updated=None)

    @property
    def count(self) -> int:
        return len(self.listings)

    @property
    def is_populated(self) -> bool:
        return self.last_updated is not None


class DerivedListingView(Listing):
    """Listing joined with brokers and lease spaces, plus display fields.

    Built fresh for every table load and never persisted.
    """

    broker_display: str = ""
    brokers_arr: list[BrokerSummary] = Field(default_factory=list)
    total_available_sf: Number = 0

    location: str = ""
    size: str = ""
    size_detail: str = ""
    listing_type: str = FOR_SALE
    title: str = ""
    url: str = ""
    image_url: str = ""
    brochure_url: str | None = None
    video_url: str | None = None
    description: str = ""
    property_type_label: str = ""
    subtype_label: str = ""
    subtype_type_line: str = ""

    @property
    def broker_names(self) -> list[str]:
        return [b.name for b in self.brokers_arr]
