"""Catalog data models.

These models are read-only snapshots of rows held by the marketplace's hosted
Postgres store. Raw rows are mapped through the ``from_record`` classmethods,
which is the one place where missing or malformed optional data is replaced by
its least-restrictive default.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Weekday keys used by vendor opening-hours schedules, indexed by datetime.weekday()
WEEKDAY_KEYS: tuple[str, ...] = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

DEFAULT_CURRENCY = "MYR"

PREPARED_FOOD_KIND = "prepared_food"
GROCERY_KIND = "grocery"


class ItemType(str, Enum):
    """Kinds of listing a vendor can publish."""

    PRODUCT = "product"
    SERVICE = "service"


def _optional_float(value: Any) -> float | None:
    """Coerce a numeric-looking value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _clamp_percent(value: float) -> float:
    return min(100.0, max(0.0, value))


def _optional_flag(value: Any, default: bool) -> bool:
    return default if value is None else bool(value)


class GeoPoint(BaseModel):
    """A latitude/longitude pair in degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., description="Latitude in degrees", ge=-90, le=90)
    longitude: float = Field(..., description="Longitude in degrees", ge=-180, le=180)

    @classmethod
    def from_coordinates(cls, latitude: Any, longitude: Any) -> "GeoPoint | None":
        """Build a point only when both coordinates are present and valid.

        Args:
            latitude: Raw latitude value (may be None, a string or a number)
            longitude: Raw longitude value (may be None, a string or a number)

        Returns:
            GeoPoint, or None when either coordinate is missing or out of range
        """
        lat = _optional_float(latitude)
        lng = _optional_float(longitude)
        if lat is None or lng is None:
            return None
        if not (-90 <= lat <= 90 and -180 <= lng <= 180):
            return None
        return cls(latitude=lat, longitude=lng)


class DaySchedule(BaseModel):
    """Opening hours for one weekday, as entered in the vendor's store settings."""

    model_config = ConfigDict(frozen=True)

    open: str | None = Field(None, description="Opening time as HH:MM")
    close: str | None = Field(None, description="Closing time as HH:MM")
    closed: bool = Field(default=False, description="Whether the store is closed all day")


class Vendor(BaseModel):
    """Vendor record as needed for pricing and opening-hours decisions."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique identifier for the vendor")
    member_discount_override_percent: float | None = Field(
        None, description="Discount that replaces the community default", ge=0, le=100
    )
    community_id: str | None = Field(None, description="Community the vendor trades in")
    opening_hours: dict[str, DaySchedule] | None = Field(
        None, description="Opening hours keyed by weekday (mon..sun)"
    )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Vendor":
        """Create a Vendor from a raw ``vendors`` row.

        Args:
            record: Row dictionary from the data store

        Returns:
            Vendor: Parsed model instance
        """
        override = _optional_float(record.get("member_discount_override_percent"))

        opening_hours: dict[str, DaySchedule] | None = None
        raw_hours = record.get("opening_hours")
        if isinstance(raw_hours, dict):
            opening_hours = {}
            for day, raw_day in raw_hours.items():
                if not isinstance(raw_day, dict):
                    continue
                opening_hours[str(day).strip().lower()[:3]] = DaySchedule(
                    open=raw_day.get("open") if isinstance(raw_day.get("open"), str) else None,
                    close=raw_day.get("close") if isinstance(raw_day.get("close"), str) else None,
                    closed=raw_day.get("closed") is True,
                )

        return cls(
            id=str(record["id"]),
            member_discount_override_percent=(
                _clamp_percent(override) if override is not None else None
            ),
            community_id=record.get("community_id"),
            opening_hours=opening_hours,
        )


class Community(BaseModel):
    """Community record carrying the default member discount."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique identifier for the community")
    name: str = Field(..., description="Community name")
    member_discount_percent: float = Field(
        default=0.0, description="Default discount for members", ge=0, le=100
    )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Community":
        """Create a Community from a raw ``communities`` row.

        Args:
            record: Row dictionary from the data store

        Returns:
            Community: Parsed model instance
        """
        percent = _optional_float(record.get("member_discount_percent"))
        return cls(
            id=str(record["id"]),
            name=record.get("name") or "",
            member_discount_percent=_clamp_percent(percent) if percent is not None else 0.0,
        )


class CatalogItem(BaseModel):
    """A product or service listed in the catalog."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique identifier for the listing")
    item_type: ItemType = Field(default=ItemType.PRODUCT, description="Product or service")
    name: str = Field(..., description="Display name")
    subtitle: str | None = Field(None, description="Short subtitle (services)")
    description: str | None = Field(None, description="Listing description")
    price_cents: int = Field(..., description="Price in minor currency units", ge=0)
    currency: str = Field(default=DEFAULT_CURRENCY, description="ISO 4217 currency code")
    vendor_id: str = Field(..., description="Vendor selling this listing")
    community_id: str | None = Field(None, description="Community the listing belongs to")
    pickup_location: GeoPoint | None = Field(None, description="Pickup coordinate")
    product_kind: str | None = Field(None, description="Kind tag, e.g. prepared_food, grocery")
    category_ids: tuple[str, ...] = Field(default=(), description="Assigned category tags")
    allow_rider_delivery: bool = Field(default=True, description="Local rider can deliver")
    allow_parcel_delivery: bool = Field(default=True, description="Parcel courier can ship")
    perishable: bool = Field(default=False, description="Item spoils in transit")
    prep_time_minutes: int | None = Field(None, description="Preparation estimate", ge=0)
    created_at: datetime | None = Field(None, description="Listing creation time")

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Validate that currency is a 3-letter code."""
        code = v.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError("currency must be a 3-letter code")
        return code

    @property
    def is_prepared_food(self) -> bool:
        return self.product_kind == PREPARED_FOOD_KIND

    @property
    def is_perishable_grocery(self) -> bool:
        return self.product_kind == GROCERY_KIND and self.perishable

    @classmethod
    def from_record(
        cls,
        record: dict[str, Any],
        item_type: ItemType = ItemType.PRODUCT,
        category_ids: tuple[str, ...] = (),
    ) -> "CatalogItem":
        """Create a CatalogItem from a ``products`` or ``vendor_services`` row.

        Missing delivery flags count as allowed and a missing currency falls
        back to the marketplace default.

        Args:
            record: Row dictionary from the data store
            item_type: Which table the row came from
            category_ids: Category tags assigned to the listing

        Returns:
            CatalogItem: Parsed model instance
        """
        data: dict[str, Any] = {
            "id": str(record["id"]),
            "item_type": item_type,
            "name": record.get("name") or "",
            "subtitle": record.get("subtitle"),
            "description": record.get("description"),
            "price_cents": int(record.get("price_cents") or 0),
            "currency": record.get("currency") or DEFAULT_CURRENCY,
            "vendor_id": str(record["vendor_id"]),
            "community_id": record.get("community_id") if item_type == ItemType.PRODUCT else None,
            "pickup_location": GeoPoint.from_coordinates(
                record.get("pickup_lat"), record.get("pickup_lng")
            ),
            "product_kind": record.get("product_kind"),
            "category_ids": tuple(category_ids),
            "allow_rider_delivery": _optional_flag(record.get("allow_rider_delivery"), True),
            "allow_parcel_delivery": _optional_flag(record.get("allow_easyparcel"), True),
            "perishable": _optional_flag(record.get("perishable"), False),
        }

        prep_time = record.get("prep_time_minutes")
        if isinstance(prep_time, int) and prep_time >= 0:
            data["prep_time_minutes"] = prep_time

        if record.get("created_at"):
            data["created_at"] = datetime.fromisoformat(str(record["created_at"]))

        return cls(**data)


@dataclass(frozen=True)
class ViewerContext:
    """Who is looking at the catalog, passed explicitly to every computation.

    Attributes:
        viewer_id: Authenticated user id, None for anonymous visitors
        community_ids: Communities the viewer is a member of
        location: Viewer coordinate from the request or their profile
    """

    viewer_id: str | None = None
    community_ids: frozenset[str] = field(default_factory=frozenset)
    location: GeoPoint | None = None


@dataclass(frozen=True)
class CatalogSnapshot:
    """A consistent set of catalog inputs loaded together.

    Attributes:
        items: Active listings, newest first
        vendors_by_id: Vendor records keyed by id
        communities_by_id: Community records keyed by id
        loaded_at: When the snapshot was assembled
    """

    items: tuple[CatalogItem, ...]
    vendors_by_id: dict[str, Vendor]
    communities_by_id: dict[str, Community]
    loaded_at: datetime
