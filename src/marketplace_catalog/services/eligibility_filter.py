"""Catalog eligibility filters.

Each stage takes a list of items and returns a new list. A stage whose
criterion is in its default state returns its input unchanged, so the
pipeline as a whole is the identity for ``CatalogFilters()``.
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime

from marketplace_catalog.models.catalog_models import (
    CatalogItem,
    GeoPoint,
    ItemType,
    Vendor,
)
from marketplace_catalog.models.filter_models import (
    ALL_CATEGORIES,
    ALL_KINDS,
    CatalogFilters,
    DeliveryMethod,
    TypeFilter,
)
from marketplace_catalog.services.distance import distance_between
from marketplace_catalog.services.opening_hours import is_vendor_open

logger = logging.getLogger(__name__)


def filter_by_community(
    items: Sequence[CatalogItem],
    vendors_by_id: Mapping[str, Vendor],
    community_id: str | None,
) -> list[CatalogItem]:
    """Keep items belonging to a community.

    Products match on their own community. Services carry no community of
    their own and are scoped through their vendor.
    """
    if not community_id:
        return list(items)

    def item_community(item: CatalogItem) -> str | None:
        if item.item_type == ItemType.PRODUCT:
            return item.community_id
        vendor = vendors_by_id.get(item.vendor_id)
        return vendor.community_id if vendor else None

    return [item for item in items if item_community(item) == community_id]


def filter_by_vendor(items: Sequence[CatalogItem], vendor_id: str | None) -> list[CatalogItem]:
    if not vendor_id:
        return list(items)
    return [item for item in items if item.vendor_id == vendor_id]


def filter_by_query(items: Sequence[CatalogItem], query: str | None) -> list[CatalogItem]:
    """Case-insensitive substring search over name, description and subtitle."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(items)

    return [
        item
        for item in items
        if needle in item.name.lower()
        or needle in (item.description or "").lower()
        or needle in (item.subtitle or "").lower()
    ]


def filter_by_type(items: Sequence[CatalogItem], item_type: TypeFilter) -> list[CatalogItem]:
    if item_type == TypeFilter.ALL:
        return list(items)
    wanted = ItemType(item_type.value)
    return [item for item in items if item.item_type == wanted]


def filter_by_product_kind(
    items: Sequence[CatalogItem],
    product_kind: str | None,
    item_type: TypeFilter = TypeFilter.ALL,
) -> list[CatalogItem]:
    """Keep products of one kind, e.g. prepared_food or grocery.

    Services have no kind and are dropped while the criterion is active. The
    criterion is ignored when only services are being listed.
    """
    if not product_kind or product_kind == ALL_KINDS or item_type == TypeFilter.SERVICE:
        return list(items)
    return [
        item
        for item in items
        if item.item_type == ItemType.PRODUCT and item.product_kind == product_kind
    ]


def filter_by_category(items: Sequence[CatalogItem], category_id: str) -> list[CatalogItem]:
    if not category_id or category_id == ALL_CATEGORIES:
        return list(items)
    return [item for item in items if category_id in item.category_ids]


def filter_by_delivery_method(
    items: Sequence[CatalogItem], method: DeliveryMethod
) -> list[CatalogItem]:
    if method == DeliveryMethod.RIDER:
        return [item for item in items if item.allow_rider_delivery]
    if method == DeliveryMethod.PARCEL:
        return [item for item in items if item.allow_parcel_delivery]
    return list(items)


def filter_perishable(items: Sequence[CatalogItem], enabled: bool) -> list[CatalogItem]:
    """Keep perishable items and prepared food when enabled."""
    if not enabled:
        return list(items)
    return [item for item in items if item.perishable or item.is_prepared_food]


def filter_open_now(
    items: Sequence[CatalogItem],
    vendors_by_id: Mapping[str, Vendor],
    enabled: bool,
    now: datetime | None = None,
) -> list[CatalogItem]:
    """Keep items whose vendor is open at ``now`` (viewer local time)."""
    if not enabled:
        return list(items)

    moment = now or datetime.now()
    return [item for item in items if is_vendor_open(vendors_by_id.get(item.vendor_id), moment)]


def filter_by_proximity(
    items: Sequence[CatalogItem],
    location: GeoPoint | None,
    near_me: bool,
    radius_km: float,
) -> list[CatalogItem]:
    """Keep items within ``radius_km`` of the viewer, nearest first.

    Items without a pickup location are dropped while the filter is active.
    Without a viewer location there is nothing to measure from, so the
    criterion is treated as "don't care".
    """
    if not near_me or location is None:
        return list(items)

    ranked: list[tuple[float, CatalogItem]] = []
    for item in items:
        distance = distance_between(location, item.pickup_location)
        if distance is not None and distance <= radius_km:
            ranked.append((distance, item))

    ranked.sort(key=lambda pair: pair[0])
    return [item for _, item in ranked]


def filter_catalog(
    items: Sequence[CatalogItem],
    filters: CatalogFilters,
    vendors_by_id: Mapping[str, Vendor] | None = None,
    location: GeoPoint | None = None,
    now: datetime | None = None,
) -> list[CatalogItem]:
    """Apply every eligibility stage in a fixed order.

    Order: community, vendor, search, type, product kind, category,
    delivery method, perishable, open now, proximity (which also sorts by
    distance).

    Args:
        items: Catalog items in source order
        filters: Criteria to apply
        vendors_by_id: Vendor records for community scoping and opening hours
        location: Viewer coordinate, if known
        now: Viewer local time for the open-now check

    Returns:
        Admitted items
    """
    vendors = vendors_by_id or {}

    result = filter_by_community(items, vendors, filters.community_id)
    result = filter_by_vendor(result, filters.vendor_id)
    result = filter_by_query(result, filters.query)
    result = filter_by_type(result, filters.item_type)
    result = filter_by_product_kind(result, filters.product_kind, filters.item_type)
    result = filter_by_category(result, filters.category_id)
    result = filter_by_delivery_method(result, filters.delivery_method)
    result = filter_perishable(result, filters.perishable_only)
    result = filter_open_now(result, vendors, filters.open_now, now)
    result = filter_by_proximity(result, location, filters.near_me, filters.radius_km)

    logger.debug(f"Eligibility filters admitted {len(result)} of {len(items)} items")
    return result
