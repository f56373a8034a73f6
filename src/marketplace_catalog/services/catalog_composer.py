"""Catalog composer.

Turns a catalog snapshot, a viewer and filter criteria into the ordered list of
annotated entries a page renders. The composer is a pure function of its
inputs: calling it twice with the same arguments yields equal results.
"""

import logging
from collections.abc import Sequence
from datetime import datetime

from marketplace_catalog.models.catalog_models import CatalogItem, CatalogSnapshot, ViewerContext
from marketplace_catalog.models.filter_models import CatalogEntry, CatalogFilters, SortOrder
from marketplace_catalog.observability import traced
from marketplace_catalog.services.currency_formatter import format_minor_units
from marketplace_catalog.services.discount_resolver import (
    is_member,
    member_price,
    resolve_discount_percent,
)
from marketplace_catalog.services.distance import distance_between
from marketplace_catalog.services.eligibility_filter import filter_catalog

logger = logging.getLogger(__name__)


def annotate_item(
    item: CatalogItem,
    snapshot: CatalogSnapshot,
    viewer: ViewerContext,
) -> CatalogEntry:
    """Attach discount, member price, distance and display prices to an item.

    Args:
        item: The item to annotate
        snapshot: Snapshot holding the vendor and community records
        viewer: The viewer's memberships and location

    Returns:
        CatalogEntry for rendering
    """
    vendor = snapshot.vendors_by_id.get(item.vendor_id)
    community = (
        snapshot.communities_by_id.get(item.community_id) if item.community_id else None
    )

    discount = resolve_discount_percent(item, vendor, community)
    viewer_is_member = is_member(item, viewer.community_ids)
    discounted = member_price(item.price_cents, discount, viewer_is_member)
    # Shown to non-members as the price after joining
    prospective = (
        None if viewer_is_member else member_price(item.price_cents, discount, True)
    )

    def display(amount: int | None) -> str | None:
        return format_minor_units(amount, item.currency) if amount is not None else None

    return CatalogEntry(
        item=item,
        effective_discount_percent=discount,
        member_price_cents=discounted,
        prospective_member_price_cents=prospective,
        distance_km=distance_between(viewer.location, item.pickup_location),
        display_price=format_minor_units(item.price_cents, item.currency),
        display_member_price=display(discounted),
        display_prospective_member_price=display(prospective),
    )


def sort_items(items: Sequence[CatalogItem], order: SortOrder) -> list[CatalogItem]:
    """Apply an explicit ordering. Sorting is stable, so ties keep pipeline order."""
    if order == SortOrder.PRICE_ASC:
        return sorted(items, key=lambda item: item.price_cents)
    if order == SortOrder.PRICE_DESC:
        return sorted(items, key=lambda item: item.price_cents, reverse=True)
    if order == SortOrder.NEWEST:
        return sorted(
            items,
            key=lambda item: item.created_at.timestamp() if item.created_at else float("-inf"),
            reverse=True,
        )
    return list(items)


@traced("compose_catalog", service_name="catalog-svc")
def compose_catalog(
    snapshot: CatalogSnapshot,
    viewer: ViewerContext,
    filters: CatalogFilters,
    now: datetime | None = None,
) -> list[CatalogEntry]:
    """Produce the ordered, annotated catalog view.

    Args:
        snapshot: Catalog items with their vendor and community records
        viewer: The viewer's memberships and location
        filters: Filter criteria
        now: Viewer local time for the open-now filter

    Returns:
        Annotated entries in display order
    """
    admitted = filter_catalog(
        snapshot.items,
        filters,
        vendors_by_id=snapshot.vendors_by_id,
        location=viewer.location,
        now=now,
    )
    ordered = sort_items(admitted, filters.sort)

    return [annotate_item(item, snapshot, viewer) for item in ordered]


def find_entry(
    snapshot: CatalogSnapshot,
    viewer: ViewerContext,
    item_id: str,
) -> CatalogEntry | None:
    """Annotate a single item by id, without applying any filters.

    Args:
        snapshot: Catalog snapshot to look in
        viewer: The viewer's memberships and location
        item_id: Catalog item identifier

    Returns:
        CatalogEntry, or None if the item is not in the snapshot
    """
    for item in snapshot.items:
        if item.id == item_id:
            return annotate_item(item, snapshot, viewer)

    logger.info(f"Catalog item {item_id} not found in snapshot")
    return None
