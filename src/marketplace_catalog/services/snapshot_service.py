"""Snapshot service for loading consistent catalog inputs."""

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from marketplace_catalog.adapters.base_adapter import CatalogSource
from marketplace_catalog.models.catalog_models import (
    CatalogItem,
    CatalogSnapshot,
    GeoPoint,
    ItemType,
    ViewerContext,
)
from marketplace_catalog.observability import traced
from marketplace_catalog.observability.metrics import record_cache_lookup
from marketplace_catalog.services.subscription_hub import SubscriptionHub

logger = logging.getLogger(__name__)

# Tables whose changes make a cached snapshot stale
SNAPSHOT_TABLES: tuple[str, ...] = (
    "products",
    "vendor_services",
    "vendors",
    "communities",
    "product_categories",
    "service_categories",
)


def topic_for_table(table: str) -> str:
    return f"catalog.{table}"


class CatalogSnapshotService:
    """Service for assembling catalog snapshots and viewer contexts.

    Items are loaded first; vendors, communities and category tags for those
    items are then loaded concurrently. Only an items failure fails the load;
    the other lookups degrade to empty maps so every item stays visible with
    default pricing.

    The assembled snapshot is cached for ``cache_ttl_seconds`` and dropped
    whenever a catalog change is published on the subscription hub.
    """

    def __init__(
        self,
        source: CatalogSource,
        subscriptions: SubscriptionHub | None = None,
        cache_ttl_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the CatalogSnapshotService.

        Args:
            source: Catalog data source
            subscriptions: Hub delivering catalog change events, if any
            cache_ttl_seconds: How long a loaded snapshot is reused (0 disables caching)
            clock: Monotonic clock, injectable for tests
        """
        self.source = source
        self.subscriptions = subscriptions
        self.cache_ttl_seconds = cache_ttl_seconds
        self._clock = clock

        self._snapshot: CatalogSnapshot | None = None
        self._cached_at = 0.0
        self._generation = 0

        self._subscription_tokens: list[str] = []
        if subscriptions is not None:
            self._subscription_tokens = [
                subscriptions.subscribe(topic_for_table(table), self._on_catalog_changed)
                for table in SNAPSHOT_TABLES
            ]

    def invalidate(self) -> None:
        """Drop the cached snapshot so the next request reloads it."""
        self._snapshot = None
        self._generation += 1
        logger.info("Catalog snapshot cache invalidated")

    def close(self) -> None:
        """Release hub subscriptions."""
        if self.subscriptions is not None:
            for token in self._subscription_tokens:
                self.subscriptions.unsubscribe(token)
        self._subscription_tokens = []

    def _on_catalog_changed(self, _event: Any) -> None:
        self.invalidate()

    def _cache_is_fresh(self) -> bool:
        return (
            self._snapshot is not None
            and self._clock() - self._cached_at < self.cache_ttl_seconds
        )

    async def get_snapshot(self) -> CatalogSnapshot | None:
        """Return the current catalog snapshot.

        Returns:
            CatalogSnapshot, or None if the catalog items could not be loaded
        """
        if self._cache_is_fresh():
            record_cache_lookup(hit=True)
            return self._snapshot

        record_cache_lookup(hit=False)
        generation = self._generation
        snapshot = await self.load_snapshot()

        # A change published while loading means this snapshot may already be stale
        if snapshot is not None and generation == self._generation:
            self._snapshot = snapshot
            self._cached_at = self._clock()

        return snapshot

    @traced("load_catalog_snapshot", service_name="catalog-svc")
    async def load_snapshot(self) -> CatalogSnapshot | None:
        """Load a fresh snapshot from the catalog source, bypassing the cache.

        Returns:
            CatalogSnapshot, or None if the catalog items could not be loaded
        """
        items = await self.source.fetch_items()
        if items is None:
            logger.error(f"Failed to load catalog items from {self.source.source_name}")
            return None

        vendor_ids = sorted({item.vendor_id for item in items})
        community_ids = sorted({item.community_id for item in items if item.community_id})
        product_ids = [item.id for item in items if item.item_type == ItemType.PRODUCT]
        service_ids = [item.id for item in items if item.item_type == ItemType.SERVICE]

        vendors, communities, categories = await asyncio.gather(
            self.source.fetch_vendors(vendor_ids),
            self.source.fetch_communities(community_ids),
            self.source.fetch_item_categories(product_ids, service_ids),
        )

        if vendors is None:
            logger.warning("Vendor lookup failed, items will use default pricing and hours")
            vendors = []
        if communities is None:
            logger.warning("Community lookup failed, member discounts default to 0")
            communities = []
        if categories is None:
            logger.warning("Category lookup failed, category filters will match nothing")
            categories = {}

        tagged_items: list[CatalogItem] = [
            item.model_copy(update={"category_ids": categories.get(item.id, ())})
            if item.id in categories
            else item
            for item in items
        ]

        snapshot = CatalogSnapshot(
            items=tuple(tagged_items),
            vendors_by_id={vendor.id: vendor for vendor in vendors},
            communities_by_id={community.id: community for community in communities},
            loaded_at=datetime.now(UTC),
        )

        logger.info(
            f"Loaded catalog snapshot: {len(snapshot.items)} items, "
            f"{len(snapshot.vendors_by_id)} vendors, {len(snapshot.communities_by_id)} communities"
        )
        return snapshot

    async def get_viewer_context(
        self,
        viewer_id: str | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
    ) -> ViewerContext:
        """Build the viewer context for a request.

        A location supplied with the request wins over the one saved on the
        viewer's profile. Anonymous viewers have no memberships.

        Args:
            viewer_id: Authenticated user id, if any
            latitude: Device latitude, if shared
            longitude: Device longitude, if shared

        Returns:
            ViewerContext for the composer
        """
        location = GeoPoint.from_coordinates(latitude, longitude)

        if not viewer_id:
            return ViewerContext(location=location)

        if location is None:
            memberships, location = await asyncio.gather(
                self.source.fetch_memberships(viewer_id),
                self.source.fetch_profile_location(viewer_id),
            )
        else:
            memberships = await self.source.fetch_memberships(viewer_id)

        if memberships is None:
            logger.warning(f"Membership lookup failed for viewer {viewer_id}, using none")
            memberships = frozenset()

        return ViewerContext(viewer_id=viewer_id, community_ids=memberships, location=location)
