"""Base adapter for catalog data sources.

This module defines the abstract base class every catalog data source must
implement. Expected failures (HTTP errors, network issues) are reported as
None rather than raised; the snapshot layer decides how to degrade.
"""

from abc import ABC, abstractmethod

from marketplace_catalog.models.catalog_models import CatalogItem, Community, GeoPoint, Vendor


class CatalogSource(ABC):
    """Abstract base class for the remote store holding catalog data.

    Lookups by id accept an empty list and return an empty result without
    contacting the store.
    """

    def __init__(self, source_name: str) -> None:
        """Initialize the catalog source.

        Args:
            source_name: Name of the backing store (e.g., 'postgrest')
        """
        self.source_name = source_name

    @abstractmethod
    async def fetch_items(self) -> list[CatalogItem] | None:
        """Fetch all active products and services, newest first.

        Returns:
            List of catalog items (without category tags), or None on failure
        """
        pass

    @abstractmethod
    async def fetch_item_categories(
        self, product_ids: list[str], service_ids: list[str]
    ) -> dict[str, tuple[str, ...]] | None:
        """Fetch category tags for the given listings.

        Args:
            product_ids: Product identifiers
            service_ids: Vendor service identifiers

        Returns:
            Mapping of item id to its category ids, or None on failure
        """
        pass

    @abstractmethod
    async def fetch_vendors(self, vendor_ids: list[str]) -> list[Vendor] | None:
        """Fetch vendor records by id.

        Returns:
            List of vendors, or None on failure
        """
        pass

    @abstractmethod
    async def fetch_communities(self, community_ids: list[str]) -> list[Community] | None:
        """Fetch community records by id.

        Returns:
            List of communities, or None on failure
        """
        pass

    @abstractmethod
    async def fetch_memberships(self, viewer_id: str) -> frozenset[str] | None:
        """Fetch the ids of communities a viewer belongs to.

        Returns:
            Set of community ids, or None on failure
        """
        pass

    @abstractmethod
    async def fetch_profile_location(self, viewer_id: str) -> GeoPoint | None:
        """Fetch the location saved on a viewer's profile.

        Returns:
            GeoPoint, or None if unset or on failure
        """
        pass
