"""PostgREST catalog source.

Reads catalog rows from the marketplace's hosted Postgres through its REST
gateway (``/rest/v1/<table>``), the same tables the storefront queries.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from marketplace_catalog.adapters.base_adapter import CatalogSource
from marketplace_catalog.models.catalog_models import (
    CatalogItem,
    Community,
    GeoPoint,
    ItemType,
    Vendor,
)
from marketplace_catalog.observability.metrics import record_source_fetch

logger = logging.getLogger(__name__)

T = TypeVar("T")

PRODUCT_COLUMNS = (
    "id,name,description,price_cents,currency,vendor_id,community_id,status,"
    "pickup_lat,pickup_lng,product_kind,perishable,allow_easyparcel,"
    "allow_rider_delivery,prep_time_minutes,created_at"
)
SERVICE_COLUMNS = "id,vendor_id,name,subtitle,description,price_cents,currency,status,created_at"
VENDOR_COLUMNS = "id,member_discount_override_percent,community_id,opening_hours"
COMMUNITY_COLUMNS = "id,name,member_discount_percent"


def in_filter(values: list[str]) -> str:
    """Build a PostgREST ``in`` filter with quoted values."""
    quoted = ",".join('"{}"'.format(value.replace('"', '\\"')) for value in values)
    return f"in.({quoted})"


class PostgrestCatalogSource(CatalogSource):
    """Catalog source backed by a PostgREST endpoint.

    Authenticates with the project's API key, sent both as ``apikey`` and as a
    bearer token.
    """

    def __init__(self, base_url: str, api_key: str, timeout_seconds: float = 10.0) -> None:
        """Initialize the PostgREST source.

        Args:
            base_url: Project URL (e.g., "https://project.supabase.co")
            api_key: API key for the REST gateway
            timeout_seconds: Per-request timeout
        """
        super().__init__("postgrest")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    @property
    def headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

    async def _get_rows(self, table: str, params: dict[str, str]) -> list[dict[str, Any]] | None:
        """Fetch rows from a table.

        Args:
            table: Table name under /rest/v1
            params: PostgREST query parameters

        Returns:
            List of row dictionaries, or None on failure
        """
        url = f"{self.base_url}/rest/v1/{table}"
        started = time.perf_counter()

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(url, params=params, headers=self.headers)
                response.raise_for_status()
                rows = response.json()

        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Failed to fetch {table} from catalog store: {e}")
            record_source_fetch(table, time.perf_counter() - started, success=False)
            return None

        record_source_fetch(table, time.perf_counter() - started, success=True)
        return rows if isinstance(rows, list) else []

    def _parse_rows(
        self, table: str, rows: list[dict[str, Any]], parse: Callable[[dict[str, Any]], T]
    ) -> list[T]:
        """Parse rows, skipping (and logging) any that fail validation."""
        parsed: list[T] = []
        for row in rows:
            try:
                parsed.append(parse(row))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed {table} row {row.get('id')}: {e}")
        return parsed

    async def fetch_items(self) -> list[CatalogItem] | None:
        """Fetch active products and vendor services, newest first.

        Both requests must succeed for items to be returned.
        """
        product_rows, service_rows = await asyncio.gather(
            self._get_rows(
                "products",
                {"select": PRODUCT_COLUMNS, "status": "eq.active", "order": "created_at.desc"},
            ),
            self._get_rows(
                "vendor_services",
                {"select": SERVICE_COLUMNS, "status": "eq.active", "order": "created_at.desc"},
            ),
        )

        if product_rows is None or service_rows is None:
            return None

        products = self._parse_rows(
            "products", product_rows, lambda row: CatalogItem.from_record(row, ItemType.PRODUCT)
        )
        services = self._parse_rows(
            "vendor_services",
            service_rows,
            lambda row: CatalogItem.from_record(row, ItemType.SERVICE),
        )

        return products + services

    async def fetch_item_categories(
        self, product_ids: list[str], service_ids: list[str]
    ) -> dict[str, tuple[str, ...]] | None:
        """Fetch category tags from the product and service join tables."""
        empty: list[dict[str, Any]] = []

        async def no_rows() -> list[dict[str, Any]]:
            return empty

        product_rows, service_rows = await asyncio.gather(
            self._get_rows(
                "product_categories",
                {"select": "product_id,category_id", "product_id": in_filter(product_ids)},
            )
            if product_ids
            else no_rows(),
            self._get_rows(
                "service_categories",
                {"select": "service_id,category_id", "service_id": in_filter(service_ids)},
            )
            if service_ids
            else no_rows(),
        )

        if product_rows is None or service_rows is None:
            return None

        categories: dict[str, list[str]] = {}
        for row in product_rows:
            if row.get("product_id") and row.get("category_id"):
                categories.setdefault(str(row["product_id"]), []).append(str(row["category_id"]))
        for row in service_rows:
            if row.get("service_id") and row.get("category_id"):
                categories.setdefault(str(row["service_id"]), []).append(str(row["category_id"]))

        return {item_id: tuple(ids) for item_id, ids in categories.items()}

    async def fetch_vendors(self, vendor_ids: list[str]) -> list[Vendor] | None:
        if not vendor_ids:
            return []

        rows = await self._get_rows(
            "vendors", {"select": VENDOR_COLUMNS, "id": in_filter(vendor_ids)}
        )
        if rows is None:
            return None

        return self._parse_rows("vendors", rows, Vendor.from_record)

    async def fetch_communities(self, community_ids: list[str]) -> list[Community] | None:
        if not community_ids:
            return []

        rows = await self._get_rows(
            "communities", {"select": COMMUNITY_COLUMNS, "id": in_filter(community_ids)}
        )
        if rows is None:
            return None

        return self._parse_rows("communities", rows, Community.from_record)

    async def fetch_memberships(self, viewer_id: str) -> frozenset[str] | None:
        rows = await self._get_rows(
            "community_members", {"select": "community_id", "user_id": f"eq.{viewer_id}"}
        )
        if rows is None:
            return None

        return frozenset(str(row["community_id"]) for row in rows if row.get("community_id"))

    async def fetch_profile_location(self, viewer_id: str) -> GeoPoint | None:
        rows = await self._get_rows(
            "profiles", {"select": "latitude,longitude", "id": f"eq.{viewer_id}", "limit": "1"}
        )
        if not rows:
            return None

        return GeoPoint.from_coordinates(rows[0].get("latitude"), rows[0].get("longitude"))
