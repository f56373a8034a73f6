"""FastAPI application for catalog endpoints."""

import logging
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from pydantic import BaseModel, ValidationError

from marketplace_catalog.auth.api_dependencies import get_api_key_from_header
from marketplace_catalog.auth.api_key_validator import APIKeyValidator
from marketplace_catalog.handlers.event_handler import CatalogChangedEvent, CatalogEventHandler
from marketplace_catalog.models.catalog_models import CatalogSnapshot
from marketplace_catalog.models.delivery_models import DeliveryPlan, DeliveryPreference
from marketplace_catalog.models.filter_models import (
    ALL_CATEGORIES,
    DEFAULT_RADIUS_KM,
    CatalogEntry,
    CatalogFilters,
    DeliveryMethod,
    SortOrder,
    TypeFilter,
)
from marketplace_catalog.observability.metrics import record_compose
from marketplace_catalog.services.catalog_composer import compose_catalog, find_entry
from marketplace_catalog.services.delivery_planner import plan_delivery
from marketplace_catalog.services.snapshot_service import CatalogSnapshotService

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class CatalogResponse(BaseModel):
    """Response model for a catalog listing."""

    count: int
    items: list[CatalogEntry]


class WebhookResponse(BaseModel):
    """Response model for catalog change webhooks."""

    table: str
    accepted: bool


def create_app(
    snapshot_service: CatalogSnapshotService,
    api_keys: list[str],
    event_handler: CatalogEventHandler | None = None,
    timezone_name: str = "Asia/Kuala_Lumpur",
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        snapshot_service: Service providing catalog snapshots and viewer contexts
        api_keys: Keys accepted from callers in the X-API-Key header
        event_handler: Handler for catalog change webhooks (webhook route is
            only mounted when provided)
        timezone_name: IANA timezone used for the open-now filter

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Marketplace Catalog API",
        description="Catalog listings with member pricing and eligibility filters",
        version="1.0.0",
    )

    # Store services in app state for access in route handlers
    app.state.snapshot_service = snapshot_service
    app.state.event_handler = event_handler
    app.state.timezone = ZoneInfo(timezone_name)
    app.state.api_key_validator = APIKeyValidator(api_keys=api_keys)

    async def load_snapshot() -> CatalogSnapshot:
        snapshot: CatalogSnapshot | None = await app.state.snapshot_service.get_snapshot()
        if snapshot is None:
            raise HTTPException(status_code=502, detail="Catalog is temporarily unavailable")
        return snapshot

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint.

        Returns:
            Health status indicating service is running
        """
        return HealthResponse(status="healthy")

    def validate_api_key(x_api_key: str | None = Header(None)) -> str:
        """Dependency to validate API key."""
        return get_api_key_from_header(app.state.api_key_validator, x_api_key=x_api_key)

    @app.get("/catalog", response_model=CatalogResponse, tags=["Catalog"])
    async def list_catalog(
        item_type: TypeFilter = Query(TypeFilter.ALL, alias="type"),
        category: str = ALL_CATEGORIES,
        kind: str | None = None,
        delivery_method: DeliveryMethod = Query(DeliveryMethod.ANY, alias="delivery"),
        perishable_only: bool = False,
        open_now: bool = False,
        near_me: bool = False,
        radius_km: float = Query(DEFAULT_RADIUS_KM, gt=0),
        community: str | None = None,
        vendor: str | None = None,
        q: str | None = None,
        sort: SortOrder = SortOrder.RELEVANCE,
        lat: float | None = Query(None, ge=-90, le=90),
        lng: float | None = Query(None, ge=-180, le=180),
        x_viewer_id: str | None = Header(None),
        _api_key: str = Depends(validate_api_key),
    ) -> CatalogResponse:
        """List catalog items visible to the viewer.

        Returns:
            Annotated entries in display order

        Raises:
            HTTPException: 401 without a valid API key, 502 if the catalog could not
                be loaded
        """
        snapshot = await load_snapshot()
        viewer = await app.state.snapshot_service.get_viewer_context(
            viewer_id=x_viewer_id, latitude=lat, longitude=lng
        )

        filters = CatalogFilters(
            item_type=item_type,
            category_id=category,
            product_kind=kind,
            delivery_method=delivery_method,
            perishable_only=perishable_only,
            open_now=open_now,
            near_me=near_me,
            radius_km=radius_km,
            community_id=community,
            vendor_id=vendor,
            query=q,
            sort=sort,
        )

        entries = compose_catalog(snapshot, viewer, filters, now=datetime.now(app.state.timezone))
        record_compose(len(snapshot.items), len(entries), near_me)

        logger.info(
            f"Composed catalog with {len(entries)} of {len(snapshot.items)} items"
            + (f" for viewer {x_viewer_id}" if x_viewer_id else "")
        )
        return CatalogResponse(count=len(entries), items=entries)

    @app.get("/catalog/{item_id}", response_model=CatalogEntry, tags=["Catalog"])
    async def get_catalog_item(
        item_id: str,
        lat: float | None = Query(None, ge=-90, le=90),
        lng: float | None = Query(None, ge=-180, le=180),
        x_viewer_id: str | None = Header(None),
        _api_key: str = Depends(validate_api_key),
    ) -> CatalogEntry:
        """Get a single catalog item with the viewer's pricing.

        Args:
            item_id: Catalog item identifier

        Returns:
            The annotated item

        Raises:
            HTTPException: 401 without a valid API key, 404 if the item is unknown,
                502 if the catalog could not be loaded
        """
        snapshot = await load_snapshot()
        viewer = await app.state.snapshot_service.get_viewer_context(
            viewer_id=x_viewer_id, latitude=lat, longitude=lng
        )

        entry = find_entry(snapshot, viewer, item_id)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Catalog item '{item_id}' not found")

        return entry

    @app.get("/catalog/{item_id}/delivery", response_model=DeliveryPlan, tags=["Delivery"])
    async def get_delivery_plan(
        item_id: str,
        preference: DeliveryPreference = DeliveryPreference.AUTO,
        riders_nearby: bool = False,
        lat: float | None = Query(None, ge=-90, le=90),
        lng: float | None = Query(None, ge=-180, le=180),
        x_viewer_id: str | None = Header(None),
        _api_key: str = Depends(validate_api_key),
    ) -> DeliveryPlan:
        """Get delivery options and an ETA window for an item.

        Args:
            item_id: Catalog item identifier
            preference: Buyer's delivery preference
            riders_nearby: Whether riders are currently near the vendor

        Returns:
            Delivery plan for the viewer

        Raises:
            HTTPException: 401 without a valid API key, 404 if the item is unknown,
                502 if the catalog could not be loaded
        """
        snapshot = await load_snapshot()
        viewer = await app.state.snapshot_service.get_viewer_context(
            viewer_id=x_viewer_id, latitude=lat, longitude=lng
        )

        entry = find_entry(snapshot, viewer, item_id)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Catalog item '{item_id}' not found")

        return plan_delivery(
            entry.item,
            preference=preference,
            riders_nearby=riders_nearby,
            distance_km=entry.distance_km,
        )

    if event_handler is not None:

        @app.post(
            "/webhooks/catalog-changed",
            response_model=WebhookResponse,
            tags=["Webhooks"],
        )
        async def catalog_changed_webhook(
            payload: dict[str, Any],
            _api_key: str = Depends(validate_api_key),
        ) -> WebhookResponse:
            """Receive a database change webhook and invalidate cached catalog data.

            Returns:
                Whether the change was accepted

            Raises:
                HTTPException: 401 without a valid API key, 422 if the payload is not
                    a change notification
            """
            try:
                event = CatalogChangedEvent.from_database_webhook(payload)
            except (KeyError, ValidationError) as e:
                logger.error(f"Invalid catalog change webhook: {e}")
                raise HTTPException(
                    status_code=422, detail="Invalid change notification"
                ) from e

            accepted = await app.state.event_handler.handle_catalog_changed(event)
            return WebhookResponse(table=event.table, accepted=accepted)

    return app
