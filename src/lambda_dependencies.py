"""Shared dependency factory for Lambda handlers.

Dependencies are created once and reused across invocations within the same
Lambda container. The snapshot cache therefore survives warm starts, and
EventBridge change events reaching the same container invalidate it through
the shared subscription hub.
"""

import logging
import os

from fastapi import FastAPI

from marketplace_catalog.adapters.base_adapter import CatalogSource
from marketplace_catalog.adapters.postgrest_adapter import PostgrestCatalogSource
from marketplace_catalog.auth.api_key_validator import parse_api_keys
from marketplace_catalog.handlers.api_handler import create_app
from marketplace_catalog.handlers.event_handler import CatalogEventHandler
from marketplace_catalog.observability import configure_logging, setup_observability
from marketplace_catalog.services.snapshot_service import CatalogSnapshotService
from marketplace_catalog.services.subscription_hub import SubscriptionHub

logger = logging.getLogger(__name__)

# Module-level caches for Lambda container reuse
_catalog_source: CatalogSource | None = None
_subscription_hub: SubscriptionHub | None = None
_snapshot_service: CatalogSnapshotService | None = None
_event_handler: CatalogEventHandler | None = None
_fastapi_app: FastAPI | None = None


def get_catalog_source() -> CatalogSource:
    """Create or retrieve cached catalog source.

    Returns:
        Configured catalog source

    Raises:
        ValueError: If CATALOG_API_URL or CATALOG_API_KEY is missing
    """
    global _catalog_source

    if _catalog_source is not None:
        return _catalog_source

    api_url = os.getenv("CATALOG_API_URL")
    api_key = os.getenv("CATALOG_API_KEY")

    if not api_url or not api_key:
        raise ValueError("CATALOG_API_URL and CATALOG_API_KEY must be set in environment")

    timeout = float(os.getenv("CATALOG_HTTP_TIMEOUT_SECONDS", "10"))
    _catalog_source = PostgrestCatalogSource(
        base_url=api_url, api_key=api_key, timeout_seconds=timeout
    )

    logger.info(f"Catalog source initialized for {api_url}")
    return _catalog_source


def get_subscription_hub() -> SubscriptionHub:
    """Create or retrieve cached subscription hub.

    Returns:
        SubscriptionHub shared by the snapshot service and event handler
    """
    global _subscription_hub

    if _subscription_hub is None:
        _subscription_hub = SubscriptionHub()

    return _subscription_hub


def get_snapshot_service() -> CatalogSnapshotService:
    """Create or retrieve cached snapshot service.

    Returns:
        Configured CatalogSnapshotService instance
    """
    global _snapshot_service

    if _snapshot_service is not None:
        return _snapshot_service

    cache_ttl = float(os.getenv("CATALOG_CACHE_TTL_SECONDS", "60"))
    _snapshot_service = CatalogSnapshotService(
        source=get_catalog_source(),
        subscriptions=get_subscription_hub(),
        cache_ttl_seconds=cache_ttl,
    )

    logger.info("Snapshot service initialized")
    return _snapshot_service


def get_event_handler() -> CatalogEventHandler:
    """Create or retrieve cached event handler.

    The snapshot service is created first so its cache subscriptions exist
    before any change event is published.

    Returns:
        Configured CatalogEventHandler instance
    """
    global _event_handler

    if _event_handler is not None:
        return _event_handler

    get_snapshot_service()
    _event_handler = CatalogEventHandler(subscriptions=get_subscription_hub())

    logger.info("Event handler initialized")
    return _event_handler


def get_fastapi_app() -> FastAPI:
    """Create or retrieve cached FastAPI application.

    Returns:
        Configured FastAPI application instance

    Raises:
        ValueError: If CATALOG_SERVICE_API_KEYS is missing or empty
    """
    global _fastapi_app

    if _fastapi_app is not None:
        return _fastapi_app

    api_keys = parse_api_keys(os.getenv("CATALOG_SERVICE_API_KEYS"))
    if not api_keys:
        raise ValueError("CATALOG_SERVICE_API_KEYS must list at least one key")

    _fastapi_app = create_app(
        snapshot_service=get_snapshot_service(),
        api_keys=api_keys,
        event_handler=get_event_handler(),
        timezone_name=os.getenv("CATALOG_TIMEZONE", "Asia/Kuala_Lumpur"),
    )

    logger.info("FastAPI application initialized")
    return _fastapi_app


def initialize_lambda_environment() -> None:
    """Initialize Lambda environment with logging and observability.

    Should be called once during Lambda cold start.
    """
    log_level = os.getenv("LOG_LEVEL", "INFO")
    configure_logging(log_level)
    setup_observability()

    logger.info("Lambda environment initialized")
