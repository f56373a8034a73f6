"""Main application entry point for the marketplace catalog service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os

from fastapi import FastAPI

from marketplace_catalog.adapters.postgrest_adapter import PostgrestCatalogSource
from marketplace_catalog.auth.api_key_validator import parse_api_keys
from marketplace_catalog.handlers.api_handler import create_app
from marketplace_catalog.handlers.event_handler import CatalogEventHandler
from marketplace_catalog.observability import configure_logging, setup_observability
from marketplace_catalog.services.snapshot_service import CatalogSnapshotService
from marketplace_catalog.services.subscription_hub import SubscriptionHub

logger = logging.getLogger(__name__)


def create_catalog_source() -> PostgrestCatalogSource:
    """Create the catalog source from environment variables.

    Returns:
        PostgREST catalog source

    Raises:
        ValueError: If required configuration is missing
    """
    api_url = os.getenv("CATALOG_API_URL")
    api_key = os.getenv("CATALOG_API_KEY")

    if not api_url or not api_key:
        raise ValueError("CATALOG_API_URL and CATALOG_API_KEY must be set in environment")

    timeout = float(os.getenv("CATALOG_HTTP_TIMEOUT_SECONDS", "10"))
    logger.info(f"Catalog source configured - URL: {api_url}")
    return PostgrestCatalogSource(base_url=api_url, api_key=api_key, timeout_seconds=timeout)


def load_service_api_keys() -> list[str]:
    """Read the keys callers must present in the X-API-Key header.

    Returns:
        Non-empty list of accepted keys

    Raises:
        ValueError: If CATALOG_SERVICE_API_KEYS is missing or empty
    """
    api_keys = parse_api_keys(os.getenv("CATALOG_SERVICE_API_KEYS"))
    if not api_keys:
        raise ValueError("CATALOG_SERVICE_API_KEYS must list at least one key")

    logger.info(f"Catalog API accepts {len(api_keys)} caller key(s)")
    return api_keys


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Configures logging
    2. Creates the catalog source and loads caller API keys
    3. Wires the subscription hub, snapshot service and event handler
    4. Creates FastAPI app with catalog endpoints
    5. Sets up observability

    Returns:
        Configured FastAPI application instance
    """
    log_level = os.getenv("LOG_LEVEL", "INFO")
    configure_logging(log_level)

    logger.info("Initializing marketplace catalog service...")

    source = create_catalog_source()
    api_keys = load_service_api_keys()

    subscriptions = SubscriptionHub()
    cache_ttl = float(os.getenv("CATALOG_CACHE_TTL_SECONDS", "60"))
    snapshot_service = CatalogSnapshotService(
        source=source,
        subscriptions=subscriptions,
        cache_ttl_seconds=cache_ttl,
    )
    event_handler = CatalogEventHandler(subscriptions=subscriptions)

    logger.info(f"Services initialized - snapshot cache TTL: {cache_ttl}s")

    timezone_name = os.getenv("CATALOG_TIMEZONE", "Asia/Kuala_Lumpur")
    app = create_app(
        snapshot_service=snapshot_service,
        api_keys=api_keys,
        event_handler=event_handler,
        timezone_name=timezone_name,
    )

    setup_observability(app)

    logger.info("Marketplace catalog service initialized successfully")
    return app


# Create the FastAPI application instance (only when not in test mode)
# This prevents the app from being created during test collection
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    # Create a placeholder app for test imports
    app = FastAPI()


if __name__ == "__main__":
    """Run the application with uvicorn when executed directly."""
    import uvicorn

    port = int(os.getenv("PORT", "8001"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")
    logger.info(f"API documentation available at http://{host}:{port}/docs")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
