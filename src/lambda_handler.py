"""Lambda entry point for the catalog service.

HTTP requests arrive through API Gateway and are served by the FastAPI app via
Mangum. Catalog change notifications arrive as EventBridge events and go
straight to the CatalogEventHandler, which invalidates cached snapshots.
"""

import asyncio
import logging
import os
from typing import Any

from mangum import Mangum

from lambda_dependencies import get_event_handler, get_fastapi_app, initialize_lambda_environment

CATALOG_EVENT_SOURCE = "com.marketplace.catalog"
CATALOG_CHANGED_DETAIL_TYPE = "CatalogChanged"

logger = logging.getLogger(__name__)

# Cold start wiring; tests inject their own collaborators
if os.getenv("ENVIRONMENT") == "test":
    app = None  # type: ignore
    mangum_handler = None  # type: ignore
else:
    initialize_lambda_environment()
    app = get_fastapi_app()
    mangum_handler = Mangum(app, lifespan="off")


def _response(status_code: int, body: str) -> dict[str, Any]:
    return {"statusCode": status_code, "body": body}


def is_eventbridge_event(event: dict[str, Any]) -> bool:
    """Return True when the payload has the EventBridge envelope keys."""
    return all(key in event for key in ("source", "detail-type", "detail"))


def is_catalog_change_event(event: dict[str, Any]) -> bool:
    """Return True for CatalogChanged events published by the catalog store."""
    return (
        event.get("source") == CATALOG_EVENT_SOURCE
        and event.get("detail-type") == CATALOG_CHANGED_DETAIL_TYPE
    )


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Route a Lambda invocation to the change handler or the HTTP app.

    Args:
        event: EventBridge or API Gateway payload
        context: Lambda context object

    Returns:
        Response dict with statusCode and body
    """
    logger.info(f"Catalog invocation received, request_id: {context.request_id}")

    try:
        if is_eventbridge_event(event):
            return handle_eventbridge_event(event, context)

        result: dict[str, Any] = mangum_handler(event, context)
        return result
    except Exception as e:
        logger.exception(f"Catalog invocation failed: {e}")
        return _response(500, f"Internal server error: {str(e)}")


def handle_eventbridge_event(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    """Apply a CatalogChanged event to the cached catalog snapshots.

    Args:
        event: EventBridge payload
        context: Lambda context object

    Returns:
        Response dict with statusCode and body
    """
    source = event.get("source", "")
    detail_type = event.get("detail-type", "")

    if not is_catalog_change_event(event):
        logger.warning(f"Ignoring event {source}/{detail_type}")
        return _response(400, f"Unsupported event type: {source}/{detail_type}")

    try:
        logger.info(f"Applying catalog change for table {event['detail'].get('table')}")
        result: dict[str, Any] = asyncio.run(
            get_event_handler().handle_eventbridge_event(event, context)
        )
        return result
    except Exception as e:
        logger.exception(f"Catalog change could not be applied: {e}")
        return _response(500, f"Error processing event: {str(e)}")
