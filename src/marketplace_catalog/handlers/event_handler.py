"""Handler for catalog change events.

Change notifications arrive either as EventBridge events (Lambda deployment)
or as database webhooks posted to the HTTP API. Both are normalized into a
``CatalogChangedEvent`` and published on the subscription hub under
``catalog.<table>``.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ValidationError

from marketplace_catalog.observability.metrics import record_catalog_change
from marketplace_catalog.services.subscription_hub import SubscriptionHub

logger = logging.getLogger(__name__)

CATALOG_TABLES = frozenset(
    {
        "products",
        "vendor_services",
        "vendors",
        "communities",
        "product_categories",
        "service_categories",
        "community_members",
    }
)


class CatalogChangedEvent(BaseModel):
    """A change to one of the catalog tables.

    Attributes:
        table: Table that changed (e.g., "products")
        record_id: Primary key of the changed row, if known
        event_type: Type of change (insert, update, delete)
        timestamp: ISO 8601 timestamp of when the change happened
    """

    table: str
    record_id: str | None = None
    event_type: str
    timestamp: str

    @classmethod
    def from_database_webhook(cls, payload: dict[str, Any]) -> "CatalogChangedEvent":
        """Create an event from a database webhook payload.

        Webhook payloads look like
        ``{"type": "UPDATE", "table": "products", "record": {...}, "old_record": {...}}``.

        Args:
            payload: Webhook request body

        Returns:
            CatalogChangedEvent: Parsed event
        """
        record = payload.get("record") or payload.get("old_record") or {}
        record_id = record.get("id") if isinstance(record, dict) else None

        return cls(
            table=payload["table"],
            record_id=str(record_id) if record_id is not None else None,
            event_type=str(payload.get("type", "update")).lower(),
            timestamp=payload.get("commit_timestamp") or datetime.now(UTC).isoformat(),
        )


def parse_eventbridge_event(event: dict[str, Any]) -> CatalogChangedEvent | None:
    """Parse an EventBridge event into a CatalogChangedEvent.

    Args:
        event: Raw EventBridge event dictionary

    Returns:
        CatalogChangedEvent if parsing succeeds, None otherwise
    """
    try:
        detail = event.get("detail", {})
        return CatalogChangedEvent(**detail)
    except (ValidationError, TypeError) as e:
        logger.error(f"Failed to parse EventBridge event: {e}")
        return None


class CatalogEventHandler:
    """Handler that fans catalog changes out to hub subscribers."""

    def __init__(self, subscriptions: SubscriptionHub) -> None:
        """Initialize the event handler.

        Args:
            subscriptions: Hub to publish catalog changes on
        """
        self.subscriptions = subscriptions

    async def handle_catalog_changed(self, event: CatalogChangedEvent) -> bool:
        """Handle a catalog changed event.

        Args:
            event: The change to publish

        Returns:
            True if the table is a catalog table and the change was published,
            False if the event was ignored
        """
        if event.table not in CATALOG_TABLES:
            logger.warning(f"Ignoring change to non-catalog table {event.table}")
            return False

        logger.info(
            f"Processing {event.event_type} on {event.table}"
            + (f" for record {event.record_id}" if event.record_id else "")
        )
        record_catalog_change(event.table)

        delivered = await self.subscriptions.publish(f"catalog.{event.table}", event)
        logger.info(f"Catalog change on {event.table} delivered to {delivered} subscribers")
        return True

    async def handle_eventbridge_event(
        self, event: dict[str, Any], _context: Any
    ) -> dict[str, Any]:
        """Lambda handler for EventBridge events.

        Args:
            event: EventBridge event dictionary
            _context: Lambda context object (unused)

        Returns:
            Dictionary with statusCode and body for Lambda response
        """
        change = parse_eventbridge_event(event)
        if not change:
            logger.error("Received invalid event format")
            return {
                "statusCode": 400,
                "body": "Invalid event format",
            }

        if await self.handle_catalog_changed(change):
            return {
                "statusCode": 200,
                "body": f"Processed {change.event_type} on {change.table}",
            }

        return {
            "statusCode": 400,
            "body": f"Unsupported table: {change.table}",
        }
