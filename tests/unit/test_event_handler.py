"""Unit tests for the catalog change event handler."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from marketplace_catalog.handlers.event_handler import (
    CatalogChangedEvent,
    CatalogEventHandler,
    parse_eventbridge_event,
)
from marketplace_catalog.services.subscription_hub import SubscriptionHub


@pytest.mark.unit
class TestCatalogChangedEvent:
    """Test suite for CatalogChangedEvent parsing."""

    def test_parse_eventbridge_event(self, mock_eventbridge_event: dict) -> None:
        """Test parsing a well-formed EventBridge event."""
        event = parse_eventbridge_event(mock_eventbridge_event)

        assert event is not None
        assert event.table == "products"
        assert event.record_id == "prod_near"
        assert event.event_type == "update"

    def test_parse_eventbridge_event_invalid(self) -> None:
        """Test that events missing required fields give None."""
        assert parse_eventbridge_event({"detail": {"record_id": "x"}}) is None
        assert parse_eventbridge_event({}) is None

    def test_from_database_webhook(self) -> None:
        """Test parsing a database webhook payload."""
        event = CatalogChangedEvent.from_database_webhook(
            {
                "type": "UPDATE",
                "table": "vendors",
                "record": {"id": 42},
                "commit_timestamp": "2024-01-15T10:30:00Z",
            }
        )

        assert event.table == "vendors"
        assert event.record_id == "42"
        assert event.event_type == "update"
        assert event.timestamp == "2024-01-15T10:30:00Z"

    def test_from_database_webhook_delete_uses_old_record(self) -> None:
        """Test that deletes take the id from the previous row."""
        event = CatalogChangedEvent.from_database_webhook(
            {"type": "DELETE", "table": "products", "record": None, "old_record": {"id": "p1"}}
        )

        assert event.record_id == "p1"
        assert event.event_type == "delete"
        assert event.timestamp

    def test_from_database_webhook_requires_table(self) -> None:
        """Test that payloads without a table are rejected."""
        with pytest.raises(KeyError):
            CatalogChangedEvent.from_database_webhook({"type": "INSERT"})


@pytest.mark.unit
class TestCatalogEventHandler:
    """Test suite for CatalogEventHandler."""

    @pytest.fixture
    def hub(self) -> MagicMock:
        """Mocked subscription hub."""
        mock_hub = MagicMock(spec=SubscriptionHub)
        mock_hub.publish = AsyncMock(return_value=1)
        return mock_hub

    @pytest.mark.asyncio
    async def test_publishes_catalog_change(self, hub: MagicMock) -> None:
        """Test that known tables are published on their topic."""
        handler = CatalogEventHandler(subscriptions=hub)
        event = CatalogChangedEvent(
            table="communities", event_type="update", timestamp="2024-01-15T10:30:00Z"
        )

        assert await handler.handle_catalog_changed(event) is True
        hub.publish.assert_awaited_once_with("catalog.communities", event)

    @pytest.mark.asyncio
    async def test_ignores_unknown_table(self, hub: MagicMock) -> None:
        """Test that non-catalog tables are ignored."""
        handler = CatalogEventHandler(subscriptions=hub)
        event = CatalogChangedEvent(
            table="orders", event_type="insert", timestamp="2024-01-15T10:30:00Z"
        )

        assert await handler.handle_catalog_changed(event) is False
        hub.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_handle_eventbridge_event_success(
        self, hub: MagicMock, mock_eventbridge_event: dict
    ) -> None:
        """Test the Lambda entry for a valid event."""
        handler = CatalogEventHandler(subscriptions=hub)

        result = await handler.handle_eventbridge_event(mock_eventbridge_event, None)

        assert result["statusCode"] == 200
        assert "products" in result["body"]

    @pytest.mark.asyncio
    async def test_handle_eventbridge_event_invalid(self, hub: MagicMock) -> None:
        """Test the Lambda entry for a malformed event."""
        handler = CatalogEventHandler(subscriptions=hub)

        result = await handler.handle_eventbridge_event({"detail": {}}, None)

        assert result == {"statusCode": 400, "body": "Invalid event format"}

    @pytest.mark.asyncio
    async def test_handle_eventbridge_event_unknown_table(self, hub: MagicMock) -> None:
        """Test the Lambda entry for a change to an unrelated table."""
        handler = CatalogEventHandler(subscriptions=hub)
        event = {
            "detail": {"table": "orders", "event_type": "insert", "timestamp": "2024-01-15"}
        }

        result = await handler.handle_eventbridge_event(event, None)

        assert result["statusCode"] == 400
        assert "orders" in result["body"]

    @pytest.mark.asyncio
    async def test_membership_change_reaches_real_hub(self) -> None:
        """Test delivery through a real hub to a membership subscriber."""
        hub = SubscriptionHub()
        received: list[CatalogChangedEvent] = []
        hub.subscribe("catalog.community_members", received.append)
        handler = CatalogEventHandler(subscriptions=hub)
        event = CatalogChangedEvent(
            table="community_members", event_type="insert", timestamp="2024-01-15T10:30:00Z"
        )

        await handler.handle_catalog_changed(event)

        assert received == [event]
