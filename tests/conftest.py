"""Shared pytest fixtures and configuration for all tests."""

import math
import os
from datetime import UTC, datetime

import pytest

# Entry-point modules skip building the real application in test mode
os.environ.setdefault("ENVIRONMENT", "test")

from marketplace_catalog.models.catalog_models import (  # noqa: E402
    CatalogItem,
    CatalogSnapshot,
    Community,
    DaySchedule,
    GeoPoint,
    ItemType,
    Vendor,
    ViewerContext,
)

# Kilometres per degree of latitude on the sphere used for distances
KM_PER_DEGREE = 6371.0 * math.pi / 180


def point_km_north(km: float) -> GeoPoint:
    """A point ``km`` kilometres due north of (0, 0)."""
    return GeoPoint(latitude=km / KM_PER_DEGREE, longitude=0.0)


@pytest.fixture
def km_north():
    """Fixture providing a factory for points due north of (0, 0)."""
    return point_km_north


@pytest.fixture
def origin() -> GeoPoint:
    """Fixture providing the viewer location used across tests."""
    return GeoPoint(latitude=0.0, longitude=0.0)


@pytest.fixture
def community() -> Community:
    """Fixture providing a community with a 10% member discount."""
    return Community(id="comm_1", name="Taman Harmoni", member_discount_percent=10)


@pytest.fixture
def vendor() -> Vendor:
    """Fixture providing a vendor without a discount override."""
    return Vendor(
        id="vendor_1",
        community_id="comm_1",
        opening_hours={
            "mon": DaySchedule(open="09:00", close="17:00"),
            "sun": DaySchedule(closed=True),
        },
    )


@pytest.fixture
def sample_items() -> list[CatalogItem]:
    """Fixture providing three products at 3, 5 and 50 km from the origin."""
    return [
        CatalogItem(
            id="prod_near",
            name="Nasi Lemak",
            price_cents=1000,
            vendor_id="vendor_1",
            community_id="comm_1",
            pickup_location=point_km_north(3),
            product_kind="prepared_food",
            category_ids=("cat_food",),
            created_at=datetime(2024, 1, 3, tzinfo=UTC),
        ),
        CatalogItem(
            id="prod_mid",
            name="Fresh Durian",
            price_cents=2500,
            vendor_id="vendor_1",
            community_id="comm_1",
            pickup_location=point_km_north(5),
            product_kind="grocery",
            perishable=True,
            category_ids=("cat_fruit",),
            created_at=datetime(2024, 1, 2, tzinfo=UTC),
        ),
        CatalogItem(
            id="prod_far",
            name="Batik Scarf",
            description="Hand-drawn batik",
            price_cents=4000,
            vendor_id="vendor_2",
            community_id="comm_2",
            pickup_location=point_km_north(50),
            created_at=datetime(2024, 1, 1, tzinfo=UTC),
        ),
    ]


@pytest.fixture
def sample_service() -> CatalogItem:
    """Fixture providing a service listing (no community of its own)."""
    return CatalogItem(
        id="svc_1",
        item_type=ItemType.SERVICE,
        name="Aircond Servicing",
        subtitle="Split units",
        price_cents=8000,
        vendor_id="vendor_1",
        allow_parcel_delivery=False,
    )


@pytest.fixture
def snapshot(
    sample_items: list[CatalogItem],
    sample_service: CatalogItem,
    vendor: Vendor,
    community: Community,
) -> CatalogSnapshot:
    """Fixture providing a snapshot over the sample items and service."""
    return CatalogSnapshot(
        items=(*sample_items, sample_service),
        vendors_by_id={
            vendor.id: vendor,
            "vendor_2": Vendor(
                id="vendor_2", community_id="comm_2", member_discount_override_percent=0
            ),
        },
        communities_by_id={
            community.id: community,
            "comm_2": Community(id="comm_2", name="Kampung Baru", member_discount_percent=20),
        },
        loaded_at=datetime(2024, 1, 15, 10, 30, tzinfo=UTC),
    )


@pytest.fixture
def member_viewer(origin: GeoPoint) -> ViewerContext:
    """Fixture providing a member of comm_1 standing at the origin."""
    return ViewerContext(viewer_id="user_1", community_ids=frozenset({"comm_1"}), location=origin)


@pytest.fixture
def mock_eventbridge_event() -> dict:
    """Fixture providing a sample EventBridge catalog change event."""
    return {
        "version": "0",
        "id": "event_123",
        "detail-type": "CatalogChanged",
        "source": "com.marketplace.catalog",
        "account": "123456789012",
        "time": "2024-01-15T10:30:00Z",
        "region": "ap-southeast-1",
        "resources": [],
        "detail": {
            "table": "products",
            "record_id": "prod_near",
            "event_type": "update",
            "timestamp": "2024-01-15T10:30:00Z",
        },
    }
