"""Unit tests for catalog data models."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from marketplace_catalog.models.catalog_models import (
    CatalogItem,
    Community,
    GeoPoint,
    ItemType,
    Vendor,
    ViewerContext,
)


@pytest.mark.unit
class TestGeoPoint:
    """Test suite for GeoPoint."""

    def test_from_coordinates_valid(self) -> None:
        """Test building a point from numeric strings."""
        point = GeoPoint.from_coordinates("3.139", "101.6869")

        assert point == GeoPoint(latitude=3.139, longitude=101.6869)

    @pytest.mark.parametrize(
        ("latitude", "longitude"),
        [
            (None, 101.6),
            (3.1, None),
            ("abc", 101.6),
            (float("nan"), 101.6),
            (91.0, 0.0),
            (0.0, 181.0),
            (True, 1.0),
        ],
    )
    def test_from_coordinates_invalid_returns_none(self, latitude, longitude) -> None:
        """Test that missing, non-finite or out-of-range coordinates give no point."""
        assert GeoPoint.from_coordinates(latitude, longitude) is None

    def test_point_is_immutable(self) -> None:
        """Test that GeoPoint cannot be mutated."""
        point = GeoPoint(latitude=1.0, longitude=2.0)

        with pytest.raises(ValidationError):
            point.latitude = 5.0  # type: ignore[misc]


@pytest.mark.unit
class TestCatalogItem:
    """Test suite for CatalogItem."""

    def test_create_item_with_defaults(self) -> None:
        """Test that optional fields take their least restrictive defaults."""
        item = CatalogItem(id="p1", name="Kuih", price_cents=300, vendor_id="v1")

        assert item.item_type == ItemType.PRODUCT
        assert item.currency == "MYR"
        assert item.allow_rider_delivery is True
        assert item.allow_parcel_delivery is True
        assert item.perishable is False
        assert item.category_ids == ()
        assert item.pickup_location is None

    def test_currency_is_upper_cased(self) -> None:
        """Test that lower-case currency codes are normalized."""
        item = CatalogItem(id="p1", name="Kuih", price_cents=300, vendor_id="v1", currency="usd")

        assert item.currency == "USD"

    @pytest.mark.parametrize("currency", ["US", "DOLLARS", "12A"])
    def test_invalid_currency_rejected(self, currency: str) -> None:
        """Test that currency must be a 3-letter code."""
        with pytest.raises(ValidationError):
            CatalogItem(id="p1", name="Kuih", price_cents=300, vendor_id="v1", currency=currency)

    def test_negative_price_rejected(self) -> None:
        """Test that prices cannot be negative."""
        with pytest.raises(ValidationError):
            CatalogItem(id="p1", name="Kuih", price_cents=-1, vendor_id="v1")

    def test_kind_properties(self) -> None:
        """Test prepared food and perishable grocery detection."""
        food = CatalogItem(
            id="p1", name="Laksa", price_cents=900, vendor_id="v1", product_kind="prepared_food"
        )
        fish = CatalogItem(
            id="p2",
            name="Ikan",
            price_cents=900,
            vendor_id="v1",
            product_kind="grocery",
            perishable=True,
        )
        rice = CatalogItem(
            id="p3", name="Beras", price_cents=900, vendor_id="v1", product_kind="grocery"
        )

        assert food.is_prepared_food is True
        assert fish.is_perishable_grocery is True
        assert rice.is_perishable_grocery is False

    def test_from_record_product(self) -> None:
        """Test mapping a products row."""
        record = {
            "id": "prod_1",
            "name": "Rendang",
            "description": "Beef rendang",
            "price_cents": 1500,
            "currency": "myr",
            "vendor_id": "vendor_1",
            "community_id": "comm_1",
            "pickup_lat": 3.14,
            "pickup_lng": 101.69,
            "product_kind": "prepared_food",
            "allow_easyparcel": False,
            "allow_rider_delivery": None,
            "perishable": True,
            "prep_time_minutes": 20,
            "created_at": "2024-01-15T10:30:00+00:00",
        }

        item = CatalogItem.from_record(record, ItemType.PRODUCT, ("cat_1",))

        assert item.id == "prod_1"
        assert item.currency == "MYR"
        assert item.community_id == "comm_1"
        assert item.pickup_location == GeoPoint(latitude=3.14, longitude=101.69)
        assert item.allow_parcel_delivery is False
        assert item.allow_rider_delivery is True
        assert item.perishable is True
        assert item.prep_time_minutes == 20
        assert item.category_ids == ("cat_1",)
        assert item.created_at == datetime(2024, 1, 15, 10, 30, tzinfo=UTC)

    def test_from_record_minimal_row(self) -> None:
        """Test that a sparse row maps with defaults."""
        item = CatalogItem.from_record({"id": 7, "vendor_id": 3, "name": "Teh"})

        assert item.id == "7"
        assert item.vendor_id == "3"
        assert item.price_cents == 0
        assert item.currency == "MYR"
        assert item.pickup_location is None
        assert item.created_at is None

    def test_from_record_service_has_no_community(self) -> None:
        """Test that services are never tied to a community directly."""
        record = {
            "id": "svc_1",
            "vendor_id": "vendor_1",
            "name": "Tutoring",
            "subtitle": "Maths",
            "price_cents": 5000,
            "community_id": "comm_1",
        }

        item = CatalogItem.from_record(record, ItemType.SERVICE)

        assert item.item_type == ItemType.SERVICE
        assert item.community_id is None
        assert item.subtitle == "Maths"

    def test_from_record_missing_id_raises(self) -> None:
        """Test that rows without an id are rejected."""
        with pytest.raises(KeyError):
            CatalogItem.from_record({"vendor_id": "v1", "name": "x"})


@pytest.mark.unit
class TestVendor:
    """Test suite for Vendor."""

    def test_from_record_with_hours(self) -> None:
        """Test mapping a vendor row with opening hours."""
        record = {
            "id": "vendor_1",
            "member_discount_override_percent": "15",
            "community_id": "comm_1",
            "opening_hours": {
                "Monday": {"open": "09:00", "close": "18:00", "closed": False},
                "sun": {"closed": True},
                "tue": "not a schedule",
            },
        }

        vendor = Vendor.from_record(record)

        assert vendor.member_discount_override_percent == 15.0
        assert vendor.opening_hours is not None
        assert vendor.opening_hours["mon"].open == "09:00"
        assert vendor.opening_hours["sun"].closed is True
        assert "tue" not in vendor.opening_hours

    @pytest.mark.parametrize("raw_closed", ["false", "true", 1, "yes", None])
    def test_from_record_only_boolean_true_closes_day(self, raw_closed) -> None:
        """Test that non-boolean closed flags leave the day open."""
        vendor = Vendor.from_record(
            {"id": "v", "opening_hours": {"mon": {"open": "09:00", "closed": raw_closed}}}
        )

        assert vendor.opening_hours is not None
        assert vendor.opening_hours["mon"].closed is False

    def test_from_record_clamps_override(self) -> None:
        """Test that out-of-range overrides are clamped."""
        high = Vendor.from_record({"id": "v", "member_discount_override_percent": 150})
        low = Vendor.from_record({"id": "v", "member_discount_override_percent": -5})

        assert high.member_discount_override_percent == 100.0
        assert low.member_discount_override_percent == 0.0

    def test_from_record_zero_override_is_kept(self) -> None:
        """Test that a zero override is preserved rather than treated as unset."""
        vendor = Vendor.from_record({"id": "v", "member_discount_override_percent": 0})

        assert vendor.member_discount_override_percent == 0.0

    def test_from_record_without_hours(self) -> None:
        """Test that missing or malformed hours map to None."""
        assert Vendor.from_record({"id": "v"}).opening_hours is None
        assert Vendor.from_record({"id": "v", "opening_hours": "24/7"}).opening_hours is None


@pytest.mark.unit
class TestCommunity:
    """Test suite for Community."""

    def test_from_record(self) -> None:
        """Test mapping a communities row."""
        community = Community.from_record(
            {"id": "comm_1", "name": "Taman", "member_discount_percent": 12.5}
        )

        assert community.member_discount_percent == 12.5

    def test_from_record_defaults_and_clamps(self) -> None:
        """Test missing percent defaults to 0 and large percents clamp to 100."""
        missing = Community.from_record({"id": "c"})
        large = Community.from_record({"id": "c", "member_discount_percent": 250})

        assert missing.member_discount_percent == 0.0
        assert large.member_discount_percent == 100.0


@pytest.mark.unit
class TestViewerContext:
    """Test suite for ViewerContext."""

    def test_anonymous_defaults(self) -> None:
        """Test that an anonymous viewer has no memberships or location."""
        viewer = ViewerContext()

        assert viewer.viewer_id is None
        assert viewer.community_ids == frozenset()
        assert viewer.location is None
