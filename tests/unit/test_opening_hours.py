"""Unit tests for vendor opening hours."""

from datetime import datetime

import pytest

from marketplace_catalog.models.catalog_models import DaySchedule, Vendor
from marketplace_catalog.services.opening_hours import is_vendor_open, parse_clock_minutes

# 2024-01-15 is a Monday, 2024-01-21 a Sunday
MONDAY = datetime(2024, 1, 15)
SUNDAY = datetime(2024, 1, 21)


@pytest.mark.unit
class TestParseClockMinutes:
    """Test suite for parse_clock_minutes."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("00:00", 0),
            ("09:30", 570),
            ("23:59", 1439),
            ("9:05", 545),
            ("17:45:30", 1065),
        ],
    )
    def test_valid_values(self, value: str, expected: int) -> None:
        """Test parsing well-formed clock strings."""
        assert parse_clock_minutes(value, default=-1) == expected

    @pytest.mark.parametrize("value", [None, "", "noon", "25:00", "12:60", "12", "ab:cd"])
    def test_malformed_values_use_default(self, value) -> None:
        """Test that malformed values fall back to the default."""
        assert parse_clock_minutes(value, default=42) == 42


@pytest.mark.unit
class TestIsVendorOpen:
    """Test suite for is_vendor_open."""

    def test_open_within_hours(self, vendor: Vendor) -> None:
        """Test a time inside the opening window."""
        assert is_vendor_open(vendor, MONDAY.replace(hour=12)) is True

    def test_window_is_inclusive(self, vendor: Vendor) -> None:
        """Test that opening and closing minutes count as open."""
        assert is_vendor_open(vendor, MONDAY.replace(hour=9, minute=0)) is True
        assert is_vendor_open(vendor, MONDAY.replace(hour=17, minute=0)) is True

    def test_closed_outside_hours(self, vendor: Vendor) -> None:
        """Test times before opening and after closing."""
        assert is_vendor_open(vendor, MONDAY.replace(hour=8, minute=59)) is False
        assert is_vendor_open(vendor, MONDAY.replace(hour=17, minute=1)) is False

    def test_closed_day(self, vendor: Vendor) -> None:
        """Test a day marked closed."""
        assert is_vendor_open(vendor, SUNDAY.replace(hour=12)) is False

    def test_closed_flag_wins_over_times(self) -> None:
        """Test that a closed day is closed even with opening times set."""
        vendor = Vendor(
            id="v", opening_hours={"mon": DaySchedule(open="00:00", close="23:59", closed=True)}
        )

        assert is_vendor_open(vendor, MONDAY.replace(hour=12)) is False

    def test_day_without_entry_is_open(self, vendor: Vendor) -> None:
        """Test that a weekday missing from the schedule counts as open."""
        tuesday = datetime(2024, 1, 16, 3, 0)

        assert is_vendor_open(vendor, tuesday) is True

    def test_vendor_without_schedule_is_open(self) -> None:
        """Test that vendors without hours, or unknown vendors, count as open."""
        assert is_vendor_open(Vendor(id="v"), MONDAY) is True
        assert is_vendor_open(Vendor(id="v", opening_hours={}), MONDAY) is True
        assert is_vendor_open(None, MONDAY) is True

    def test_missing_open_or_close_uses_full_day(self) -> None:
        """Test that missing bounds default to start and end of day."""
        vendor = Vendor(id="v", opening_hours={"mon": DaySchedule(close="10:00")})

        assert is_vendor_open(vendor, MONDAY.replace(hour=0, minute=5)) is True
        assert is_vendor_open(vendor, MONDAY.replace(hour=10, minute=30)) is False

    def test_malformed_times_use_full_day(self) -> None:
        """Test that unparseable times keep the vendor open all day."""
        vendor = Vendor(id="v", opening_hours={"mon": DaySchedule(open="late", close="soon")})

        assert is_vendor_open(vendor, MONDAY.replace(hour=23, minute=59)) is True
