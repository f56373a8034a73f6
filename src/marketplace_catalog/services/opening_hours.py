"""Vendor opening-hours evaluation."""

from datetime import datetime

from marketplace_catalog.models.catalog_models import WEEKDAY_KEYS, Vendor

START_OF_DAY_MINUTES = 0
END_OF_DAY_MINUTES = 23 * 60 + 59


def parse_clock_minutes(value: str | None, default: int) -> int:
    """Parse an "HH:MM" string into minutes after midnight.

    Hour and minute are parsed separately; seconds, if present, are ignored.

    Args:
        value: Clock string from the vendor's schedule
        default: Minutes to use when the value is missing or malformed

    Returns:
        Minutes after midnight
    """
    if not isinstance(value, str):
        return default

    parts = value.strip().split(":")
    if len(parts) < 2:
        return default

    try:
        hour = int(parts[0])
        minute = int(parts[1])
    except ValueError:
        return default

    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return default

    return hour * 60 + minute


def is_vendor_open(vendor: Vendor | None, now: datetime) -> bool:
    """Check whether a vendor is open at a local wall-clock time.

    A vendor without a schedule, or without an entry for today, counts as open.
    Malformed open/close values fall back to a full day (00:00-23:59).

    Args:
        vendor: Vendor record, None when it could not be loaded
        now: Viewer's local time

    Returns:
        True if the vendor is open
    """
    if vendor is None or not vendor.opening_hours:
        return True

    schedule = vendor.opening_hours.get(WEEKDAY_KEYS[now.weekday()])
    if schedule is None:
        return True

    if schedule.closed:
        return False

    minute_of_day = now.hour * 60 + now.minute
    opens_at = parse_clock_minutes(schedule.open, START_OF_DAY_MINUTES)
    closes_at = parse_clock_minutes(schedule.close, END_OF_DAY_MINUTES)

    return opens_at <= minute_of_day <= closes_at
