"""Member discount resolution for catalog items.

A vendor can override its community's member discount. The override is
authoritative even when it is 0, which is how a vendor opts out of the
community discount.
"""

from collections.abc import Set
from decimal import ROUND_HALF_UP, Decimal

from marketplace_catalog.models.catalog_models import CatalogItem, Community, Vendor


def resolve_discount_percent(
    item: CatalogItem,
    vendor: Vendor | None = None,
    community: Community | None = None,
) -> float:
    """Determine the effective member discount for an item.

    Priority (first match wins):
    1. Items without a community get no discount
    2. Vendor override, when set
    3. Community default
    4. 0

    Args:
        item: The catalog item being priced
        vendor: The item's vendor record, if it was loaded
        community: The item's community record, if it was loaded

    Returns:
        Discount percent in [0, 100]
    """
    if item.community_id is None:
        return 0.0

    if vendor is not None and vendor.member_discount_override_percent is not None:
        return _clamp(vendor.member_discount_override_percent)

    if community is not None:
        return _clamp(community.member_discount_percent)

    return 0.0


def is_member(item: CatalogItem, community_ids: Set[str]) -> bool:
    """Whether the viewer belongs to the item's community."""
    return item.community_id is not None and item.community_id in community_ids


def member_price(price_cents: int, discount_percent: float, viewer_is_member: bool) -> int | None:
    """Calculate the discounted member price in minor units.

    Args:
        price_cents: Base price in minor currency units
        discount_percent: Effective discount percent
        viewer_is_member: Whether the viewer belongs to the item's community

    Returns:
        Rounded (half-up) member price, or None when no member price applies
    """
    if not viewer_is_member or discount_percent <= 0:
        return None

    factor = Decimal(1) - Decimal(str(discount_percent)) / Decimal(100)
    discounted = (Decimal(price_cents) * factor).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return int(discounted)


def _clamp(percent: float) -> float:
    return float(min(100.0, max(0.0, percent)))
