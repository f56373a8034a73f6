"""Delivery method selection and ETA estimates for catalog items."""

import math

from marketplace_catalog.models.catalog_models import GROCERY_KIND, CatalogItem
from marketplace_catalog.models.delivery_models import (
    DeliveryOption,
    DeliveryPlan,
    DeliveryPreference,
)

DEFAULT_PREP_MINUTES = 15
MIN_RIDE_MINUTES = 10
UNKNOWN_RIDE_MINUTES = 30
RIDE_MINUTES_PER_KM = 3
ETA_WINDOW_MINUTES = 15


def available_methods(item: CatalogItem) -> list[DeliveryOption]:
    """List the delivery methods an item supports.

    Prepared food and perishable groceries cannot go by parcel courier.
    Pickup needs a pickup location.
    """
    methods: list[DeliveryOption] = []

    if item.allow_rider_delivery:
        methods.append(DeliveryOption.RIDER)

    if item.allow_parcel_delivery and not item.is_prepared_food and not item.is_perishable_grocery:
        methods.append(DeliveryOption.PARCEL)

    if item.pickup_location is not None:
        methods.append(DeliveryOption.PICKUP)

    return methods


def choose_delivery_method(
    preference: DeliveryPreference,
    item: CatalogItem,
    riders_nearby: bool,
) -> DeliveryOption:
    """Pick rider or parcel delivery for a buyer.

    Args:
        preference: Buyer's stored delivery preference
        item: Item being delivered
        riders_nearby: Whether riders are currently available near the vendor

    Returns:
        DeliveryOption.RIDER or DeliveryOption.PARCEL
    """
    if item.is_prepared_food or item.is_perishable_grocery:
        return DeliveryOption.RIDER

    if not item.allow_parcel_delivery:
        return DeliveryOption.RIDER
    if not item.allow_rider_delivery:
        return DeliveryOption.PARCEL

    if preference == DeliveryPreference.PREFER_RIDER:
        return DeliveryOption.RIDER if riders_nearby else DeliveryOption.PARCEL
    if preference == DeliveryPreference.PREFER_PARCEL:
        return DeliveryOption.PARCEL

    # auto: fresh items go by rider when one is around
    if (item.product_kind == GROCERY_KIND or item.perishable) and riders_nearby:
        return DeliveryOption.RIDER
    return DeliveryOption.PARCEL


def estimate_delivery_window(
    prep_minutes: int | None,
    distance_km: float | None,
) -> tuple[int, int]:
    """Estimate a rider delivery window in minutes.

    Args:
        prep_minutes: Vendor preparation time, defaults to 15 minutes
        distance_km: Distance from pickup to the buyer, if known

    Returns:
        (earliest, latest) minutes from now
    """
    prep = DEFAULT_PREP_MINUTES if prep_minutes is None else prep_minutes

    if distance_km:
        ride = max(MIN_RIDE_MINUTES, math.floor(distance_km * RIDE_MINUTES_PER_KM + 0.5))
    else:
        ride = UNKNOWN_RIDE_MINUTES

    earliest = prep + ride
    return earliest, earliest + ETA_WINDOW_MINUTES


def plan_delivery(
    item: CatalogItem,
    preference: DeliveryPreference = DeliveryPreference.AUTO,
    riders_nearby: bool = False,
    distance_km: float | None = None,
) -> DeliveryPlan:
    """Build the delivery plan shown on a product detail page."""
    earliest, latest = estimate_delivery_window(item.prep_time_minutes, distance_km)

    return DeliveryPlan(
        item_id=item.id,
        available_methods=available_methods(item),
        recommended_method=choose_delivery_method(preference, item, riders_nearby),
        eta_min_minutes=earliest,
        eta_max_minutes=latest,
        distance_km=distance_km,
    )
