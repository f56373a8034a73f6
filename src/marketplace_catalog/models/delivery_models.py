"""Delivery option models for product detail views."""

from enum import Enum

from pydantic import BaseModel, Field


class DeliveryOption(str, Enum):
    """Ways a buyer can receive an item."""

    RIDER = "rider"
    PARCEL = "parcel"
    PICKUP = "pickup"


class DeliveryPreference(str, Enum):
    """Buyer preference stored on their profile."""

    AUTO = "auto"
    PREFER_RIDER = "prefer_rider"
    PREFER_PARCEL = "prefer_parcel"


class DeliveryPlan(BaseModel):
    """Delivery options and timing for one item and one viewer."""

    item_id: str = Field(..., description="Catalog item identifier")
    available_methods: list[DeliveryOption] = Field(..., description="Methods the item supports")
    recommended_method: DeliveryOption = Field(..., description="Method chosen for the viewer")
    eta_min_minutes: int = Field(..., description="Lower bound of the delivery window", ge=0)
    eta_max_minutes: int = Field(..., description="Upper bound of the delivery window", ge=0)
    distance_km: float | None = Field(None, description="Distance from pickup to viewer", ge=0)
