"""Catalog filter criteria and the annotated view-model returned to callers."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from marketplace_catalog.models.catalog_models import CatalogItem

ALL_CATEGORIES = "all"
ALL_KINDS = "all"
DEFAULT_RADIUS_KM = 10.0


class TypeFilter(str, Enum):
    """Listing type criterion."""

    ALL = "all"
    PRODUCT = "product"
    SERVICE = "service"


class DeliveryMethod(str, Enum):
    """Delivery-method criterion."""

    ANY = "any"
    RIDER = "rider"
    PARCEL = "parcel"


class SortOrder(str, Enum):
    """Ordering applied after filtering.

    RELEVANCE keeps the pipeline order: the source order, or ascending
    distance when the proximity filter is active.
    """

    RELEVANCE = "relevance"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NEWEST = "newest"


class CatalogFilters(BaseModel):
    """Filter criteria for a catalog view.

    Every field defaults to its "don't care" value, so ``CatalogFilters()``
    admits the whole catalog.
    """

    model_config = ConfigDict(frozen=True)

    item_type: TypeFilter = Field(default=TypeFilter.ALL, description="Listing type")
    category_id: str = Field(default=ALL_CATEGORIES, description="Category tag or 'all'")
    product_kind: str | None = Field(None, description="Product kind tag or 'all'")
    delivery_method: DeliveryMethod = Field(
        default=DeliveryMethod.ANY, description="Required delivery capability"
    )
    perishable_only: bool = Field(default=False, description="Only perishable or prepared food")
    open_now: bool = Field(default=False, description="Only vendors open right now")
    near_me: bool = Field(default=False, description="Restrict to the radius around the viewer")
    radius_km: float = Field(default=DEFAULT_RADIUS_KM, description="Proximity radius", gt=0)
    community_id: str | None = Field(None, description="Restrict to one community")
    vendor_id: str | None = Field(None, description="Restrict to one vendor")
    query: str | None = Field(None, description="Free-text search")
    sort: SortOrder = Field(default=SortOrder.RELEVANCE, description="Result ordering")


class CatalogEntry(BaseModel):
    """One catalog item annotated for display."""

    item: CatalogItem
    effective_discount_percent: float = Field(..., ge=0, le=100)
    member_price_cents: int | None = Field(None, description="Discounted price for members")
    prospective_member_price_cents: int | None = Field(
        None, description="Price a non-member would pay after joining the community"
    )
    distance_km: float | None = Field(None, description="Distance from the viewer", ge=0)
    display_price: str = Field(..., description="Localized base price")
    display_member_price: str | None = Field(None, description="Localized member price")
    display_prospective_member_price: str | None = Field(
        None, description="Localized price after joining"
    )
