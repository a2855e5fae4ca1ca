"""
Pydantic models for listings.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

ALL_CATEGORIES = "all"
ALL_CATEGORIES_LABEL = "All Items"

TITLE_MAX_LENGTH = 80
DESCRIPTION_MAX_LENGTH = 1000


class Category(str, Enum):
    VEHICLES = "vehicles"
    PROPERTY = "property"
    APPAREL = "apparel"
    ELECTRONICS = "electronics"
    SPORTS = "sports"
    HOME = "home"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


class Condition(str, Enum):
    NEW = "new"
    LIKE_NEW = "like-new"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @property
    def label(self) -> str:
        return CONDITION_LABELS[self]


# Display labels, in the order the catalog sidebar lists them.
CATEGORY_LABELS: Dict[Category, str] = {
    Category.VEHICLES: "Vehicles",
    Category.PROPERTY: "Property Rentals",
    Category.APPAREL: "Apparel",
    Category.ELECTRONICS: "Electronics",
    Category.SPORTS: "Sports & Outdoors",
    Category.HOME: "Home & Garden",
}

CONDITION_LABELS: Dict[Condition, str] = {
    Condition.NEW: "New",
    Condition.LIKE_NEW: "Like New",
    Condition.GOOD: "Good",
    Condition.FAIR: "Fair",
    Condition.POOR: "Poor",
}


def category_heading(category: str) -> str:
    """Heading for a catalog filter value: "All Items" or the category label."""
    if category == ALL_CATEGORIES:
        return ALL_CATEGORIES_LABEL
    return Category(category).label


class Listing(BaseModel):
    """Listing row as stored in the ``listings`` table. Append-only."""
    id: str
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    price: Decimal = Field(ge=0)
    category: Category
    condition: Optional[Condition] = None
    location: str = Field(min_length=1)
    seller_email: str = Field(min_length=1)
    image_url: Optional[str] = None
    created_at: datetime

    class Config:
        frozen = True
        from_attributes = True

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Ids are opaque; integer primary keys are carried as strings."""
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("condition", "image_url", mode="before")
    @classmethod
    def blank_as_missing(cls, v: Any) -> Any:
        """Rows written without a condition or image store an empty string."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ListingDraft(BaseModel):
    """
    Raw form input for a new listing.

    Fields stay as strings so validation can report every problem at once
    (including an unparseable price) instead of failing on the first one.
    """
    title: str = ""
    description: str = ""
    price: str = ""
    category: str = ""
    condition: str = ""
    location: str = ""
    seller_email: str = ""


class ListingCard(BaseModel):
    """Listing plus display strings, as shown in the catalog and detail views."""
    listing: Listing
    price_display: str
    listed_display: str
    condition_display: Optional[str] = None
    category_display: str


class CatalogResponse(BaseModel):
    """Response for GET /api/listings."""
    category: str
    search: str
    heading: str
    count: int
    items: List[ListingCard]
    error: Optional[str] = None


class CategoryOption(BaseModel):
    id: str
    name: str
