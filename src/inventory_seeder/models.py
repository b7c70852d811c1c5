from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, StrictStr, field_validator


class Address(BaseModel):
    """
    Manufacturer postal address.
    """

    street: StrictStr
    city: StrictStr
    state: StrictStr
    postal_code: StrictStr
    country: StrictStr


class Prices(BaseModel):
    full_price: float = Field(..., ge=0, strict=True, description="Regular price in USD")
    sale_price: float = Field(..., ge=0, strict=True, description="Discounted price in USD")


class Review(BaseModel):
    review_date: StrictStr
    rating: float = Field(..., strict=True, description="Numerical rating, usually 1-5")
    comment: StrictStr


class Record(BaseModel):
    """
    One furniture-store inventory item as produced by the generator.
    Every field is required; numbers and strings are not coerced into each other.
    """

    item_id: StrictStr = Field(..., description="Unique identifier for the item")
    item_name: StrictStr = Field(..., description="Name of the furniture item")
    item_description: StrictStr = Field(..., description="Detailed description of the item")
    brand: StrictStr = Field(..., description="Brand or manufacturer name")
    manufacturer_address: Address
    prices: Prices
    categories: List[StrictStr] = Field(..., description="Category tags")
    user_reviews: List[Review] = Field(..., description="Customer reviews")
    notes: StrictStr = Field(..., description="Additional notes about the item")

    @field_validator("item_id", "item_name", "item_description", "brand")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v
