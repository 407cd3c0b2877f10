# app/schemas/product.py
from decimal import Decimal, InvalidOperation

from pydantic import ConfigDict, Field, field_validator

from app.models.product import Category
from app.schemas.common import ApiModel


def normalize_price(raw: str) -> str:
    """
    Validate a decimal price string and render it with 2 decimals.

    "3499" -> "3499.00"; negative values, NaN and more than 2 fraction
    digits are rejected.
    """
    try:
        value = Decimal(raw.strip())
    except (InvalidOperation, AttributeError):
        raise ValueError("price must be a decimal string")
    if not value.is_finite() or value < 0:
        raise ValueError("price must be a non-negative decimal")
    if value.as_tuple().exponent < -2:
        raise ValueError("price supports at most 2 decimal places")
    return f"{value:.2f}"


class ProductBase(ApiModel):
    """
    Shared fields for product payloads.
    """

    name: str = Field(min_length=1, max_length=200)
    description: str = ""
    price: str
    image: str = ""
    category: Category
    specifications: list[str] = Field(default_factory=list)
    in_stock: bool = True

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: str) -> str:
        return normalize_price(v)


class ProductCreate(ProductBase):
    """
    Payload for inserting a catalog entry (used by the seeder).
    """

    model_config = ConfigDict(extra="forbid")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class ProductRead(ProductBase):
    """
    Product representation for clients.
    """

    id: int
