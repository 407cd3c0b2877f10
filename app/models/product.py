# app/models/product.py
from enum import Enum

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


class Category(str, Enum):
    """Fixed set of catalog categories."""

    COMPUTERS = "computers"
    NOTEBOOKS = "notebooks"
    PERIPHERALS = "peripherals"


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    `price` is kept as a decimal string ("3499.00") so totals can be
    computed with Decimal without float drift.
    The cart only references products by id, it never writes to this table.
    """

    __tablename__ = "products"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    name: str = Field(
        max_length=200,
        index=True,
        description="Display name of the product",
    )

    description: str = Field(
        default="",
        description="Short marketing description",
    )

    price: str = Field(
        max_length=20,
        description="Unit price as a decimal string",
    )

    image: str = Field(
        default="",
        description="Image URL",
    )

    category: Category = Field(
        index=True,
        description="One of the fixed catalog categories",
    )

    specifications: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    in_stock: bool = Field(
        default=True,
        description="Whether this product is currently available",
    )
