# app/schemas/cart.py
from datetime import datetime

from pydantic import ConfigDict, Field

from app.schemas.common import MAX_ROW_ID, ApiModel
from app.schemas.product import ProductRead


class CartItemCreate(ApiModel):
    """
    Payload for adding to cart. Quantity defaults to 1.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: int = Field(gt=0, le=MAX_ROW_ID)
    quantity: int = Field(default=1, gt=0, strict=True)


class CartItemUpdate(ApiModel):
    """
    Payload for setting the quantity of a cart line.

    Zero or negative removes the line.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(strict=True)


class CartItemRead(ApiModel):
    """
    Read model for a single cart line item.
    """

    id: int
    user_id: int
    product_id: int
    quantity: int
    created_at: datetime


class CartLineRead(CartItemRead):
    """
    Cart line item hydrated with its product.
    """

    product: ProductRead


class CartSummary(ApiModel):
    """
    Full cart response model with totals.
    """

    items: list[CartLineRead]
    total_items: int
    total_price: str
