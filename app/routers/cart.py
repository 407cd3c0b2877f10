# app/routers/cart.py
from functools import lru_cache

from fastapi import APIRouter, Depends, Path
from sqlmodel import Session

from app.core.auth import AuthenticatedIdentity, require_auth
from app.core.config import get_settings
from app.database import get_session
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import (
    CartItemCreate,
    CartItemRead,
    CartItemUpdate,
    CartLineRead,
    CartSummary,
)
from app.schemas.common import MAX_ROW_ID, MessageResponse
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])


@lru_cache
def get_cart_service() -> CartService:
    """
    Cart service wired to the SQL stores.

    Overridable through `app.dependency_overrides` to inject another
    CartStore (e.g. the in-memory one in tests).
    """
    return CartService(
        CartRepository(),
        ProductRepository(),
        max_quantity=get_settings().CART_MAX_QUANTITY,
    )


@router.get("", response_model=list[CartLineRead])
def get_my_cart(
    identity: AuthenticatedIdentity = Depends(require_auth),
    session: Session = Depends(get_session),
    service: CartService = Depends(get_cart_service),
):
    """
    Get the current user's line items, each with its product.
    """
    return service.list_cart(session, identity.user_id)


@router.get("/summary", response_model=CartSummary)
def get_my_cart_summary(
    identity: AuthenticatedIdentity = Depends(require_auth),
    session: Session = Depends(get_session),
    service: CartService = Depends(get_cart_service),
):
    """
    Get the current user's cart with total item count and total price.
    """
    return service.get_cart_summary(session, identity.user_id)


@router.post("/add", response_model=CartItemRead)
def add_to_cart(
    payload: CartItemCreate,
    identity: AuthenticatedIdentity = Depends(require_auth),
    session: Session = Depends(get_session),
    service: CartService = Depends(get_cart_service),
):
    """
    Add a product to the current user's cart.

    Adding a product already in the cart increases its quantity.
    Returns the resulting line item.
    """
    return service.add_to_cart(
        session, identity.user_id, payload.product_id, payload.quantity
    )


@router.put("/{product_id}", response_model=MessageResponse)
def update_cart_item(
    payload: CartItemUpdate,
    product_id: int = Path(gt=0, le=MAX_ROW_ID),
    identity: AuthenticatedIdentity = Depends(require_auth),
    session: Session = Depends(get_session),
    service: CartService = Depends(get_cart_service),
):
    """
    Set the quantity of a product in the cart.

    A quantity of zero or less removes the product.
    """
    service.update_quantity(session, identity.user_id, product_id, payload.quantity)
    return MessageResponse(message="Cart updated successfully")


@router.delete("/{product_id}", response_model=MessageResponse)
def remove_cart_item(
    product_id: int = Path(gt=0, le=MAX_ROW_ID),
    identity: AuthenticatedIdentity = Depends(require_auth),
    session: Session = Depends(get_session),
    service: CartService = Depends(get_cart_service),
):
    """
    Remove a product from the cart.
    """
    service.remove_item(session, identity.user_id, product_id)
    return MessageResponse(message="Item removed from cart")


@router.delete("", response_model=MessageResponse)
def clear_cart(
    identity: AuthenticatedIdentity = Depends(require_auth),
    session: Session = Depends(get_session),
    service: CartService = Depends(get_cart_service),
):
    """
    Clear the entire cart.
    """
    service.clear_cart(session, identity.user_id)
    return MessageResponse(message="Cart cleared successfully")
