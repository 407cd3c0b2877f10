"""
Client-side cart cache: invalidate-then-refetch and confirmed checkout.
"""
from contextlib import asynccontextmanager
from decimal import Decimal

import httpx
import pytest

from app.client.cart_state import AuthSession, CartState, Err, Ok, needs_refetch
from app.core.errors import StoreError
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.routers.cart import get_cart_service
from app.services.cart_service import CartService


@asynccontextmanager
async def _signed_in(app, email="erin@example.com"):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        auth = AuthSession(client)
        result = await auth.register("Erin", email, "s3cret-pass")
        assert isinstance(result, Ok)
        yield CartState(client, auth)


class ClearFailsCartService(CartService):
    """Real cart behaviour, except the server-side clear always fails."""

    def clear_cart(self, session, user_id):
        raise StoreError("connection reset")


def test_needs_refetch_only_after_confirmed_change():
    assert needs_refetch(Ok({"message": "ok"}))
    assert not needs_refetch(Err(error=None))


@pytest.mark.asyncio
async def test_signed_out_cart_is_empty_and_mutations_fail(app, products):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        cart = CartState(client, AuthSession(client))

        assert await cart.refresh() == Ok([])
        result = await cart.add_to_cart(products[0].id)

    assert isinstance(result, Err)
    assert result.error.status_code == 401
    assert cart.is_open is False


@pytest.mark.asyncio
async def test_add_refetches_and_opens_panel(app, products):
    async with _signed_in(app) as cart:
        await cart.refresh()
        assert cart.items == []

        result = await cart.add_to_cart(products[0].id, 2)
        await cart.add_to_cart(products[1].id, 3)

    assert isinstance(result, Ok)
    assert cart.stale is False
    assert cart.is_open is True
    assert cart.total_items == 5
    assert cart.total_price == Decimal("199.90") * 2 + Decimal("2299.00") * 3


@pytest.mark.asyncio
async def test_update_and_remove_reconcile_with_server(app, products):
    async with _signed_in(app) as cart:
        await cart.add_to_cart(products[0].id, 2)
        await cart.add_to_cart(products[1].id, 1)

        await cart.update_quantity(products[0].id, 7)
        assert {i["productId"]: i["quantity"] for i in cart.items} == {
            products[0].id: 7,
            products[1].id: 1,
        }

        await cart.update_quantity(products[0].id, 0)
        await cart.remove_from_cart(products[1].id)

    assert cart.items == []
    assert cart.total_items == 0


@pytest.mark.asyncio
async def test_failed_mutation_leaves_cache_untouched(app, products):
    async with _signed_in(app) as cart:
        await cart.add_to_cart(products[0].id, 2)
        before = list(cart.items)

        result = await cart.add_to_cart(9999, 1)

    assert isinstance(result, Err)
    assert result.error.status_code == 404
    assert result.error.message == "Product not found"
    assert cart.items == before


@pytest.mark.asyncio
async def test_checkout_clears_only_after_server_confirms(app, products):
    async with _signed_in(app) as cart:
        await cart.add_to_cart(products[0].id, 1)
        assert cart.is_open is True

        result = await cart.checkout()

        assert isinstance(result, Ok)
        assert cart.items == []
        assert cart.is_open is False
        # Server agrees.
        assert await cart.refresh() == Ok([])


@pytest.mark.asyncio
async def test_checkout_failure_keeps_items_and_panel(app, products):
    service = ClearFailsCartService(
        CartRepository(), ProductRepository(), max_quantity=50
    )
    app.dependency_overrides[get_cart_service] = lambda: service

    async with _signed_in(app) as cart:
        await cart.add_to_cart(products[0].id, 3)

        result = await cart.checkout()

        assert isinstance(result, Err)
        assert result.error.status_code == 500
        assert cart.total_items == 3
        assert cart.is_open is True
        # The server still has the line.
        await cart.refresh()
        assert cart.total_items == 3


@pytest.mark.asyncio
async def test_rejected_token_reads_as_empty_cart(app, products):
    async with _signed_in(app) as cart:
        await cart.add_to_cart(products[0].id, 1)
        cart._auth.token = "tampered.token.value"

        result = await cart.refresh()

    assert result == Ok([])
    assert cart.items == []


@pytest.mark.asyncio
async def test_login_with_wrong_password_returns_err(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        auth = AuthSession(client)
        await auth.register("Erin", "erin@example.com", "s3cret-pass")
        auth.logout()

        result = await auth.login("erin@example.com", "nope-nope")

    assert isinstance(result, Err)
    assert result.error.status_code == 401
    assert auth.is_authenticated is False
