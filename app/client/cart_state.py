# app/client/cart_state.py
"""
Client-side mirror of the server cart.

Holds the cached cart view and the transient panel state a storefront UI
needs, and talks to the REST API over an `httpx.AsyncClient`.

Rules:
  - every successful mutation invalidates the cached view and refetches it
    before the call returns; failed mutations leave the cache untouched
  - checkout only reports success (and clears local state) after the server
    confirmed the cart was cleared
  - one CartState per AuthSession; there is no module-level instance
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Generic, TypeVar, Union

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CartClientError(Exception):
    """A cart/auth call that did not succeed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: CartClientError


Result = Union[Ok[T], Err]


def needs_refetch(result: Result) -> bool:
    """The cached cart is stale exactly when the server confirmed a change."""
    return isinstance(result, Ok)


def _error_from(response: httpx.Response, fallback: str) -> CartClientError:
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        detail = None
    message = detail if isinstance(detail, str) and detail else fallback
    return CartClientError(message, status_code=response.status_code)


class AuthSession:
    """
    Token holder for one signed-in shopper.

    Equivalent of the storefront keeping the token in local storage.
    """

    def __init__(self, client: httpx.AsyncClient, api_prefix: str = "/api"):
        self._client = client
        self._prefix = api_prefix
        self.token: str | None = None
        self.user: dict[str, Any] | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _authenticate(
        self, path: str, body: dict[str, str], fallback: str
    ) -> Result[dict[str, Any]]:
        try:
            response = await self._client.post(f"{self._prefix}{path}", json=body)
        except httpx.HTTPError as exc:
            logger.warning("Auth request failed: %s", type(exc).__name__)
            return Err(CartClientError("Network error"))

        if response.is_error:
            return Err(_error_from(response, fallback))

        data = response.json()
        self.token = data["token"]
        self.user = data["user"]
        return Ok(data["user"])

    async def register(self, name: str, email: str, password: str) -> Result[dict[str, Any]]:
        return await self._authenticate(
            "/auth/register",
            {"name": name, "email": email, "password": password},
            "Registration failed",
        )

    async def login(self, email: str, password: str) -> Result[dict[str, Any]]:
        return await self._authenticate(
            "/auth/login",
            {"email": email, "password": password},
            "Login failed",
        )

    def logout(self) -> None:
        self.token = None
        self.user = None


class CartState:
    """
    Cached cart view plus UI state for one AuthSession.

    Attributes:
        items: hydrated line items as returned by GET /cart
        is_open: whether the cart panel is shown (never sent to the server)
        is_loading: a fetch is in flight
        stale: the cached view no longer reflects the server
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        auth: AuthSession,
        api_prefix: str = "/api",
    ):
        self._client = client
        self._auth = auth
        self._prefix = api_prefix
        self._lock = asyncio.Lock()

        self.items: list[dict[str, Any]] = []
        self.is_open = False
        self.is_loading = False
        self.stale = True

    # ----- derived view -----

    @property
    def total_items(self) -> int:
        return sum(item["quantity"] for item in self.items)

    @property
    def total_price(self) -> Decimal:
        return sum(
            (Decimal(item["product"]["price"]) * item["quantity"] for item in self.items),
            Decimal("0"),
        )

    def set_open(self, is_open: bool) -> None:
        self.is_open = is_open

    def invalidate(self) -> None:
        self.stale = True

    # ----- fetching -----

    async def refresh(self) -> Result[list[dict[str, Any]]]:
        """
        Reload the cart from the server.

        Signed-out or rejected sessions see an empty cart.
        """
        if not self._auth.is_authenticated:
            self.items = []
            self.stale = False
            return Ok(self.items)

        self.is_loading = True
        try:
            response = await self._client.get(
                f"{self._prefix}/cart", headers=self._auth.headers()
            )
        except httpx.HTTPError as exc:
            logger.warning("Cart fetch failed: %s", type(exc).__name__)
            return Err(CartClientError("Network error"))
        finally:
            self.is_loading = False

        if response.status_code in (401, 403):
            self.items = []
            self.stale = False
            return Ok(self.items)
        if response.is_error:
            return Err(_error_from(response, "Failed to fetch cart"))

        self.items = response.json()
        self.stale = False
        return Ok(self.items)

    async def _mutate(
        self, method: str, path: str, body: dict[str, Any] | None, fallback: str
    ) -> Result[Any]:
        if not self._auth.is_authenticated:
            return Err(CartClientError("Authentication required", status_code=401))

        async with self._lock:
            try:
                response = await self._client.request(
                    method,
                    f"{self._prefix}{path}",
                    json=body,
                    headers=self._auth.headers(),
                )
            except httpx.HTTPError as exc:
                logger.warning("Cart %s %s failed: %s", method, path, type(exc).__name__)
                return Err(CartClientError("Network error"))

            if response.is_error:
                result: Result[Any] = Err(_error_from(response, fallback))
            else:
                result = Ok(response.json())

            if needs_refetch(result):
                self.invalidate()
                refreshed = await self.refresh()
                if isinstance(refreshed, Err):
                    logger.warning("Cart refetch after %s %s failed", method, path)
            return result

    # ----- mutations -----

    async def add_to_cart(self, product_id: int, quantity: int = 1) -> Result[Any]:
        result = await self._mutate(
            "POST",
            "/cart/add",
            {"productId": product_id, "quantity": quantity},
            "Failed to add to cart",
        )
        if isinstance(result, Ok):
            self.set_open(True)
        return result

    async def update_quantity(self, product_id: int, quantity: int) -> Result[Any]:
        return await self._mutate(
            "PUT", f"/cart/{product_id}", {"quantity": quantity}, "Failed to update cart"
        )

    async def remove_from_cart(self, product_id: int) -> Result[Any]:
        return await self._mutate(
            "DELETE", f"/cart/{product_id}", None, "Failed to remove from cart"
        )

    async def clear_cart(self) -> Result[Any]:
        return await self._mutate("DELETE", "/cart", None, "Failed to clear cart")

    async def checkout(self) -> Result[Any]:
        """
        Finish the purchase by clearing the server-side cart.

        Local items and the panel are only cleared once the server has
        confirmed; on failure everything is left as it was.
        """
        result = await self.clear_cart()
        if isinstance(result, Ok):
            self.items = []
            self.set_open(False)
        return result
