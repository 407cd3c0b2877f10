# app/services/cart_service.py
import logging
from contextlib import contextmanager
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.errors import NotFoundError, StoreError, ValidationError
from app.models.cart import CartItem
from app.models.product import Product
from app.repositories.cart_repo import CartStore
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import CartItemRead, CartLineRead, CartSummary
from app.schemas.product import ProductRead

logger = logging.getLogger(__name__)


class CartService:
    """
    Business logic for cart operations.

    Each (user, product) pair is either absent or present with quantity >= 1:
      - add:        absent -> present(n), present(q) -> present(q + n)
      - set:        q <= 0 -> absent, present -> present(q), absent stays absent
      - remove:     present -> absent, absent -> no-op
      - clear:      every pair of the user -> absent

    Every operation that names a product fails with NotFoundError, without
    touching the cart, if the product is not in the catalog.
    Callers are expected to have authenticated the user already.
    """

    def __init__(
        self,
        cart_store: CartStore,
        product_repo: ProductRepository,
        max_quantity: int,
    ):
        self.cart_store = cart_store
        self.product_repo = product_repo
        self.max_quantity = max_quantity

    # ---- internal helpers ----

    @contextmanager
    def _store_call(self, session: Session, action: str):
        """Translate persistence failures of a cart store call into StoreError."""
        try:
            yield
        except SQLAlchemyError as exc:
            session.rollback()
            raise StoreError(f"Cart {action} failed: {type(exc).__name__}") from exc

    def _get_product(self, session: Session, product_id: int) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def _check_quantity(self, quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError("Quantity must be an integer")
        if quantity > self.max_quantity:
            raise ValidationError(f"Quantity cannot exceed {self.max_quantity}")

    def _hydrate(self, session: Session, items: list[CartItem]) -> list[CartLineRead]:
        products = self.product_repo.get_many(
            session, sorted({it.product_id for it in items})
        )
        lines: list[CartLineRead] = []
        for it in items:
            product = products.get(it.product_id)
            if product is None:
                # Orphaned line: omitted from reads rather than failing the cart.
                logger.warning(
                    "Cart line %s references missing product %s", it.id, it.product_id
                )
                continue
            lines.append(
                CartLineRead(
                    id=it.id,
                    user_id=it.user_id,
                    product_id=it.product_id,
                    quantity=it.quantity,
                    created_at=it.created_at,
                    product=ProductRead.model_validate(product),
                )
            )
        return lines

    # ---- public operations ----

    def list_cart(self, session: Session, user_id: int) -> list[CartLineRead]:
        """
        Return the user's line items in insertion order, each with its product.
        """
        with self._store_call(session, "read"):
            items = self.cart_store.list_for_user(session, user_id)
        return self._hydrate(session, items)

    def get_cart_summary(self, session: Session, user_id: int) -> CartSummary:
        """
        Return full cart summary:
          - hydrated line items
          - total_items (sum of quantities)
          - total_price (sum of price * quantity, 2 decimals)
        """
        lines = self.list_cart(session, user_id)
        total_items = sum(line.quantity for line in lines)
        total_price = sum(
            (Decimal(line.product.price) * line.quantity for line in lines),
            Decimal("0"),
        )
        return CartSummary(
            items=lines,
            total_items=total_items,
            total_price=f"{total_price:.2f}",
        )

    def add_to_cart(
        self,
        session: Session,
        user_id: int,
        product_id: int,
        quantity: int = 1,
    ) -> CartItemRead:
        """
        Add a product to the user's cart, merging with an existing line.

        Rules:
          - product must exist
          - quantity must be a positive integer
          - resulting quantity must not exceed max_quantity
        """
        self._check_quantity(quantity)
        if quantity <= 0:
            raise ValidationError("Quantity must be a positive integer")
        self._get_product(session, product_id)

        with self._store_call(session, "add"):
            item = self.cart_store.increment(
                session,
                user_id,
                product_id,
                quantity,
                max_quantity=self.max_quantity,
            )
        if item is None:
            raise ValidationError(f"Quantity cannot exceed {self.max_quantity}")

        logger.info(
            "Cart add user=%s product=%s quantity=%s -> %s",
            user_id, product_id, quantity, item.quantity,
        )
        return CartItemRead.model_validate(item)

    def update_quantity(
        self,
        session: Session,
        user_id: int,
        product_id: int,
        quantity: int,
    ) -> None:
        """
        Set the quantity of a line.

        quantity <= 0 removes the line. A positive quantity on a product that
        is not in the cart is a no-op: lines are only created by add_to_cart.
        """
        self._check_quantity(quantity)
        self._get_product(session, product_id)

        if quantity <= 0:
            with self._store_call(session, "remove"):
                self.cart_store.delete_item(session, user_id, product_id)
            return

        with self._store_call(session, "update"):
            updated = self.cart_store.set_quantity(session, user_id, product_id, quantity)
        if updated is None:
            logger.info(
                "Cart set on absent line ignored user=%s product=%s", user_id, product_id
            )

    def remove_item(self, session: Session, user_id: int, product_id: int) -> None:
        """
        Remove a product from the cart. Removing an absent line is a no-op.
        """
        self._get_product(session, product_id)
        with self._store_call(session, "remove"):
            self.cart_store.delete_item(session, user_id, product_id)

    def clear_cart(self, session: Session, user_id: int) -> None:
        """
        Clear all items from the cart. Idempotent.
        """
        with self._store_call(session, "clear"):
            removed = self.cart_store.clear_user_cart(session, user_id)
        logger.info("Cart cleared user=%s lines=%s", user_id, removed)
