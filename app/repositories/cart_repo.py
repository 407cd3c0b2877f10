# app/repositories/cart_repo.py
import threading
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.models.cart import CartItem

# How many times increment() retries after losing an insert race.
INSERT_RACE_RETRIES = 3


def _is_duplicate_line(exc: IntegrityError) -> bool:
    """True when the violation is the one-line-per-(user, product) constraint."""
    message = str(exc.orig)
    return "uq_cart_user_product" in message or (
        "UNIQUE constraint failed" in message and "cart_items.product_id" in message
    )


class CartStore(Protocol):
    """
    Persistence contract for cart line items, keyed by (user_id, product_id).

    Implementations guarantee at most one line per key and that
    `increment` is atomic with respect to concurrent callers.
    """

    def get_item(
        self, session: Session, user_id: int, product_id: int
    ) -> CartItem | None: ...

    def list_for_user(self, session: Session, user_id: int) -> list[CartItem]: ...

    def increment(
        self,
        session: Session,
        user_id: int,
        product_id: int,
        quantity: int,
        *,
        max_quantity: int,
    ) -> CartItem | None: ...

    def set_quantity(
        self, session: Session, user_id: int, product_id: int, quantity: int
    ) -> CartItem | None: ...

    def delete_item(self, session: Session, user_id: int, product_id: int) -> bool: ...

    def clear_user_cart(self, session: Session, user_id: int) -> int: ...


class CartRepository:
    """
    Data access layer for CartItem backed by the cart_items table.

    - Pure DB operations, no FastAPI, no business logic.
    - The (user_id, product_id) unique constraint is what keeps concurrent
      adds from creating duplicate rows; `increment` relies on it.
    """

    @staticmethod
    def _key(user_id: int, product_id: int):
        return (CartItem.user_id == user_id, CartItem.product_id == product_id)

    def get_item(
        self, session: Session, user_id: int, product_id: int
    ) -> CartItem | None:
        stmt = select(CartItem).where(*self._key(user_id, product_id))
        return session.exec(stmt).first()

    def list_for_user(self, session: Session, user_id: int) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.id)
        )
        return list(session.exec(stmt).all())

    def _increment_existing(
        self, session: Session, user_id: int, product_id: int, quantity: int
    ) -> CartItem | None:
        # Single UPDATE so the read-modify-write happens inside the database.
        stmt = (
            update(CartItem)
            .where(*self._key(user_id, product_id))
            .values(quantity=CartItem.quantity + quantity)
        )
        result = session.exec(stmt)  # type: ignore[call-overload]
        if result.rowcount == 0:
            return None
        refetch = (
            select(CartItem)
            .where(*self._key(user_id, product_id))
            .execution_options(populate_existing=True)
        )
        return session.exec(refetch).one()

    def increment(
        self,
        session: Session,
        user_id: int,
        product_id: int,
        quantity: int,
        *,
        max_quantity: int,
    ) -> CartItem | None:
        """
        Add `quantity` to the (user, product) line, creating it if absent.

        Returns the committed line, or None (and rolls back) when the
        resulting quantity would exceed `max_quantity`.
        """
        item = None
        for attempt in range(INSERT_RACE_RETRIES):
            item = self._increment_existing(session, user_id, product_id, quantity)
            if item is not None:
                break
            try:
                item = CartItem(user_id=user_id, product_id=product_id, quantity=quantity)
                session.add(item)
                session.flush()
                break
            except IntegrityError as exc:
                session.rollback()
                item = None
                # Only a lost race on the (user, product) key is retried.
                if not _is_duplicate_line(exc) or attempt == INSERT_RACE_RETRIES - 1:
                    raise

        if item.quantity > max_quantity:
            session.rollback()
            return None

        session.commit()
        session.refresh(item)
        return item

    def set_quantity(
        self, session: Session, user_id: int, product_id: int, quantity: int
    ) -> CartItem | None:
        """Overwrite the quantity of an existing line. Absent lines are left absent."""
        stmt = (
            update(CartItem)
            .where(*self._key(user_id, product_id))
            .values(quantity=quantity)
        )
        result = session.exec(stmt)  # type: ignore[call-overload]
        session.commit()
        if result.rowcount == 0:
            return None
        return self.get_item(session, user_id, product_id)

    def delete_item(self, session: Session, user_id: int, product_id: int) -> bool:
        stmt = delete(CartItem).where(*self._key(user_id, product_id))
        result = session.exec(stmt)  # type: ignore[call-overload]
        session.commit()
        return result.rowcount > 0

    def clear_user_cart(self, session: Session, user_id: int) -> int:
        stmt = delete(CartItem).where(CartItem.user_id == user_id)
        result = session.exec(stmt)  # type: ignore[call-overload]
        session.commit()
        return result.rowcount


class InMemoryCartRepository:
    """
    Dict-backed CartStore for tests and local experiments.

    The `session` argument is accepted for interface parity and ignored.
    A single lock serializes every operation, which gives `increment`
    the same atomicity the SQL implementation gets from the database.
    """

    def __init__(self) -> None:
        self._items: dict[tuple[int, int], CartItem] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    @staticmethod
    def _copy(item: CartItem) -> CartItem:
        return CartItem(**item.model_dump())

    def get_item(
        self, session: Session, user_id: int, product_id: int
    ) -> CartItem | None:
        with self._lock:
            item = self._items.get((user_id, product_id))
            return self._copy(item) if item else None

    def list_for_user(self, session: Session, user_id: int) -> list[CartItem]:
        with self._lock:
            rows = [it for (uid, _), it in self._items.items() if uid == user_id]
            return [self._copy(it) for it in sorted(rows, key=lambda it: it.id)]

    def increment(
        self,
        session: Session,
        user_id: int,
        product_id: int,
        quantity: int,
        *,
        max_quantity: int,
    ) -> CartItem | None:
        with self._lock:
            key = (user_id, product_id)
            existing = self._items.get(key)
            new_qty = quantity + (existing.quantity if existing else 0)
            if new_qty > max_quantity:
                return None
            if existing:
                existing.quantity = new_qty
            else:
                existing = CartItem(
                    id=self._next_id,
                    user_id=user_id,
                    product_id=product_id,
                    quantity=new_qty,
                    created_at=datetime.now(timezone.utc),
                )
                self._next_id += 1
                self._items[key] = existing
            return self._copy(existing)

    def set_quantity(
        self, session: Session, user_id: int, product_id: int, quantity: int
    ) -> CartItem | None:
        with self._lock:
            item = self._items.get((user_id, product_id))
            if item is None:
                return None
            item.quantity = quantity
            return self._copy(item)

    def delete_item(self, session: Session, user_id: int, product_id: int) -> bool:
        with self._lock:
            return self._items.pop((user_id, product_id), None) is not None

    def clear_user_cart(self, session: Session, user_id: int) -> int:
        with self._lock:
            keys = [key for key in self._items if key[0] == user_id]
            for key in keys:
                del self._items[key]
            return len(keys)
