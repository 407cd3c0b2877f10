"""
Cart mutations racing each other: parallel adds of the same (user, product)
pair must neither duplicate rows nor lose increments, and a line deleted
under a pending update stays deleted.
"""
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import event
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.errors import StoreError
from app.models.cart import CartItem
from app.repositories.cart_repo import CartRepository, InMemoryCartRepository
from app.repositories.product_repo import ProductRepository
from app.services.cart_service import CartService

PARALLEL_ADDS = 12
USER_ID = 1


def _run_parallel(fn, n: int) -> list:
    with ThreadPoolExecutor(max_workers=n) as pool:
        futures = [pool.submit(fn) for _ in range(n)]
        return [f.result(timeout=60) for f in futures]


def test_parallel_adds_on_sql_store_leave_one_row(engine, products):
    service = CartService(CartRepository(), ProductRepository(), max_quantity=1000)
    pid = products[0].id

    def add_one():
        # One session per "request", as FastAPI's threadpool would do.
        with Session(engine) as s:
            service.add_to_cart(s, USER_ID, pid, 1)

    _run_parallel(add_one, PARALLEL_ADDS)

    with Session(engine) as s:
        rows = s.exec(
            select(CartItem).where(CartItem.user_id == USER_ID, CartItem.product_id == pid)
        ).all()

    assert len(rows) == 1
    assert rows[0].quantity == PARALLEL_ADDS


def test_parallel_adds_on_memory_store_leave_one_line(engine, session, products):
    service = CartService(InMemoryCartRepository(), ProductRepository(), max_quantity=1000)
    pid = products[0].id

    def add_one():
        with Session(engine) as s:
            return service.add_to_cart(s, USER_ID, pid, 1).quantity

    results = _run_parallel(add_one, PARALLEL_ADDS)

    lines = service.list_cart(session, USER_ID)
    assert len(lines) == 1
    assert lines[0].quantity == PARALLEL_ADDS
    # Every add observed a distinct intermediate quantity: no lost update.
    assert sorted(results) == list(range(1, PARALLEL_ADDS + 1))


def test_unique_constraint_rejects_duplicate_rows(engine, products):
    pid = products[0].id
    with Session(engine) as s:
        s.add(CartItem(user_id=USER_ID, product_id=pid, quantity=1))
        s.commit()

    with Session(engine) as s:
        s.add(CartItem(user_id=USER_ID, product_id=pid, quantity=1))
        with pytest.raises(IntegrityError):
            s.commit()


def test_set_quantity_after_concurrent_delete_is_noop(engine, session, products):
    repo = CartRepository()
    service = CartService(repo, ProductRepository(), max_quantity=50)
    pid = products[0].id
    service.add_to_cart(session, USER_ID, pid, 2)
    # This request has already seen the line.
    assert repo.get_item(session, USER_ID, pid) is not None

    deleted = []

    def delete_before_update(orm_context):
        if orm_context.is_update and not deleted:
            deleted.append(True)
            with Session(engine) as other:
                repo.delete_item(other, USER_ID, pid)

    event.listen(session, "do_orm_execute", delete_before_update)

    service.update_quantity(session, USER_ID, pid, 5)

    assert deleted == [True]
    assert service.list_cart(session, USER_ID) == []


def _flush_failing_on_new_line(session, monkeypatch, error: IntegrityError, times: int):
    """Make the next `times` flushes of a pending CartItem raise `error`."""
    real_flush = session.flush
    raised = []

    def flush(objects=None):
        if len(raised) < times and any(isinstance(o, CartItem) for o in session.new):
            raised.append(error)
            raise error
        return real_flush(objects)

    monkeypatch.setattr(session, "flush", flush)
    return raised


def test_lost_insert_race_is_retried(session, products, monkeypatch):
    duplicate = IntegrityError(
        "INSERT INTO cart_items",
        {},
        Exception("UNIQUE constraint failed: cart_items.user_id, cart_items.product_id"),
    )
    raised = _flush_failing_on_new_line(session, monkeypatch, duplicate, times=1)

    item = CartRepository().increment(session, USER_ID, products[0].id, 3, max_quantity=50)

    assert len(raised) == 1
    assert item.quantity == 3


def test_other_integrity_errors_are_not_retried(session, products, monkeypatch):
    foreign_key = IntegrityError(
        "INSERT INTO cart_items", {}, Exception("FOREIGN KEY constraint failed")
    )
    raised = _flush_failing_on_new_line(session, monkeypatch, foreign_key, times=10)
    service = CartService(CartRepository(), ProductRepository(), max_quantity=50)

    with pytest.raises(StoreError) as exc_info:
        service.add_to_cart(session, USER_ID, products[0].id, 1)

    assert len(raised) == 1
    assert exc_info.value.__cause__ is foreign_key
