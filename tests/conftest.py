import os

# Settings are read at import time of app.main; configure them first.
os.environ["JWT_SECRET"] = "test-secret-for-the-storefront-suite-0123456789"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_CATALOG"] = "false"
os.environ["CART_MAX_QUANTITY"] = "50"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from app.core.auth import create_access_token, hash_password
from app.database import build_engine, create_db_and_tables, get_session
from app.main import app as fastapi_app
from app.models.product import Category, Product
from app.models.user import User
from app.repositories.cart_repo import CartRepository, InMemoryCartRepository
from app.repositories.product_repo import ProductRepository
from app.services.cart_service import CartService

MAX_QUANTITY = 50


@pytest.fixture
def engine(tmp_path):
    """Fresh file-backed SQLite database per test (shared across threads)."""
    eng = build_engine(f"sqlite:///{tmp_path / 'storefront.db'}")
    create_db_and_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def products(session) -> list[Product]:
    rows = [
        Product(
            name="Gaming Mouse",
            description="16000 DPI optical sensor",
            price="199.90",
            category=Category.PERIPHERALS,
            specifications=["7 buttons"],
        ),
        Product(
            name="Notebook Pro 15",
            description="Intel i5, 8GB RAM",
            price="2299.00",
            category=Category.NOTEBOOKS,
            specifications=["256GB SSD", "Windows 11"],
        ),
        Product(
            name="Mechanical Keyboard",
            description="Blue switches with RGB",
            price="349.00",
            category=Category.PERIPHERALS,
            in_stock=False,
        ),
    ]
    repo = ProductRepository()
    return [repo.create(session, p) for p in rows]


@pytest.fixture
def user(session) -> User:
    u = User(
        name="Alice",
        email="alice@example.com",
        password_hash=hash_password("correct-horse"),
    )
    session.add(u)
    session.commit()
    session.refresh(u)
    return u


@pytest.fixture
def auth_headers(user) -> dict[str, str]:
    token = create_access_token(user.id, user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(params=["sql", "memory"])
def cart_store(request):
    if request.param == "sql":
        return CartRepository()
    return InMemoryCartRepository()


@pytest.fixture
def cart_service(cart_store) -> CartService:
    return CartService(cart_store, ProductRepository(), max_quantity=MAX_QUANTITY)


@pytest.fixture
def app(engine):
    def _session_override():
        with Session(engine) as s:
            yield s

    fastapi_app.dependency_overrides[get_session] = _session_override
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
