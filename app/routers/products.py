# app/routers/products.py
from fastapi import APIRouter, Depends, Path
from sqlmodel import Session

from app.database import get_session
from app.models.product import Category
from app.repositories.product_repo import ProductRepository
from app.schemas.common import MAX_ROW_ID
from app.schemas.product import ProductRead
from app.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)


@router.get("", response_model=list[ProductRead])
def list_products(
    category: Category | None = None,
    search: str | None = None,
    session: Session = Depends(get_session),
):
    """
    List products.

    - Public endpoint.
    - `category` restricts to one catalog category.
    - `search` matches name or description, case-insensitive.
    """
    return service.list_products(session, category=category, search=search)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: int = Path(gt=0, le=MAX_ROW_ID),
    session: Session = Depends(get_session),
):
    """
    Get a single product by id.

    - Public endpoint.
    """
    return service.get_product(session, product_id)
