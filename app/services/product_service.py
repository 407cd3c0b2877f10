# app/services/product_service.py
from sqlmodel import Session

from app.core.errors import NotFoundError
from app.models.product import Category, Product
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductCreate


class ProductService:
    """
    Business logic for the read-mostly catalog.

    Responsibilities:
      - search / category filtering
      - 404 translation for unknown ids
      - validated inserts for the seeder
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    def list_products(
        self,
        session: Session,
        category: Category | None = None,
        search: str | None = None,
    ) -> list[Product]:
        search = search.strip() if search else None
        return self.repo.list_products(session, category=category, search=search or None)

    def get_product(self, session: Session, product_id: int) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        product = Product(**payload.model_dump())
        return self.repo.create(session, product)
