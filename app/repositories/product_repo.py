# app/repositories/product_repo.py
from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from app.models.product import Category, Product


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: int) -> Product | None:
        return session.get(Product, product_id)

    def get_many(self, session: Session, product_ids: list[int]) -> dict[int, Product]:
        """Return the products that exist among `product_ids`, keyed by id."""
        if not product_ids:
            return {}
        stmt = select(Product).where(col(Product.id).in_(product_ids))
        return {p.id: p for p in session.exec(stmt).all()}

    def list_products(
        self,
        session: Session,
        category: Category | None = None,
        search: str | None = None,
    ) -> list[Product]:
        """
        List products, optionally filtered.

        - category: exact match on the category enum
        - search: case-insensitive substring of name or description
        Both filters combine with AND.
        """
        stmt = select(Product)
        if category is not None:
            stmt = stmt.where(Product.category == category)
        if search:
            stmt = stmt.where(
                or_(
                    col(Product.name).icontains(search, autoescape=True),
                    col(Product.description).icontains(search, autoescape=True),
                )
            )
        stmt = stmt.order_by(Product.id)
        return list(session.exec(stmt).all())

    def count(self, session: Session) -> int:
        return session.exec(select(func.count()).select_from(Product)).one()

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product
