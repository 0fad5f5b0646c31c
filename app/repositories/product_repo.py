# app/repositories/product_repo.py
import uuid

from sqlalchemy import func, or_
from sqlmodel import Session, select

from app.models.product import Product


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (queries + seeding inserts).
    - No FastAPI, no business logic.
    """

    @staticmethod
    def _search_filter(query: str | None):
        """
        Case-insensitive substring match on name OR description.
        Returns None when there is nothing to filter on.

        `%` and `_` in the query match themselves, not LIKE wildcards.
        """
        if not query:
            return None
        return or_(
            Product.name.icontains(query, autoescape=True),
            Product.description.icontains(query, autoescape=True),
        )

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def count(self, session: Session, query: str | None = None) -> int:
        stmt = select(func.count()).select_from(Product)
        condition = self._search_filter(query)
        if condition is not None:
            stmt = stmt.where(condition)
        value = session.exec(stmt).one()
        return int(value or 0)

    def search(
        self,
        session: Session,
        query: str | None = None,
        skip: int = 0,
        limit: int = 8,
    ) -> list[Product]:
        """
        Newest first. id breaks ties between identical timestamps so that
        pages never overlap.
        """
        stmt = select(Product)
        condition = self._search_filter(query)
        if condition is not None:
            stmt = stmt.where(condition)
        stmt = (
            stmt.order_by(Product.created_at.desc(), Product.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def create_many(self, session: Session, products: list[Product]) -> list[Product]:
        session.add_all(products)
        session.commit()
        for product in products:
            session.refresh(product)
        return products
