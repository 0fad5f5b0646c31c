# app/services/catalog_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductPage, ProductRead
from app.utils.pagination import normalize_page, page_offset, total_pages

DEFAULT_PAGE_SIZE = 8


class CatalogService:
    """
    Read-only catalog queries.

    Responsibilities:
      - free-text search (name OR description, case-insensitive)
      - page normalisation and page-count math
      - single product lookup for the detail page
    """

    def __init__(self, repo: ProductRepository, page_size: int = DEFAULT_PAGE_SIZE):
        self.repo = repo
        self.page_size = page_size

    def list_products(
        self,
        session: Session,
        query: str | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> ProductPage:
        """
        Return one page of products, newest first.

        - page < 1 is treated as 1
        - a page past the end yields no items but keeps total/total_pages
        """
        size = page_size or self.page_size
        term = (query or "").strip()
        current = normalize_page(page)

        total = self.repo.count(session, term)
        skip = page_offset(current, size)
        # Past the last page: nothing to fetch, and a huge offset would not
        # fit the database integer type.
        rows = self.repo.search(session, term, skip=skip, limit=size) if skip < total else []

        return ProductPage(
            items=[ProductRead.model_validate(p) for p in rows],
            total=total,
            page=current,
            page_size=size,
            total_pages=total_pages(total, size),
            query=term,
        )

    def get_product(self, session: Session, product_id: str | uuid.UUID) -> Product:
        """
        Raises:
            HTTPException(404): unknown or malformed id.
        """
        try:
            pid = product_id if isinstance(product_id, uuid.UUID) else uuid.UUID(str(product_id))
        except ValueError:
            pid = None

        product = self.repo.get_by_id(session, pid) if pid else None
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product
