# app/routers/products.py
from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from app.database import get_session
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductPage, ProductRead
from app.services.catalog_service import CatalogService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()


def get_catalog_service(request: Request) -> CatalogService:
    return CatalogService(repo, page_size=request.app.state.settings.PRODUCTS_PER_PAGE)


@router.get("", response_model=ProductPage)
def list_products(
    q: str = "",
    page: int = 1,
    session: Session = Depends(get_session),
    service: CatalogService = Depends(get_catalog_service),
):
    """
    Search products.

    - Public endpoint.
    - `q` matches name or description, case-insensitively.
    - `page` is 1-based; values below 1 mean page 1.
    """
    return service.list_products(session, query=q, page=page)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: str,
    session: Session = Depends(get_session),
    service: CatalogService = Depends(get_catalog_service),
):
    """
    Get a single product by id.

    - Public endpoint.
    """
    return service.get_product(session, product_id)
