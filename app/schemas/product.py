# app/schemas/product.py
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import field_serializer

from app.schemas.base import CamelModel


class ProductRead(CamelModel):
    """
    Product representation for clients.
    """

    id: uuid.UUID
    name: str
    description: str
    price: Decimal
    image_url: str
    created_at: datetime

    @field_serializer("price")
    def serialize_price(self, value: Decimal) -> float:
        return float(value)


class ProductPage(CamelModel):
    """
    One page of catalog search results plus the numbers needed
    to draw pagination controls.
    """

    items: list[ProductRead]
    total: int
    page: int
    page_size: int
    total_pages: int
    query: str = ""
