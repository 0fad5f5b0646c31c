# app/schemas/cart.py
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, Field, field_serializer

from app.models.cart import MAX_QUANTITY
from app.schemas.base import CamelModel


class CartItemAdd(CamelModel):
    """
    Payload for adding to cart (accumulates onto an existing line).
    """

    model_config = ConfigDict(extra="forbid")

    product_id: str = Field(min_length=1)
    quantity: int = Field(default=1, gt=0, le=MAX_QUANTITY, strict=True)


class CartItemSet(CamelModel):
    """
    Payload for setting the quantity of a line (overwrites).
    0 removes the line.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: str = Field(min_length=1)
    quantity: int = Field(ge=0, le=MAX_QUANTITY, strict=True)


class CartItemRemove(CamelModel):
    """
    Payload for removing a product from the cart.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: str = Field(min_length=1)


class CartProductRead(CamelModel):
    id: uuid.UUID
    name: str
    description: str
    price: Decimal
    image_url: str

    @field_serializer("price")
    def serialize_price(self, value: Decimal) -> float:
        return float(value)


class CartItemRead(CamelModel):
    """
    Read model for a single cart line with its product joined in.
    """

    id: uuid.UUID
    quantity: int
    product: CartProductRead


class CartRead(CamelModel):
    """
    Full cart response model with totals.
    """

    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    items: list[CartItemRead]
    total_quantity: int
    total_price: Decimal

    @field_serializer("total_price")
    def serialize_total(self, value: Decimal) -> float:
        return float(value)
