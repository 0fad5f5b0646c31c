# app/routers/cart.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_auth
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import CartItemAdd, CartItemRemove, CartItemSet, CartRead
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo)

# NOTE: current_user is declared before session on every route so an
# anonymous request is rejected before any database work happens.


@router.get("", response_model=CartRead)
def get_my_cart(
    current_user: User = Depends(require_auth),
    session: Session = Depends(get_session),
):
    """
    Get current user's cart.

    The cart is created (empty) on first access.
    """
    return service.get_or_create_cart(session, current_user.id)


@router.post("", response_model=CartRead)
def add_to_cart(
    payload: CartItemAdd,
    current_user: User = Depends(require_auth),
    session: Session = Depends(get_session),
):
    """
    Add `quantity` (default 1) of a product to the current user's cart.

    Adding a product already in the cart increases its quantity.
    Returns the updated cart.
    """
    return service.add_quantity(session, current_user.id, payload)


@router.put("", response_model=CartRead)
def set_cart_item_quantity(
    payload: CartItemSet,
    current_user: User = Depends(require_auth),
    session: Session = Depends(get_session),
):
    """
    Set the quantity of a product in the cart (0 removes it).

    Returns the updated cart.
    """
    return service.set_quantity(session, current_user.id, payload)


@router.delete("", response_model=CartRead)
def remove_cart_item(
    payload: CartItemRemove,
    current_user: User = Depends(require_auth),
    session: Session = Depends(get_session),
):
    """
    Remove a product from the cart.

    Returns the updated cart.
    """
    return service.remove_item(session, current_user.id, payload)
