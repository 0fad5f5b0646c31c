# app/services/cart_service.py
import logging
import uuid
from decimal import Decimal

from fastapi import HTTPException, status
from sqlalchemy.exc import DataError, IntegrityError
from sqlmodel import Session

from app.models.cart import MAX_QUANTITY, Cart
from app.models.product import Product
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import (
    CartItemAdd,
    CartItemRead,
    CartItemRemove,
    CartItemSet,
    CartProductRead,
    CartRead,
)

logger = logging.getLogger(__name__)


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - every operation is scoped to the caller's own cart
        (user id comes from the auth dependency, never from the body)
      - validate product existence before touching the cart
      - keep at most one line per (cart, product):
          add  => accumulate onto the existing line
          set  => overwrite the existing line (0 removes it)
      - one commit per mutation
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # ---- internal helpers ----

    def _get_valid_product(self, session: Session, product_id: str) -> Product:
        try:
            pid = uuid.UUID(product_id)
        except ValueError:
            pid = None

        product = self.product_repo.get_by_id(session, pid) if pid else None
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def _load(self, session: Session, user_id: uuid.UUID) -> Cart:
        cart = self.cart_repo.get_for_user(session, user_id)
        if cart is None:
            # Only reachable if the cart vanished between commit and read.
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Cart not found",
            )
        return cart

    @staticmethod
    def _to_read(cart: Cart) -> CartRead:
        items: list[CartItemRead] = []
        total_qty = 0
        total_price = Decimal("0")

        for it in cart.items:
            product = it.product
            total_qty += it.quantity
            total_price += Decimal(product.price) * it.quantity
            items.append(
                CartItemRead(
                    id=it.id,
                    quantity=it.quantity,
                    product=CartProductRead.model_validate(product),
                )
            )

        return CartRead(
            id=cart.id,
            user_id=cart.user_id,
            created_at=cart.created_at,
            updated_at=cart.updated_at,
            items=items,
            total_quantity=total_qty,
            total_price=total_price,
        )

    # ---- public operations ----

    def get_or_create_cart(self, session: Session, user_id: uuid.UUID) -> CartRead:
        """
        Return the caller's cart with items and products.

        This is a write when the user has no cart yet: an empty cart
        row is inserted and committed before it is returned.
        """
        cart = self.cart_repo.get_for_user(session, user_id)
        if cart is None:
            self.cart_repo.get_or_create(session, user_id)
            session.commit()
            logger.info("Created cart for user %s", user_id)
            cart = self._load(session, user_id)
        return self._to_read(cart)

    def add_quantity(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CartItemAdd,
    ) -> CartRead:
        """
        Add `quantity` units of a product.

        Rules:
          - product must exist (404 otherwise, cart untouched)
          - an existing line is incremented, never duplicated
          - the resulting quantity may not exceed MAX_QUANTITY (400)
        """
        product = self._get_valid_product(session, payload.product_id)

        cart_id = self.cart_repo.get_or_create(session, user_id).id
        try:
            self.cart_repo.add_quantity(session, cart_id, product.id, payload.quantity)
        except (IntegrityError, DataError):
            # CHECK violation (SQLite) or integer overflow (PostgreSQL)
            session.rollback()
            logger.info("Cart %s: quantity limit hit for product %s", cart_id, product.id)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Quantity cannot exceed {MAX_QUANTITY}",
            )
        self.cart_repo.touch(session, cart_id)
        session.commit()
        logger.debug(
            "Cart %s: +%d x product %s", cart_id, payload.quantity, product.id
        )

        return self._to_read(self._load(session, user_id))

    def set_quantity(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CartItemSet,
    ) -> CartRead:
        """
        Set the quantity of a product's line to exactly `quantity`.

        Rules:
          - product must exist (404 otherwise, cart untouched)
          - quantity 0 removes the line
          - a missing line is created
        """
        product = self._get_valid_product(session, payload.product_id)

        cart_id = self.cart_repo.get_or_create(session, user_id).id
        if payload.quantity == 0:
            self.cart_repo.delete_item(session, cart_id, product.id)
        else:
            self.cart_repo.set_quantity(session, cart_id, product.id, payload.quantity)
        self.cart_repo.touch(session, cart_id)
        session.commit()
        logger.debug(
            "Cart %s: product %s set to %d", cart_id, product.id, payload.quantity
        )

        return self._to_read(self._load(session, user_id))

    def remove_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CartItemRemove,
    ) -> CartRead:
        """
        Remove a product from the cart (if present),
        and return the updated cart.

        Removing a product that is not in the cart is a no-op.
        A user without any cart gets 404.
        """
        cart = self.cart_repo.get_for_user(session, user_id, with_items=False)
        if cart is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Cart not found",
            )

        try:
            product_id = uuid.UUID(payload.product_id)
        except ValueError:
            # Cannot match any row, so nothing to delete.
            product_id = None

        if product_id is not None:
            cart_id = cart.id
            removed = self.cart_repo.delete_item(session, cart_id, product_id)
            if removed:
                self.cart_repo.touch(session, cart_id)
                session.commit()
                logger.debug("Cart %s: removed product %s", cart_id, product_id)

        return self._to_read(self._load(session, user_id))
