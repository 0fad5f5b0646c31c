# app/repositories/cart_repo.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import delete, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from app.models.cart import Cart, CartItem


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _insert_for(session: Session):
    """
    Pick the INSERT construct that supports ON CONFLICT for the
    dialect the session is bound to.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise RuntimeError(f"Unsupported database dialect for cart upserts: {dialect}")


class CartRepository:
    """
    Data access layer for carts and cart_items.

    NOTE:
      - No commits here; every cart mutation is one transaction made of
        a get-or-create, an upsert/delete and a timestamp touch.
        The service is responsible for calling session.commit().
      - Quantity changes are single INSERT ... ON CONFLICT statements, so
        two concurrent adds for the same product cannot lose an update.
    """

    # ---- Carts ----

    def get_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        with_items: bool = True,
    ) -> Cart | None:
        stmt = select(Cart).where(Cart.user_id == user_id)
        if with_items:
            stmt = stmt.options(
                selectinload(Cart.items).selectinload(CartItem.product)
            ).execution_options(populate_existing=True)
        return session.exec(stmt).first()

    def get_or_create(self, session: Session, user_id: uuid.UUID) -> Cart:
        """
        Return the user's cart, inserting an empty one if there is none.

        The insert is ON CONFLICT (user_id) DO NOTHING, so a concurrent
        request creating the same cart is harmless.
        """
        cart = self.get_for_user(session, user_id, with_items=False)
        if cart is not None:
            return cart

        now = _now()
        insert = _insert_for(session)
        stmt = (
            insert(Cart)
            .values(id=uuid.uuid4(), user_id=user_id, created_at=now, updated_at=now)
            .on_conflict_do_nothing(index_elements=["user_id"])
        )
        session.execute(stmt)
        return self.get_for_user(session, user_id, with_items=False)

    def touch(self, session: Session, cart_id: uuid.UUID) -> None:
        session.execute(
            update(Cart).where(Cart.id == cart_id).values(updated_at=_now())
        )

    # ---- Cart items ----

    def add_quantity(
        self,
        session: Session,
        cart_id: uuid.UUID,
        product_id: uuid.UUID,
        quantity: int,
    ) -> None:
        """
        Insert the line, or add `quantity` to the existing one.
        """
        insert = _insert_for(session)
        stmt = insert(CartItem).values(
            id=uuid.uuid4(),
            cart_id=cart_id,
            product_id=product_id,
            quantity=quantity,
            created_at=_now(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["cart_id", "product_id"],
            set_={"quantity": CartItem.quantity + stmt.excluded.quantity},
        )
        session.execute(stmt)

    def set_quantity(
        self,
        session: Session,
        cart_id: uuid.UUID,
        product_id: uuid.UUID,
        quantity: int,
    ) -> None:
        """
        Insert the line, or overwrite the quantity of the existing one.
        """
        insert = _insert_for(session)
        stmt = insert(CartItem).values(
            id=uuid.uuid4(),
            cart_id=cart_id,
            product_id=product_id,
            quantity=quantity,
            created_at=_now(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["cart_id", "product_id"],
            set_={"quantity": stmt.excluded.quantity},
        )
        session.execute(stmt)

    def delete_item(
        self,
        session: Session,
        cart_id: uuid.UUID,
        product_id: uuid.UUID,
    ) -> int:
        """Delete the line for (cart, product). Returns the number of rows removed."""
        result = session.execute(
            delete(CartItem).where(
                CartItem.cart_id == cart_id, CartItem.product_id == product_id
            )
        )
        return result.rowcount or 0
