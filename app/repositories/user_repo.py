# app/repositories/user_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from app.models.user import User


class UserRepository:
    """
    Data access layer for accounts.

    Shared by credential sign-up/sign-in, token resolution and seeding.
    Emails are stored lowercased; lookups compare case-insensitively so
    identity-provider claims with mixed case still hit the same row.
    """

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        return session.get(User, user_id)

    def get_by_email(self, session: Session, email: str) -> User | None:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return session.exec(stmt).first()

    def save(self, session: Session, user: User) -> User:
        """
        Insert or update `user` and commit.

        A duplicate email surfaces as IntegrityError; the session is
        left for the caller to roll back.
        """
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
