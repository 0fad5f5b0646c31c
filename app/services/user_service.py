# app/services/user_service.py
import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.security import hash_password, verify_password
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import RegisterRequest, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - credential registration (bcrypt hashing)
      - credential verification for sign-in
      - profile edits
      - map domain errors to HTTP errors
    """

    def __init__(self, repo: UserRepository, bcrypt_rounds: int = 12):
        self.repo = repo
        self.bcrypt_rounds = bcrypt_rounds

    # ----- Credentials -----

    @staticmethod
    def _email_taken() -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    def register(self, session: Session, payload: RegisterRequest) -> User:
        """
        Create a credential account.

        The pre-check gives the common case a clean 409; the unique index
        on email decides between two concurrent sign-ups.

        Raises:
            HTTPException(409): if the email is already registered.
        """
        if self.repo.get_by_email(session, payload.email) is not None:
            raise self._email_taken()

        user = User(
            email=payload.email,
            name=payload.name or payload.email.split("@", 1)[0],
            password_hash=hash_password(payload.password, rounds=self.bcrypt_rounds),
        )
        try:
            user = self.repo.save(session, user)
        except IntegrityError:
            session.rollback()
            logger.info("Concurrent sign-up lost for %s", payload.email)
            raise self._email_taken()
        logger.info("Registered user %s", user.email)
        return user

    def verify_password(self, session: Session, email: str, password: str) -> bool:
        """True iff `email` has a credential account and `password` matches it."""
        user = self.repo.get_by_email(session, email)
        return user is not None and verify_password(password, user.password_hash)

    def authenticate(self, session: Session, email: str, password: str) -> User:
        """
        Resolve a user from email + password.

        Unknown email, OAuth-only account and wrong password all fail
        the same way so callers cannot probe which emails exist.

        Raises:
            HTTPException(401): "Invalid credentials".
        """
        user = self.repo.get_by_email(session, email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Credential sign-in rejected for %s", email)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials",
            )
        logger.info("Credential sign-in for %s", email)
        return user

    # ----- Self profile -----

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update for profile edits (name, avatar).
        """
        if payload.name is not None:
            current_user.name = payload.name

        if payload.image is not None:
            current_user.image = payload.image

        return self.repo.save(session, current_user)
