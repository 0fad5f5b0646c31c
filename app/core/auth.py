# app/core/auth.py
import logging
import uuid

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from app.core.config import Settings
from app.core.security import InvalidTokenError, decode_access_token
from app.database import get_session
from app.models.user import User
from app.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so we can support anonymous browsing and fall back to the session cookie.
bearer_scheme = HTTPBearer(auto_error=False)

users = UserRepository()


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings


def _default_name_from_email(email: str) -> str:
    """
    Derive a default display name from email if the identity
    provider did not supply one.
    """
    if "@" in email:
        return email.split("@", 1)[0]
    return email


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def extract_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
    settings: Settings,
) -> str | None:
    """
    Bearer header wins; browsers send the same token in the session cookie.
    """
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


def user_from_token(session: Session, settings: Settings, token: str) -> User:
    """
    Resolve the User a session token belongs to.

    Flow:
      1. Decode JWT => extract 'sub' (user id) and 'email'.
      2. Convert 'sub' to UUID to match User.id type.
      3. Find user in users table.
      4. If missing, auto-provision a profile from the claims
         (first sign-in through an external identity provider).

    Raises:
        HTTPException(401): if token is invalid/expired or misses claims.
    """
    try:
        payload = decode_access_token(settings, token)
    except InvalidTokenError:
        raise _unauthorized("Invalid or expired token")

    sub = payload.get("sub")
    email = payload.get("email")

    if not sub or not email:
        raise _unauthorized("Token missing sub/email")

    try:
        sub_uuid = uuid.UUID(str(sub))
    except ValueError:
        raise _unauthorized("Invalid sub in token")

    user = users.get_by_id(session, sub_uuid)
    if user is not None:
        return user

    # Email already belongs to another account => refuse to mint a second one.
    if users.get_by_email(session, email) is not None:
        raise _unauthorized("Token does not match an account")

    user = users.save(
        session,
        User(
            id=sub_uuid,
            email=email.strip().lower(),
            name=payload.get("name") or _default_name_from_email(email),
            image=payload.get("picture"),
        ),
    )
    logger.info("Provisioned user %s on first sign-in", user.id)
    return user


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """
    Resolve the current user from the request.

    Returns:
        User instance if authenticated, else None for anonymous requests.
        No database access happens for anonymous requests.

    Raises:
        HTTPException(401): if a token is present but invalid.
    """
    settings = get_app_settings(request)
    token = extract_token(request, credentials, settings)
    if token is None:
        return None  # anonymous
    return user_from_token(session, settings, token)


def get_page_user(
    request: Request,
    session: Session = Depends(get_session),
) -> User | None:
    """
    Cookie-only variant for server-rendered pages.

    A stale or forged cookie makes the visitor anonymous so the page
    can send them to the sign-in form instead of answering 401.
    """
    settings = get_app_settings(request)
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    try:
        return user_from_token(session, settings, token)
    except HTTPException as exc:
        logger.info("Ignoring session cookie: %s", exc.detail)
        return None


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Enforce authentication.

    If attached to a route, anonymous callers
    will be rejected with 401.

    Returns:
        The authenticated User.

    Raises:
        HTTPException(401): if user is None.
    """
    if user is None:
        raise _unauthorized("Unauthorized")
    return user


def set_session_cookie(response: Response, settings: Settings, token: str) -> None:
    """Store the session token in an HttpOnly cookie for browser pages."""
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")
