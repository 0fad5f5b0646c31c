# app/routers/auth.py
from fastapi import APIRouter, Depends, Request, Response, status
from sqlmodel import Session

from app.core.auth import clear_session_cookie, get_app_settings, set_session_cookie
from app.core.config import Settings
from app.core.security import create_access_token
from app.database import get_session
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import RegisterRequest, SignInRequest, TokenResponse, UserRead
from app.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Auth"])

repo = UserRepository()


def get_user_service(request: Request) -> UserService:
    return UserService(repo, bcrypt_rounds=request.app.state.settings.BCRYPT_ROUNDS)


def issue_session(response: Response, settings: Settings, user: User) -> TokenResponse:
    """Mint a token for `user`, set it as cookie and build the response body."""
    token = create_access_token(
        settings,
        subject=str(user.id),
        email=user.email,
        name=user.name,
    )
    set_session_cookie(response, settings, token)
    return TokenResponse(access_token=token, user=UserRead.model_validate(user))


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: RegisterRequest,
    response: Response,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
    service: UserService = Depends(get_user_service),
):
    """
    Create an email/password account and sign it in.
    """
    user = service.register(session, payload)
    return issue_session(response, settings, user)


@router.post("/signin", response_model=TokenResponse)
def signin(
    payload: SignInRequest,
    response: Response,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
    service: UserService = Depends(get_user_service),
):
    """
    Email/password sign-in.

    Returns a bearer token and also sets the session cookie.
    """
    user = service.authenticate(session, payload.email, payload.password)
    return issue_session(response, settings, user)


@router.post("/signout", status_code=status.HTTP_204_NO_CONTENT)
def signout(
    response: Response,
    settings: Settings = Depends(get_app_settings),
):
    """Drop the session cookie. Bearer tokens simply expire."""
    clear_session_cookie(response, settings)
    return None
