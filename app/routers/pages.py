# app/routers/pages.py
from pathlib import Path
from urllib.parse import quote

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlmodel import Session

from app.core.auth import (
    clear_session_cookie,
    get_app_settings,
    get_page_user,
    set_session_cookie,
)
from app.core.config import Settings
from app.core.security import create_access_token
from app.database import get_session
from app.models.user import User
from app.routers.auth import get_user_service
from app.routers.cart import service as cart_service
from app.routers.products import get_catalog_service
from app.services.catalog_service import CatalogService
from app.services.user_service import UserService
from app.utils.pagination import parse_page

router = APIRouter(tags=["Pages"], include_in_schema=False)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

SIGNIN_PATH = "/auth/signin"


def _safe_callback(url: str | None) -> str:
    """Only same-site paths are allowed as post-sign-in targets."""
    if url and url.startswith("/") and not url.startswith("//") and "\\" not in url:
        return url
    return "/"


def _render(
    request: Request,
    name: str,
    user: User | None,
    status_code: int = status.HTTP_200_OK,
    **context,
) -> HTMLResponse:
    context.update(
        user=user,
        api_prefix=request.app.state.settings.API_PREFIX,
    )
    return templates.TemplateResponse(request, name, context, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
def catalog_page(
    request: Request,
    q: str = "",
    page: str | None = None,
    user: User | None = Depends(get_page_user),
    session: Session = Depends(get_session),
    catalog: CatalogService = Depends(get_catalog_service),
):
    result = catalog.list_products(session, query=q, page=parse_page(page))
    return _render(request, "index.html", user, result=result)


@router.get("/products/{product_id}", response_class=HTMLResponse)
def product_page(
    request: Request,
    product_id: str,
    user: User | None = Depends(get_page_user),
    session: Session = Depends(get_session),
    catalog: CatalogService = Depends(get_catalog_service),
):
    try:
        product = catalog.get_product(session, product_id)
    except HTTPException:
        return _render(
            request,
            "not_found.html",
            user,
            status_code=status.HTTP_404_NOT_FOUND,
            message="Product not found",
        )
    return _render(request, "product.html", user, product=product)


@router.get("/cart", response_class=HTMLResponse)
def cart_page(
    request: Request,
    user: User | None = Depends(get_page_user),
    session: Session = Depends(get_session),
):
    if user is None:
        return RedirectResponse(
            f"{SIGNIN_PATH}?callbackUrl={quote('/cart', safe='')}",
            status_code=status.HTTP_303_SEE_OTHER,
        )
    cart = cart_service.get_or_create_cart(session, user.id)
    return _render(request, "cart.html", user, cart=cart)


@router.get(SIGNIN_PATH, response_class=HTMLResponse)
def signin_page(
    request: Request,
    callback_url: str = Query("/", alias="callbackUrl"),
    user: User | None = Depends(get_page_user),
):
    return _render(
        request,
        "signin.html",
        user,
        callback_url=_safe_callback(callback_url),
        error=None,
        email="",
    )


@router.post(SIGNIN_PATH, response_class=HTMLResponse)
def signin_submit(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    callback_url: str = Form("/", alias="callbackUrl"),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
    service: UserService = Depends(get_user_service),
):
    email = email.strip().lower()
    target = _safe_callback(callback_url)
    try:
        user = service.authenticate(session, email, password)
    except HTTPException as exc:
        return _render(
            request,
            "signin.html",
            None,
            status_code=exc.status_code,
            callback_url=target,
            error=exc.detail,
            email=email,
        )

    token = create_access_token(
        settings, subject=str(user.id), email=user.email, name=user.name
    )
    response = RedirectResponse(target, status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, settings, token)
    return response


@router.get("/auth/signout")
def signout_page(settings: Settings = Depends(get_app_settings)):
    response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    clear_session_cookie(response, settings)
    return response
