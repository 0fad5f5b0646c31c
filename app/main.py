# app/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI
from sqlalchemy.engine import Engine

from app.core.config import Settings, get_settings
from app.core.errors import register_exception_handlers
from app.database import build_engine, create_db_and_tables

# Routers
from app.routers.auth import router as auth_router
from app.routers.cart import router as cart_router
from app.routers.pages import router as pages_router
from app.routers.products import router as products_router
from app.routers.users import router as users_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.

    Shutdown:
      - Dispose the engine's connection pool.
    """
    logger.info("Startup: connecting to database...")
    try:
        create_db_and_tables(app.state.engine)
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise
    yield
    app.state.engine.dispose()


def create_app(settings: Settings | None = None, engine: Engine | None = None) -> FastAPI:
    """
    Build the application.

    The persistence handle (engine) is created here, or injected by the
    caller, and shared by all requests through app.state.
    """
    settings = settings or get_settings()
    engine = engine or build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # JSON API under a common prefix, e.g. /api/cart
    app.include_router(auth_router, prefix=settings.API_PREFIX)
    app.include_router(users_router, prefix=settings.API_PREFIX)
    app.include_router(products_router, prefix=settings.API_PREFIX)
    app.include_router(cart_router, prefix=settings.API_PREFIX)

    # Server-rendered pages
    app.include_router(pages_router)

    @app.get("/health", include_in_schema=False)
    def health():
        """Health check endpoint."""
        return {"status": "ok", "service": "storefront"}

    return app


# `uvicorn app.main:app` target. Built at import, so importing this module
# requires AUTH_SECRET; `uvicorn --factory app.main:create_app` defers it.
app = create_app()
