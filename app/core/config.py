# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - AUTH_SECRET (JWT signing secret for session tokens)

    Optional:
      - DATABASE_URL (defaults to a local SQLite file; use Postgres in prod)
      - BCRYPT_ROUNDS, PRODUCTS_PER_PAGE, SESSION_COOKIE_* ...
    """

    PROJECT_NAME: str = "Storefront Catalog"
    API_PREFIX: str = "/api"

    # Database
    DATABASE_URL: str = "sqlite:///./storefront.db"
    DATABASE_ECHO: bool = False

    # Session tokens (JWT)
    AUTH_SECRET: str
    AUTH_JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30

    # Browser session cookie (carries the same JWT)
    SESSION_COOKIE_NAME: str = "storefront_session"
    SESSION_COOKIE_SECURE: bool = False

    # Password hashing cost
    BCRYPT_ROUNDS: int = 12

    # Catalog
    PRODUCTS_PER_PAGE: int = 8

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
