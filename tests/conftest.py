"""
Shared fixtures.

The application is built with an in-memory SQLite engine (StaticPool, so
every connection sees the same database) and one Session shared between
the test and the request handlers.
"""
import os

os.environ.setdefault("AUTH_SECRET", "test-secret")

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import Settings
from app.core.security import create_access_token, hash_password
from app.database import create_db_and_tables, get_session
from app.main import create_app
from app.models.product import Product
from app.models.user import User

TEST_PASSWORD = "password123"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        AUTH_SECRET="test-secret",
        DATABASE_URL="sqlite://",
        BCRYPT_ROUNDS=4,
        PRODUCTS_PER_PAGE=8,
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def web_app(settings, engine, session):
    web_app = create_app(settings, engine)
    web_app.dependency_overrides[get_session] = lambda: session
    yield web_app
    web_app.dependency_overrides.clear()


@pytest.fixture
def test_client(web_app) -> TestClient:
    return TestClient(web_app)


@pytest.fixture
def make_products(session):
    """
    Factory: insert `n` products with strictly increasing created_at,
    so product 1 is the oldest and product n the newest.
    """

    def _make(n: int, names: list[str] | None = None, descriptions: list[str] | None = None):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        rows = []
        for i in range(n):
            rows.append(
                Product(
                    name=names[i] if names else f"Product {i + 1}",
                    description=descriptions[i] if descriptions else f"Description of product {i + 1}",
                    price=Decimal("10.00") + i,
                    image_url=f"https://img.example.com/{i + 1}.jpg",
                    created_at=base + timedelta(minutes=i),
                )
            )
        session.add_all(rows)
        session.commit()
        for row in rows:
            session.refresh(row)
        return rows

    return _make


@pytest.fixture
def product(make_products) -> Product:
    return make_products(1, names=["Smart Watch"], descriptions=["Track your fitness"])[0]


@pytest.fixture
def user(session) -> User:
    user = User(
        email="shopper@example.com",
        name="Shopper",
        password_hash=hash_password(TEST_PASSWORD, rounds=4),
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def auth_headers(settings, user) -> dict[str, str]:
    token = create_access_token(settings, subject=str(user.id), email=user.email, name=user.name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_client(test_client, auth_headers) -> TestClient:
    test_client.headers.update(auth_headers)
    return test_client
