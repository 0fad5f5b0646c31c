# app/seed.py
"""
Seed the database with a credential test user and the sample catalog.

Usage:
    python -m app.seed
"""
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy.engine import Engine
from sqlmodel import Session

from app.core.config import get_settings
from app.core.security import hash_password
from app.database import build_engine, create_db_and_tables
from app.models.product import Product
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

TEST_USER_EMAIL = "test.user@example.com"
TEST_USER_PASSWORD = "password123"

SAMPLE_PRODUCTS: list[dict] = [
    {
        "name": "Wireless Headphones",
        "description": "High-quality wireless headphones with noise cancellation. Perfect for music lovers and professionals.",
        "price": "99.99",
        "image_url": "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=500&auto=format",
    },
    {
        "name": "Smart Watch",
        "description": "Track your fitness, receive notifications, and more with this stylish smart watch.",
        "price": "199.99",
        "image_url": "https://images.unsplash.com/photo-1523275335684-37898b6baf30?w=500&auto=format",
    },
    {
        "name": "Laptop Backpack",
        "description": "Durable and stylish backpack with padded laptop compartment. Perfect for work or travel.",
        "price": "49.99",
        "image_url": "https://images.unsplash.com/photo-1553062407-98eeb64c6a62?w=500&auto=format",
    },
    {
        "name": "Mechanical Keyboard",
        "description": "RGB mechanical keyboard with blue switches. Great for gaming and typing.",
        "price": "79.99",
        "image_url": "https://images.unsplash.com/photo-1595225476474-87563907a212?w=500&auto=format",
    },
    {
        "name": "4K Monitor",
        "description": "27-inch 4K UHD monitor with HDR support. Perfect for creative work.",
        "price": "299.99",
        "image_url": "https://images.unsplash.com/photo-1527443224154-c4a3942d3acf?w=500&auto=format",
    },
    {
        "name": "Wireless Mouse",
        "description": "Ergonomic wireless mouse with long battery life.",
        "price": "29.99",
        "image_url": "https://images.unsplash.com/photo-1527864550417-7fd91fc51a46?w=500&auto=format",
    },
    {
        "name": "USB-C Hub",
        "description": "7-in-1 USB-C hub with HDMI, USB ports, and card readers.",
        "price": "39.99",
        "image_url": "https://images.unsplash.com/photo-1612815154858-60aa4c59eaa6?w=500&auto=format",
    },
    {
        "name": "External SSD",
        "description": "1TB portable SSD with fast transfer speeds.",
        "price": "89.99",
        "image_url": "https://images.unsplash.com/photo-1531492746076-161ca9bcad58?w=500&auto=format",
    },
    {
        "name": "Gaming Chair",
        "description": "Ergonomic gaming chair with lumbar support.",
        "price": "199.99",
        "image_url": "https://images.unsplash.com/photo-1598558301610-31a12a4bc8ed?w=500&auto=format",
    },
    {
        "name": "Webcam",
        "description": "1080p webcam with built-in microphone for video calls.",
        "price": "59.99",
        "image_url": "https://images.unsplash.com/photo-1587826080692-f439cd0bd70c?w=500&auto=format",
    },
    {
        "name": "Microphone",
        "description": "USB condenser microphone for streaming and recording.",
        "price": "69.99",
        "image_url": "https://images.unsplash.com/photo-1589903308904-1010c2294adc?w=500&auto=format",
    },
    {
        "name": "Desk Lamp",
        "description": "LED desk lamp with wireless charging pad.",
        "price": "34.99",
        "image_url": "https://images.unsplash.com/photo-1534073828943-f801091bb18c?w=500&auto=format",
    },
]


def seed(engine: Engine, bcrypt_rounds: int = 12) -> None:
    """
    Idempotent: the test user and its cart are only created once,
    products only when the catalog is empty.
    """
    create_db_and_tables(engine)

    users = UserRepository()
    products = ProductRepository()
    carts = CartRepository()

    with Session(engine) as session:
        user = users.get_by_email(session, TEST_USER_EMAIL)
        if user is None:
            user = users.save(
                session,
                User(
                    email=TEST_USER_EMAIL,
                    name="Test User",
                    password_hash=hash_password(TEST_USER_PASSWORD, rounds=bcrypt_rounds),
                ),
            )
            logger.info("Created test user: %s", user.email)

        carts.get_or_create(session, user.id)
        session.commit()

        if products.count(session) == 0:
            # Distinct, increasing timestamps keep "newest first" deterministic.
            base = datetime.now(timezone.utc) - timedelta(minutes=len(SAMPLE_PRODUCTS))
            rows = [
                Product(
                    name=data["name"],
                    description=data["description"],
                    price=Decimal(data["price"]),
                    image_url=data["image_url"],
                    created_at=base + timedelta(minutes=i),
                )
                for i, data in enumerate(SAMPLE_PRODUCTS)
            ]
            products.create_many(session, rows)
            logger.info("Created %d products", len(rows))

        logger.info("Total products: %d", products.count(session))


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    settings = get_settings()
    engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    try:
        seed(engine, bcrypt_rounds=settings.BCRYPT_ROUNDS)
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
