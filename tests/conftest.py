"""
Bookstore Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set before any `bookstore` import so the
       settings singleton and the module-level engine never point at a
       real database.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for pure unit tests
    ├── db_engine:       fresh SQLite file database with the schema created
    ├── session_factory: async_sessionmaker bound to db_engine
    ├── seed:            one user, two genres, three books
    ├── snapshot:        callable returning stock levels and order counts
    ├── auth_headers:    Authorization header for the seeded user
    └── test_client:     HTTPX AsyncClient with get_db_session overridden
"""

import os
import tempfile
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

_TMP_DIR = tempfile.mkdtemp(prefix="bookstore_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/app.db"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["PUBLICATION_YEAR_CUTOFF"] = "2025"
os.environ["LOG_LEVEL"] = "WARNING"

from bookstore.database import Base, build_engine, build_session_factory, get_db_session  # noqa: E402
from bookstore.models import Book, Genre, Order, OrderItem, User  # noqa: E402
from bookstore.security import create_access_token, hash_password  # noqa: E402

TEST_PASSWORD = "correct horse battery"


@dataclass
class SeedData:
    user_id: UUID
    email: str
    fantasy_id: UUID
    horror_id: UUID
    books: Dict[str, UUID] = field(default_factory=dict)


# ══════════════════════════════════════════════════════════════════════════
# Unit-test helpers
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = book
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Database fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A new SQLite file per test, with BEGIN IMMEDIATE locking enabled."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookstore.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest_asyncio.fixture
async def seed(session_factory) -> SeedData:
    """
    Catalog used across the suite:
        Fantasy: "The Hobbit" (stock 5), "Dune" (stock 2)
        Horror:  "It" (stock 10)
    """
    async with session_factory() as db:
        user = User(email="reader@example.com", password_hash=hash_password(TEST_PASSWORD), username="reader")
        fantasy = Genre(name="Fantasy")
        horror = Genre(name="Horror")
        db.add_all([user, fantasy, horror])
        await db.flush()

        books = {
            "hobbit": Book(
                title="The Hobbit", writer="J. R. R. Tolkien", publisher="Allen & Unwin",
                publication_year=1937, price=Decimal("12.50"), stock_quantity=5, genre_id=fantasy.id,
            ),
            "dune": Book(
                title="Dune", writer="Frank Herbert", publisher="Chilton",
                publication_year=1965, price=Decimal("9.99"), stock_quantity=2, genre_id=fantasy.id,
            ),
            "it": Book(
                title="It", writer="Stephen King", publisher="Viking",
                publication_year=1986, price=Decimal("15.00"), stock_quantity=10, genre_id=horror.id,
            ),
        }
        db.add_all(list(books.values()))
        await db.commit()

        return SeedData(
            user_id=user.id,
            email=user.email,
            fantasy_id=fantasy.id,
            horror_id=horror.id,
            books={key: book.id for key, book in books.items()},
        )


@pytest.fixture
def snapshot(session_factory):
    """
    Returns an async callable capturing everything an order placement may
    touch: stock per book id, and the order / order item row counts.
    """

    async def _take():
        async with session_factory() as db:
            stocks = dict((await db.execute(select(Book.id, Book.stock_quantity))).all())
            orders = (await db.execute(select(func.count(Order.id)))).scalar()
            items = (await db.execute(select(func.count(OrderItem.id)))).scalar()
        return {"stocks": stocks, "orders": orders, "items": items}

    return _take


# ══════════════════════════════════════════════════════════════════════════
# API fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def auth_headers(seed):
    token = create_access_token(str(seed.user_id))
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient routed straight into the FastAPI app.

    Request sessions come from the per-test database with the same
    commit-on-success / rollback-on-error behavior as production.
    """
    from bookstore.main import app

    async def _override_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
