"""
Bookstore Backend — Database Session Management
=================================================

What:  Async SQLAlchemy engine, session factory, unit-of-work helper and
       FastAPI dependency.
How:   Creates an async engine with connection pooling, provides a session
       dependency that commits on success and rolls back on error, and a
       `transaction()` context manager for multi-step writes that must be
       all-or-nothing (order placement).
Who:   Routes (via Depends), services (via transaction()), Alembic, tests.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

SQLite (tests, local development):
    pysqlite/aiosqlite defer BEGIN until the first write, so two concurrent
    order placements could both read a book before either writes it, and the
    later writer dies with "database is locked". Every SQLite transaction
    therefore starts with BEGIN IMMEDIATE, which takes the write lock up front
    and makes concurrent writers queue behind each other (busy timeout).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from bookstore.config import settings

logger = logging.getLogger(__name__)


def is_sqlite_url(url: str) -> bool:
    return url.startswith("sqlite")


def _enable_sqlite_write_locking(engine: AsyncEngine) -> None:
    """Install the BEGIN IMMEDIATE / foreign key hooks on a SQLite engine."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Stop the driver from emitting its own deferred BEGIN
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for `url`.

    Pool options only apply to server databases; SQLite gets the write
    locking hooks instead.
    """
    if is_sqlite_url(url):
        engine = create_async_engine(url, echo=echo)
        _enable_sqlite_write_locking(engine)
        return engine

    return create_async_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=echo,
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: response serialization reads attributes after
    # the commit, outside any transaction
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# ── Engine & Session Factory ──────────────────────────────────────────────
# Echo SQL only in DEBUG mode
engine = build_engine(settings.database_url, echo=settings.log_level == "DEBUG")
async_session_factory = build_session_factory(engine)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for autogenerate and
    the test suite uses for create_all().
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handlers
        5. Always: closes the session (returns connection to pool)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Unit of Work ──────────────────────────────────────────────────────────
@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a block of reads and writes as one atomic unit.

    What:    Commits when the block exits cleanly; rolls back everything the
             block did when it raises, then re-raises.
    How:     Opens a real transaction when the session is idle. When the
             session already has one (e.g. a caller already queried through
             it), a SAVEPOINT scopes the rollback to this block and the
             outer transaction is left to its owner.

    Example:
        async with transaction(db):
            order = await order_store.create_order(db, user_id)
            ...
    """
    if session.in_transaction():
        async with session.begin_nested():
            yield session
    else:
        async with session.begin():
            yield session


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
@retry(
    stop=stop_after_attempt(settings.db_connect_max_attempts),
    wait=wait_exponential(
        multiplier=1,
        min=settings.db_connect_min_wait,
        max=settings.db_connect_max_wait,
    ),
    retry=retry_if_exception_type((OSError, SQLAlchemyError)),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def wait_for_database() -> None:
    """
    What:  Probes the database with SELECT 1, retrying with backoff.
    When:  Called once during application startup (lifespan).
    Raises the last connection error when all attempts are exhausted.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def dispose_engine() -> None:
    """Gracefully closes all connections in the pool (shutdown)."""
    await engine.dispose()
