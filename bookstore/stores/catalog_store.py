"""
Bookstore Backend — Catalog Store
===================================

What:  Data access for genres and books.
Who:   GenreService, BookService, and OrderService (book lookup + stock).

Visibility:
    Every lookup here filters on `is_active` (deleted_at IS NULL). A
    soft-deleted genre or book is indistinguishable from a missing one to
    all callers.

Stock decrement:
    decrement_stock() issues
        UPDATE books SET stock_quantity = stock_quantity - :q
        WHERE id = :id AND deleted_at IS NULL AND stock_quantity >= :q
    and returns the remaining stock, or None when no row matched. The guard
    keeps stock from going negative even when a concurrent transaction
    changed it after our read.
"""

import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import Select, asc, desc, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bookstore.models.book import Book
from bookstore.models.genre import Genre
from bookstore.schemas.common import PageRequest

logger = logging.getLogger(__name__)

# Sort keys a client may request, mapped to columns
GENRE_SORT_COLUMNS = {"name": Genre.name}
BOOK_SORT_COLUMNS = {"title": Book.title, "publication_year": Book.publication_year}


def _contains(column, term: str):
    """Case-insensitive substring match; % and _ in `term` match literally."""
    return column.icontains(term, autoescape=True)


def _apply_sort(query: Select, columns: dict, default, page: PageRequest) -> Select:
    column = columns.get(page.sort_field or "")
    if column is None or page.sort_direction is None:
        return query.order_by(desc(default))
    ordering = asc(column) if page.sort_direction == "asc" else desc(column)
    return query.order_by(ordering)


async def _fetch_page(db: AsyncSession, query: Select, page: PageRequest) -> Tuple[List, int]:
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar() or 0
    result = await db.execute(query.offset(page.offset).limit(page.limit))
    return list(result.scalars().all()), total


# ══════════════════════════════════════════════════════════════════════════
# Genres
# ══════════════════════════════════════════════════════════════════════════


async def get_active_genre(db: AsyncSession, genre_id: uuid.UUID) -> Optional[Genre]:
    result = await db.execute(
        select(Genre).where(Genre.id == genre_id, Genre.is_active)
    )
    return result.scalar_one_or_none()


async def find_active_genre_by_name(
    db: AsyncSession,
    name: str,
    exclude_id: Optional[uuid.UUID] = None,
) -> Optional[Genre]:
    query = select(Genre).where(Genre.name == name, Genre.is_active)
    if exclude_id is not None:
        query = query.where(Genre.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none()


async def search_genres(db: AsyncSession, page: PageRequest) -> Tuple[List[Genre], int]:
    query = select(Genre).where(Genre.is_active)
    if page.search:
        query = query.where(_contains(Genre.name, page.search))
    query = _apply_sort(query, GENRE_SORT_COLUMNS, Genre.created_at, page)
    return await _fetch_page(db, query, page)


# ══════════════════════════════════════════════════════════════════════════
# Books
# ══════════════════════════════════════════════════════════════════════════


async def get_active_book(
    db: AsyncSession,
    book_id: uuid.UUID,
    for_update: bool = False,
    with_genre: bool = False,
) -> Optional[Book]:
    """
    Find a non-deleted book by id.

    for_update: take a row lock (SELECT ... FOR UPDATE) so the stock value
    read stays valid until the surrounding transaction ends. Dialects
    without row locks (SQLite) ignore it; they serialize writers at BEGIN.
    """
    query = select(Book).where(Book.id == book_id, Book.is_active)
    if with_genre:
        query = query.options(selectinload(Book.genre))
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def find_active_book_by_title(db: AsyncSession, title: str) -> Optional[Book]:
    result = await db.execute(
        select(Book).where(Book.title == title, Book.is_active).limit(1)
    )
    return result.scalar_one_or_none()


async def search_books(
    db: AsyncSession,
    page: PageRequest,
    genre_id: Optional[uuid.UUID] = None,
) -> Tuple[List[Book], int]:
    query = select(Book).where(Book.is_active).options(selectinload(Book.genre))
    if genre_id is not None:
        query = query.where(Book.genre_id == genre_id)
    if page.search:
        query = query.where(
            or_(
                _contains(Book.title, page.search),
                _contains(Book.writer, page.search),
                _contains(Book.publisher, page.search),
            )
        )
    query = _apply_sort(query, BOOK_SORT_COLUMNS, Book.created_at, page)
    return await _fetch_page(db, query, page)


async def decrement_stock(db: AsyncSession, book_id: uuid.UUID, quantity: int) -> Optional[int]:
    """
    Lower a book's stock by `quantity` inside the caller's transaction.

    Returns the remaining stock, or None (changing nothing) when the book
    is gone or holds fewer than `quantity` copies. Book instances already
    loaded in the session are not refreshed; the caller owns that.
    """
    result = await db.execute(
        update(Book)
        .where(
            Book.id == book_id,
            Book.is_active,
            Book.stock_quantity >= quantity,
        )
        .values(stock_quantity=Book.stock_quantity - quantity)
        .returning(Book.stock_quantity)
        .execution_options(synchronize_session=False)
    )
    return result.scalar_one_or_none()
