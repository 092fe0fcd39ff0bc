"""
Bookstore Backend — Book Service
==================================

What:  Book catalog operations: create, list (all or per genre), get,
       partial update and soft delete.
Who:   Called by the /books route handlers.

Validation (applied here, not in the schemas):
    create: title, writer, publisher, publication_year, price,
            stock_quantity and genre_id are required; description is optional
            and may be an empty string.
    ranges: 1 <= publication_year <= settings.max_publication_year
            price >= 0
            0 <= stock_quantity <= 2147483647
    genre:  must reference an active genre (400 "Genre not found")
    title:  unique among active books (ConflictError)

Update whitelist:
    description, price, stock_quantity. Each field present in the request
    is re-validated; a request with none of them is rejected.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.config import settings
from bookstore.exceptions import BookstoreError, ConflictError, DatabaseError, NotFoundError, ValidationError
from bookstore.models.book import Book
from bookstore.schemas.book import BookCreate, BookCreated, BookResponse, BookUpdate, BookUpdated
from bookstore.schemas.common import PageMeta, PageRequest
from bookstore.services.genre_service import GENRE_NOT_FOUND
from bookstore.services.identifiers import parse_resource_id
from bookstore.stores import catalog_store

logger = logging.getLogger(__name__)

BOOK_NOT_FOUND = "Book not found"
REQUIRED_FIELDS = ("title", "writer", "publisher", "publication_year", "price", "stock_quantity", "genre_id")
UPDATABLE_FIELDS = ("description", "price", "stock_quantity")
# books.stock_quantity is a 32-bit INTEGER column
MAX_STOCK_QUANTITY = 2_147_483_647


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _check_publication_year(year: int) -> int:
    cutoff = settings.max_publication_year
    if year < 1 or year > cutoff:
        raise ValidationError(
            f"publication_year must be between 1 and {cutoff}",
            field="publication_year",
        )
    return year


def _check_price(price: Optional[Decimal]) -> Decimal:
    if price is None or price < 0:
        raise ValidationError("price must be a number greater than or equal to 0", field="price")
    return price


def _check_stock(stock: Optional[int]) -> int:
    if stock is None or stock < 0:
        raise ValidationError(
            "stock_quantity must be an integer greater than or equal to 0",
            field="stock_quantity",
        )
    if stock > MAX_STOCK_QUANTITY:
        raise ValidationError(
            f"stock_quantity must be at most {MAX_STOCK_QUANTITY}",
            field="stock_quantity",
        )
    return stock


class BookService:

    async def create_book(self, db: AsyncSession, payload: BookCreate) -> BookCreated:
        values: Dict[str, Any] = {
            "title": _clean_text(payload.title),
            "writer": _clean_text(payload.writer),
            "publisher": _clean_text(payload.publisher),
            "publication_year": payload.publication_year,
            "price": payload.price,
            "stock_quantity": payload.stock_quantity,
            "genre_id": payload.genre_id,
        }
        if any(values[name] is None for name in REQUIRED_FIELDS):
            raise ValidationError(
                "Title, writer, publisher, publication_year, price, stock_quantity, "
                "and genre_id are required"
            )
        _check_publication_year(values["publication_year"])
        _check_price(values["price"])
        _check_stock(values["stock_quantity"])

        try:
            if await catalog_store.get_active_genre(db, values["genre_id"]) is None:
                raise ValidationError(GENRE_NOT_FOUND, field="genre_id")
            if await catalog_store.find_active_book_by_title(db, values["title"]) is not None:
                raise ConflictError("Book title already exists", field="title")

            book = Book(description=payload.description, **values)
            db.add(book)
            await db.flush()
        except BookstoreError:
            raise
        except IntegrityError:
            raise ConflictError("Book title already exists", field="title")
        except SQLAlchemyError as e:
            logger.error("Database error creating book: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "create_book"})

        logger.info("Created book %s (%s), stock=%d", book.id, book.title, book.stock_quantity)
        return BookCreated.model_validate(book)

    async def list_books(
        self,
        db: AsyncSession,
        page: PageRequest,
        genre_id: Optional[str] = None,
    ) -> Tuple[List[BookResponse], PageMeta]:
        """
        List active books, optionally restricted to one genre.

        With genre_id, the genre itself must be active (404 otherwise).
        """
        genre_uuid = None
        if genre_id is not None:
            genre_uuid = parse_resource_id(genre_id, "genre", message=GENRE_NOT_FOUND)

        try:
            if genre_uuid is not None and await catalog_store.get_active_genre(db, genre_uuid) is None:
                raise NotFoundError(resource="genre", resource_id=genre_id, message=GENRE_NOT_FOUND)
            books, total = await catalog_store.search_books(db, page, genre_id=genre_uuid)
        except BookstoreError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error listing books: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "list_books", "genre_id": genre_id})

        return (
            [BookResponse.model_validate(b) for b in books],
            PageMeta.build(page.page, page.limit, total),
        )

    async def get_book(self, db: AsyncSession, book_id: str) -> BookResponse:
        book = await self._get_active(db, book_id, with_genre=True)
        return BookResponse.model_validate(book)

    async def update_book(self, db: AsyncSession, book_id: str, payload: BookUpdate) -> BookUpdated:
        changes = {
            name: value
            for name, value in payload.model_dump(exclude_unset=True).items()
            if name in UPDATABLE_FIELDS
        }
        if not changes:
            raise ValidationError(
                "At least one field (description, price, stock_quantity) is required for update"
            )
        if "price" in changes:
            _check_price(changes["price"])
        if "stock_quantity" in changes:
            _check_stock(changes["stock_quantity"])

        book = await self._get_active(db, book_id)
        for name, value in changes.items():
            setattr(book, name, value)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating book %s: %s", book_id, str(e), exc_info=True)
            raise DatabaseError(context={"book_id": book_id})

        logger.info("Updated book %s: %s", book.id, ", ".join(sorted(changes)))
        return BookUpdated.model_validate(book)

    async def delete_book(self, db: AsyncSession, book_id: str) -> None:
        book = await self._get_active(db, book_id)
        book.soft_delete()
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting book %s: %s", book_id, str(e), exc_info=True)
            raise DatabaseError(context={"book_id": book_id})
        logger.info("Soft-deleted book %s", book.id)

    async def _get_active(self, db: AsyncSession, raw_id: str, with_genre: bool = False) -> Book:
        book_uuid = parse_resource_id(raw_id, "book", message=BOOK_NOT_FOUND)
        try:
            book = await catalog_store.get_active_book(db, book_uuid, with_genre=with_genre)
        except SQLAlchemyError as e:
            logger.error("Database error fetching book %s: %s", raw_id, str(e))
            raise DatabaseError(context={"book_id": raw_id})
        if book is None:
            raise NotFoundError(resource="book", resource_id=raw_id, message=BOOK_NOT_FOUND)
        return book


book_service = BookService()
