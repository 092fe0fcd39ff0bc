"""
Bookstore Backend — Genre & Book Service Tests
================================================

What:  Catalog CRUD rules: required fields, ranges, uniqueness among
       active rows, soft delete visibility, listing and sorting.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from bookstore.exceptions import ConflictError, NotFoundError, ValidationError
from bookstore.schemas.book import BookCreate, BookUpdate
from bookstore.schemas.common import PageRequest
from bookstore.schemas.genre import GenreCreate, GenreUpdate
from bookstore.services.book_service import BookService
from bookstore.services.genre_service import GenreService


def new_book(genre_id, **overrides):
    fields = dict(
        title="Neuromancer",
        writer="William Gibson",
        publisher="Ace",
        publication_year=1984,
        description="",
        price=Decimal("8.00"),
        stock_quantity=4,
        genre_id=genre_id,
    )
    fields.update(overrides)
    return BookCreate(**fields)


class TestGenreService:

    def setup_method(self):
        self.service = GenreService()

    @pytest.mark.asyncio
    async def test_create_and_get(self, session_factory, seed):
        async with session_factory() as db:
            created = await self.service.create_genre(db, GenreCreate(name="  Mystery "))
            await db.commit()
        async with session_factory() as db:
            fetched = await self.service.get_genre(db, str(created.id))
        assert fetched.name == "Mystery"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", [None, "", "   "])
    async def test_name_required(self, mock_db_session, name):
        with pytest.raises(ValidationError):
            await self.service.create_genre(mock_db_session, GenreCreate(name=name))

    @pytest.mark.asyncio
    async def test_duplicate_active_name(self, session_factory, seed):
        async with session_factory() as db:
            with pytest.raises(ConflictError):
                await self.service.create_genre(db, GenreCreate(name="Fantasy"))

    @pytest.mark.asyncio
    async def test_name_reusable_after_delete(self, session_factory, seed):
        async with session_factory() as db:
            await self.service.delete_genre(db, str(seed.horror_id))
            recreated = await self.service.create_genre(db, GenreCreate(name="Horror"))
            await db.commit()
        assert recreated.id != seed.horror_id

    @pytest.mark.asyncio
    async def test_deleted_genre_not_found(self, session_factory, seed):
        async with session_factory() as db:
            await self.service.delete_genre(db, str(seed.horror_id))
            await db.commit()
        async with session_factory() as db:
            with pytest.raises(NotFoundError) as exc_info:
                await self.service.get_genre(db, str(seed.horror_id))
        assert exc_info.value.message == "Genre not found"

    @pytest.mark.asyncio
    async def test_rename_to_taken_name(self, session_factory, seed):
        async with session_factory() as db:
            with pytest.raises(ConflictError):
                await self.service.update_genre(db, str(seed.horror_id), GenreUpdate(name="Fantasy"))

    @pytest.mark.asyncio
    async def test_list_search_and_sort(self, session_factory, seed):
        async with session_factory() as db:
            genres, meta = await self.service.list_genres(
                db, PageRequest(sort_field="name", sort_direction="desc")
            )
            found, _ = await self.service.list_genres(db, PageRequest(search="hor"))

        assert [g.name for g in genres] == ["Horror", "Fantasy"]
        assert meta.total == 2
        assert [g.name for g in found] == ["Horror"]


class TestBookService:

    def setup_method(self):
        self.service = BookService()

    @pytest.mark.asyncio
    async def test_create_book(self, session_factory, seed):
        async with session_factory() as db:
            created = await self.service.create_book(db, new_book(seed.fantasy_id))
            await db.commit()
        async with session_factory() as db:
            book = await self.service.get_book(db, str(created.id))
        assert book.title == "Neuromancer"
        assert book.stock_quantity == 4
        assert book.genre.name == "Fantasy"

    @pytest.mark.asyncio
    async def test_missing_fields(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_book(mock_db_session, BookCreate(title="Untitled"))
        assert "are required" in exc_info.value.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"publication_year": 0},
            {"publication_year": 2026},
            {"price": Decimal("-1")},
            {"stock_quantity": -3},
        ],
    )
    async def test_out_of_range_values(self, mock_db_session, overrides):
        with pytest.raises(ValidationError):
            await self.service.create_book(mock_db_session, new_book(uuid4(), **overrides))
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_genre(self, session_factory, seed):
        async with session_factory() as db:
            with pytest.raises(ValidationError) as exc_info:
                await self.service.create_book(db, new_book(uuid4()))
        assert exc_info.value.message == "Genre not found"

    @pytest.mark.asyncio
    async def test_duplicate_title(self, session_factory, seed):
        async with session_factory() as db:
            with pytest.raises(ConflictError):
                await self.service.create_book(db, new_book(seed.horror_id, title="It"))

    @pytest.mark.asyncio
    async def test_update_whitelisted_fields(self, session_factory, seed):
        book_id = str(seed.books["it"])
        async with session_factory() as db:
            await self.service.update_book(
                db, book_id, BookUpdate(price=Decimal("20.00"), stock_quantity=1)
            )
            await db.commit()
        async with session_factory() as db:
            book = await self.service.get_book(db, book_id)
        assert book.price == Decimal("20.00")
        assert book.stock_quantity == 1
        assert book.title == "It"

    @pytest.mark.asyncio
    async def test_update_requires_a_field(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.update_book(mock_db_session, str(uuid4()), BookUpdate())
        assert exc_info.value.message.startswith("At least one field")

    @pytest.mark.asyncio
    async def test_deleted_book_hidden(self, session_factory, seed):
        book_id = str(seed.books["dune"])
        async with session_factory() as db:
            await self.service.delete_book(db, book_id)
            await db.commit()
        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await self.service.get_book(db, book_id)
            books, meta = await self.service.list_books(db, PageRequest())
        assert "Dune" not in [b.title for b in books]
        assert meta.total == 2

    @pytest.mark.asyncio
    async def test_list_by_genre_sorted(self, session_factory, seed):
        async with session_factory() as db:
            books, _ = await self.service.list_books(
                db,
                PageRequest(sort_field="publication_year", sort_direction="asc"),
                genre_id=str(seed.fantasy_id),
            )
        assert [b.title for b in books] == ["The Hobbit", "Dune"]

    @pytest.mark.asyncio
    async def test_list_by_unknown_genre(self, session_factory, seed):
        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await self.service.list_books(db, PageRequest(), genre_id=str(uuid4()))

    @pytest.mark.asyncio
    async def test_search_matches_writer(self, session_factory, seed):
        async with session_factory() as db:
            books, meta = await self.service.list_books(db, PageRequest(search="king"))
        assert [b.title for b in books] == ["It"]
        assert meta.total == 1


class TestSearchWildcards:
    """% and _ in a search term are ordinary characters."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("term", ["%", "_"])
    async def test_genre_search_treats_wildcards_literally(self, session_factory, seed, term):
        async with session_factory() as db:
            genres, meta = await GenreService().list_genres(db, PageRequest(search=term))
        assert genres == []
        assert meta.total == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("term", ["%", "_"])
    async def test_book_search_treats_wildcards_literally(self, session_factory, seed, term):
        async with session_factory() as db:
            books, meta = await BookService().list_books(db, PageRequest(search=term))
        assert books == []
        assert meta.total == 0

    @pytest.mark.asyncio
    async def test_literal_underscore_still_matches(self, session_factory, seed):
        async with session_factory() as db:
            await GenreService().create_genre(db, GenreCreate(name="Sci_Fi"))
            await db.commit()
        async with session_factory() as db:
            genres, _ = await GenreService().list_genres(db, PageRequest(search="i_f"))
        assert [g.name for g in genres] == ["Sci_Fi"]


class TestStockUpperBound:

    def setup_method(self):
        self.service = BookService()

    @pytest.mark.asyncio
    async def test_create_rejects_stock_beyond_integer_column(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_book(
                mock_db_session, new_book(uuid4(), stock_quantity=3_000_000_000)
            )
        assert exc_info.value.field == "stock_quantity"
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_rejects_stock_beyond_integer_column(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.update_book(
                mock_db_session, str(uuid4()), BookUpdate(stock_quantity=2_147_483_648)
            )
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_largest_stock_accepted(self, session_factory, seed):
        async with session_factory() as db:
            updated = await self.service.update_book(
                db, str(seed.books["it"]), BookUpdate(stock_quantity=2_147_483_647)
            )
        assert updated.title == "It"
