"""
Bookstore Backend — Genre Service
===================================

What:  Create, list, get, rename and soft-delete genres.
Who:   Called by the /genre route handlers.

Rules:
    - name is required (blank after trimming counts as missing)
    - name is unique among active genres; a soft-deleted genre's name is free
    - get/update/delete on a missing or soft-deleted genre → NotFoundError
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.exceptions import BookstoreError, ConflictError, DatabaseError, NotFoundError, ValidationError
from bookstore.models.genre import Genre
from bookstore.schemas.common import PageMeta, PageRequest
from bookstore.schemas.genre import GenreCreate, GenreResponse, GenreUpdate
from bookstore.services.identifiers import parse_resource_id
from bookstore.stores import catalog_store

logger = logging.getLogger(__name__)

GENRE_NOT_FOUND = "Genre not found"


def _required_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Name is required", field="name")
    return cleaned


class GenreService:

    async def create_genre(self, db: AsyncSession, payload: GenreCreate) -> GenreResponse:
        name = _required_name(payload.name)
        try:
            if await catalog_store.find_active_genre_by_name(db, name) is not None:
                raise ConflictError("Genre name already exists", field="name")
            genre = Genre(name=name)
            db.add(genre)
            await db.flush()
        except BookstoreError:
            raise
        except IntegrityError:
            raise ConflictError("Genre name already exists", field="name")
        except SQLAlchemyError as e:
            logger.error("Database error creating genre: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "create_genre"})

        logger.info("Created genre %s (%s)", genre.id, genre.name)
        return GenreResponse.model_validate(genre)

    async def list_genres(
        self, db: AsyncSession, page: PageRequest
    ) -> Tuple[List[GenreResponse], PageMeta]:
        try:
            genres, total = await catalog_store.search_genres(db, page)
        except SQLAlchemyError as e:
            logger.error("Database error listing genres: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "list_genres"})
        return (
            [GenreResponse.model_validate(g) for g in genres],
            PageMeta.build(page.page, page.limit, total),
        )

    async def get_genre(self, db: AsyncSession, genre_id: str) -> GenreResponse:
        genre = await self._get_active(db, genre_id)
        return GenreResponse.model_validate(genre)

    async def update_genre(
        self, db: AsyncSession, genre_id: str, payload: GenreUpdate
    ) -> GenreResponse:
        name = _required_name(payload.name)
        genre = await self._get_active(db, genre_id)
        try:
            duplicate = await catalog_store.find_active_genre_by_name(db, name, exclude_id=genre.id)
            if duplicate is not None:
                raise ConflictError("Genre name already exists", field="name")
            genre.name = name
            await db.flush()
        except BookstoreError:
            raise
        except IntegrityError:
            raise ConflictError("Genre name already exists", field="name")
        except SQLAlchemyError as e:
            logger.error("Database error updating genre %s: %s", genre_id, str(e), exc_info=True)
            raise DatabaseError(context={"genre_id": genre_id})
        return GenreResponse.model_validate(genre)

    async def delete_genre(self, db: AsyncSession, genre_id: str) -> None:
        genre = await self._get_active(db, genre_id)
        genre.soft_delete()
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting genre %s: %s", genre_id, str(e), exc_info=True)
            raise DatabaseError(context={"genre_id": genre_id})
        logger.info("Soft-deleted genre %s", genre.id)

    async def _get_active(self, db: AsyncSession, raw_id: str) -> Genre:
        genre_uuid = parse_resource_id(raw_id, "genre", message=GENRE_NOT_FOUND)
        try:
            genre = await catalog_store.get_active_genre(db, genre_uuid)
        except SQLAlchemyError as e:
            logger.error("Database error fetching genre %s: %s", raw_id, str(e))
            raise DatabaseError(context={"genre_id": raw_id})
        if genre is None:
            raise NotFoundError(resource="genre", resource_id=raw_id, message=GENRE_NOT_FOUND)
        return genre


genre_service = GenreService()
