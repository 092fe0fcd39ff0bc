"""
Bookstore Backend — Genre Route Handlers
==========================================

What:  /genre CRUD.
Who:   Reads (list, detail) are public; create/update/delete require a
       bearer token.

List query parameters:
    page, limit, search   see dependencies.page_request_dependency
    orderByName           'asc' | 'desc'; anything else keeps newest first
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.database import get_db_session
from bookstore.dependencies import get_current_user_id, page_request_dependency, sort_direction
from bookstore.schemas.common import (
    ApiResponse,
    ErrorResponse,
    MessageResponse,
    PageRequest,
    PaginatedResponse,
)
from bookstore.schemas.genre import GenreCreate, GenreResponse, GenreUpdate
from bookstore.services.genre_service import genre_service

router = APIRouter(prefix="/genre", tags=["Genres"])

NOT_FOUND = {404: {"description": "Genre not found", "model": ErrorResponse}}


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[GenreResponse],
    responses={400: {"description": "Missing or duplicate name", "model": ErrorResponse}},
    summary="Create a genre",
)
async def create_genre(
    payload: GenreCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[GenreResponse]:
    genre = await genre_service.create_genre(db, payload)
    return ApiResponse(message="Genre created successfully", data=genre)


@router.get(
    "",
    response_model=PaginatedResponse[GenreResponse],
    summary="List genres",
)
async def list_genres(
    page: PageRequest = Depends(page_request_dependency),
    order_by_name: Optional[str] = Query(default=None, alias="orderByName"),
    db: AsyncSession = Depends(get_db_session),
) -> PaginatedResponse[GenreResponse]:
    direction = sort_direction(order_by_name)
    if direction is not None:
        page = page.model_copy(update={"sort_field": "name", "sort_direction": direction})
    genres, meta = await genre_service.list_genres(db, page)
    return PaginatedResponse(message="Get all genre successfully", data=genres, meta=meta)


@router.get(
    "/{genre_id}",
    response_model=ApiResponse[GenreResponse],
    responses=NOT_FOUND,
    summary="Get a genre",
)
async def get_genre(
    genre_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[GenreResponse]:
    genre = await genre_service.get_genre(db, genre_id)
    return ApiResponse(message="Get genre detail successfully", data=genre)


@router.patch(
    "/{genre_id}",
    response_model=ApiResponse[GenreResponse],
    responses=NOT_FOUND,
    summary="Rename a genre",
)
async def update_genre(
    genre_id: str,
    payload: GenreUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[GenreResponse]:
    genre = await genre_service.update_genre(db, genre_id, payload)
    return ApiResponse(message="Genre updated successfully", data=genre)


@router.delete(
    "/{genre_id}",
    response_model=MessageResponse,
    responses=NOT_FOUND,
    summary="Soft-delete a genre",
)
async def delete_genre(
    genre_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await genre_service.delete_genre(db, genre_id)
    return MessageResponse(message="Genre removed successfully")
