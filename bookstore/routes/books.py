"""
Bookstore Backend — Book Route Handlers
=========================================

What:  /books CRUD and GET /books/genre/{genre_id}. Every endpoint requires
       a bearer token.

List query parameters:
    page, limit, search     search matches title, writer or publisher
    orderByTitle            'asc' | 'desc'
    orderByPublishDate      'asc' | 'desc' (publication year)
    When both sort parameters are sent, orderByTitle wins. Without either,
    newest books come first.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.database import get_db_session
from bookstore.dependencies import get_current_user_id, page_request_dependency, sort_direction
from bookstore.schemas.book import BookCreate, BookCreated, BookResponse, BookUpdate, BookUpdated
from bookstore.schemas.common import (
    ApiResponse,
    ErrorResponse,
    MessageResponse,
    PageRequest,
    PaginatedResponse,
)
from bookstore.services.book_service import book_service

router = APIRouter(
    prefix="/books",
    tags=["Books"],
    dependencies=[Depends(get_current_user_id)],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)

NOT_FOUND = {404: {"description": "Book not found", "model": ErrorResponse}}


def book_page_request(
    page: PageRequest = Depends(page_request_dependency),
    order_by_title: Optional[str] = Query(default=None, alias="orderByTitle"),
    order_by_publish_date: Optional[str] = Query(default=None, alias="orderByPublishDate"),
) -> PageRequest:
    for field, raw in (("title", order_by_title), ("publication_year", order_by_publish_date)):
        direction = sort_direction(raw)
        if direction is not None:
            return page.model_copy(update={"sort_field": field, "sort_direction": direction})
    return page


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[BookCreated],
    responses={400: {"description": "Invalid fields, unknown genre or duplicate title", "model": ErrorResponse}},
    summary="Create a book",
)
async def create_book(
    payload: BookCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[BookCreated]:
    book = await book_service.create_book(db, payload)
    return ApiResponse(message="Book added successfully", data=book)


@router.get("", response_model=PaginatedResponse[BookResponse], summary="List books")
async def list_books(
    page: PageRequest = Depends(book_page_request),
    db: AsyncSession = Depends(get_db_session),
) -> PaginatedResponse[BookResponse]:
    books, meta = await book_service.list_books(db, page)
    return PaginatedResponse(message="Get all book successfully", data=books, meta=meta)


@router.get(
    "/genre/{genre_id}",
    response_model=PaginatedResponse[BookResponse],
    responses={404: {"description": "Genre not found", "model": ErrorResponse}},
    summary="List books of one genre",
)
async def list_books_by_genre(
    genre_id: str,
    page: PageRequest = Depends(book_page_request),
    db: AsyncSession = Depends(get_db_session),
) -> PaginatedResponse[BookResponse]:
    books, meta = await book_service.list_books(db, page, genre_id=genre_id)
    return PaginatedResponse(message="Get all book by genre successfully", data=books, meta=meta)


@router.get(
    "/{book_id}",
    response_model=ApiResponse[BookResponse],
    responses=NOT_FOUND,
    summary="Get a book",
)
async def get_book(
    book_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[BookResponse]:
    book = await book_service.get_book(db, book_id)
    return ApiResponse(message="Get book detail successfully", data=book)


@router.patch(
    "/{book_id}",
    response_model=ApiResponse[BookUpdated],
    responses=NOT_FOUND,
    summary="Update description, price or stock",
)
async def update_book(
    book_id: str,
    payload: BookUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[BookUpdated]:
    book = await book_service.update_book(db, book_id, payload)
    return ApiResponse(message="Book updated successfully", data=book)


@router.delete(
    "/{book_id}",
    response_model=MessageResponse,
    responses=NOT_FOUND,
    summary="Soft-delete a book",
)
async def delete_book(
    book_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await book_service.delete_book(db, book_id)
    return MessageResponse(message="Book removed successfully")
