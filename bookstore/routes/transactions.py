"""
Bookstore Backend — Transaction (Order) Route Handlers
========================================================

What:  POST /transactions (place an order), GET /transactions,
       GET /transactions/statistics, GET /transactions/{id}.
Who:   Authenticated users only.

Route order matters: /statistics is declared before /{transaction_id} so
it is not captured as an id.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.database import get_db_session
from bookstore.dependencies import get_current_user_id, page_request_dependency
from bookstore.schemas.common import ApiResponse, ErrorResponse, PageRequest, PaginatedResponse
from bookstore.schemas.order import (
    OrderCreateRequest,
    OrderDetail,
    OrderResponse,
    TransactionStatistics,
)
from bookstore.services.order_service import order_service
from bookstore.services.statistics_service import statistics_service

router = APIRouter(
    prefix="/transactions",
    tags=["Transactions"],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[OrderResponse],
    responses={
        400: {"description": "Malformed items or insufficient stock", "model": ErrorResponse},
        404: {"description": "Unknown book id", "model": ErrorResponse},
    },
    summary="Place an order",
    description=(
        "All lines succeed together or nothing is stored: stock is only "
        "decremented when every line is valid and in stock."
    ),
)
async def create_transaction(
    payload: OrderCreateRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[OrderResponse]:
    order = await order_service.place_order(db, user_id, payload.items)
    return ApiResponse(message="Transaction (Order) created successfully", data=order)


@router.get("", response_model=PaginatedResponse[OrderDetail], summary="List orders")
async def list_transactions(
    page: PageRequest = Depends(page_request_dependency),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> PaginatedResponse[OrderDetail]:
    orders, meta = await order_service.list_orders(db, page)
    return PaginatedResponse(message="Get all transaction successfully", data=orders, meta=meta)


@router.get(
    "/statistics",
    response_model=ApiResponse[TransactionStatistics],
    summary="Order totals and most/least ordered genre",
)
async def transaction_statistics(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[TransactionStatistics]:
    stats = await statistics_service.get_transaction_statistics(db)
    return ApiResponse(message="Get transactions statistics successfully", data=stats)


@router.get(
    "/{transaction_id}",
    response_model=ApiResponse[OrderDetail],
    responses={404: {"description": "Transaction not found", "model": ErrorResponse}},
    summary="Get one order with its lines",
)
async def get_transaction(
    transaction_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[OrderDetail]:
    order = await order_service.get_order(db, transaction_id)
    return ApiResponse(message="Get transaction detail successfully", data=order)
