"""
Bookstore Backend — Order (Transaction) Schemas
=================================================

What:  Request/response models for /transactions endpoints.

OrderLineRequest:
    book_id and quantity are Optional so that a line missing either one is
    rejected by OrderService inside the placement transaction (400
    "Invalid bookId or quantity") rather than by schema parsing.

TransactionStatistics:
    Serialized with camelCase keys (totalTransactions, mostGenre,
    leastGenre); FastAPI dumps response models by alias. Services build it
    by field name (populate_by_name).
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from bookstore.schemas.book import BookSummary


# ── Requests ──────────────────────────────────────────────────────────────


class OrderLineRequest(BaseModel):
    book_id: Optional[str] = None
    quantity: Optional[int] = None


class OrderCreateRequest(BaseModel):
    items: Optional[List[OrderLineRequest]] = None


# ── Responses ─────────────────────────────────────────────────────────────


class OrderItemResponse(BaseModel):
    id: uuid.UUID
    book_id: uuid.UUID
    quantity: int

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    """Returned by POST /transactions (201)."""

    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    items: List[OrderItemResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    id: uuid.UUID
    username: Optional[str] = None
    email: str

    model_config = {"from_attributes": True}


class OrderItemDetail(BaseModel):
    id: uuid.UUID
    book_id: uuid.UUID
    quantity: int
    book: BookSummary

    model_config = {"from_attributes": True}


class OrderDetail(BaseModel):
    """Returned by GET /transactions and GET /transactions/{id}."""

    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    user: UserSummary
    items: List[OrderItemDetail]

    model_config = {"from_attributes": True}


class GenreTransactionCount(BaseModel):
    genre_id: uuid.UUID
    genre_name: str
    txn_count: int


class TransactionStatistics(BaseModel):
    total_transactions: int = Field(alias="totalTransactions")
    most_genre: Optional[GenreTransactionCount] = Field(default=None, alias="mostGenre")
    least_genre: Optional[GenreTransactionCount] = Field(default=None, alias="leastGenre")

    model_config = {"populate_by_name": True}
