"""
Bookstore Backend — Book Schemas
==================================

What:  Request/response models for /books endpoints.

Create/update payloads:
    Every field is Optional at the schema level. Pydantic only coerces types
    here (e.g. "12.50" → Decimal, 3.5 → rejected for an int); whether a
    field is required and whether it is in range is decided by BookService,
    so the same rules hold for callers that bypass HTTP.

Update whitelist:
    Only description, price and stock_quantity can change after creation.
    Unknown keys in a PATCH body are ignored.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from bookstore.schemas.genre import GenreResponse


class BookCreate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=255)
    writer: Optional[str] = Field(default=None, max_length=255)
    publisher: Optional[str] = Field(default=None, max_length=255)
    publication_year: Optional[int] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)
    stock_quantity: Optional[int] = None
    genre_id: Optional[uuid.UUID] = None


class BookUpdate(BaseModel):
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)
    stock_quantity: Optional[int] = None


class BookResponse(BaseModel):
    id: uuid.UUID
    title: str
    writer: str
    publisher: str
    publication_year: int
    description: Optional[str] = None
    price: Decimal
    stock_quantity: int
    genre_id: uuid.UUID
    genre: Optional[GenreResponse] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BookCreated(BaseModel):
    id: uuid.UUID
    title: str
    created_at: datetime

    model_config = {"from_attributes": True}


class BookUpdated(BaseModel):
    id: uuid.UUID
    title: str
    updated_at: datetime

    model_config = {"from_attributes": True}


class BookSummary(BaseModel):
    """Book fields embedded in order line items."""

    id: uuid.UUID
    title: str
    price: Decimal

    model_config = {"from_attributes": True}
