"""Pydantic schemas for /genre endpoints."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class GenreCreate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)


class GenreUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)


class GenreResponse(BaseModel):
    id: uuid.UUID
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
