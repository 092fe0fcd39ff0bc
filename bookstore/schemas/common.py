"""
Bookstore Backend — Shared Pydantic Schemas
=============================================

What:  Response envelopes, pagination parameters/metadata, and the error
       and health response models used by every route module.

Envelope:
    Success: {"success": true, "message": "...", "data": ..., "meta": {...}}
    Failure: {"success": false, "message": "...", "error": "<kind>", "request_id": "..."}

    `meta` only appears on paginated list responses.
"""

import math
from typing import Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")

SortDirection = Literal["asc", "desc"]


# ══════════════════════════════════════════════════════════════════════════
# Pagination
# ══════════════════════════════════════════════════════════════════════════


class PageRequest(BaseModel):
    """
    Validated list parameters handed from routes to services.

    page/limit are 1-based offset pagination. `sort_direction` is None when
    the client sent no (or an unrecognised) sort value, in which case the
    service falls back to its default ordering.
    """

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)
    search: Optional[str] = None
    sort_field: Optional[str] = None
    sort_direction: Optional[SortDirection] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PageMeta(BaseModel):
    page: int
    limit: int
    total: int
    prev_page: Optional[int] = None
    next_page: Optional[int] = None

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PageMeta":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            prev_page=page - 1 if page > 1 else None,
            next_page=page + 1 if page < total_pages else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Envelopes
# ══════════════════════════════════════════════════════════════════════════


class ApiResponse(BaseModel, Generic[DataT]):
    success: bool = True
    message: str
    data: Optional[DataT] = None


class PaginatedResponse(BaseModel, Generic[DataT]):
    success: bool = True
    message: str
    data: List[DataT]
    meta: PageMeta


class MessageResponse(BaseModel):
    """Envelope for endpoints that return no data (soft deletes)."""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all API errors.

    Fields:
        success: Always false
        message: Human-readable description, safe to show to users
        error: Machine-readable kind ("validation_error", "not_found", ...)
        request_id: Correlation ID for tracing this error in server logs
    """

    success: bool = False
    message: str = Field(description="Human-readable error description")
    error: str = Field(description="Machine-readable error kind")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    success: bool
    message: str
    date: str = Field(description="Server time (UTC ISO 8601)")
    version: str
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float
