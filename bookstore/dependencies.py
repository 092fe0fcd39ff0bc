"""
Bookstore Backend — Request Dependencies
==========================================

What:  FastAPI dependencies shared by the route modules.

get_current_user_id:
    Resolves `Authorization: Bearer <jwt>` to the caller's user id. A
    missing header, a non-bearer scheme, a bad signature, an expired token
    or a subject that is not a UUID all raise UnauthorizedError (401). The
    user row itself is not loaded; routes that need it (GET /auth/me) load
    it through the service.

page_request_dependency:
    Builds a PageRequest from `page`, `limit` and `search` query parameters.
"""

import uuid
from typing import Optional

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from bookstore.config import settings
from bookstore.exceptions import UnauthorizedError
from bookstore.schemas.common import PageRequest, SortDirection
from bookstore.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False, description="Access token from POST /auth/login")


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> uuid.UUID:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()

    subject = decode_access_token(credentials.credentials)
    if subject is None:
        raise UnauthorizedError("Invalid or expired token")
    try:
        return uuid.UUID(subject)
    except ValueError:
        raise UnauthorizedError("Invalid or expired token")


def page_request_dependency(
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: int = Query(
        default=settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Items per page",
    ),
    search: Optional[str] = Query(default=None, description="Case-insensitive substring filter"),
) -> PageRequest:
    return PageRequest(page=page, limit=limit, search=search or None)


def sort_direction(value: Optional[str]) -> Optional[SortDirection]:
    """Accept 'asc'/'desc' (any case); anything else means no explicit sort."""
    if value is None:
        return None
    lowered = value.lower()
    if lowered in ("asc", "desc"):
        return lowered  # type: ignore[return-value]
    return None
