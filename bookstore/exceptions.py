"""
Bookstore Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every failure the API reports.
How:   Each class carries a user-safe message, a context dict (logged, never
       returned), a stable `kind` tag and the HTTP status it maps to. The
       global handler registered in main.py turns any of them into
       `{"success": false, "message": ..., "error": kind}`.
Who:   Raised by stores and services; caught by the global handlers and,
       where a caller needs to branch on the failure, by `kind`.

Exception Hierarchy:
    BookstoreError (base)          kind                 HTTP
    ├── ValidationError            validation_error     400
    ├── UnauthorizedError          unauthorized         401
    ├── NotFoundError              not_found            404
    ├── ConflictError              conflict             400
    ├── InsufficientStockError     insufficient_stock   400
    └── DatabaseError              internal             500

Conflicts answer 400 rather than 409; existing API clients treat a duplicate
name, title or email as a plain bad request.
"""

from typing import Any, ClassVar, Dict, Optional


class BookstoreError(Exception):
    """
    Base exception for all bookstore application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
        kind:     Stable machine-readable tag, one per subclass
        status_code: HTTP status the global handler responds with
    """

    kind: ClassVar[str] = "internal"
    status_code: ClassVar[int] = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BookstoreError):
    """
    Client input is missing, malformed or out of range.

    Also covers malformed order requests (empty item list, missing book id,
    non-positive quantity).
    """

    kind = "validation_error"
    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthorizedError(BookstoreError):
    """Caller identity is missing, invalid, or the credentials are wrong."""

    kind = "unauthorized"
    status_code = 401

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(BookstoreError):
    """
    Raised when a requested resource does not exist or is soft-deleted.

    SQLAlchemy returns None for missing records; stores and services convert
    that None into this exception so routes stay free of status-code logic.
    """

    kind = "not_found"
    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"{resource.capitalize()} not found"
            if resource_id:
                message = f"{resource.capitalize()} with id {resource_id} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(BookstoreError):
    """A unique field (genre name, book title, user email) is already taken."""

    kind = "conflict"
    status_code = 400

    def __init__(
        self,
        message: str = "Resource already exists",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InsufficientStockError(BookstoreError):
    """
    A requested quantity exceeds the book's current stock.

    Carries the book id, title, requested and available quantities so a
    caller can tell the customer which line to reduce.
    """

    kind = "insufficient_stock"
    status_code = 400

    def __init__(
        self,
        book_id: str,
        title: str,
        requested: int,
        available: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx.update({"book_id": book_id, "title": title, "requested": requested})
        if available is not None:
            ctx["available"] = available
        super().__init__(message=f'Insufficient stock for "{title}"', context=ctx)
        self.book_id = book_id
        self.title = title
        self.requested = requested
        self.available = available


class DatabaseError(BookstoreError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic. Driver errors,
        SQL and constraint names are logged server-side only.
    """

    kind = "internal"
    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
