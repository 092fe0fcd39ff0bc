"""Path and payload id parsing shared by the services."""

import uuid
from typing import Optional

from bookstore.exceptions import NotFoundError


def parse_resource_id(raw: Optional[str], resource: str, message: Optional[str] = None) -> uuid.UUID:
    """
    Turn a client-supplied id into a UUID.

    A value that is not a UUID cannot name an existing row, so it is
    reported the same way as a missing one (NotFoundError).
    """
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError):
        raise NotFoundError(resource=resource, resource_id=str(raw), message=message)
