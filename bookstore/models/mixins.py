"""
Shared column mixins for catalog models.

TimestampMixin:  created_at / updated_at maintained on the Python side and
                 defaulted on the server side for raw inserts.
SoftDeleteMixin: nullable deleted_at plus the `is_active` predicate every
                 catalog read path filters on.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, text
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )


class SoftDeleteMixin:
    # NULL means the record is visible; a timestamp means it was removed.
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    @hybrid_property
    def is_active(self) -> bool:
        return self.deleted_at is None

    @is_active.inplace.expression
    @classmethod
    def _is_active_expression(cls):
        return cls.deleted_at.is_(None)

    def soft_delete(self) -> None:
        self.deleted_at = utcnow()
