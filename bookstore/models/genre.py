"""
Bookstore Backend — Genre SQLAlchemy Model
============================================

What:  ORM model for the `genres` table.
Who:   GenreService (CRUD), Book (foreign key), StatisticsService (grouping).

Lifecycle:
    1. Created by an authenticated admin action
    2. Renamed via PATCH (name stays unique among active genres)
    3. Soft-deleted by setting deleted_at; the row is never removed, so
       books and historical statistics keep resolving it

Uniqueness:
    The name index is partial (WHERE deleted_at IS NULL): a deleted genre's
    name can be reused by a new genre.
"""

import uuid
from typing import TYPE_CHECKING, List

from sqlalchemy import Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookstore.database import Base
from bookstore.models.mixins import SoftDeleteMixin, TimestampMixin

if TYPE_CHECKING:
    from bookstore.models.book import Book


class Genre(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "genres"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    books: Mapped[List["Book"]] = relationship(back_populates="genre")

    __table_args__ = (
        Index(
            "uq_genres_name_active",
            "name",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    def __repr__(self) -> str:
        return f"<Genre(id={self.id}, name='{self.name}', active={self.is_active})>"
