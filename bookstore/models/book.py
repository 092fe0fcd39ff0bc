"""
Bookstore Backend — Book SQLAlchemy Model
===========================================

What:  ORM model for the `books` table.
Who:   BookService (CRUD), catalog_store (lookups, stock decrement),
       OrderItem (foreign key), StatisticsService (genre join).

Invariants enforced by the schema as well as by the services:
    - stock_quantity >= 0   (ck_books_stock_non_negative)
    - price >= 0            (ck_books_price_non_negative)
    - title unique among active books (partial unique index)

Stock is only ever lowered through catalog_store.decrement_stock(), which
guards the UPDATE with `stock_quantity >= :quantity`.
"""

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Numeric, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookstore.database import Base
from bookstore.models.mixins import SoftDeleteMixin, TimestampMixin

if TYPE_CHECKING:
    from bookstore.models.genre import Genre


class Book(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "books"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    writer: Mapped[str] = mapped_column(String(255), nullable=False)
    publisher: Mapped[str] = mapped_column(String(255), nullable=False)
    publication_year: Mapped[int] = mapped_column(Integer, nullable=False)

    # Optional; an empty string is a valid description
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    genre_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("genres.id"), nullable=False, index=True
    )
    genre: Mapped["Genre"] = relationship(back_populates="books")

    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_books_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_books_price_non_negative"),
        Index(
            "uq_books_title_active",
            "title",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Book(id={self.id}, title='{self.title}', "
            f"stock={self.stock_quantity}, active={self.is_active})>"
        )
