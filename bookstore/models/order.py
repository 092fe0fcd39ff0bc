"""
Bookstore Backend — Order and OrderItem SQLAlchemy Models
===========================================================

What:  ORM models for the `orders` and `order_items` tables.
Who:   OrderService (placement, listing, detail), StatisticsService.

Lifecycle:
    An Order and all of its OrderItems are written inside the single
    transaction opened by OrderService.place_order(). Neither table has an
    update or delete path; the rows are immutable once committed.

Ownership:
    Order owns its items (cascade="all, delete-orphan", ON DELETE CASCADE).
    Items reference books, they do not own them.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookstore.database import Base
from bookstore.models.mixins import utcnow

if TYPE_CHECKING:
    from bookstore.models.book import Book
    from bookstore.models.user import User


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    user: Mapped["User"] = relationship()

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    items: Mapped[List["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
    )

    # Listing is newest first
    __table_args__ = (
        Index("idx_orders_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, user_id={self.user_id}, created_at='{self.created_at}')>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("books.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    order: Mapped["Order"] = relationship(back_populates="items")
    book: Mapped["Book"] = relationship()

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )

    def __repr__(self) -> str:
        return f"<OrderItem(order_id={self.order_id}, book_id={self.book_id}, quantity={self.quantity})>"
