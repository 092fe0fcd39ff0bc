"""Create bookstore tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  users, genres, books, orders and order_items.
How:   PostgreSQL UUID keys, TIMESTAMP WITH TIME ZONE, CHECK constraints
       that keep stock and price non-negative and quantities positive, and
       partial unique indexes so a soft-deleted genre name or book title can
       be reused.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_ONLY = sa.text("deleted_at IS NULL")


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
        primary_key=True,
    )


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=None if nullable else sa.text("CURRENT_TIMESTAMP"),
        nullable=nullable,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("username", sa.String(100), nullable=True),
        _timestamp("created_at"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "genres",
        _uuid_pk(),
        sa.Column("name", sa.String(100), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        _timestamp("deleted_at", nullable=True),
    )
    op.create_index(
        "uq_genres_name_active", "genres", ["name"], unique=True, postgresql_where=ACTIVE_ONLY
    )

    op.create_table(
        "books",
        _uuid_pk(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("writer", sa.String(255), nullable=False),
        sa.Column("publisher", sa.String(255), nullable=False),
        sa.Column("publication_year", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("stock_quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("genre_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("genres.id"), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        _timestamp("deleted_at", nullable=True),
        sa.CheckConstraint("stock_quantity >= 0", name="ck_books_stock_non_negative"),
        sa.CheckConstraint("price >= 0", name="ck_books_price_non_negative"),
    )
    op.create_index("ix_books_genre_id", "books", ["genre_id"])
    op.create_index(
        "uq_books_title_active", "books", ["title"], unique=True, postgresql_where=ACTIVE_ONLY
    )

    op.create_table(
        "orders",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        _timestamp("created_at"),
    )
    op.create_index("ix_orders_user_id", "orders", ["user_id"])
    op.create_index("idx_orders_created_at", "orders", [sa.text("created_at DESC")])

    op.create_table(
        "order_items",
        _uuid_pk(),
        sa.Column(
            "order_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("orders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("book_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("books.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])
    op.create_index("ix_order_items_book_id", "order_items", ["book_id"])


def downgrade() -> None:
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_index("uq_books_title_active", table_name="books")
    op.drop_table("books")
    op.drop_index("uq_genres_name_active", table_name="genres")
    op.drop_table("genres")
    op.drop_table("users")
