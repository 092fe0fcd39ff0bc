"""
ORM models. Importing this package registers every mapped class on
Base.metadata, which relationship() string targets and Alembic rely on.
"""

from bookstore.models.book import Book
from bookstore.models.genre import Genre
from bookstore.models.order import Order, OrderItem
from bookstore.models.user import User

__all__ = ["Book", "Genre", "Order", "OrderItem", "User"]
