"""
Bookstore Backend — Order Store
=================================

What:  Data access for orders and their line items.
Who:   OrderService (placement, listing, detail) and StatisticsService.

create_order() and add_order_item() only flush; committing (or rolling
back) is the job of the transaction the caller opened.
"""

import uuid
from typing import List, Optional, Tuple

from sqlalchemy import desc, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bookstore.models.book import Book
from bookstore.models.genre import Genre
from bookstore.models.order import Order, OrderItem
from bookstore.schemas.common import PageRequest


def _with_details(query):
    return query.options(
        selectinload(Order.user),
        selectinload(Order.items).selectinload(OrderItem.book),
    )


async def create_order(db: AsyncSession, user_id: uuid.UUID) -> Order:
    # items=[] so the relationship is loaded and appends need no lazy load
    order = Order(user_id=user_id, items=[])
    db.add(order)
    await db.flush()
    return order


async def add_order_item(
    db: AsyncSession,
    order: Order,
    book_id: uuid.UUID,
    quantity: int,
) -> OrderItem:
    item = OrderItem(order_id=order.id, book_id=book_id, quantity=quantity)
    order.items.append(item)
    await db.flush()
    return item


async def count_orders(db: AsyncSession) -> int:
    result = await db.execute(select(func.count(Order.id)))
    return result.scalar() or 0


async def list_orders(db: AsyncSession, page: PageRequest) -> Tuple[List[Order], int]:
    total = await count_orders(db)
    query = _with_details(
        select(Order).order_by(desc(Order.created_at), Order.id)
    ).offset(page.offset).limit(page.limit)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def get_order(db: AsyncSession, order_id: uuid.UUID) -> Optional[Order]:
    result = await db.execute(_with_details(select(Order).where(Order.id == order_id)))
    return result.scalar_one_or_none()


async def count_orders_by_genre(db: AsyncSession):
    """
    Distinct orders per genre, via order_items → books → genres.

    Rows carry genre_id, genre_name, txn_count; highest count first.
    """
    txn_count = func.count(distinct(OrderItem.order_id)).label("txn_count")
    query = (
        select(Genre.id.label("genre_id"), Genre.name.label("genre_name"), txn_count)
        .select_from(OrderItem)
        .join(Book, OrderItem.book_id == Book.id)
        .join(Genre, Book.genre_id == Genre.id)
        .group_by(Genre.id, Genre.name)
        .order_by(desc(txn_count), Genre.name)
    )
    result = await db.execute(query)
    return result.all()
