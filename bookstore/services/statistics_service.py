"""
Bookstore Backend — Statistics Service
========================================

What:  Read-only order statistics: total order count plus the genres with
       the most and the fewest distinct orders.
Who:   Called by GET /transactions/statistics.

Counting:
    order_items → books → genres, COUNT(DISTINCT order_id) per genre. A
    genre only appears once at least one order contains one of its books;
    soft-deleted books and genres still count toward history.

Tie-break:
    mostGenre is the highest count, leastGenre the lowest; among genres
    sharing that count the alphabetically first name wins (then genre id,
    so the answer is stable even for duplicate names).
"""

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.exceptions import DatabaseError
from bookstore.schemas.order import GenreTransactionCount, TransactionStatistics
from bookstore.stores import order_store

logger = logging.getLogger(__name__)


def pick_most_and_least(counts: List[GenreTransactionCount]):
    """Return (most, least) from per-genre counts; (None, None) when empty."""
    most = min(counts, key=lambda c: (-c.txn_count, c.genre_name, str(c.genre_id)), default=None)
    least = min(counts, key=lambda c: (c.txn_count, c.genre_name, str(c.genre_id)), default=None)
    return most, least


class StatisticsService:

    async def get_transaction_statistics(self, db: AsyncSession) -> TransactionStatistics:
        try:
            total = await order_store.count_orders(db)
            rows = await order_store.count_orders_by_genre(db)
        except SQLAlchemyError as e:
            logger.error("Database error computing statistics: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "transaction_statistics"})

        counts = [
            GenreTransactionCount(genre_id=row.genre_id, genre_name=row.genre_name, txn_count=row.txn_count)
            for row in rows
        ]
        most, least = pick_most_and_least(counts)
        return TransactionStatistics(total_transactions=total, most_genre=most, least_genre=least)


statistics_service = StatisticsService()
