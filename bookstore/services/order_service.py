"""
Bookstore Backend — Order Service (Order Placement)
=====================================================

What:  Turns a list of {book_id, quantity} lines into a persisted Order with
       its OrderItems and the matching stock decrements, atomically. Also
       serves order listing and detail.
Who:   Called by the /transactions route handlers.

Placement Flow (one transaction):
    ┌──────────────┐   ┌──────────────────────── for each line ─────────────────────────┐
    │ create Order │──▶│ validate line → lock book → check stock → decrement → add item │──▶ commit
    └──────────────┘   └────────────────────────────────────────────────────────────────┘
            any exception anywhere ──▶ rollback of the order, every decrement, every item

    Lines are processed in submission order; the first failing line decides
    the error the caller sees.

Failure Kinds:
    UnauthorizedError       no caller identity, or the caller's account no
                            longer exists
    ValidationError         empty item list; line without book_id or with a
                            missing/non-positive quantity
    NotFoundError           book id unknown, malformed, or soft-deleted
    InsufficientStockError  stock lower than the requested quantity
    DatabaseError           anything raised by the driver/ORM

Locking:
    The book row is read with FOR UPDATE (PostgreSQL) or under the write lock
    taken by BEGIN IMMEDIATE (SQLite), and the decrement itself is guarded by
    `stock_quantity >= :quantity`. Two placements racing for the last copies
    serialize: the second one sees the reduced stock and fails with
    InsufficientStockError.
"""

import logging
import uuid
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from bookstore.database import transaction
from bookstore.exceptions import (
    BookstoreError,
    DatabaseError,
    InsufficientStockError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from bookstore.models.order import Order
from bookstore.models.user import User
from bookstore.schemas.common import PageMeta, PageRequest
from bookstore.schemas.order import OrderDetail, OrderLineRequest, OrderResponse
from bookstore.services.identifiers import parse_resource_id
from bookstore.stores import catalog_store, order_store

logger = logging.getLogger(__name__)


class OrderService:
    """
    Order placement and order queries.

    Stateless: every method receives the session to run in. place_order()
    opens its own transaction on that session (see database.transaction).
    """

    async def place_order(
        self,
        db: AsyncSession,
        user_id: Optional[uuid.UUID],
        items: Optional[Sequence[OrderLineRequest]],
    ) -> OrderResponse:
        """
        Place an order for `user_id`.

        Args:
            db: Session for this request; must not be shared with another
                concurrent placement.
            user_id: Authenticated caller, or None.
            items: Lines in the order the customer submitted them.

        Returns:
            OrderResponse with the generated id, created_at and the items.

        Raises:
            UnauthorizedError, ValidationError, NotFoundError,
            InsufficientStockError, DatabaseError. On any of them nothing
            from this call is persisted.
        """
        if user_id is None:
            raise UnauthorizedError()
        if not items:
            raise ValidationError("Items are required", field="items")

        try:
            async with transaction(db):
                if await db.get(User, user_id) is None:
                    raise UnauthorizedError(context={"user_id": str(user_id)})
                order = await order_store.create_order(db, user_id)
                for position, line in enumerate(items):
                    await self._place_line(db, order, line, position)
                response = OrderResponse.model_validate(order)
        except BookstoreError as e:
            logger.warning(
                "Order rejected for user %s (%s): %s | Context: %s",
                user_id, e.kind, e.message, e.context,
            )
            raise
        except SQLAlchemyError as e:
            logger.error("Database error placing order for user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not place the order. Please try again.",
                context={"user_id": str(user_id), "error_type": type(e).__name__},
            )

        logger.info("Order %s placed by user %s with %d line(s)", response.id, user_id, len(response.items))
        return response

    async def _place_line(
        self,
        db: AsyncSession,
        order: Order,
        line: OrderLineRequest,
        position: int,
    ) -> None:
        quantity = line.quantity
        if not line.book_id or quantity is None or quantity <= 0:
            raise ValidationError(
                "Invalid bookId or quantity",
                field="items",
                context={"position": position},
            )

        not_found = f"Book with id {line.book_id} not found"
        book_id = parse_resource_id(line.book_id, "book", message=not_found)
        book = await catalog_store.get_active_book(db, book_id, for_update=True)
        if book is None:
            raise NotFoundError(resource="book", resource_id=line.book_id, message=not_found)

        if book.stock_quantity < quantity:
            raise InsufficientStockError(
                book_id=str(book.id),
                title=book.title,
                requested=quantity,
                available=book.stock_quantity,
            )

        remaining = await catalog_store.decrement_stock(db, book.id, quantity)
        if remaining is None:
            raise InsufficientStockError(book_id=str(book.id), title=book.title, requested=quantity)
        # Keep the loaded instance in step without scheduling another UPDATE
        set_committed_value(book, "stock_quantity", remaining)

        await order_store.add_order_item(db, order, book.id, quantity)

    async def list_orders(
        self, db: AsyncSession, page: PageRequest
    ) -> Tuple[List[OrderDetail], PageMeta]:
        try:
            orders, total = await order_store.list_orders(db, page)
        except SQLAlchemyError as e:
            logger.error("Database error listing orders: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "list_orders"})
        return (
            [OrderDetail.model_validate(o) for o in orders],
            PageMeta.build(page.page, page.limit, total),
        )

    async def get_order(self, db: AsyncSession, order_id: str) -> OrderDetail:
        not_found = "Transaction not found"
        order_uuid = parse_resource_id(order_id, "transaction", message=not_found)
        try:
            order = await order_store.get_order(db, order_uuid)
        except SQLAlchemyError as e:
            logger.error("Database error fetching order %s: %s", order_id, str(e))
            raise DatabaseError(context={"order_id": order_id})
        if order is None:
            raise NotFoundError(resource="transaction", resource_id=order_id, message=not_found)
        return OrderDetail.model_validate(order)


order_service = OrderService()
