"""
Order repository: explicit save/load of placed orders.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from kungfu import Error, Ok, Result
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tally.orders import Order, OrderStatus
from tally.payments import PaymentStatus
from tally.storage._tables import OrderRow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageError:
    message: str
    cause: Exception | None = None


def _to_row(order: Order) -> OrderRow:
    now = datetime.now()
    return OrderRow(
        id=order.id,
        user_id=order.user_id,
        status=order.status.value,
        subtotal=order.subtotal,
        tax_amount=order.tax_amount,
        shipping_amount=order.shipping_amount,
        payment_fee=order.payment_fee,
        total_amount=order.total_amount,
        payment_method=order.payment_method,
        payment_status=order.payment_status.value if order.payment_status else None,
        transaction_id=order.transaction_id,
        notes=order.notes,
        created_at=order.created_at or now,
        updated_at=order.updated_at or now,
    )


def _to_order(row: OrderRow) -> Order:
    return Order(
        id=row.id,
        user_id=row.user_id,
        status=OrderStatus(row.status),
        subtotal=row.subtotal,
        tax_amount=row.tax_amount,
        shipping_amount=row.shipping_amount,
        payment_fee=row.payment_fee,
        total_amount=row.total_amount,
        payment_method=row.payment_method,
        payment_status=PaymentStatus(row.payment_status) if row.payment_status else None,
        transaction_id=row.transaction_id,
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class OrderRepository:
    """
    Orders by id.

    Every method returns a Result; database failures come back as
    StorageError instead of raising.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, order: Order) -> Result[Order, StorageError]:
        """Insert or overwrite the order with this id."""
        try:
            async with self._session_factory() as session:
                await session.merge(_to_row(order))
                await session.commit()
                return Ok(order)
        except Exception as e:
            logger.exception("Failed to save order %s", order.id)
            return Error(StorageError(f"Failed to save order: {e}", e))

    async def load(self, order_id: str) -> Result[Order | None, StorageError]:
        try:
            async with self._session_factory() as session:
                row = (
                    await session.execute(select(OrderRow).where(OrderRow.id == order_id))
                ).scalar_one_or_none()
                return Ok(_to_order(row) if row is not None else None)
        except Exception as e:
            return Error(StorageError(f"Failed to load order: {e}", e))

    async def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        notes: str | None = None,
    ) -> Result[Order | None, StorageError]:
        """
        Overwrite status (and notes when given). Ok(None) if no such order.

        The caller decides legality through the state machine first; this
        only writes.
        """
        try:
            async with self._session_factory() as session:
                row = (
                    await session.execute(select(OrderRow).where(OrderRow.id == order_id))
                ).scalar_one_or_none()
                if row is None:
                    return Ok(None)
                row.status = status.value
                if notes is not None:
                    row.notes = notes
                row.updated_at = datetime.now()
                await session.commit()
                return Ok(_to_order(row))
        except Exception as e:
            logger.exception("Failed to update order %s", order_id)
            return Error(StorageError(f"Failed to update order: {e}", e))


__all__ = ("StorageError", "OrderRepository")
