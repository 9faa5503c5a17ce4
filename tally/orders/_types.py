"""
Order types: status, the placed order, and the errors of its lifecycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from tally.payments import PaymentStatus


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PAYMENT_FAILED = "payment_failed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


# ═══════════════════════════════════════════════════════════════════════════════
# Order
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Order:
    """
    A placed order.

    `total_amount` is fixed when the order is placed; later status changes
    never recompute it.
    """

    id: str
    user_id: str
    status: OrderStatus
    subtotal: Decimal
    tax_amount: Decimal
    shipping_amount: Decimal
    payment_fee: Decimal
    total_amount: Decimal
    payment_method: str
    payment_status: PaymentStatus | None = None
    transaction_id: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def place(
        cls,
        *,
        id: str,
        user_id: str,
        subtotal: Decimal,
        tax_amount: Decimal,
        shipping_amount: Decimal,
        payment_fee: Decimal,
        payment_method: str,
        status: OrderStatus = OrderStatus.PENDING,
        notes: str | None = None,
    ) -> Order:
        now = datetime.now()
        return cls(
            id=id,
            user_id=user_id,
            status=status,
            subtotal=subtotal,
            tax_amount=tax_amount,
            shipping_amount=shipping_amount,
            payment_fee=payment_fee,
            total_amount=subtotal + shipping_amount + tax_amount + payment_fee,
            payment_method=payment_method,
            notes=notes,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True, slots=True)
class RefundInfo:
    will_be_refunded: bool
    amount: Decimal
    timeframe: str = "3-5 business days"
    method: str = "Original payment method"


@dataclass(frozen=True, slots=True)
class Cancellation:
    order: Order
    message: str
    refund: RefundInfo


@dataclass(frozen=True, slots=True)
class CancellationCheck:
    can_cancel: bool
    status: OrderStatus
    reason: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderError:
    code: str
    message: str


class OrderErrors:
    @staticmethod
    def not_found() -> OrderError:
        return OrderError("NOT_FOUND", "Order not found")

    @staticmethod
    def unauthorized() -> OrderError:
        return OrderError("UNAUTHORIZED", "Unauthorized to cancel this order")

    @staticmethod
    def invalid_state(msg: str) -> OrderError:
        return OrderError("INVALID_STATE", msg)

    @staticmethod
    def invalid_transition(current: OrderStatus, target: OrderStatus) -> OrderError:
        return OrderError(
            "INVALID_TRANSITION",
            f"Cannot move order from {current.value} to {target.value}",
        )


__all__ = (
    "OrderStatus",
    "Order",
    "RefundInfo",
    "Cancellation",
    "CancellationCheck",
    "OrderError",
    "OrderErrors",
)
