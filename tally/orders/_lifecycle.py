"""
Order lifecycle: payment outcome mapping, forward progression and cancellation.

    pending ──► confirmed ──► processing ──► shipped ──► delivered
       │  ▲         │
       │  └─ payment_failed (retry)
       ▼            ▼
         cancelled

Only pending and confirmed orders are customer-cancellable. A
payment_failed order may be retried or cancelled administratively.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from types import MappingProxyType

from kungfu import Error, Ok, Result

from tally.orders._types import (
    Cancellation,
    CancellationCheck,
    Order,
    OrderError,
    OrderErrors,
    OrderStatus,
    RefundInfo,
)
from tally.payments import PaymentResult, PaymentStatus

logger = logging.getLogger(__name__)

DEFAULT_CANCELLATION_REASON = "Customer requested cancellation"

CANCELLABLE = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})

TRANSITIONS = MappingProxyType({
    OrderStatus.PENDING: frozenset({
        OrderStatus.CONFIRMED,
        OrderStatus.PAYMENT_FAILED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PAYMENT_FAILED: frozenset({OrderStatus.PENDING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
})

_REJECTIONS = MappingProxyType({
    OrderStatus.PROCESSING: "Cannot cancel order in processing status",
    OrderStatus.SHIPPED: "Cannot cancel shipped order",
    OrderStatus.DELIVERED: "Cannot cancel delivered order",
    OrderStatus.CANCELLED: "Order is already cancelled",
    OrderStatus.PAYMENT_FAILED: "Cannot cancel payment_failed orders",
})


# ═══════════════════════════════════════════════════════════════════════════════
# Payment outcome
# ═══════════════════════════════════════════════════════════════════════════════


def order_status_for_payment(status: PaymentStatus) -> OrderStatus:
    match status:
        case PaymentStatus.CONFIRMED:
            return OrderStatus.CONFIRMED
        case PaymentStatus.PENDING | PaymentStatus.PENDING_VERIFICATION:
            return OrderStatus.PENDING
        case PaymentStatus.FAILED:
            return OrderStatus.PAYMENT_FAILED


def apply_payment(order: Order, payment: PaymentResult) -> Order:
    """Record a payment result on a freshly placed order."""
    status = order_status_for_payment(payment.status)
    logger.info("Order %s payment %s -> %s", order.id, payment.status.value, status.value)
    return replace(
        order,
        status=status,
        payment_status=payment.status,
        transaction_id=payment.transaction_id,
        updated_at=datetime.now(),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Progression
# ═══════════════════════════════════════════════════════════════════════════════


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in TRANSITIONS[current]


def advance(order: Order, target: OrderStatus) -> Result[Order, OrderError]:
    """
    Move an order to `target` if the edge exists.

    Example:
        advance(order, OrderStatus.SHIPPED)   # Error(INVALID_TRANSITION) unless processing
    """
    if not can_transition(order.status, target):
        return Error(OrderErrors.invalid_transition(order.status, target))
    logger.info("Order %s %s -> %s", order.id, order.status.value, target.value)
    return Ok(replace(order, status=target, updated_at=datetime.now()))


# ═══════════════════════════════════════════════════════════════════════════════
# Cancellation
# ═══════════════════════════════════════════════════════════════════════════════


def can_cancel(status: OrderStatus) -> bool:
    return status in CANCELLABLE


def cancellation_rejection(status: OrderStatus) -> str | None:
    """Reason a customer may not cancel from `status`, None if they may."""
    if can_cancel(status):
        return None
    return _REJECTIONS[status]


def cancellation_check(order: Order) -> CancellationCheck:
    if can_cancel(order.status):
        return CancellationCheck(can_cancel=True, status=order.status)
    return CancellationCheck(
        can_cancel=False,
        status=order.status,
        reason=f"Cannot cancel {order.status.value} orders",
    )


def _append_note(notes: str | None, line: str) -> str:
    return f"{notes}\n\n{line}" if notes else line


def cancel_order(
    order: Order | None,
    requester_id: str,
    reason: str | None = None,
) -> Result[Cancellation, OrderError]:
    """
    Customer cancellation.

    Checks run in order: existence, ownership, then state. Ownership is an
    exact id match; there is no elevated-role override here.
    """
    if order is None:
        return Error(OrderErrors.not_found())
    if order.user_id != requester_id:
        logger.warning("User %s tried to cancel order %s", requester_id, order.id)
        return Error(OrderErrors.unauthorized())

    rejection = cancellation_rejection(order.status)
    if rejection is not None:
        return Error(OrderErrors.invalid_state(rejection))

    why = reason or DEFAULT_CANCELLATION_REASON
    cancelled = replace(
        order,
        status=OrderStatus.CANCELLED,
        notes=_append_note(order.notes, f"Cancelled: {why}"),
        updated_at=datetime.now(),
    )
    logger.info("Order %s cancelled by %s: %s", order.id, requester_id, why)
    return Ok(Cancellation(
        order=cancelled,
        message="Order cancelled successfully",
        refund=RefundInfo(
            will_be_refunded=order.total_amount > 0,
            amount=order.total_amount,
        ),
    ))


__all__ = (
    "DEFAULT_CANCELLATION_REASON",
    "CANCELLABLE",
    "TRANSITIONS",
    "order_status_for_payment",
    "apply_payment",
    "can_transition",
    "advance",
    "can_cancel",
    "cancellation_rejection",
    "cancellation_check",
    "cancel_order",
)
