"""
Orders: the status state machine and customer cancellation.

    from tally import orders as O

    O.order_status_for_payment(PaymentStatus.PENDING_VERIFICATION)  # OrderStatus.PENDING
    O.can_cancel(O.OrderStatus.SHIPPED)                              # False

    match O.cancel_order(order, requester_id=user.id, reason="Changed my mind"):
        case Ok(cancellation):
            cancellation.refund.amount
        case Error(err):
            err.code    # NOT_FOUND / UNAUTHORIZED / INVALID_STATE
"""

from tally.orders._types import (
    OrderStatus,
    Order,
    RefundInfo,
    Cancellation,
    CancellationCheck,
    OrderError,
    OrderErrors,
)
from tally.orders._lifecycle import (
    DEFAULT_CANCELLATION_REASON,
    CANCELLABLE,
    TRANSITIONS,
    order_status_for_payment,
    apply_payment,
    can_transition,
    advance,
    can_cancel,
    cancellation_rejection,
    cancellation_check,
    cancel_order,
)

__all__ = (
    # Types
    "OrderStatus",
    "Order",
    "RefundInfo",
    "Cancellation",
    "CancellationCheck",
    "OrderError",
    "OrderErrors",
    # Lifecycle
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
