"""
Order nodes: draft the order, pay for it, record the outcome.

    CartCheckNode ──► SummaryNode ──► PaymentMethodsNode ──► SelectedMethodNode
          │               │                                        │
          └───────────────┴──────────────► PaymentNode ◄───────────┘
                                               │
                                               ▼
                                         PlaceOrderNode
"""

import logging
import uuid
from dataclasses import dataclass

from kungfu import Error, Ok, Result

from tally import graph as G
from tally.checkout._pricing import CartCheckNode, SelectedMethodNode, SummaryNode
from tally.checkout._types import CheckoutContext, CheckoutError, CheckoutRequest
from tally.orders import Order, OrderStatus, advance, apply_payment
from tally.payments import PaymentRequest, PaymentResult
from tally.storage import OrderRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacedOrder:
    order: Order
    payment: PaymentResult


async def _persist(repository: OrderRepository | None, order: Order) -> None:
    if repository is None:
        return
    saved = await repository.save(order)
    match saved:
        case Error(err):
            raise CheckoutError.storage(err.message)
        case Ok(_):
            pass


_RESUMABLE = frozenset({OrderStatus.PENDING, OrderStatus.PAYMENT_FAILED})


async def _resume(request: CheckoutRequest, repository: OrderRepository | None) -> Order | None:
    """
    The stored order a resubmission refers to, ready to be paid again.

    Only an order still awaiting payment is resumed; anything further along
    keeps its state and the checkout is refused.
    """
    if repository is None or request.order_id is None:
        return None
    loaded = await repository.load(request.order_id)
    match loaded:
        case Error(err):
            raise CheckoutError.storage(err.message)
        case Ok(None):
            return None
        case Ok(order):
            pass

    if order.user_id != request.user_id:
        raise CheckoutError.order_exists(f"Order {order.id} belongs to another customer")
    if order.status not in _RESUMABLE:
        raise CheckoutError.order_exists(f"Order {order.id} is already {order.status.value}")
    if order.status is OrderStatus.PENDING:
        return order

    retried = advance(order, OrderStatus.PENDING)
    match retried:
        case Ok(pending):
            logger.info("Retrying payment for order %s", order.id)
            return pending
        case Error(err):
            raise CheckoutError.order_exists(err.message)


@G.node
class PaymentNode:
    """Save the pending order, then submit its payment."""

    def __init__(self, draft: Order, payment: PaymentResult, context: CheckoutContext) -> None:
        self.draft = draft
        self.payment = payment
        self.context = context

    @classmethod
    async def __compose__(
        cls,
        check: CartCheckNode,
        summary: SummaryNode,
        method: SelectedMethodNode,
    ) -> "PaymentNode":
        request, context = check.request, check.context
        totals = summary.data

        draft = await _resume(request, context.repository)
        if draft is None:
            draft = Order.place(
                id=request.order_id or f"ord_{uuid.uuid4().hex[:12]}",
                user_id=request.user_id,
                subtotal=totals.subtotal,
                tax_amount=totals.tax_amount,
                shipping_amount=totals.shipping_amount,
                payment_fee=method.data.fee,
                payment_method=method.data.id,
                notes=request.notes,
            )
        await _persist(context.repository, draft)

        # The processor judges availability before the fee and adds it itself.
        payment = await context.processor.process(
            PaymentRequest(
                order_id=draft.id,
                amount=draft.total_amount - draft.payment_fee,
                payment_method_id=draft.payment_method,
                currency=context.config.currency,
                customer_email=request.customer_email,
                customer_phone=request.customer_phone,
            )
        )
        return cls(draft, payment, context)


@G.node
class PlaceOrderNode:
    def __init__(self, data: PlacedOrder) -> None:
        self.data = data

    @classmethod
    async def __compose__(cls, paid: PaymentNode) -> "PlaceOrderNode":
        order = apply_payment(paid.draft, paid.payment)
        await _persist(paid.context.repository, order)
        logger.info(
            "Placed order %s for %s: %s total %s",
            order.id,
            order.user_id,
            order.status.value,
            order.total_amount,
        )
        return cls(PlacedOrder(order=order, payment=paid.payment))

    @classmethod
    async def execute(
        cls,
        request: CheckoutRequest,
        context: CheckoutContext,
    ) -> Result[PlacedOrder, CheckoutError]:
        """
        Run the full checkout.

        A failed payment still places the order, in payment_failed; only
        cart, shipping, method and storage problems are errors.
        """
        try:
            node = await G.compose(cls, request, context)
            return Ok(node.data)
        except CheckoutError as e:
            logger.info("Checkout for %s rejected: %s %s", request.user_id, e.code, e.message)
            return Error(e)


__all__ = ("PlacedOrder", "PaymentNode", "PlaceOrderNode")
