"""
Checkout: the pricing components wired as a nodnod graph.

    from tally import checkout as CO

    context = CO.CheckoutContext(products=products, repository=orders)
    request = CO.CheckoutRequest(
        user_id="u_1",
        cart=cart,
        payment_method_id="cod",
        customer_email="buyer@example.com",
        customer_phone="+923001234567",
    )

    preview = await CO.PreviewNode.execute(request, context)    # no payment
    placed = await CO.PlaceOrderNode.execute(request, context)  # Ok(PlacedOrder) | Error(CheckoutError)

Only the nodes a target needs run: the preview never reaches PaymentNode.
"""

from tally.checkout._types import (
    CheckoutRequest,
    CheckoutContext,
    OrderPreview,
    CheckoutError,
)
from tally.checkout._pricing import (
    CartCheckNode,
    SummaryNode,
    PaymentMethodsNode,
    SelectedMethodNode,
)
from tally.checkout._order import (
    PlacedOrder,
    PaymentNode,
    PlaceOrderNode,
)
from tally.checkout._preview import (
    PreviewNode,
)

__all__ = (
    # Types
    "CheckoutRequest",
    "CheckoutContext",
    "OrderPreview",
    "CheckoutError",
    # Nodes
    "CartCheckNode",
    "SummaryNode",
    "PaymentMethodsNode",
    "SelectedMethodNode",
    "PlacedOrder",
    "PaymentNode",
    "PlaceOrderNode",
    "PreviewNode",
)
