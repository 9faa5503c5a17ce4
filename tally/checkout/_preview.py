"""
Preview: totals and priced payment methods without paying.

Reuses SummaryNode and PaymentMethodsNode; PaymentNode never runs.
"""

from kungfu import Error, Ok, Result

from tally import graph as G
from tally.checkout._pricing import PaymentMethodsNode, SummaryNode
from tally.checkout._types import CheckoutContext, CheckoutError, CheckoutRequest, OrderPreview


@G.node
class PreviewNode:
    def __init__(self, data: OrderPreview) -> None:
        self.data = data

    @classmethod
    def __compose__(cls, summary: SummaryNode, methods: PaymentMethodsNode) -> "PreviewNode":
        return cls(OrderPreview(summary=summary.data, payment_methods=methods.data))

    @classmethod
    async def execute(
        cls,
        request: CheckoutRequest,
        context: CheckoutContext,
    ) -> Result[OrderPreview, CheckoutError]:
        try:
            node = await G.compose(cls, request, context)
            return Ok(node.data)
        except CheckoutError as e:
            return Error(e)


__all__ = ("PreviewNode",)
