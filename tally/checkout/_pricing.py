"""
Pricing nodes: cart check, summary and payment-method resolution.
"""

from tally import graph as G
from tally.cart import (
    CartSummary,
    ShippingRequirements,
    calculate_cart_summary,
    shipping_requirements,
    validate_cart_items,
)
from tally.checkout._types import CheckoutContext, CheckoutError, CheckoutRequest
from tally.payments import PaymentMethod, get_available_payment_methods
from tally.shipping import WeightLimitExceeded


@G.node
class CartCheckNode:
    """Entry point: the cart must be non-empty, in stock and addressable."""

    def __init__(
        self,
        request: CheckoutRequest,
        context: CheckoutContext,
        requirements: ShippingRequirements,
    ) -> None:
        self.request = request
        self.context = context
        self.requirements = requirements

    @classmethod
    def __compose__(cls, request: CheckoutRequest, context: CheckoutContext) -> "CartCheckNode":
        cart = request.cart
        if cart.is_empty:
            raise CheckoutError.invalid_cart("Cart is empty")

        problems = validate_cart_items(cart.lines, context.products)
        if problems:
            raise CheckoutError.invalid_cart("; ".join(problems))

        requirements = shipping_requirements(cart.lines, context.products)
        if requirements.requires_shipping and cart.address is None:
            raise CheckoutError.no_shipping("Shipping address is required")
        return cls(request, context, requirements)


@G.node
class SummaryNode:
    def __init__(self, data: CartSummary) -> None:
        self.data = data

    @classmethod
    def __compose__(cls, check: CartCheckNode) -> "SummaryNode":
        cart = check.request.cart
        try:
            summary = calculate_cart_summary(
                cart.lines,
                check.context.products,
                cart.address,
                method_id=cart.shipping_method_id,
                calculator=check.context.calculator,
            )
        except WeightLimitExceeded as e:
            raise CheckoutError.no_shipping(str(e)) from e

        if check.requirements.requires_shipping and not summary.available_shipping_methods:
            raise CheckoutError.no_shipping("No shipping method available for this address")
        return cls(summary)


@G.node
class PaymentMethodsNode:
    """Every method priced for the cart total."""

    def __init__(self, data: tuple[PaymentMethod, ...]) -> None:
        self.data = data

    @classmethod
    def __compose__(cls, summary: SummaryNode, check: CartCheckNode) -> "PaymentMethodsNode":
        methods = get_available_payment_methods(summary.data.total_amount, check.context.config)
        return cls(tuple(methods))


@G.node
class SelectedMethodNode:
    def __init__(self, data: PaymentMethod) -> None:
        self.data = data

    @classmethod
    def __compose__(cls, methods: PaymentMethodsNode, request: CheckoutRequest) -> "SelectedMethodNode":
        for method in methods.data:
            if method.id != request.payment_method_id:
                continue
            if not method.available:
                raise CheckoutError.payment_unavailable(
                    "Payment method is not available for this order amount"
                )
            return cls(method)
        raise CheckoutError.payment_unavailable(
            f"Unknown payment method {request.payment_method_id}"
        )


__all__ = ("CartCheckNode", "SummaryNode", "PaymentMethodsNode", "SelectedMethodNode")
