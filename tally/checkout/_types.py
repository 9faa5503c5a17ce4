"""
Checkout inputs, collaborators and errors.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from tally.cart import Cart, CartSummary
from tally.catalog import ProductIndex
from tally.config import DEFAULT_CONFIG, PricingConfig
from tally.payments import PaymentMethod, PaymentProcessor
from tally.shipping import QuoteSource, ZoneShippingCalculator
from tally.storage import OrderRepository


@dataclass(frozen=True)
class CheckoutRequest:
    """
    What the customer submits.

    `order_id` makes a resubmission idempotent: the same id never charges
    twice. With a repository, a stored order under that id is resumed as
    saved while it awaits payment and refused once it has moved on.
    Leave it empty to get a fresh one.
    """

    user_id: str
    cart: Cart
    payment_method_id: str
    customer_email: str
    customer_phone: str
    order_id: str | None = None
    notes: str | None = None


@dataclass(frozen=True, eq=False)
class CheckoutContext:
    """Live product state and the collaborators one checkout runs against."""

    products: ProductIndex
    calculator: QuoteSource = field(default_factory=ZoneShippingCalculator)
    processor: PaymentProcessor = field(default_factory=PaymentProcessor)
    repository: OrderRepository | None = None
    config: PricingConfig = DEFAULT_CONFIG


@dataclass(frozen=True)
class OrderPreview:
    """Totals and priced payment methods, before anything is charged."""

    summary: CartSummary
    payment_methods: tuple[PaymentMethod, ...]

    def total_with(self, method_id: str) -> Decimal | None:
        """Cart total plus the fee of `method_id`, None if not offered."""
        for method in self.payment_methods:
            if method.id == method_id and method.available:
                return self.summary.total_amount + method.fee
        return None


class CheckoutError(Exception):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @classmethod
    def invalid_cart(cls, message: str) -> "CheckoutError":
        return cls("INVALID_CART", message)

    @classmethod
    def no_shipping(cls, message: str) -> "CheckoutError":
        return cls("NO_SHIPPING", message)

    @classmethod
    def payment_unavailable(cls, message: str) -> "CheckoutError":
        return cls("PAYMENT_UNAVAILABLE", message)

    @classmethod
    def storage(cls, message: str) -> "CheckoutError":
        return cls("STORAGE_ERROR", message)

    @classmethod
    def order_exists(cls, message: str) -> "CheckoutError":
        return cls("ORDER_EXISTS", message)


__all__ = ("CheckoutRequest", "CheckoutContext", "OrderPreview", "CheckoutError")
