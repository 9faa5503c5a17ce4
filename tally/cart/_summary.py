"""
Cart summary: subtotal, shipping, tax and total from live product data.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from tally._types import ZERO
from tally.catalog import (
    CartLine,
    ProductIndex,
    ShippingAddress,
    cart_subtotal,
    total_quantity,
    total_weight,
)
from tally.shipping import QuoteSource, ShippingQuote, WeightLimitExceeded
from tally.tax import calculate_tax

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CartSummary:
    """
    Totals for one cart.

    `total_amount` excludes the payment fee, which is added once a payment
    method is chosen.
    """

    lines: tuple[CartLine, ...]
    subtotal: Decimal
    tax_amount: Decimal
    shipping_amount: Decimal
    total_amount: Decimal
    available_shipping_methods: tuple[ShippingQuote, ...] = ()
    selected_shipping_method: str | None = None
    item_count: int = 0
    total_weight: Decimal = ZERO


def _pick_quote(quotes: Sequence[ShippingQuote], method_id: str | None) -> ShippingQuote | None:
    if not quotes:
        return None
    if method_id is None:
        return quotes[0]
    for quote in quotes:
        if quote.method_id == method_id:
            return quote
    logger.warning("Shipping method %s not offered, using cheapest %s", method_id, quotes[0].method_id)
    return quotes[0]


def calculate_cart_summary(
    lines: Iterable[CartLine],
    products: ProductIndex,
    address: ShippingAddress | None = None,
    method_id: str | None = None,
    calculator: QuoteSource | None = None,
) -> CartSummary:
    """
    Summarize a cart.

    Shipping and tax are only computed when both an address and a
    calculator are given. A step that fails is logged and counted as 0;
    WeightLimitExceeded is the exception and propagates.

    Example:
        summary = calculate_cart_summary(
            lines, products, address, calculator=ZoneShippingCalculator(),
        )
        summary.shipping_amount   # cheapest quote
    """
    lines = tuple(lines)
    subtotal = cart_subtotal(lines, products)

    quotes: tuple[ShippingQuote, ...] = ()
    selected: ShippingQuote | None = None
    shipping = ZERO
    tax = ZERO

    if address is not None and calculator is not None:
        try:
            quotes = tuple(calculator.quotes(lines, products, address))
        except WeightLimitExceeded:
            raise
        except Exception:
            logger.warning("Failed to quote shipping for cart", exc_info=True)

        selected = _pick_quote(quotes, method_id)
        if selected is not None:
            shipping = selected.cost

        try:
            tax = calculate_tax(lines, products, address)
        except ArithmeticError:
            logger.warning("Failed to calculate tax for cart", exc_info=True)

    return CartSummary(
        lines=lines,
        subtotal=subtotal,
        tax_amount=tax,
        shipping_amount=shipping,
        total_amount=subtotal + shipping + tax,
        available_shipping_methods=quotes,
        selected_shipping_method=selected.method_id if selected is not None else None,
        item_count=total_quantity(lines),
        total_weight=total_weight(lines, products),
    )


__all__ = ("CartSummary", "calculate_cart_summary")
