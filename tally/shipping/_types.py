"""
Shipping types: quotes, the quote-source protocol and the weight-limit error.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from tally._types import ZERO
from tally.catalog import CartLine, ProductIndex, ShippingAddress


@dataclass(frozen=True, slots=True)
class ShippingQuote:
    method_id: str
    method_name: str
    cost: Decimal
    estimated_days: int | None = None
    carrier: str | None = None
    is_free: bool = False


def sort_quotes(quotes: Iterable[ShippingQuote]) -> list[ShippingQuote]:
    """Cheapest first; ties keep their generation order."""
    return sorted(quotes, key=lambda q: q.cost)


NO_SHIPPING_QUOTE = ShippingQuote(
    method_id="free",
    method_name="No Shipping Required",
    cost=ZERO,
    is_free=True,
)


class QuoteSource(Protocol):
    """Anything that prices a cart for a destination."""

    def quotes(
        self,
        lines: Iterable[CartLine],
        products: ProductIndex,
        destination: ShippingAddress,
    ) -> list[ShippingQuote]: ...


class WeightLimitExceeded(Exception):
    """
    The cart is heavier than a weight-based method accepts.

    The only exception the pricing core raises; the weight is never capped.
    """

    def __init__(self, method_id: str, weight: Decimal, limit: Decimal) -> None:
        super().__init__(f"Total weight {weight} exceeds method {method_id} limit {limit}")
        self.method_id = method_id
        self.weight = weight
        self.limit = limit


__all__ = (
    "ShippingQuote",
    "sort_quotes",
    "NO_SHIPPING_QUOTE",
    "QuoteSource",
    "WeightLimitExceeded",
)
