"""
Cart checks against live product state.

Problems are reported as messages, never raised; the caller decides
whether to block checkout.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from decimal import Decimal

from tally._types import CENT, ZERO
from tally.catalog import CartLine, ProductIndex, total_weight
from tally.cart._summary import CartSummary

logger = logging.getLogger(__name__)

FREE_SHIPPING_THRESHOLD = Decimal("2500")


def validate_cart_items(lines: Iterable[CartLine], products: ProductIndex) -> list[str]:
    """
    Every problem with the cart, in line order.

    A line may produce two messages: an inactive product that is also
    short on stock reports both.
    """
    errors: list[str] = []
    for line in lines:
        product = products.get(line.product_id)
        if product is None:
            errors.append(f"Product {line.product_id} is no longer available")
            continue

        if not product.is_active:
            errors.append(f"Product {product.name} is no longer available")

        if product.track_inventory and product.stock_quantity < line.quantity:
            if product.stock_quantity <= 0:
                errors.append(f"Product {product.name} is out of stock")
            else:
                errors.append(
                    f"Only {product.stock_quantity} units of {product.name} available "
                    f"(requested {line.quantity})"
                )

        if line.unit_price is not None and abs(product.live_price - line.unit_price) > CENT:
            logger.warning(
                "Price changed for %s: was %s, now %s",
                product.name,
                line.unit_price,
                product.live_price,
            )
    return errors


def update_cart_item_prices(lines: Iterable[CartLine], products: ProductIndex) -> list[CartLine]:
    """Refresh snapshot prices to the live price; unknown products are left alone."""
    updated: list[CartLine] = []
    for line in lines:
        product = products.get(line.product_id)
        updated.append(line if product is None else replace(line, unit_price=product.live_price))
    return updated


@dataclass(frozen=True, slots=True)
class ShippingRequirements:
    requires_shipping: bool
    has_digital_items: bool
    has_physical_items: bool
    has_fragile_items: bool
    has_hazardous_items: bool
    total_weight: Decimal


def shipping_requirements(lines: Iterable[CartLine], products: ProductIndex) -> ShippingRequirements:
    lines = list(lines)
    known = [products[line.product_id] for line in lines if line.product_id in products]
    physical = [product for product in known if product.requires_shipping]
    return ShippingRequirements(
        requires_shipping=bool(physical),
        has_digital_items=any(product.is_digital for product in known),
        has_physical_items=bool(physical),
        has_fragile_items=any(product.is_fragile for product in physical),
        has_hazardous_items=any(product.is_hazardous for product in physical),
        total_weight=total_weight(lines, products),
    )


def calculate_savings(lines: Iterable[CartLine], products: ProductIndex) -> Decimal:
    """What running sales take off the regular price for this cart."""
    savings = ZERO
    for line in lines:
        product = products.get(line.product_id)
        if product is None or product.sale_price is None:
            continue
        savings += (product.price - product.sale_price) * line.quantity
    return savings


@dataclass(frozen=True, slots=True)
class FreeShippingEligibility:
    qualifies: bool
    amount_needed: Decimal | None = None


def free_shipping_eligibility(
    summary: CartSummary,
    threshold: Decimal = FREE_SHIPPING_THRESHOLD,
) -> FreeShippingEligibility:
    if summary.subtotal >= threshold:
        return FreeShippingEligibility(qualifies=True)
    return FreeShippingEligibility(qualifies=False, amount_needed=threshold - summary.subtotal)


__all__ = (
    "FREE_SHIPPING_THRESHOLD",
    "validate_cart_items",
    "update_cart_item_prices",
    "ShippingRequirements",
    "shipping_requirements",
    "calculate_savings",
    "FreeShippingEligibility",
    "free_shipping_eligibility",
)
