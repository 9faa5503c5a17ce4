"""
Shipping methods: one variant per pricing strategy.

    type ShippingMethod = FixedRate | WeightBased | ZoneBased | CarrierCalculated | FreeShipping

`method_cost` dispatches with an exhaustive `match`; each variant carries only
the fields its strategy reads.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from tally._types import ZERO
from tally.catalog import CartLine, ProductIndex, total_quantity, total_weight
from tally.shipping._types import ShippingQuote, WeightLimitExceeded


# ═══════════════════════════════════════════════════════════════════════════════
# Variants
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True, kw_only=True)
class _Method:
    id: str
    name: str
    base_cost: Decimal = ZERO
    free_shipping_threshold: Decimal | None = None
    per_item_cost: Decimal | None = None
    zones: tuple[str, ...] = ()  # empty: every zone
    carriers: tuple[str, ...] = ()
    is_active: bool = True

    def serves(self, zone_id: str) -> bool:
        return not self.zones or zone_id in self.zones


@dataclass(frozen=True, slots=True, kw_only=True)
class FixedRate(_Method):
    pass


@dataclass(frozen=True, slots=True, kw_only=True)
class WeightBased(_Method):
    per_weight_cost: Decimal = ZERO
    max_weight: Decimal | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ZoneBased(_Method):
    pass


@dataclass(frozen=True, slots=True, kw_only=True)
class CarrierCalculated(_Method):
    """Approximates a live carrier rate: base plus a per-weight charge."""

    per_weight_cost: Decimal | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class FreeShipping(_Method):
    pass


type ShippingMethod = FixedRate | WeightBased | ZoneBased | CarrierCalculated | FreeShipping


# ═══════════════════════════════════════════════════════════════════════════════
# Pricing
# ═══════════════════════════════════════════════════════════════════════════════

_DAYS_BY_NAME: tuple[tuple[str, int], ...] = (
    ("standard", 5),
    ("express", 2),
    ("overnight", 1),
    ("ground", 7),
)


def estimated_days(method: ShippingMethod) -> int | None:
    """Guess delivery days from keywords in the method name."""
    name = method.name.lower()
    for keyword, days in _DAYS_BY_NAME:
        if keyword in name:
            return days
    return None


def method_cost(
    method: ShippingMethod,
    lines: Sequence[CartLine],
    products: ProductIndex,
    subtotal: Decimal,
) -> ShippingQuote:
    """
    Price one method for the shippable lines.

    The free-shipping threshold short-circuits every strategy. Raises
    WeightLimitExceeded when a weight-based method's limit is passed.
    """
    threshold = method.free_shipping_threshold
    if threshold is not None and subtotal >= threshold:
        return ShippingQuote(
            method_id=method.id,
            method_name=method.name,
            cost=ZERO,
            estimated_days=estimated_days(method),
            is_free=True,
        )

    match method:
        case FixedRate() | ZoneBased():
            cost = method.base_cost
        case WeightBased(per_weight_cost=rate, max_weight=limit):
            weight = total_weight(lines, products)
            if limit is not None and weight > limit:
                raise WeightLimitExceeded(method.id, weight, limit)
            cost = method.base_cost + rate * weight
        case CarrierCalculated(per_weight_cost=rate):
            weight = total_weight(lines, products, default=Decimal("1"))
            cost = method.base_cost + (rate if rate is not None else Decimal("1")) * weight
        case FreeShipping():
            cost = ZERO

    if method.per_item_cost:
        cost += method.per_item_cost * total_quantity(lines)

    cost = max(ZERO, cost)
    return ShippingQuote(
        method_id=method.id,
        method_name=method.name,
        cost=cost,
        estimated_days=estimated_days(method),
        carrier=method.carriers[0] if method.carriers else None,
        is_free=cost == ZERO,
    )


__all__ = (
    "FixedRate",
    "WeightBased",
    "ZoneBased",
    "CarrierCalculated",
    "FreeShipping",
    "ShippingMethod",
    "estimated_days",
    "method_cost",
)
