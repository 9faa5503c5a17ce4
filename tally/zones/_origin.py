"""
Origin: where orders ship from, and what that changes.

A destination in the origin city gets the local rate card instead of its
zone's, and only cities listed for same-day delivery get that tier. The
delivery date counts handling days at the origin before the carrier's.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from tally._types import ZERO, money
from tally.zones._cities import LOCAL_RATES, ORIGIN_CITY_ID
from tally.zones._registry import shipping_rate
from tally.zones._types import ShippingRate, ZoneRates

LOCAL_ZONE = "local"


@dataclass(frozen=True, slots=True)
class ShippingOrigin:
    """
    Example:
        ShippingOrigin(city_id="pk-mul", same_day_cities=frozenset({"pk-mul"}))
    """

    city_id: str = ORIGIN_CITY_ID
    local_rates: ZoneRates = LOCAL_RATES
    same_day_cities: frozenset[str] = field(default_factory=lambda: frozenset({ORIGIN_CITY_ID}))
    same_day_surcharge: Decimal = Decimal("200")
    processing_days: int = 1

    def is_local(self, city_id: str | None) -> bool:
        return city_id == self.city_id

    def offers_same_day(self, city_id: str | None) -> bool:
        return city_id in self.same_day_cities


DEFAULT_ORIGIN = ShippingOrigin()


def origin_shipping_rate(
    city_id: str,
    order_value: int | str | Decimal,
    origin: ShippingOrigin = DEFAULT_ORIGIN,
) -> ShippingRate:
    """Standard rate from the origin: the local card at home, the zone's elsewhere."""
    if not origin.is_local(city_id):
        return shipping_rate(city_id, order_value)

    rates = origin.local_rates
    is_free = rates.is_free(money(order_value))
    return ShippingRate(
        zone=LOCAL_ZONE,
        rate=ZERO if is_free else rates.base_rate,
        is_free=is_free,
        estimated_days=rates.estimated_days,
    )


def is_same_day_available(city_id: str, origin: ShippingOrigin = DEFAULT_ORIGIN) -> bool:
    return origin.offers_same_day(city_id)


def estimated_delivery_date(
    city_id: str,
    order_date: date | None = None,
    origin: ShippingOrigin = DEFAULT_ORIGIN,
) -> date:
    """
    Handling days plus the carrier's days for the standard tier.

    Example:
        estimated_delivery_date("pk-lhr", date(2024, 3, 1))   # 2024-03-03
    """
    start = order_date if order_date is not None else date.today()
    transit = origin_shipping_rate(city_id, ZERO, origin).estimated_days
    return start + timedelta(days=origin.processing_days + transit)


__all__ = (
    "LOCAL_ZONE",
    "ShippingOrigin",
    "DEFAULT_ORIGIN",
    "origin_shipping_rate",
    "is_same_day_available",
    "estimated_delivery_date",
)
