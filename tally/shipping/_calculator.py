"""
Shipping calculators.

Two quote sources share one contract (`QuoteSource.quotes`):

- `calculate_shipping` / `ZoneShippingCalculator` price against the city
  registry: standard, express and cash-on-delivery tiers per zone.
- `ShippingCalculator` prices configurable method variants against zone
  rules.

Both return quotes sorted by cost and never undercharge an unknown
destination: it gets the configured conservative quote.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from tally._types import ZERO, to_cents
from tally.catalog import (
    CartLine,
    ProductIndex,
    ShippingAddress,
    cart_subtotal,
    shippable_lines,
)
from tally.config import DEFAULT_CONFIG, PricingConfig
from tally.shipping._methods import ShippingMethod, method_cost
from tally.shipping._types import (
    NO_SHIPPING_QUOTE,
    ShippingQuote,
    sort_quotes,
)
from tally.shipping._zones import ZoneRule, find_zone
from tally.zones import LOCAL_ZONE, ShippingZone, ZoneMatch, resolve_zone

logger = logging.getLogger(__name__)

REGISTRY_COUNTRY = "PK"


def unknown_destination_quote(config: PricingConfig = DEFAULT_CONFIG) -> ShippingQuote:
    return ShippingQuote(
        method_id="standard-unknown",
        method_name="Standard Delivery",
        cost=config.unknown_destination_cost,
        estimated_days=config.unknown_destination_days,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Zone-based (city registry)
# ═══════════════════════════════════════════════════════════════════════════════


def _resolve_destination(destination: ShippingAddress, zone_hint: str | None) -> ZoneMatch | None:
    if destination.country.upper() != REGISTRY_COUNTRY:
        return None
    return resolve_zone(
        location_id=zone_hint or destination.city_id,
        postal_code=destination.postal_code,
    )


def calculate_shipping(
    lines: Iterable[CartLine],
    products: ProductIndex,
    destination: ShippingAddress,
    zone_hint: str | None = None,
    config: PricingConfig = DEFAULT_CONFIG,
) -> list[ShippingQuote]:
    """
    Quote every delivery tier the destination's zone offers.

    Args:
        zone_hint: registry city id; wins over the address's own city id
            and postal code.

    Standard is always offered. Express (x multiplier, one day faster) is
    offered in metro and urban zones; cash on delivery (standard + surcharge)
    everywhere but rural. A subtotal at or above the zone threshold makes
    standard and express free.

    A destination in the origin city is priced on the local rate card and
    its tiers are named `*-local`. Cities the origin serves same day also
    get `same-day-*` at standard + the same-day surcharge.
    """
    lines = list(lines)
    if not shippable_lines(lines, products):
        return [NO_SHIPPING_QUOTE]

    resolved = _resolve_destination(destination, zone_hint)
    if resolved is None:
        logger.warning(
            "No shipping zone for %s/%s, quoting conservative default",
            destination.country,
            destination.postal_code or zone_hint or destination.city_id,
        )
        return [unknown_destination_quote(config)]

    city, zone = resolved.city, resolved.zone
    origin = config.origin
    local = origin.is_local(city.id)
    rates = origin.local_rates if local else resolved.rates
    tier = LOCAL_ZONE if local else zone.value

    subtotal = cart_subtotal(lines, products)
    is_free = rates.is_free(subtotal)
    standard = ZERO if is_free else rates.base_rate
    days = rates.estimated_days if local else city.estimated_delivery_days

    quotes = [
        ShippingQuote(
            method_id=f"standard-{tier}",
            method_name=(
                f"Local Delivery in {city.name}" if local else f"Standard Delivery to {city.name}"
            ),
            cost=standard,
            estimated_days=days,
            carrier="Pakistan Post",
            is_free=is_free,
        )
    ]

    if zone in (ShippingZone.METRO, ShippingZone.URBAN):
        quotes.append(
            ShippingQuote(
                method_id=f"express-{tier}",
                method_name=f"Express Delivery to {city.name}",
                cost=ZERO if is_free else to_cents(standard * config.express_multiplier),
                estimated_days=max(1, days - 1),
                carrier="TCS Express",
                is_free=is_free,
            )
        )

    if zone is not ShippingZone.RURAL:
        quotes.append(
            ShippingQuote(
                method_id=f"cod-{tier}",
                method_name=f"Cash on Delivery - {city.name}",
                cost=standard + config.cod_shipping_surcharge,
                estimated_days=days,
                carrier="Leopards Courier",
            )
        )

    if origin.offers_same_day(city.id):
        quotes.append(
            ShippingQuote(
                method_id=f"same-day-{tier}",
                method_name=f"Same Day Delivery in {city.name}",
                cost=standard + origin.same_day_surcharge,
                estimated_days=0,
                carrier="Local Courier",
            )
        )

    return sort_quotes(quotes)


@dataclass(frozen=True, slots=True)
class ZoneShippingCalculator:
    """`calculate_shipping` bound to a config, usable as a QuoteSource."""

    config: PricingConfig = DEFAULT_CONFIG

    def quotes(
        self,
        lines: Iterable[CartLine],
        products: ProductIndex,
        destination: ShippingAddress,
    ) -> list[ShippingQuote]:
        return calculate_shipping(lines, products, destination, config=self.config)


# ═══════════════════════════════════════════════════════════════════════════════
# General (method variants over zone rules)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True, init=False)
class ShippingCalculator:
    """
    Prices configured methods for the first zone rule a destination matches.

    Inactive methods and zones are dropped at construction.

    Example:
        calculator = ShippingCalculator(default_methods(), default_zones())
        quotes = calculator.quotes(lines, products, address)
    """

    methods: tuple[ShippingMethod, ...]
    zones: tuple[ZoneRule, ...]
    config: PricingConfig

    def __init__(
        self,
        methods: Sequence[ShippingMethod],
        zones: Sequence[ZoneRule],
        config: PricingConfig = DEFAULT_CONFIG,
    ) -> None:
        object.__setattr__(self, "methods", tuple(m for m in methods if m.is_active))
        object.__setattr__(self, "zones", tuple(z for z in zones if z.is_active))
        object.__setattr__(self, "config", config)

    def quotes(
        self,
        lines: Iterable[CartLine],
        products: ProductIndex,
        destination: ShippingAddress,
    ) -> list[ShippingQuote]:
        """
        Quote every method serving the destination's zone.

        A method that cannot be priced is logged and skipped; a weight limit
        breach propagates as WeightLimitExceeded.
        """
        lines = list(lines)
        shippable = shippable_lines(lines, products)
        if not shippable:
            return [NO_SHIPPING_QUOTE]

        zone = find_zone(self.zones, destination)
        if zone is None:
            logger.warning("No zone rule matches %s", destination)
            return [unknown_destination_quote(self.config)]

        subtotal = cart_subtotal(lines, products)
        quotes: list[ShippingQuote] = []
        for method in self.methods:
            if not method.serves(zone.id):
                continue
            try:
                quotes.append(method_cost(method, shippable, products, subtotal))
            except ArithmeticError:
                logger.warning("Failed to price shipping method %s", method.id, exc_info=True)

        return sort_quotes(quotes)


__all__ = (
    "unknown_destination_quote",
    "calculate_shipping",
    "ZoneShippingCalculator",
    "ShippingCalculator",
)
