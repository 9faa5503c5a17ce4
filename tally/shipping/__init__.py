"""
Shipping: quotes for a cart and a destination.

    from tally import shipping as S

    # Zone-based, over the city registry
    quotes = S.calculate_shipping(lines, products, address, zone_hint="pk-lhr")

    # Configurable method variants
    calculator = S.ShippingCalculator(S.default_methods(), S.default_zones())
    quotes = calculator.quotes(lines, products, address)

Quotes always come back cheapest first.
"""

from tally.shipping._types import (
    ShippingQuote,
    sort_quotes,
    NO_SHIPPING_QUOTE,
    QuoteSource,
    WeightLimitExceeded,
)
from tally.shipping._methods import (
    FixedRate,
    WeightBased,
    ZoneBased,
    CarrierCalculated,
    FreeShipping,
    ShippingMethod,
    estimated_days,
    method_cost,
)
from tally.shipping._zones import (
    ZoneRule,
    find_zone,
    default_zones,
    default_methods,
)
from tally.shipping._calculator import (
    unknown_destination_quote,
    calculate_shipping,
    ZoneShippingCalculator,
    ShippingCalculator,
)

__all__ = (
    # Types
    "ShippingQuote",
    "sort_quotes",
    "NO_SHIPPING_QUOTE",
    "QuoteSource",
    "WeightLimitExceeded",
    # Methods
    "FixedRate",
    "WeightBased",
    "ZoneBased",
    "CarrierCalculated",
    "FreeShipping",
    "ShippingMethod",
    "estimated_days",
    "method_cost",
    # Zones
    "ZoneRule",
    "find_zone",
    "default_zones",
    "default_methods",
    # Calculators
    "unknown_destination_quote",
    "calculate_shipping",
    "ZoneShippingCalculator",
    "ShippingCalculator",
)
