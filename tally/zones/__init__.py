"""
Zones: static location registry for shipping.

    from tally import zones as Z

    match = Z.resolve_zone(location_id="pk-lhr")
    match = Z.resolve_zone(postal_code="54000")
    if match is None:
        ...  # unknown destination, caller picks the fallback

    Z.shipping_rate("pk-glt", 4200)   # ShippingRate(zone="rural", rate=0, ...)
    Z.search_cities("pes")
    Z.estimated_delivery_date("pk-lhr")   # today + handling + transit
"""

from tally.zones._types import (
    ShippingZone,
    ZoneRates,
    City,
    ZoneMatch,
    ShippingRate,
    DeliveryOption,
)
from tally.zones._cities import (
    ZONE_RATES,
    CITIES,
    CITIES_BY_ID,
    LOCAL_RATES,
    ORIGIN_CITY_ID,
    PROVINCES,
)
from tally.zones._registry import (
    UNKNOWN_ZONE_RATE,
    city_by_id,
    city_by_postal_code,
    cities_by_province,
    major_cities,
    resolve_zone,
    shipping_rate,
    delivery_options,
    search_cities,
    format_currency,
)
from tally.zones._origin import (
    LOCAL_ZONE,
    ShippingOrigin,
    DEFAULT_ORIGIN,
    origin_shipping_rate,
    is_same_day_available,
    estimated_delivery_date,
)

__all__ = (
    # Types
    "ShippingZone",
    "ZoneRates",
    "City",
    "ZoneMatch",
    "ShippingRate",
    "DeliveryOption",
    # Data
    "ZONE_RATES",
    "CITIES",
    "CITIES_BY_ID",
    "LOCAL_RATES",
    "ORIGIN_CITY_ID",
    "PROVINCES",
    # Lookups
    "UNKNOWN_ZONE_RATE",
    "city_by_id",
    "city_by_postal_code",
    "cities_by_province",
    "major_cities",
    "resolve_zone",
    "shipping_rate",
    "delivery_options",
    "search_cities",
    "format_currency",
    # Origin
    "LOCAL_ZONE",
    "ShippingOrigin",
    "DEFAULT_ORIGIN",
    "origin_shipping_rate",
    "is_same_day_available",
    "estimated_delivery_date",
)
