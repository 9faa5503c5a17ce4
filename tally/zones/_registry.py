"""
Registry lookups: read-only queries over the city table.

Unknown ids and postal codes resolve to None; callers decide the fallback.
"""

from __future__ import annotations

from decimal import Decimal

from tally._types import ZERO, money, round_half_up
from tally.zones._cities import CITIES, CITIES_BY_ID, CITIES_BY_PREFIX, ZONE_RATES
from tally.zones._types import (
    City,
    DeliveryOption,
    ShippingRate,
    ShippingZone,
    ZoneMatch,
)

POSTAL_PREFIX_LENGTH = 2

UNKNOWN_ZONE_RATE = ShippingRate(
    zone="unknown",
    rate=Decimal("500"),
    is_free=False,
    estimated_days=7,
)


# ═══════════════════════════════════════════════════════════════════════════════
# City lookups
# ═══════════════════════════════════════════════════════════════════════════════


def city_by_id(city_id: str) -> City | None:
    return CITIES_BY_ID.get(city_id)


def city_by_postal_code(postal_code: str) -> City | None:
    """Match the first two characters of a postal code to a city prefix."""
    prefix = postal_code.strip()[:POSTAL_PREFIX_LENGTH]
    if len(prefix) < POSTAL_PREFIX_LENGTH:
        return None
    return CITIES_BY_PREFIX.get(prefix)


def cities_by_province(province: str) -> list[City]:
    return [city for city in CITIES if city.province == province]


def major_cities() -> list[City]:
    return [city for city in CITIES if city.is_major_city]


def resolve_zone(
    location_id: str | None = None,
    postal_code: str | None = None,
) -> ZoneMatch | None:
    """
    Resolve a destination to its zone.

    The location id wins when both are given and it is known; otherwise the
    postal prefix is tried. Returns None when neither resolves.
    """
    city = city_by_id(location_id) if location_id else None
    if city is None and postal_code:
        city = city_by_postal_code(postal_code)
    if city is None:
        return None
    return ZoneMatch(city=city, rates=ZONE_RATES[city.zone])


# ═══════════════════════════════════════════════════════════════════════════════
# Rates & options
# ═══════════════════════════════════════════════════════════════════════════════


def shipping_rate(city_id: str, order_value: int | str | Decimal) -> ShippingRate:
    """Standard rate for a city, zero once the zone's free threshold is met."""
    resolved = resolve_zone(location_id=city_id)
    if resolved is None:
        return UNKNOWN_ZONE_RATE

    is_free = resolved.rates.is_free(money(order_value))
    return ShippingRate(
        zone=resolved.zone.value,
        rate=ZERO if is_free else resolved.rates.base_rate,
        is_free=is_free,
        estimated_days=resolved.city.estimated_delivery_days,
    )


def delivery_options(city_id: str) -> tuple[City | None, list[DeliveryOption]]:
    city = city_by_id(city_id)
    days = city.estimated_delivery_days if city else UNKNOWN_ZONE_RATE.estimated_days
    serviced = city is None or city.zone is not ShippingZone.RURAL

    options = [
        DeliveryOption(
            name="Standard Delivery",
            description="Regular postal service delivery",
            estimated_days=days,
            available=True,
        ),
        DeliveryOption(
            name="Express Delivery",
            description="Faster courier service",
            estimated_days=max(1, days - 1),
            available=serviced,
        ),
        DeliveryOption(
            name="Cash on Delivery",
            description="Pay when you receive your order",
            estimated_days=days,
            available=serviced,
        ),
        DeliveryOption(
            name="Same Day Delivery",
            description="Delivery within the same day",
            estimated_days=0,
            available=(
                city is not None
                and city.zone is ShippingZone.METRO
                and city.is_major_city
            ),
        ),
    ]
    return city, options


# ═══════════════════════════════════════════════════════════════════════════════
# Search & formatting
# ═══════════════════════════════════════════════════════════════════════════════


def search_cities(query: str, limit: int = 10) -> list[City]:
    """
    Autocomplete over city names and provinces.

    Major cities first, then names starting with the query, then A-Z.
    """
    term = query.strip().lower()
    hits = [
        city
        for city in CITIES
        if term in city.name.lower() or term in city.province.lower()
    ]
    hits.sort(
        key=lambda c: (
            not c.is_major_city,
            not c.name.lower().startswith(term),
            c.name.lower(),
        )
    )
    return hits[:limit]


def format_currency(amount: int | str | Decimal) -> str:
    """Whole rupees with thousands separators: `Rs. 12,500`."""
    return f"Rs. {round_half_up(money(amount)):,}"


__all__ = (
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
)
