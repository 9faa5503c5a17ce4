"""
Zone types: cities, zone classification and rate cards.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class ShippingZone(Enum):
    """
    Delivery classification of a city.

    Rural destinations get neither express nor cash-on-delivery service.
    """

    METRO = "metro"
    URBAN = "urban"
    RURAL = "rural"


@dataclass(frozen=True, slots=True)
class ZoneRates:
    name: str
    description: str
    base_rate: Decimal
    free_shipping_threshold: Decimal
    estimated_days: int

    def is_free(self, subtotal: Decimal) -> bool:
        """Inclusive: a subtotal equal to the threshold ships free."""
        return subtotal >= self.free_shipping_threshold


@dataclass(frozen=True, slots=True)
class City:
    id: str
    name: str
    province: str
    postal_code_prefix: str
    is_major_city: bool
    zone: ShippingZone
    estimated_delivery_days: int


@dataclass(frozen=True, slots=True)
class ZoneMatch:
    """A destination resolved to a city and its zone's rate card."""

    city: City
    rates: ZoneRates

    @property
    def zone(self) -> ShippingZone:
        return self.city.zone


@dataclass(frozen=True, slots=True)
class ShippingRate:
    zone: str  # zone value, or "unknown"
    rate: Decimal
    is_free: bool
    estimated_days: int


@dataclass(frozen=True, slots=True)
class DeliveryOption:
    name: str
    description: str
    estimated_days: int
    available: bool


__all__ = (
    "ShippingZone",
    "ZoneRates",
    "City",
    "ZoneMatch",
    "ShippingRate",
    "DeliveryOption",
)
