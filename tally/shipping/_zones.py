"""
Zone rules for the general calculator, plus the stock Pakistani setup.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from tally.catalog import ShippingAddress
from tally.shipping._methods import ShippingMethod, ZoneBased


@dataclass(frozen=True, slots=True)
class ZoneRule:
    """
    A named set of destinations.

    A destination matches when its country is listed, then its state if the
    rule lists states, then its postal-code prefix if the rule lists prefixes.
    """

    id: str
    name: str
    countries: tuple[str, ...]
    states: tuple[str, ...] = ()
    postal_codes: tuple[str, ...] = ()
    is_active: bool = True

    def matches(self, destination: ShippingAddress) -> bool:
        if destination.country not in self.countries:
            return False
        if self.states and destination.state not in self.states:
            return False
        if self.postal_codes:
            postal = destination.postal_code
            if not postal or not any(postal.startswith(p) for p in self.postal_codes):
                return False
        return True


def find_zone(zones: Iterable[ZoneRule], destination: ShippingAddress) -> ZoneRule | None:
    """First matching rule in declaration order."""
    return next((zone for zone in zones if zone.matches(destination)), None)


# ═══════════════════════════════════════════════════════════════════════════════
# Pakistan defaults
# ═══════════════════════════════════════════════════════════════════════════════


def default_zones() -> list[ZoneRule]:
    return [
        ZoneRule(
            id="pk-metro",
            name="Pakistan - Metro Cities",
            countries=("PK",),
            states=("Punjab", "Sindh", "Federal Capital Territory"),
            postal_codes=("54", "75", "44", "46", "38"),
        ),
        ZoneRule(
            id="pk-urban",
            name="Pakistan - Urban Areas",
            countries=("PK",),
            states=("Punjab", "Sindh", "Khyber Pakhtunkhwa", "Balochistan"),
        ),
        ZoneRule(
            id="pk-rural",
            name="Pakistan - Rural Areas",
            countries=("PK",),
            states=("Gilgit-Baltistan", "Azad Kashmir"),
            postal_codes=("15", "10"),
        ),
    ]


def default_methods() -> list[ShippingMethod]:
    return [
        ZoneBased(
            id="pk-standard-metro",
            name="Standard Delivery - Metro",
            base_cost=Decimal("150"),
            free_shipping_threshold=Decimal("2500"),
            zones=("pk-metro",),
            carriers=("Pakistan Post", "TCS"),
        ),
        ZoneBased(
            id="pk-standard-urban",
            name="Standard Delivery - Urban",
            base_cost=Decimal("200"),
            free_shipping_threshold=Decimal("3000"),
            zones=("pk-urban",),
            carriers=("Pakistan Post", "Leopards"),
        ),
        ZoneBased(
            id="pk-standard-rural",
            name="Standard Delivery - Rural",
            base_cost=Decimal("300"),
            free_shipping_threshold=Decimal("4000"),
            zones=("pk-rural",),
            carriers=("Pakistan Post",),
        ),
        ZoneBased(
            id="pk-express-metro",
            name="Express Delivery - Metro",
            base_cost=Decimal("250"),
            zones=("pk-metro",),
            carriers=("TCS Express", "Leopards Express"),
        ),
        ZoneBased(
            id="pk-express-urban",
            name="Express Delivery - Urban",
            base_cost=Decimal("350"),
            zones=("pk-urban",),
            carriers=("TCS Express", "Leopards Express"),
        ),
    ]


__all__ = ("ZoneRule", "find_zone", "default_zones", "default_methods")
