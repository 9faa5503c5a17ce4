"""
Tax: flat per-country rate on the cart subtotal.

No compounding and no per-category rates: `subtotal * rate / 100`,
rounded to the cent.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from types import MappingProxyType

from tally._types import ZERO, to_cents
from tally.catalog import CartLine, ProductIndex, ShippingAddress, cart_subtotal

COUNTRY_TAX_RATES: Mapping[str, Decimal] = MappingProxyType({
    "US": Decimal("8.5"),
    "CA": Decimal("12"),
    "GB": Decimal("20"),
    "DE": Decimal("19"),
    "FR": Decimal("20"),
    "AU": Decimal("10"),
    "PK": Decimal("17"),
})


def tax_rate(country: str, rates: Mapping[str, Decimal] = COUNTRY_TAX_RATES) -> Decimal:
    """Percentage for a country code; 0 for anything not in the table."""
    return rates.get(country.upper(), ZERO)


def calculate_tax(
    lines: Iterable[CartLine],
    products: ProductIndex,
    destination: ShippingAddress,
    rates: Mapping[str, Decimal] = COUNTRY_TAX_RATES,
) -> Decimal:
    subtotal = cart_subtotal(lines, products)
    return to_cents(subtotal * tax_rate(destination.country, rates) / 100)


__all__ = ("COUNTRY_TAX_RATES", "tax_rate", "calculate_tax")
