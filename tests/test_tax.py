from decimal import Decimal

import pytest

from tally.catalog import CartLine, Product, ShippingAddress
from tally.tax import calculate_tax, tax_rate


@pytest.mark.parametrize(
    ("country", "rate"),
    [("PK", "17"), ("US", "8.5"), ("gb", "20"), ("DE", "19"), ("BR", "0")],
)
def test_rate_table(country, rate):
    assert tax_rate(country) == Decimal(rate)


def test_tax_on_live_subtotal(products, lahore):
    # lamp is on sale at 2000
    lines = [CartLine("vase", 1), CartLine("lamp", 1, unit_price=Decimal("2500"))]
    assert calculate_tax(lines, products, lahore) == Decimal("510.00")


def test_tax_rounds_to_cents(products):
    lines = [CartLine("pattern", 1)]
    assert calculate_tax(lines, products, ShippingAddress(country="US")) == Decimal("25.50")


def test_unknown_country_pays_nothing(products):
    assert calculate_tax([CartLine("vase", 3)], products, ShippingAddress(country="ZZ")) == 0


def test_custom_rates():
    rates = {"PK": Decimal("5")}
    products = {"p": Product(id="p", name="P", price=Decimal("199.99"))}
    tax = calculate_tax([CartLine("p", 1)], products, ShippingAddress(country="PK"), rates)
    assert tax == Decimal("10.00")
