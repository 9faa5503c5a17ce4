from decimal import Decimal

import pytest
from pydantic import ValidationError

from tally import cart as C
from tally import shipping as S
from tally.catalog import CartLine, Product, ShippingAddress


@pytest.fixture
def calculator() -> S.ZoneShippingCalculator:
    return S.ZoneShippingCalculator()


# ═══════════════════════════════════════════════════════════════════════════════
# Summary
# ═══════════════════════════════════════════════════════════════════════════════


def test_summary_picks_cheapest_quote(products, multan, calculator):
    summary = C.calculate_cart_summary([CartLine("vase", 1)], products, multan, calculator=calculator)

    assert summary.subtotal == Decimal("1000")
    assert summary.shipping_amount == Decimal("200")
    assert summary.selected_shipping_method == "standard-urban"
    assert summary.tax_amount == Decimal("170.00")
    assert summary.total_amount == Decimal("1370.00")
    assert [q.method_id for q in summary.available_shipping_methods] == [
        "standard-urban",
        "cod-urban",
        "express-urban",
    ]


def test_summary_honours_selected_method(products, multan, calculator):
    summary = C.calculate_cart_summary(
        [CartLine("vase", 1)], products, multan, "express-urban", calculator
    )
    assert summary.shipping_amount == Decimal("300.00")
    assert summary.selected_shipping_method == "express-urban"
    assert summary.total_amount == Decimal("1470.00")


def test_unknown_selected_method_falls_back_to_cheapest(products, multan, calculator):
    summary = C.calculate_cart_summary(
        [CartLine("vase", 1)], products, multan, "teleport", calculator
    )
    assert summary.selected_shipping_method == "standard-urban"
    assert summary.shipping_amount == Decimal("200")


def test_summary_uses_live_prices_and_counts(products, lahore, calculator):
    lines = [CartLine("vase", 2), CartLine("lamp", 1, unit_price=Decimal("2500"))]
    summary = C.calculate_cart_summary(lines, products, lahore, calculator=calculator)

    assert summary.subtotal == Decimal("4000")
    assert summary.shipping_amount == 0
    assert summary.tax_amount == Decimal("680.00")
    assert summary.total_amount == Decimal("4680.00")
    assert summary.item_count == 3
    assert summary.total_weight == Decimal("8")


def test_without_address_or_calculator_only_subtotal(products, lahore):
    lines = [CartLine("vase", 1)]
    for summary in (
        C.calculate_cart_summary(lines, products),
        C.calculate_cart_summary(lines, products, lahore),
    ):
        assert summary.subtotal == Decimal("1000")
        assert summary.shipping_amount == 0
        assert summary.tax_amount == 0
        assert summary.total_amount == Decimal("1000")
        assert summary.available_shipping_methods == ()
        assert summary.selected_shipping_method is None


class BrokenCalculator:
    def quotes(self, lines, products, address):
        raise RuntimeError("carrier API down")


def test_failing_calculator_counts_as_free_shipping(products, multan):
    summary = C.calculate_cart_summary(
        [CartLine("vase", 1)], products, multan, calculator=BrokenCalculator()
    )
    assert summary.shipping_amount == 0
    assert summary.tax_amount == Decimal("170.00")
    assert summary.available_shipping_methods == ()


def test_weight_limit_breach_propagates(products, lahore):
    calculator = S.ShippingCalculator(
        [S.WeightBased(id="light", name="Light", max_weight=Decimal("5"))],
        [S.ZoneRule("pk", "Pakistan", ("PK",))],
    )
    with pytest.raises(S.WeightLimitExceeded):
        C.calculate_cart_summary([CartLine("vase", 3)], products, lahore, calculator=calculator)


# ═══════════════════════════════════════════════════════════════════════════════
# Checks
# ═══════════════════════════════════════════════════════════════════════════════


def test_validate_reports_every_problem(products):
    catalog = dict(products)
    catalog["rug"] = Product(id="rug", name="Old Rug", price=Decimal("900"), is_active=False)

    errors = C.validate_cart_items(
        [
            CartLine("ghost", 1),
            CartLine("rug", 1),
            CartLine("lamp", 6),
            CartLine("pattern", 100),
            CartLine("vase", 10),
        ],
        catalog,
    )

    assert errors == [
        "Product ghost is no longer available",
        "Product Old Rug is no longer available",
        "Product Old Rug is out of stock",
        "Only 5 units of Brass Lamp available (requested 6)",
    ]


def test_price_drift_is_not_an_error(products):
    assert C.validate_cart_items([CartLine("lamp", 1, unit_price=Decimal("2500"))], products) == []


def test_update_prices_to_live(products):
    updated = C.update_cart_item_prices(
        [CartLine("lamp", 1, unit_price=Decimal("2500")), CartLine("ghost", 2, Decimal("5"))],
        products,
    )
    assert updated == [CartLine("lamp", 1, Decimal("2000")), CartLine("ghost", 2, Decimal("5"))]


def test_shipping_requirements(products):
    mixed = C.shipping_requirements([CartLine("vase", 1), CartLine("pattern", 1)], products)
    assert mixed.requires_shipping
    assert mixed.has_digital_items
    assert mixed.has_physical_items
    assert not mixed.has_fragile_items
    assert mixed.total_weight == Decimal("2")

    digital = C.shipping_requirements([CartLine("pattern", 3)], products)
    assert not digital.requires_shipping
    assert digital.total_weight == 0

    assert C.shipping_requirements([CartLine("lamp", 1)], products).has_fragile_items


def test_savings(products):
    assert C.calculate_savings([CartLine("lamp", 2), CartLine("vase", 4)], products) == Decimal("1000")


def test_free_shipping_eligibility(products):
    small = C.calculate_cart_summary([CartLine("vase", 1)], products)
    assert C.free_shipping_eligibility(small) == C.FreeShippingEligibility(False, Decimal("1500"))

    large = C.calculate_cart_summary([CartLine("vase", 3)], products)
    assert C.free_shipping_eligibility(large).qualifies


# ═══════════════════════════════════════════════════════════════════════════════
# Cart aggregate
# ═══════════════════════════════════════════════════════════════════════════════


def test_add_merges_lines():
    cart = C.Cart().add("vase", 1, Decimal("1000")).add("lamp").add("vase", 2)
    assert cart.lines == (CartLine("vase", 3, Decimal("1000")), CartLine("lamp", 1))


def test_set_quantity_and_remove():
    cart = C.Cart().add("vase").add("lamp")
    assert cart.set_quantity("vase", 4).lines[0].quantity == 4
    assert cart.set_quantity("vase", 0).lines == (CartLine("lamp", 1),)
    assert cart.remove("lamp").lines == (CartLine("vase", 1),)
    assert cart.clear().is_empty


def test_snapshot_round_trip(lahore):
    cart = (
        C.Cart()
        .add("vase", 2, Decimal("1000.50"))
        .add("pattern")
        .with_address(lahore)
        .with_shipping_method("express-metro")
    )
    assert C.load_cart(C.dump_cart(cart)) == cart


def test_malformed_snapshot_is_rejected():
    with pytest.raises(ValidationError):
        C.load_cart('{"lines": [{"product_id": "vase", "quantity": 0}]}')

    with pytest.raises(ValidationError):
        C.load_cart('{"address": {"city": "Lahore"}}')
