from decimal import Decimal

import pytest

from tally.catalog import Product, ShippingAddress


@pytest.fixture
def products() -> dict[str, Product]:
    items = [
        Product(
            id="vase",
            name="Ceramic Vase",
            price=Decimal("1000"),
            weight=Decimal("2"),
            stock_quantity=10,
        ),
        Product(
            id="lamp",
            name="Brass Lamp",
            price=Decimal("2500"),
            sale_price=Decimal("2000"),
            weight=Decimal("3"),
            shipping_weight=Decimal("4"),
            is_fragile=True,
            stock_quantity=5,
        ),
        Product(
            id="pattern",
            name="Embroidery Pattern (PDF)",
            price=Decimal("300"),
            requires_shipping=False,
            track_inventory=False,
        ),
    ]
    return {product.id: product for product in items}


@pytest.fixture
def lahore() -> ShippingAddress:
    return ShippingAddress(country="PK", city="Lahore", city_id="pk-lhr", postal_code="54000")


@pytest.fixture
def multan() -> ShippingAddress:
    return ShippingAddress(country="PK", city="Multan", city_id="pk-mul", postal_code="60000")


@pytest.fixture
def gilgit() -> ShippingAddress:
    return ShippingAddress(country="PK", city="Gilgit", city_id="pk-glt", postal_code="15100")



@pytest.fixture
def muzaffargarh() -> ShippingAddress:
    return ShippingAddress(country="PK", city="Muzaffargarh", city_id="pk-mzg", postal_code="34200")
