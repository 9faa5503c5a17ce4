"""
Catalog: products, cart lines and addresses shared by every calculator.

Products are looked up by id in a mapping; a cart line only carries the
snapshot price taken when it was added, never the price it is charged at.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal

from tally._types import ZERO

type ProductIndex = Mapping[str, Product]


# ═══════════════════════════════════════════════════════════════════════════════
# Product
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Product:
    id: str
    name: str
    price: Decimal
    sale_price: Decimal | None = None
    weight: Decimal | None = None
    shipping_weight: Decimal | None = None  # overrides weight when set
    requires_shipping: bool = True
    is_fragile: bool = False
    is_hazardous: bool = False
    stock_quantity: int = 0
    track_inventory: bool = True
    is_active: bool = True

    @property
    def live_price(self) -> Decimal:
        """Price charged right now: the sale price when one is running."""
        return self.sale_price if self.sale_price is not None else self.price

    @property
    def is_digital(self) -> bool:
        return not self.requires_shipping

    @property
    def unit_weight(self) -> Decimal:
        if self.shipping_weight is not None:
            return self.shipping_weight
        if self.weight is not None:
            return self.weight
        return ZERO


# ═══════════════════════════════════════════════════════════════════════════════
# Cart line & address
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartLine:
    product_id: str
    quantity: int
    unit_price: Decimal | None = None  # snapshot at add-to-cart time

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {self.quantity}")


@dataclass(frozen=True, slots=True)
class ShippingAddress:
    country: str
    address_line_1: str = ""
    state: str | None = None
    postal_code: str | None = None
    city: str | None = None
    address_line_2: str | None = None
    city_id: str | None = None  # registry id, e.g. "pk-lhr"


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def index_products(products: Iterable[Product] | ProductIndex) -> ProductIndex:
    """Accept either a mapping or a plain iterable of products."""
    if isinstance(products, Mapping):
        return products
    return {product.id: product for product in products}


def line_total(line: CartLine, products: ProductIndex) -> Decimal:
    """Live price times quantity; a line whose product is gone counts as 0."""
    product = products.get(line.product_id)
    if product is None:
        return ZERO
    return product.live_price * line.quantity


def cart_subtotal(lines: Iterable[CartLine], products: ProductIndex) -> Decimal:
    return sum((line_total(line, products) for line in lines), ZERO)


def shippable_lines(lines: Iterable[CartLine], products: ProductIndex) -> list[CartLine]:
    """
    Lines that need a parcel.

    A line whose product is unknown is treated as shippable so it is never
    shipped for free by accident.
    """
    shippable: list[CartLine] = []
    for line in lines:
        product = products.get(line.product_id)
        if product is None or product.requires_shipping:
            shippable.append(line)
    return shippable


def total_weight(
    lines: Iterable[CartLine],
    products: ProductIndex,
    default: Decimal = ZERO,
) -> Decimal:
    """
    Sum of unit weight times quantity over shipping lines.

    `default` stands in for a product that declares no weight at all.
    """
    weight = ZERO
    for line in lines:
        product = products.get(line.product_id)
        if product is None or not product.requires_shipping:
            continue
        if product.shipping_weight is None and product.weight is None:
            unit = default
        else:
            unit = product.unit_weight
        weight += unit * line.quantity
    return weight


def total_quantity(lines: Iterable[CartLine]) -> int:
    return sum(line.quantity for line in lines)


__all__ = (
    "ProductIndex",
    "Product",
    "CartLine",
    "ShippingAddress",
    "index_products",
    "line_total",
    "cart_subtotal",
    "shippable_lines",
    "total_weight",
    "total_quantity",
)
