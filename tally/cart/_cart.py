"""
Cart aggregate: owned by the caller, passed by value into every calculation.

Persistence is an explicit save/load through CartSnapshot; nothing is
written as a side effect of pricing.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal

from pydantic import BaseModel, Field

from tally.catalog import CartLine, ShippingAddress


@dataclass(frozen=True, slots=True)
class Cart:
    """
    Example:
        cart = (
            Cart()
            .add("vase-01", 2, unit_price=Decimal("1800"))
            .with_address(ShippingAddress(country="PK", city_id="pk-lhr"))
        )

    Note: Immutable: each method returns a new Cart.
    """

    lines: tuple[CartLine, ...] = ()
    address: ShippingAddress | None = None
    shipping_method_id: str | None = None

    def add(self, product_id: str, quantity: int = 1, unit_price: Decimal | None = None) -> Cart:
        """Add to an existing line or append a new one."""
        for i, line in enumerate(self.lines):
            if line.product_id == product_id:
                merged = replace(
                    line,
                    quantity=line.quantity + quantity,
                    unit_price=unit_price if unit_price is not None else line.unit_price,
                )
                return replace(self, lines=self.lines[:i] + (merged,) + self.lines[i + 1:])
        return replace(self, lines=self.lines + (CartLine(product_id, quantity, unit_price),))

    def set_quantity(self, product_id: str, quantity: int) -> Cart:
        """A quantity below 1 removes the line."""
        if quantity < 1:
            return self.remove(product_id)
        return replace(
            self,
            lines=tuple(
                replace(line, quantity=quantity) if line.product_id == product_id else line
                for line in self.lines
            ),
        )

    def remove(self, product_id: str) -> Cart:
        return replace(self, lines=tuple(line for line in self.lines if line.product_id != product_id))

    def clear(self) -> Cart:
        return replace(self, lines=())

    def with_address(self, address: ShippingAddress | None) -> Cart:
        return replace(self, address=address)

    def with_shipping_method(self, method_id: str | None) -> Cart:
        return replace(self, shipping_method_id=method_id)

    @property
    def is_empty(self) -> bool:
        return not self.lines


# ═══════════════════════════════════════════════════════════════════════════════
# Snapshot
# ═══════════════════════════════════════════════════════════════════════════════


class CartLineModel(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    unit_price: Decimal | None = None


class AddressModel(BaseModel):
    country: str
    address_line_1: str = ""
    state: str | None = None
    postal_code: str | None = None
    city: str | None = None
    address_line_2: str | None = None
    city_id: str | None = None


class CartSnapshot(BaseModel):
    lines: list[CartLineModel] = []
    address: AddressModel | None = None
    shipping_method_id: str | None = None

    @classmethod
    def from_domain(cls, cart: Cart) -> "CartSnapshot":
        address = cart.address
        return cls(
            lines=[
                CartLineModel(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for line in cart.lines
            ],
            address=None if address is None else AddressModel(
                country=address.country,
                address_line_1=address.address_line_1,
                state=address.state,
                postal_code=address.postal_code,
                city=address.city,
                address_line_2=address.address_line_2,
                city_id=address.city_id,
            ),
            shipping_method_id=cart.shipping_method_id,
        )

    def to_domain(self) -> Cart:
        return Cart(
            lines=tuple(
                CartLine(line.product_id, line.quantity, line.unit_price) for line in self.lines
            ),
            address=None if self.address is None else ShippingAddress(**self.address.model_dump()),
            shipping_method_id=self.shipping_method_id,
        )


def dump_cart(cart: Cart) -> str:
    return CartSnapshot.from_domain(cart).model_dump_json()


def load_cart(data: str | bytes) -> Cart:
    """Raises pydantic.ValidationError on a malformed snapshot."""
    return CartSnapshot.model_validate_json(data).to_domain()


__all__ = (
    "Cart",
    "CartLineModel",
    "AddressModel",
    "CartSnapshot",
    "dump_cart",
    "load_cart",
)
