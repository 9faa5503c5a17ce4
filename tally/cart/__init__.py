"""
Cart: aggregation and validation against live products.

    from tally import cart as C

    summary = C.calculate_cart_summary(
        cart.lines, products, cart.address,
        method_id=cart.shipping_method_id,
        calculator=ZoneShippingCalculator(),
    )
    problems = C.validate_cart_items(cart.lines, products)

    saved = C.dump_cart(cart)          # explicit persistence
    cart = C.load_cart(saved)
"""

from tally.cart._summary import (
    CartSummary,
    calculate_cart_summary,
)
from tally.cart._checks import (
    FREE_SHIPPING_THRESHOLD,
    validate_cart_items,
    update_cart_item_prices,
    ShippingRequirements,
    shipping_requirements,
    calculate_savings,
    FreeShippingEligibility,
    free_shipping_eligibility,
)
from tally.cart._cart import (
    Cart,
    CartLineModel,
    AddressModel,
    CartSnapshot,
    dump_cart,
    load_cart,
)

__all__ = (
    # Summary
    "CartSummary",
    "calculate_cart_summary",
    # Checks
    "FREE_SHIPPING_THRESHOLD",
    "validate_cart_items",
    "update_cart_item_prices",
    "ShippingRequirements",
    "shipping_requirements",
    "calculate_savings",
    "FreeShippingEligibility",
    "free_shipping_eligibility",
    # Aggregate
    "Cart",
    "CartLineModel",
    "AddressModel",
    "CartSnapshot",
    "dump_cart",
    "load_cart",
)
