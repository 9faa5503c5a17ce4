"""
tally: checkout pricing, shipping zones, payments and order lifecycle.

    from tally import zones as Z      # City registry and zone rates
    from tally import shipping as S   # Shipping quotes
    from tally import payments as P   # Payment methods, fees, processing
    from tally import orders as O     # Order status state machine
    from tally import cart as C       # Cart summary and checks
    from tally import checkout as CO  # Checkout graph
"""

from tally import graph
from tally import config
from tally import catalog
from tally import zones
from tally import shipping
from tally import tax
from tally import idempotency
from tally import payments
from tally import orders
from tally import cart
from tally import storage
from tally import checkout
from tally.config import PricingConfig, DEFAULT_CONFIG
from tally._types import (
    Result,
    Ok,
    Error,
    LazyCoroResult,
    Money,
    money,
)

__version__ = "0.1.0"

__all__ = (
    "graph",
    "config",
    "catalog",
    "zones",
    "shipping",
    "tax",
    "idempotency",
    "payments",
    "orders",
    "cart",
    "storage",
    "checkout",
    "PricingConfig",
    "DEFAULT_CONFIG",
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    "Money",
    "money",
)
