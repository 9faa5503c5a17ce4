"""
Core types for tally.

Re-exports from kungfu + money helpers shared by every component.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

Money = Decimal
"""Amount in major currency units (rupees)."""

ZERO = Decimal("0")
CENT = Decimal("0.01")
UNIT = Decimal("1")


def money(value: int | float | str | Decimal) -> Decimal:
    """
    Coerce to Decimal.

    Floats go through `str()` so `0.1` becomes `Decimal("0.1")`, not its
    binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_half_up(value: Decimal, step: Decimal = UNIT) -> Decimal:
    """Round to `step`, halves go up."""
    return value.quantize(step, rounding=ROUND_HALF_UP)


def to_cents(value: Decimal) -> Decimal:
    return round_half_up(value, CENT)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Money
    "Money",
    "ZERO",
    "CENT",
    "UNIT",
    "money",
    "round_half_up",
    "to_cents",
)
