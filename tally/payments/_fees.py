"""
Fee schedules: one variant per pricing shape, dispatched by match.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from tally._types import ZERO, round_half_up


@dataclass(frozen=True, slots=True)
class Flat:
    amount: Decimal


@dataclass(frozen=True, slots=True)
class Percentage:
    """`rate` is a percent: Decimal("1.5") means 1.5%."""

    rate: Decimal


@dataclass(frozen=True, slots=True)
class PercentagePlusFlat:
    rate: Decimal
    flat: Decimal


type FeeSchedule = Flat | Percentage | PercentagePlusFlat


def _percent_of(amount: Decimal, rate: Decimal) -> Decimal:
    # Whole rupees, halves up.
    return round_half_up(amount * rate / 100)


def compute_fee(schedule: FeeSchedule, amount: Decimal) -> Decimal:
    match schedule:
        case Flat(amount=flat):
            fee = flat
        case Percentage(rate=rate):
            fee = _percent_of(amount, rate)
        case PercentagePlusFlat(rate=rate, flat=flat):
            fee = _percent_of(amount, rate) + flat
    return max(ZERO, fee)


__all__ = ("Flat", "Percentage", "PercentagePlusFlat", "FeeSchedule", "compute_fee")
