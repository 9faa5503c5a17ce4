"""
Payment method catalog: fee and availability are pure functions of the amount.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from tally._types import money
from tally.config import DEFAULT_CONFIG, PricingConfig
from tally.payments._fees import FeeSchedule, Flat, Percentage, PercentagePlusFlat, compute_fee
from tally.payments._types import PaymentMethod, PaymentProvider


@dataclass(frozen=True, slots=True)
class MethodSpec:
    """Static description of a method; `fee` and `ceiling` are resolved per call."""

    id: str
    name: str
    provider: PaymentProvider
    description: str
    processing_time: str
    fee: FeeSchedule | None = None
    capped: bool = False


CARD_GATEWAY = "card-gateway"
JAZZCASH = "jazzcash"
EASYPAISA = "easypaisa"
COD = "cod"
BANK_TRANSFER = "bank-transfer"

METHOD_SPECS: tuple[MethodSpec, ...] = (
    MethodSpec(
        id=CARD_GATEWAY,
        name="Credit/Debit Card",
        provider=PaymentProvider.STRIPE,
        description="Visa, MasterCard, American Express",
        processing_time="Instant",
        fee=PercentagePlusFlat(rate=Decimal("2.9"), flat=Decimal("30")),
    ),
    MethodSpec(
        id=JAZZCASH,
        name="JazzCash",
        provider=PaymentProvider.JAZZCASH,
        description="Pay using JazzCash mobile wallet",
        processing_time="Instant",
        fee=Percentage(rate=Decimal("1.5")),
    ),
    MethodSpec(
        id=EASYPAISA,
        name="EasyPaisa",
        provider=PaymentProvider.EASYPAISA,
        description="Pay using EasyPaisa mobile wallet",
        processing_time="Instant",
        fee=Percentage(rate=Decimal("2.0")),
    ),
    # COD fee and ceiling come from PricingConfig.
    MethodSpec(
        id=COD,
        name="Cash on Delivery",
        provider=PaymentProvider.COD,
        description="Pay when you receive your order",
        processing_time="On delivery",
        capped=True,
    ),
    MethodSpec(
        id=BANK_TRANSFER,
        name="Bank Transfer",
        provider=PaymentProvider.BANK_TRANSFER,
        description="Direct bank account transfer",
        processing_time="1-2 business days",
        fee=Flat(Decimal("0")),
    ),
)

SPECS_BY_ID = {spec.id: spec for spec in METHOD_SPECS}


def _resolve(spec: MethodSpec, amount: Decimal, config: PricingConfig) -> PaymentMethod:
    schedule = spec.fee if spec.fee is not None else Flat(config.cod_fee)
    ceiling = config.cod_max_amount if spec.capped else None
    return PaymentMethod(
        id=spec.id,
        name=spec.name,
        provider=spec.provider,
        description=spec.description,
        fee=compute_fee(schedule, amount),
        available=ceiling is None or amount <= ceiling,
        processing_time=spec.processing_time,
        max_amount=ceiling,
    )


def get_available_payment_methods(
    amount: int | str | Decimal,
    config: PricingConfig = DEFAULT_CONFIG,
) -> list[PaymentMethod]:
    """
    Every method in catalog order, priced for `amount`.

    Methods over their ceiling are still listed with `available=False`
    so the caller can show why they are disabled.
    """
    value = money(amount)
    return [_resolve(spec, value, config) for spec in METHOD_SPECS]


def get_payment_method_by_id(
    method_id: str,
    amount: int | str | Decimal,
    config: PricingConfig = DEFAULT_CONFIG,
) -> PaymentMethod | None:
    spec = SPECS_BY_ID.get(method_id)
    if spec is None:
        return None
    return _resolve(spec, money(amount), config)


def calculate_total_with_fee(
    amount: int | str | Decimal,
    method_id: str,
    config: PricingConfig = DEFAULT_CONFIG,
) -> Decimal:
    """Amount plus the method's fee; unknown methods add nothing."""
    value = money(amount)
    method = get_payment_method_by_id(method_id, value, config)
    return value + method.fee if method is not None else value


__all__ = (
    "MethodSpec",
    "CARD_GATEWAY",
    "JAZZCASH",
    "EASYPAISA",
    "COD",
    "BANK_TRANSFER",
    "METHOD_SPECS",
    "get_available_payment_methods",
    "get_payment_method_by_id",
    "calculate_total_with_fee",
)
