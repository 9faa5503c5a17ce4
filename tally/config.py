"""
Pricing configuration: market-specific constants as an explicit input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import timedelta
from decimal import Decimal

from tally._types import money
from tally.zones import DEFAULT_ORIGIN, ShippingOrigin


# ═══════════════════════════════════════════════════════════════════════════════
# PricingConfig
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PricingConfig:
    """
    Knobs for one market.

    Fluent builder pattern: chain methods to configure.

    Example:
        config = (
            PricingConfig()
            .with_cod(max_amount=75_000, fee=120)
            .with_payment_timeout(seconds=5)
        )

    Note: Immutable: each method returns a new config.
    """

    currency: str = "PKR"
    phone_pattern: str = r"^\+92[0-9]{10}$"
    cod_max_amount: Decimal = Decimal("50000")
    cod_fee: Decimal = Decimal("100")
    cod_shipping_surcharge: Decimal = Decimal("50")
    express_multiplier: Decimal = Decimal("1.5")
    unknown_destination_cost: Decimal = Decimal("500")
    unknown_destination_days: int = 7
    payment_timeout: timedelta = timedelta(seconds=10)
    attempt_ttl: timedelta | None = timedelta(hours=24)
    reject_concurrent_payments: bool = False
    record_failed_payments: bool = False
    origin: ShippingOrigin = DEFAULT_ORIGIN

    @property
    def phone_regex(self) -> re.Pattern[str]:
        return re.compile(self.phone_pattern)

    def with_currency(self, currency: str, *, phone_pattern: str | None = None) -> PricingConfig:
        """
        Switch the single supported currency.

        Example:
            .with_currency("PKR", phone_pattern=r"^\\+92[0-9]{10}$")
        """
        return replace(
            self,
            currency=currency,
            phone_pattern=phone_pattern if phone_pattern is not None else self.phone_pattern,
        )

    def with_cod(
        self,
        *,
        max_amount: int | str | Decimal | None = None,
        fee: int | str | Decimal | None = None,
        shipping_surcharge: int | str | Decimal | None = None,
    ) -> PricingConfig:
        """
        Cash-on-delivery ceiling, payment fee and courier surcharge.

        Example:
            .with_cod(max_amount=50_000, fee=100, shipping_surcharge=50)
        """
        return replace(
            self,
            cod_max_amount=self.cod_max_amount if max_amount is None else money(max_amount),
            cod_fee=self.cod_fee if fee is None else money(fee),
            cod_shipping_surcharge=(
                self.cod_shipping_surcharge
                if shipping_surcharge is None
                else money(shipping_surcharge)
            ),
        )

    def with_origin(self, origin: ShippingOrigin) -> PricingConfig:
        """
        Where orders ship from: local rates, same-day cities, handling days.

        Example:
            .with_origin(ShippingOrigin(city_id="pk-mul", same_day_cities=frozenset({"pk-mul"})))
        """
        return replace(self, origin=origin)

    def with_express_multiplier(self, multiplier: int | str | Decimal) -> PricingConfig:
        return replace(self, express_multiplier=money(multiplier))

    def with_unknown_destination(
        self,
        *,
        cost: int | str | Decimal,
        days: int | None = None,
    ) -> PricingConfig:
        """
        Quote used when the address matches no known city.

        Keep it high: an unknown destination must never be undercharged.
        """
        return replace(
            self,
            unknown_destination_cost=money(cost),
            unknown_destination_days=self.unknown_destination_days if days is None else days,
        )

    def with_payment_timeout(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> PricingConfig:
        """
        Upper bound for one gateway submission.

        Example:
            .with_payment_timeout(seconds=5)
        """
        if delta is not None:
            return replace(self, payment_timeout=delta)
        if seconds is not None:
            return replace(self, payment_timeout=timedelta(seconds=seconds))
        return self

    def with_attempt_ttl(
        self,
        *,
        hours: float | None = None,
        delta: timedelta | None = None,
    ) -> PricingConfig:
        """
        How long a recorded payment attempt blocks resubmission.

        `None` on both keeps attempts forever; zero keeps them not at all.
        """
        if delta is not None:
            ttl: timedelta | None = delta
        elif hours is not None:
            ttl = timedelta(hours=hours)
        else:
            ttl = None
        return replace(self, attempt_ttl=ttl)

    def with_duplicate_payments(
        self,
        *,
        reject_concurrent: bool | None = None,
        record_failures: bool | None = None,
    ) -> PricingConfig:
        """
        How a resubmitted payment for the same order is treated.

        reject_concurrent: a resubmission while the first is still at the
            gateway fails with CONFLICT instead of waiting for its result.
        record_failures: a declined or timed-out payment is remembered, so a
            resubmission replays the failure until the attempt expires or
            is forgotten.

        Example:
            .with_duplicate_payments(reject_concurrent=True, record_failures=True)
        """
        return replace(
            self,
            reject_concurrent_payments=(
                self.reject_concurrent_payments
                if reject_concurrent is None
                else reject_concurrent
            ),
            record_failed_payments=(
                self.record_failed_payments if record_failures is None else record_failures
            ),
        )


DEFAULT_CONFIG = PricingConfig()


__all__ = ("PricingConfig", "DEFAULT_CONFIG")
