"""
Payment request validation.

Every rule runs; the result lists all violations at once.
"""

from __future__ import annotations

import re

from tally._types import ZERO
from tally.config import DEFAULT_CONFIG, PricingConfig
from tally.payments._catalog import SPECS_BY_ID
from tally.payments._types import PaymentRequest, ValidationResult

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_payment_request(
    request: PaymentRequest,
    config: PricingConfig = DEFAULT_CONFIG,
) -> ValidationResult:
    errors: list[str] = []

    if request.amount is None or request.amount <= ZERO:
        errors.append("Amount must be greater than 0")

    if request.payment_method_id not in SPECS_BY_ID:
        errors.append("Invalid payment method")

    # Case-sensitive: "pkr" is rejected.
    if request.currency != config.currency:
        errors.append(f"Only {config.currency} currency is supported")

    if not EMAIL_PATTERN.match(request.customer_email or ""):
        errors.append("Invalid email format")

    if not config.phone_regex.match(request.customer_phone or ""):
        errors.append("Invalid Pakistani phone number format")

    return ValidationResult(is_valid=not errors, errors=tuple(errors))


__all__ = ("EMAIL_PATTERN", "validate_payment_request")
