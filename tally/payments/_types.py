"""
Payment types: methods, requests, results and errors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


# ═══════════════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentStatus(Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    PENDING_VERIFICATION = "pending_verification"
    FAILED = "failed"


class PaymentProvider(Enum):
    STRIPE = "stripe"
    JAZZCASH = "jazzcash"
    EASYPAISA = "easypaisa"
    COD = "cod"
    BANK_TRANSFER = "bank_transfer"

    @property
    def label(self) -> str:
        return _PROVIDER_LABELS[self]


_PROVIDER_LABELS = {
    PaymentProvider.STRIPE: "Stripe",
    PaymentProvider.JAZZCASH: "JazzCash",
    PaymentProvider.EASYPAISA: "EasyPaisa",
    PaymentProvider.COD: "Cash on Delivery",
    PaymentProvider.BANK_TRANSFER: "Bank Transfer",
}


# ═══════════════════════════════════════════════════════════════════════════════
# Method & Request
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentMethod:
    """One entry of the catalog with its fee computed for a given amount."""

    id: str
    name: str
    provider: PaymentProvider
    description: str
    fee: Decimal
    available: bool
    processing_time: str
    max_amount: Decimal | None = None


@dataclass(frozen=True, slots=True)
class PaymentRequest:
    """
    `amount` is the order total before the method's fee. Availability is
    judged on it; the fee is added on top when charging.
    """

    order_id: str
    amount: Decimal
    payment_method_id: str
    currency: str
    customer_email: str
    customer_phone: str


@dataclass(frozen=True, slots=True)
class ValidationResult:
    is_valid: bool
    errors: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class BankDetails:
    bank_name: str
    account_title: str
    account_number: str
    iban: str


# ═══════════════════════════════════════════════════════════════════════════════
# Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentResult:
    """
    Outcome of one submission.

    A failed result carries either validation `errors` or a single
    infrastructure `error`; a successful one carries fresh ids and the
    charged `amount`, fee included.
    """

    success: bool
    status: PaymentStatus
    payment_method_id: str
    message: str
    transaction_id: str | None = None
    payment_id: str | None = None
    requires_action: bool = False
    errors: tuple[str, ...] = ()
    bank_details: BankDetails | None = None
    error: PaymentError | None = None
    amount: Decimal | None = None

    @classmethod
    def failed(
        cls,
        payment_method_id: str,
        message: str,
        *,
        errors: tuple[str, ...] = (),
        error: PaymentError | None = None,
    ) -> PaymentResult:
        return cls(
            success=False,
            status=PaymentStatus.FAILED,
            payment_method_id=payment_method_id,
            message=message,
            errors=errors,
            error=error,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentError:
    code: str
    message: str
    details: tuple[str, ...] = field(default=())


class PaymentErrors:
    @staticmethod
    def invalid_request(errors: tuple[str, ...]) -> PaymentError:
        return PaymentError("INVALID_REQUEST", "Payment request is invalid", errors)

    @staticmethod
    def unavailable(method_id: str) -> PaymentError:
        return PaymentError(
            "METHOD_UNAVAILABLE",
            f"Payment method {method_id} is not available for this order amount",
        )

    @staticmethod
    def timeout(seconds: float) -> PaymentError:
        return PaymentError("TIMEOUT", f"Gateway did not answer within {seconds:g}s")

    @staticmethod
    def gateway(msg: str) -> PaymentError:
        return PaymentError("GATEWAY_ERROR", msg)

    @staticmethod
    def conflict(msg: str) -> PaymentError:
        return PaymentError("CONFLICT", msg)

    @staticmethod
    def store(msg: str) -> PaymentError:
        return PaymentError("STORE_ERROR", msg)


__all__ = (
    "PaymentStatus",
    "PaymentProvider",
    "PaymentMethod",
    "PaymentRequest",
    "ValidationResult",
    "BankDetails",
    "PaymentResult",
    "PaymentError",
    "PaymentErrors",
)
