"""
Payment processing: validated, bounded, idempotent submission.

    PaymentRequest
         │ validate_payment_request ──► failed (errors)
         │ ceiling check on amount ───► failed (unavailable)
         ▼
    idempotent on order_id
         │ replay ────────────────────► recorded PaymentResult
         ▼
    Gateway.submit under timeout ─────► PaymentResult
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Protocol

from combinators import flow, lift as L
from kungfu import Error, LazyCoroResult, Ok, Result

from tally import idempotency as I
from tally._types import to_cents
from tally.config import DEFAULT_CONFIG, PricingConfig
from tally.payments._catalog import get_payment_method_by_id
from tally.payments._types import (
    BankDetails,
    PaymentError,
    PaymentErrors,
    PaymentMethod,
    PaymentProvider,
    PaymentRequest,
    PaymentResult,
    PaymentStatus,
)
from tally.payments._validate import validate_payment_request

logger = logging.getLogger(__name__)

BUSINESS_BANK_DETAILS = BankDetails(
    bank_name="Allied Bank Limited",
    account_title="Arts & Crafts Home Decor",
    account_number="1234567890123456",
    iban="PK36ABPA0010001234567890",
)


# ═══════════════════════════════════════════════════════════════════════════════
# Gateway
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class GatewayReceipt:
    transaction_id: str
    payment_id: str
    status: PaymentStatus
    message: str
    requires_action: bool
    bank_details: BankDetails | None = None


class Gateway(Protocol):
    async def submit(self, request: PaymentRequest, method: PaymentMethod) -> GatewayReceipt:
        ...


def _fresh_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:16]}"


class SimulatedGateway:
    """
    Deterministic per provider; no network.

    `submissions` counts real submissions so tests can assert a retry
    never reached the gateway.
    """

    def __init__(self, latency: float = 0.0) -> None:
        self.latency = latency
        self.submissions = 0

    async def submit(self, request: PaymentRequest, method: PaymentMethod) -> GatewayReceipt:
        self.submissions += 1
        if self.latency:
            await asyncio.sleep(self.latency)

        transaction_id = _fresh_id("txn")
        payment_id = _fresh_id("pay")

        match method.provider:
            case PaymentProvider.COD:
                return GatewayReceipt(
                    transaction_id=transaction_id,
                    payment_id=payment_id,
                    status=PaymentStatus.CONFIRMED,
                    message="Cash on Delivery order confirmed",
                    requires_action=False,
                )
            case PaymentProvider.BANK_TRANSFER:
                return GatewayReceipt(
                    transaction_id=transaction_id,
                    payment_id=payment_id,
                    status=PaymentStatus.PENDING_VERIFICATION,
                    message="Order placed, pending bank transfer verification",
                    requires_action=True,
                    bank_details=BUSINESS_BANK_DETAILS,
                )
            case provider:
                return GatewayReceipt(
                    transaction_id=transaction_id,
                    payment_id=payment_id,
                    status=PaymentStatus.PENDING,
                    message=f"Payment initiated via {provider.label}",
                    requires_action=True,
                )


# ═══════════════════════════════════════════════════════════════════════════════
# Processor
# ═══════════════════════════════════════════════════════════════════════════════


def _submission_error(e: Exception, timeout: float) -> PaymentError:
    if isinstance(e, TimeoutError):
        return PaymentErrors.timeout(timeout)
    return PaymentErrors.gateway(str(e) or type(e).__name__)


def _to_result(
    request: PaymentRequest,
    method: PaymentMethod,
    receipt: GatewayReceipt,
) -> PaymentResult:
    return PaymentResult(
        success=True,
        status=receipt.status,
        payment_method_id=request.payment_method_id,
        message=receipt.message,
        transaction_id=receipt.transaction_id,
        payment_id=receipt.payment_id,
        requires_action=receipt.requires_action,
        bank_details=receipt.bank_details,
        amount=request.amount + method.fee,
    )


def _guard_error(err: I.IdempotencyError[PaymentError]) -> PaymentError:
    match err.kind:
        case I.IdempotencyErrorKind.EXECUTION if isinstance(err.cause, PaymentError):
            return err.cause
        case I.IdempotencyErrorKind.EXECUTION:
            return PaymentErrors.gateway(err.message)
        case I.IdempotencyErrorKind.STORE_ERROR:
            return PaymentErrors.store(err.message)
        case _:
            return PaymentErrors.conflict(err.message)


def _fingerprint(request: PaymentRequest) -> str:
    # 1170 and 1170.00 are the same charge.
    return f"{to_cents(request.amount)}:{request.payment_method_id}"


def _attempt_policy(config: PricingConfig) -> I.Policy:
    on_pending = I.OnPending.FAIL if config.reject_concurrent_payments else I.OnPending.WAIT
    return (
        I.Policy()
        .with_ttl(delta=config.attempt_ttl)
        .with_on_pending(on_pending)
        .with_wait_timeout(delta=config.payment_timeout)
        .with_persist_failed(config.record_failed_payments)
    )


class PaymentProcessor:
    """
    Submits payments at most once per order.

    A retry for an order that already has a recorded result gets that
    result back without reaching the gateway. A failed submission is not
    recorded unless the config says `record_failed_payments`, so by
    default the caller may retry it.

    Example:
        processor = PaymentProcessor(store=SQLAttemptStore(sessions, PaymentResult))
        result = await processor.process(request)
    """

    def __init__(
        self,
        gateway: Gateway | None = None,
        store: I.StoreAny | None = None,
        config: PricingConfig = DEFAULT_CONFIG,
    ) -> None:
        self.gateway = gateway if gateway is not None else SimulatedGateway()
        self.config = config
        self._executor = (
            I.idempotent(self._submit)
            .key(lambda r: f"payment:{r.order_id}")
            .fingerprint(_fingerprint)
            .store(store if store is not None else I.MemoryStore())
            .policy(_attempt_policy(config))
            .build()
        )

    def _submit(self, request: PaymentRequest) -> LazyCoroResult[PaymentResult, PaymentError]:
        method = get_payment_method_by_id(request.payment_method_id, request.amount, self.config)
        if method is None or not method.available:
            error = PaymentErrors.unavailable(request.payment_method_id)

            async def unavailable() -> Result[PaymentResult, PaymentError]:
                return Error(error)

            return LazyCoroResult(unavailable)

        timeout = self.config.payment_timeout.total_seconds()
        return (
            flow(
                L.catching_async(
                    lambda: asyncio.wait_for(self.gateway.submit(request, method), timeout),
                    on_error=lambda e: _submission_error(e, timeout),
                )
            )
            .map(lambda receipt: _to_result(request, method, receipt))
            .compile()
        )

    async def process(self, request: PaymentRequest) -> PaymentResult:
        validation = validate_payment_request(request, self.config)
        if not validation.is_valid:
            logger.info("Rejected payment for order %s: %s", request.order_id, validation.errors)
            return PaymentResult.failed(
                request.payment_method_id,
                "Payment validation failed",
                errors=validation.errors,
                error=PaymentErrors.invalid_request(validation.errors),
            )

        method = get_payment_method_by_id(request.payment_method_id, request.amount, self.config)
        if method is None or not method.available:
            return PaymentResult.failed(
                request.payment_method_id,
                "Payment method is not available for this order amount",
                error=PaymentErrors.unavailable(request.payment_method_id),
            )

        logger.debug("Submitting payment for order %s via %s", request.order_id, method.id)
        result = await self._executor.run(request)

        match result:
            case Ok(attempt):
                if attempt.replayed:
                    logger.info("Replayed recorded payment for order %s", request.order_id)
                return attempt.value
            case Error(err):
                error = _guard_error(err)
                logger.warning(
                    "Payment for order %s failed: %s %s",
                    request.order_id,
                    error.code,
                    error.message,
                )
                return PaymentResult.failed(request.payment_method_id, error.message, error=error)

    async def forget(self, request: PaymentRequest) -> bool:
        """Drop the recorded attempt for this order so it can be resubmitted."""
        return await self._executor.forget(request)


async def process_payment(
    request: PaymentRequest,
    processor: PaymentProcessor | None = None,
) -> PaymentResult:
    """
    Process one request.

    Without a `processor` a fresh one is used, so nothing is remembered
    between calls; share a processor to get per-order idempotency.
    """
    return await (processor if processor is not None else PaymentProcessor()).process(request)


__all__ = (
    "BUSINESS_BANK_DETAILS",
    "GatewayReceipt",
    "Gateway",
    "SimulatedGateway",
    "PaymentProcessor",
    "process_payment",
)
