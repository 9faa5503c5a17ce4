import asyncio
from dataclasses import replace
from decimal import Decimal

import pytest

from tally import payments as P
from tally.config import PricingConfig


def request(**overrides) -> P.PaymentRequest:
    base = P.PaymentRequest(
        order_id="order-123",
        amount=Decimal("1000"),
        payment_method_id="cod",
        currency="PKR",
        customer_email="test@example.com",
        customer_phone="+923001234567",
    )
    return replace(base, **overrides)


def fee(method_id: str, amount) -> Decimal:
    return P.get_payment_method_by_id(method_id, amount).fee


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog & fees
# ═══════════════════════════════════════════════════════════════════════════════


def test_catalog_order_and_shape():
    methods = P.get_available_payment_methods(1000)
    assert [m.id for m in methods] == ["card-gateway", "jazzcash", "easypaisa", "cod", "bank-transfer"]
    assert [m.processing_time for m in methods] == [
        "Instant",
        "Instant",
        "Instant",
        "On delivery",
        "1-2 business days",
    ]
    assert methods[0].provider is P.PaymentProvider.STRIPE


@pytest.mark.parametrize(
    ("method_id", "amount", "expected"),
    [
        ("card-gateway", 1000, 59),
        ("card-gateway", 10000, 320),
        ("jazzcash", 1000, 15),
        ("jazzcash", 10000, 150),
        ("easypaisa", 1000, 20),
        ("cod", 1000, 100),
        ("cod", 10000, 100),
        ("bank-transfer", 10000, 0),
    ],
)
def test_fee_schedule(method_id, amount, expected):
    assert fee(method_id, amount) == Decimal(expected)


def test_fee_halves_round_up():
    # 1100 x 1.5% = 16.5
    assert fee("jazzcash", 1100) == Decimal("17")
    # 1050 x 2.9% = 30.45 -> 30, plus 30
    assert fee("card-gateway", 1050) == Decimal("60")


@pytest.mark.parametrize("method_id", ["card-gateway", "jazzcash", "easypaisa"])
def test_percentage_fees_are_monotonic(method_id):
    amounts = [Decimal(n) for n in range(0, 20_000, 37)]
    fees = [fee(method_id, amount) for amount in amounts]
    assert fees == sorted(fees)


def test_cod_ceiling():
    assert P.get_payment_method_by_id("cod", 50_000).available
    over = P.get_payment_method_by_id("cod", Decimal("50000.01"))
    assert not over.available
    assert over.max_amount == Decimal("50000")
    assert all(m.available for m in P.get_available_payment_methods(80_000) if m.id != "cod")


def test_cod_ceiling_is_configurable():
    config = PricingConfig().with_cod(max_amount=75_000, fee=120)
    cod = P.get_payment_method_by_id("cod", 60_000, config)
    assert cod.available
    assert cod.fee == Decimal("120")


def test_lookup_is_deterministic():
    first = P.get_payment_method_by_id("card-gateway", 1000)
    second = P.get_payment_method_by_id("card-gateway", 1000)
    assert first == second
    assert first.fee == second.fee == Decimal("59")


def test_unknown_method_is_none():
    assert P.get_payment_method_by_id("invalid-id", 1000) is None


def test_total_with_fee():
    assert P.calculate_total_with_fee(1000, "jazzcash") == Decimal("1015")
    assert P.calculate_total_with_fee(1000, "nope") == Decimal("1000")


# ═══════════════════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════════════════


def test_valid_request():
    result = P.validate_payment_request(request())
    assert result.is_valid
    assert result.errors == ()


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"amount": Decimal("0")}, "Amount must be greater than 0"),
        ({"amount": Decimal("-5")}, "Amount must be greater than 0"),
        ({"payment_method_id": "invalid-method"}, "Invalid payment method"),
        ({"currency": "USD"}, "Only PKR currency is supported"),
        ({"currency": "pkr"}, "Only PKR currency is supported"),
        ({"customer_email": "invalid-email"}, "Invalid email format"),
        ({"customer_email": "a b@example.com"}, "Invalid email format"),
        ({"customer_phone": "123"}, "Invalid Pakistani phone number format"),
    ],
)
def test_single_violation(overrides, message):
    result = P.validate_payment_request(request(**overrides))
    assert not result.is_valid
    assert result.errors == (message,)


@pytest.mark.parametrize(
    "phone",
    ["03001234567", "+923001234", "+9230012345678", "+1234567890", "not-a-number", ""],
)
def test_rejects_local_or_malformed_phones(phone):
    result = P.validate_payment_request(request(customer_phone=phone))
    assert "Invalid Pakistani phone number format" in result.errors


@pytest.mark.parametrize("phone", ["+923001234567", "+923331234567", "+923451234567"])
def test_accepts_international_phones(phone):
    assert P.validate_payment_request(request(customer_phone=phone)).is_valid


def test_every_violation_is_reported():
    result = P.validate_payment_request(
        request(
            amount=Decimal("0"),
            payment_method_id="bogus",
            currency="usd",
            customer_email="nope",
            customer_phone="03001234567",
        )
    )
    assert len(result.errors) == 5
    assert result.errors[0] == "Amount must be greater than 0"


# ═══════════════════════════════════════════════════════════════════════════════
# Processing
# ═══════════════════════════════════════════════════════════════════════════════


async def test_cod_is_confirmed():
    result = await P.process_payment(request())

    assert result.success
    assert result.status is P.PaymentStatus.CONFIRMED
    assert result.payment_method_id == "cod"
    assert result.message == "Cash on Delivery order confirmed"
    assert not result.requires_action
    assert result.transaction_id.startswith("txn_")


async def test_bank_transfer_awaits_verification():
    result = await P.process_payment(request(payment_method_id="bank-transfer"))

    assert result.success
    assert result.status is P.PaymentStatus.PENDING_VERIFICATION
    assert result.requires_action
    assert "pending bank transfer verification" in result.message
    assert result.bank_details.bank_name == "Allied Bank Limited"
    assert result.bank_details.account_number == "1234567890123456"


@pytest.mark.parametrize(
    ("method_id", "label"),
    [("card-gateway", "Stripe"), ("jazzcash", "JazzCash"), ("easypaisa", "EasyPaisa")],
)
async def test_wallets_and_cards_are_pending(method_id, label):
    result = await P.process_payment(request(payment_method_id=method_id))

    assert result.success
    assert result.status is P.PaymentStatus.PENDING
    assert result.requires_action
    assert result.message == f"Payment initiated via {label}"


async def test_each_order_gets_a_fresh_transaction_id():
    processor = P.PaymentProcessor()
    first = await processor.process(request(order_id="a"))
    second = await processor.process(request(order_id="b"))
    assert first.transaction_id != second.transaction_id


async def test_invalid_request_never_reaches_gateway():
    gateway = P.SimulatedGateway()
    result = await P.PaymentProcessor(gateway).process(request(amount=Decimal("0")))

    assert not result.success
    assert result.status is P.PaymentStatus.FAILED
    assert "Amount must be greater than 0" in result.errors
    assert result.error.code == "INVALID_REQUEST"
    assert gateway.submissions == 0


async def test_cod_over_ceiling_fails():
    result = await P.process_payment(request(amount=Decimal("60000")))
    assert not result.success
    assert result.message == "Payment method is not available for this order amount"
    assert result.error.code == "METHOD_UNAVAILABLE"


async def test_cod_ceiling_applies_before_the_fee():
    gateway = P.SimulatedGateway()
    result = await P.PaymentProcessor(gateway).process(request(amount=Decimal("49950")))

    assert result.success
    assert result.amount == Decimal("50050")
    assert gateway.submissions == 1


async def test_charged_amount_includes_the_fee():
    result = await P.process_payment(request(payment_method_id="jazzcash"))
    assert result.amount == Decimal("1015")


# ═══════════════════════════════════════════════════════════════════════════════
# Hardening: idempotency, timeout, cancellation
# ═══════════════════════════════════════════════════════════════════════════════


async def test_retry_replays_recorded_result():
    gateway = P.SimulatedGateway()
    processor = P.PaymentProcessor(gateway)

    first = await processor.process(request(payment_method_id="jazzcash"))
    second = await processor.process(request(payment_method_id="jazzcash"))

    assert second == first
    assert gateway.submissions == 1


async def test_concurrent_duplicate_waits_and_replays():
    gateway = P.SimulatedGateway(latency=0.05)
    processor = P.PaymentProcessor(gateway)

    first, second = await asyncio.gather(
        processor.process(request()),
        processor.process(request()),
    )

    assert first.transaction_id == second.transaction_id
    assert gateway.submissions == 1


async def test_same_order_with_different_amount_is_rejected():
    gateway = P.SimulatedGateway()
    processor = P.PaymentProcessor(gateway)

    await processor.process(request())
    clash = await processor.process(request(amount=Decimal("2000")))

    assert not clash.success
    assert clash.error.code == "CONFLICT"
    assert gateway.submissions == 1


async def test_amount_scale_does_not_change_the_fingerprint():
    gateway = P.SimulatedGateway()
    processor = P.PaymentProcessor(gateway)

    first = await processor.process(request(amount=Decimal("1170")))
    second = await processor.process(request(amount=Decimal("1170.00")))

    assert second == first
    assert gateway.submissions == 1


async def test_forget_allows_resubmission():
    gateway = P.SimulatedGateway()
    processor = P.PaymentProcessor(gateway)

    first = await processor.process(request())
    assert await processor.forget(request())
    second = await processor.process(request())

    assert first.transaction_id != second.transaction_id
    assert gateway.submissions == 2


async def test_slow_gateway_times_out_and_can_be_retried():
    gateway = P.SimulatedGateway(latency=1.0)
    processor = P.PaymentProcessor(gateway, config=PricingConfig().with_payment_timeout(seconds=0.05))

    result = await processor.process(request())
    assert not result.success
    assert result.status is P.PaymentStatus.FAILED
    assert result.error.code == "TIMEOUT"

    gateway.latency = 0
    retried = await processor.process(request())
    assert retried.success
    assert gateway.submissions == 2


class ExplodingGateway:
    def __init__(self) -> None:
        self.calls = 0

    async def submit(self, request, method):
        self.calls += 1
        raise RuntimeError("card declined")


async def test_gateway_exception_becomes_failed_result():
    result = await P.PaymentProcessor(ExplodingGateway()).process(request(payment_method_id="card-gateway"))

    assert not result.success
    assert result.error.code == "GATEWAY_ERROR"
    assert result.message == "card declined"


class GatedGateway(P.SimulatedGateway):
    def __init__(self) -> None:
        super().__init__()
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def submit(self, request, method):
        self.entered.set()
        await self.release.wait()
        return await super().submit(request, method)


async def test_abandoned_request_releases_its_claim():
    gateway = GatedGateway()
    processor = P.PaymentProcessor(gateway)

    task = asyncio.create_task(processor.process(request()))
    await gateway.entered.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    gateway.release.set()
    result = await processor.process(request())

    assert result.success
    assert result.status is P.PaymentStatus.CONFIRMED


async def test_concurrent_duplicate_can_be_refused():
    gateway = GatedGateway()
    config = PricingConfig().with_duplicate_payments(reject_concurrent=True)
    processor = P.PaymentProcessor(gateway, config=config)

    task = asyncio.create_task(processor.process(request()))
    await gateway.entered.wait()

    duplicate = await processor.process(request())
    assert not duplicate.success
    assert duplicate.error.code == "CONFLICT"

    gateway.release.set()
    first = await task
    assert first.success
    assert gateway.submissions == 1


async def test_recorded_failure_is_replayed_until_forgotten():
    gateway = ExplodingGateway()
    config = PricingConfig().with_duplicate_payments(record_failures=True)
    processor = P.PaymentProcessor(gateway, config=config)
    declined = request(payment_method_id="card-gateway")

    first = await processor.process(declined)
    second = await processor.process(declined)

    assert first.error.code == second.error.code == "GATEWAY_ERROR"
    assert second.message == "card declined"
    assert gateway.calls == 1

    assert await processor.forget(declined)
    await processor.process(declined)
    assert gateway.calls == 2
