from decimal import Decimal

import pytest
from kungfu import Error, Ok

from tally import checkout as CO
from tally import shipping as S
from tally import storage as DB
from tally.cart import Cart
from tally.catalog import Product
from tally.orders import OrderStatus
from tally.payments import PaymentProcessor, PaymentStatus, SimulatedGateway


@pytest.fixture
def gateway() -> SimulatedGateway:
    return SimulatedGateway()


@pytest.fixture
def context(products, gateway) -> CO.CheckoutContext:
    return CO.CheckoutContext(products=products, processor=PaymentProcessor(gateway))


def checkout(cart: Cart, method_id: str = "cod", **extra) -> CO.CheckoutRequest:
    return CO.CheckoutRequest(
        user_id="user-1",
        cart=cart,
        payment_method_id=method_id,
        customer_email="buyer@example.com",
        customer_phone="+923001234567",
        **extra,
    )


def placed(result) -> CO.PlacedOrder:
    match result:
        case Ok(value):
            return value
        case Error(err):
            pytest.fail(f"{err.code}: {err.message}")


def rejected(result) -> CO.CheckoutError:
    match result:
        case Error(err):
            return err
        case Ok(value):
            pytest.fail(f"expected rejection, got {value}")


# ═══════════════════════════════════════════════════════════════════════════════
# Placing orders
# ═══════════════════════════════════════════════════════════════════════════════


async def test_cod_order_is_confirmed_and_saved(products, lahore, gateway):
    sessions, engine = await DB.create_database()
    repository = DB.OrderRepository(sessions)
    context = CO.CheckoutContext(
        products=products,
        processor=PaymentProcessor(gateway),
        repository=repository,
    )

    result = await CO.PlaceOrderNode.execute(
        checkout(Cart().add("vase", 3).with_address(lahore), notes="Ring twice"), context
    )
    outcome = placed(result)
    order = outcome.order

    assert order.status is OrderStatus.CONFIRMED
    assert order.payment_status is PaymentStatus.CONFIRMED
    assert order.subtotal == Decimal("3000")
    assert order.shipping_amount == 0
    assert order.tax_amount == Decimal("510.00")
    assert order.payment_fee == Decimal("100")
    assert order.total_amount == Decimal("3610.00")
    assert order.transaction_id == outcome.payment.transaction_id
    assert order.id.startswith("ord_")
    assert gateway.submissions == 1

    match await repository.load(order.id):
        case Ok(saved):
            assert saved.status is OrderStatus.CONFIRMED
            assert saved.total_amount == Decimal("3610.00")
            assert saved.notes == "Ring twice"
        case Error(err):
            pytest.fail(err.message)
    await engine.dispose()


async def test_bank_transfer_order_stays_pending(context, lahore):
    outcome = placed(await CO.PlaceOrderNode.execute(
        checkout(Cart().add("vase", 1).with_address(lahore), "bank-transfer"), context
    ))

    assert outcome.order.status is OrderStatus.PENDING
    assert outcome.order.payment_status is PaymentStatus.PENDING_VERIFICATION
    assert outcome.order.payment_fee == 0
    assert outcome.payment.bank_details is not None
    # 1000 + 150 metro shipping + 170 tax
    assert outcome.order.total_amount == Decimal("1320.00")


async def test_selected_shipping_method_is_charged(context, lahore):
    cart = Cart().add("vase", 1).with_address(lahore).with_shipping_method("express-metro")
    outcome = placed(await CO.PlaceOrderNode.execute(checkout(cart, "jazzcash"), context))

    assert outcome.order.shipping_amount == Decimal("225.00")
    # 1000 + 225 + 170 = 1395, jazzcash 1.5% = 20.925 -> 21
    assert outcome.order.payment_fee == Decimal("21")
    assert outcome.order.total_amount == Decimal("1416.00")


async def test_digital_cart_needs_no_address(context):
    outcome = placed(await CO.PlaceOrderNode.execute(
        checkout(Cart().add("pattern", 2), "bank-transfer"), context
    ))
    assert outcome.order.subtotal == Decimal("600")
    assert outcome.order.shipping_amount == 0


class DecliningGateway:
    async def submit(self, request, method):
        raise RuntimeError("card declined")


async def test_declined_payment_still_places_the_order(products, lahore):
    context = CO.CheckoutContext(products=products, processor=PaymentProcessor(DecliningGateway()))
    outcome = placed(await CO.PlaceOrderNode.execute(
        checkout(Cart().add("vase", 1).with_address(lahore), "card-gateway"), context
    ))

    assert not outcome.payment.success
    assert outcome.order.status is OrderStatus.PAYMENT_FAILED
    assert outcome.order.payment_status is PaymentStatus.FAILED


async def test_resubmission_with_same_order_id_charges_once(context, lahore, gateway):
    request = checkout(Cart().add("vase", 1).with_address(lahore), "jazzcash", order_id="ord_fixed")

    first = placed(await CO.PlaceOrderNode.execute(request, context))
    second = placed(await CO.PlaceOrderNode.execute(request, context))

    assert first.order.id == second.order.id == "ord_fixed"
    assert first.payment == second.payment
    assert gateway.submissions == 1


async def test_cod_ceiling_is_judged_before_the_fee(products, lahore, gateway):
    catalog = dict(products)
    catalog["chest"] = Product(id="chest", name="Carved Chest", price=Decimal("42650"), stock_quantity=1)
    context = CO.CheckoutContext(products=catalog, processor=PaymentProcessor(gateway))

    outcome = placed(await CO.PlaceOrderNode.execute(
        checkout(Cart().add("chest").with_address(lahore)), context
    ))

    # 42650 + 7250.50 tax = 49900.50, under the 50000 ceiling; the fee takes it over.
    assert outcome.order.status is OrderStatus.CONFIRMED
    assert outcome.order.total_amount == Decimal("50000.50")
    assert outcome.payment.success
    assert outcome.payment.amount == Decimal("50000.50")
    assert gateway.submissions == 1


@pytest.fixture
async def repository():
    sessions, engine = await DB.create_database()
    yield DB.OrderRepository(sessions)
    await engine.dispose()


async def test_resubmitting_a_cancelled_order_leaves_it_cancelled(products, lahore, gateway, repository):
    context = CO.CheckoutContext(
        products=products,
        processor=PaymentProcessor(gateway),
        repository=repository,
    )
    request = checkout(Cart().add("vase", 1).with_address(lahore), order_id="ord_kept")

    placed(await CO.PlaceOrderNode.execute(request, context))
    match await repository.update_status("ord_kept", OrderStatus.CANCELLED, "Cancelled: changed mind"):
        case Ok(order):
            assert order.status is OrderStatus.CANCELLED
        case Error(err):
            pytest.fail(err.message)

    err = rejected(await CO.PlaceOrderNode.execute(request, context))
    assert err.code == "ORDER_EXISTS"
    assert err.message == "Order ord_kept is already cancelled"

    match await repository.load("ord_kept"):
        case Ok(saved):
            assert saved.status is OrderStatus.CANCELLED
            assert saved.notes == "Cancelled: changed mind"
        case Error(err):
            pytest.fail(err.message)
    assert gateway.submissions == 1


async def test_order_id_of_another_customer_is_refused(products, lahore, repository):
    context = CO.CheckoutContext(products=products, repository=repository)
    placed(await CO.PlaceOrderNode.execute(
        checkout(Cart().add("vase", 1).with_address(lahore), "bank-transfer", order_id="ord_theirs"),
        context,
    ))

    intruder = CO.CheckoutRequest(
        user_id="user-2",
        cart=Cart().add("vase", 1).with_address(lahore),
        payment_method_id="bank-transfer",
        customer_email="other@example.com",
        customer_phone="+923007654321",
        order_id="ord_theirs",
    )
    err = rejected(await CO.PlaceOrderNode.execute(intruder, context))
    assert err.code == "ORDER_EXISTS"
    assert err.message == "Order ord_theirs belongs to another customer"


class FlakyGateway:
    """Declines the first submission, then behaves."""

    def __init__(self) -> None:
        self.inner = SimulatedGateway()
        self.calls = 0

    async def submit(self, request, method):
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("network blip")
        return await self.inner.submit(request, method)


async def test_failed_payment_can_be_retried_on_the_stored_order(products, lahore, repository):
    gateway = FlakyGateway()
    context = CO.CheckoutContext(
        products=products,
        processor=PaymentProcessor(gateway),
        repository=repository,
    )
    request = checkout(Cart().add("vase", 1).with_address(lahore), order_id="ord_retry")

    first = placed(await CO.PlaceOrderNode.execute(request, context))
    assert first.order.status is OrderStatus.PAYMENT_FAILED

    second = placed(await CO.PlaceOrderNode.execute(request, context))
    assert second.order.status is OrderStatus.CONFIRMED
    assert second.order.created_at == first.order.created_at
    assert second.order.total_amount == first.order.total_amount
    assert gateway.calls == 2


# ═══════════════════════════════════════════════════════════════════════════════
# Rejections
# ═══════════════════════════════════════════════════════════════════════════════


async def test_empty_cart(context, lahore):
    err = rejected(await CO.PlaceOrderNode.execute(checkout(Cart().with_address(lahore)), context))
    assert err.code == "INVALID_CART"
    assert err.message == "Cart is empty"


async def test_short_stock(context, lahore, gateway):
    err = rejected(await CO.PlaceOrderNode.execute(
        checkout(Cart().add("lamp", 6).with_address(lahore)), context
    ))
    assert err.code == "INVALID_CART"
    assert err.message == "Only 5 units of Brass Lamp available (requested 6)"
    assert gateway.submissions == 0


async def test_missing_address(context):
    err = rejected(await CO.PlaceOrderNode.execute(checkout(Cart().add("vase", 1)), context))
    assert err.code == "NO_SHIPPING"
    assert err.message == "Shipping address is required"


async def test_weight_limit_breach(products, lahore):
    calculator = S.ShippingCalculator(
        [S.WeightBased(id="light", name="Light", max_weight=Decimal("5"))],
        [S.ZoneRule("pk", "Pakistan", ("PK",))],
    )
    context = CO.CheckoutContext(products=products, calculator=calculator)
    err = rejected(await CO.PlaceOrderNode.execute(
        checkout(Cart().add("vase", 3).with_address(lahore)), context
    ))
    assert err.code == "NO_SHIPPING"


async def test_cod_over_ceiling(products, lahore, gateway):
    catalog = dict(products)
    catalog["carpet"] = Product(id="carpet", name="Silk Carpet", price=Decimal("60000"), stock_quantity=1)
    context = CO.CheckoutContext(products=catalog, processor=PaymentProcessor(gateway))

    err = rejected(await CO.PlaceOrderNode.execute(
        checkout(Cart().add("carpet").with_address(lahore)), context
    ))
    assert err.code == "PAYMENT_UNAVAILABLE"
    assert err.message == "Payment method is not available for this order amount"
    assert gateway.submissions == 0


async def test_unknown_payment_method(context, lahore):
    err = rejected(await CO.PlaceOrderNode.execute(
        checkout(Cart().add("vase", 1).with_address(lahore), "bitcoin"), context
    ))
    assert err.code == "PAYMENT_UNAVAILABLE"
    assert err.message == "Unknown payment method bitcoin"


# ═══════════════════════════════════════════════════════════════════════════════
# Preview
# ═══════════════════════════════════════════════════════════════════════════════


async def test_preview_prices_without_paying(context, lahore, gateway):
    result = await CO.PreviewNode.execute(
        checkout(Cart().add("vase", 3).with_address(lahore)), context
    )

    match result:
        case Ok(preview):
            assert preview.summary.total_amount == Decimal("3510.00")
            assert [m.id for m in preview.payment_methods] == [
                "card-gateway",
                "jazzcash",
                "easypaisa",
                "cod",
                "bank-transfer",
            ]
            assert preview.total_with("cod") == Decimal("3610.00")
            assert preview.total_with("bitcoin") is None
        case Error(err):
            pytest.fail(err.message)
    assert gateway.submissions == 0


async def test_preview_reports_cart_problems(context, lahore):
    result = await CO.PreviewNode.execute(checkout(Cart().with_address(lahore)), context)
    assert rejected(result).code == "INVALID_CART"
