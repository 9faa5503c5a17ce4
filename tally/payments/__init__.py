"""
Payments: method catalog, fees, validation and processing.

    from tally import payments as P

    methods = P.get_available_payment_methods(12_000)   # fees priced for the amount
    P.get_payment_method_by_id("cod", 60_000).available  # False, over the COD ceiling

    processor = P.PaymentProcessor()
    result = await processor.process(P.PaymentRequest(
        order_id="ord_1",
        amount=Decimal("12180"),
        payment_method_id="jazzcash",
        currency="PKR",
        customer_email="buyer@example.com",
        customer_phone="+923001234567",
    ))
    result.status  # PaymentStatus.PENDING
"""

from tally.payments._types import (
    PaymentStatus,
    PaymentProvider,
    PaymentMethod,
    PaymentRequest,
    ValidationResult,
    BankDetails,
    PaymentResult,
    PaymentError,
    PaymentErrors,
)
from tally.payments._fees import (
    Flat,
    Percentage,
    PercentagePlusFlat,
    FeeSchedule,
    compute_fee,
)
from tally.payments._catalog import (
    MethodSpec,
    CARD_GATEWAY,
    JAZZCASH,
    EASYPAISA,
    COD,
    BANK_TRANSFER,
    METHOD_SPECS,
    get_available_payment_methods,
    get_payment_method_by_id,
    calculate_total_with_fee,
)
from tally.payments._validate import (
    EMAIL_PATTERN,
    validate_payment_request,
)
from tally.payments._process import (
    BUSINESS_BANK_DETAILS,
    GatewayReceipt,
    Gateway,
    SimulatedGateway,
    PaymentProcessor,
    process_payment,
)

__all__ = (
    # Types
    "PaymentStatus",
    "PaymentProvider",
    "PaymentMethod",
    "PaymentRequest",
    "ValidationResult",
    "BankDetails",
    "PaymentResult",
    "PaymentError",
    "PaymentErrors",
    # Fees
    "Flat",
    "Percentage",
    "PercentagePlusFlat",
    "FeeSchedule",
    "compute_fee",
    # Catalog
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
    # Validation
    "EMAIL_PATTERN",
    "validate_payment_request",
    # Processing
    "BUSINESS_BANK_DETAILS",
    "GatewayReceipt",
    "Gateway",
    "SimulatedGateway",
    "PaymentProcessor",
    "process_payment",
)
